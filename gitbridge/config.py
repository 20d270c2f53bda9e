"""Configuration loader."""

import configparser
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_GIT_EXECUTABLE = "git"
DEFAULT_MIN_GIT_VERSION = "1.7.2"
DEFAULT_IDENTITY_NAME = "Gitbridge"
DEFAULT_IDENTITY_EMAIL = "gitbridge@fake.local"
DEFAULT_FSCK_TIMEOUT = 0

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    """gitbridge settings."""

    git_executable: str = DEFAULT_GIT_EXECUTABLE
    min_git_version: str = DEFAULT_MIN_GIT_VERSION
    default_name: str = DEFAULT_IDENTITY_NAME
    default_email: str = DEFAULT_IDENTITY_EMAIL
    fsck_timeout: float = DEFAULT_FSCK_TIMEOUT
    debug: bool = False
    config_path: Optional[Path] = None

    @property
    def identity_defaults(self) -> dict[str, str]:
        """Fallback values for the git identity keys."""
        return {"user.name": self.default_name, "user.email": self.default_email}


def _parse_config_file(config_path: Path) -> dict[str, str]:
    """
    Parse INI-style config file.

    Returns:
        Dict of config values (flattened: section.key -> value)
    """
    if not config_path.exists():
        return {}

    parser = configparser.ConfigParser()
    parser.read(config_path)

    config = {}

    # Parse DEFAULT section (values without [DEFAULT] prefix)
    if "DEFAULT" in parser:
        for key, value in parser["DEFAULT"].items():
            config[key.upper()] = value

    for section in parser.sections():
        for key, value in parser[section].items():
            config[f"{section}.{key}"] = value

    return config


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes")


def get_settings() -> Settings:
    """
    Get current settings.

    Resolves from:
    1. Environment variables (GITBRIDGE_*)
    2. Config file (GITBRIDGE_CONFIG, INI format)
    3. Built-in defaults

    Returns:
        Settings object
    """
    config_path_str = os.environ.get("GITBRIDGE_CONFIG")
    config_path = Path(config_path_str) if config_path_str else None
    file_config = _parse_config_file(config_path) if config_path else {}

    git_executable = (
        os.environ.get("GITBRIDGE_GIT_EXECUTABLE")
        or file_config.get("GIT_EXECUTABLE")
        or DEFAULT_GIT_EXECUTABLE
    )
    min_git_version = (
        os.environ.get("GITBRIDGE_MIN_GIT_VERSION")
        or file_config.get("MIN_GIT_VERSION")
        or DEFAULT_MIN_GIT_VERSION
    )
    default_name = (
        os.environ.get("GITBRIDGE_DEFAULT_NAME")
        or file_config.get("identity.name")
        or DEFAULT_IDENTITY_NAME
    )
    default_email = (
        os.environ.get("GITBRIDGE_DEFAULT_EMAIL")
        or file_config.get("identity.email")
        or DEFAULT_IDENTITY_EMAIL
    )

    fsck_timeout: float = DEFAULT_FSCK_TIMEOUT
    fsck_timeout_str = os.environ.get("GITBRIDGE_FSCK_TIMEOUT") or file_config.get("FSCK_TIMEOUT")
    if fsck_timeout_str:
        try:
            fsck_timeout = float(fsck_timeout_str)
        except ValueError:
            logger.warning(f"Invalid FSCK_TIMEOUT value, using default: {DEFAULT_FSCK_TIMEOUT}")

    debug_str = os.environ.get("GITBRIDGE_DEBUG") or file_config.get("DEBUG", "")
    debug = _parse_bool(debug_str)

    logger.debug(f"Git executable: {git_executable}")
    logger.debug(f"Minimum git version: {min_git_version}")
    logger.debug(f"Fsck timeout: {fsck_timeout}")

    return Settings(
        git_executable=git_executable,
        min_git_version=min_git_version,
        default_name=default_name,
        default_email=default_email,
        fsck_timeout=fsck_timeout,
        debug=debug,
        config_path=config_path,
    )
