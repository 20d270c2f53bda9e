"""
Git discovery and startup checks.

Locates the git executable, checks its version against the minimum
supported one and makes sure commits can be attributed. Must succeed once
before any repository operation is attempted.
"""

import logging
import re
import shutil
import threading
from dataclasses import dataclass
from typing import Optional

from gitbridge.command import GitCommand, run_command
from gitbridge.config import Settings, get_settings
from gitbridge.errors import (
    CommandError,
    ConfigReadError,
    ConfigWriteError,
    ExecutableNotFoundError,
    InitError,
    UnexpectedOutputError,
    UnsupportedVersionError,
)

logger = logging.getLogger(__name__)

# `git config --get` exits 1 when the key is simply not set
CONFIG_KEY_MISSING = 1

# Forced so paths with non-ASCII characters are printed verbatim
GLOBAL_SETTINGS = {"core.quotepath": "false"}

_version_cache: dict[str, str] = {}
_version_lock = threading.Lock()

_environment: Optional["GitEnvironment"] = None
_environment_lock = threading.Lock()


@dataclass(frozen=True)
class GitEnvironment:
    """Resolved git executable and its version."""

    executable: str
    version: str

    def command(self, *args: str) -> GitCommand:
        """Start a GitCommand bound to the resolved executable."""
        return GitCommand(*args, executable=self.executable)


def find_executable(name: str) -> str:
    """
    Resolve the absolute path of the git executable.

    Raises:
        ExecutableNotFoundError: If name is not found on PATH
    """
    path = shutil.which(name)
    if path is None:
        raise ExecutableNotFoundError(f"Git not found: {name!r} is not on PATH")
    logger.debug(f"Git executable: {path}")
    return path


def parse_version_output(output: str) -> str:
    """
    Extract the version number from `git version` output.

    "git version 2.30.1" -> "2.30.1"
    "git version 2.30.1.windows.1" -> "2.30.1"

    Raises:
        UnexpectedOutputError: If the output has fewer than three fields
    """
    fields = output.split()
    if len(fields) < 3:
        raise UnexpectedOutputError(f"Not enough output from git version: {output!r}")

    version = fields[2]
    index = version.find("windows")
    if index >= 1:
        return version[: index - 1]
    return version


def binary_version(executable: str) -> str:
    """
    Return the version of the given git executable.

    Memoized for the lifetime of the process.
    """
    with _version_lock:
        cached = _version_cache.get(executable)
        if cached is not None:
            return cached

        stdout = run_command([executable, "version"], description="git version").stdout
        version = parse_version_output(stdout)
        _version_cache[executable] = version
        logger.debug(f"Git version: {version}")
        return version


def _version_key(version: str) -> list[int]:
    segments = []
    for part in version.strip().split("."):
        match = re.match(r"\d+", part)
        segments.append(int(match.group()) if match else 0)
    return segments


def version_less_than(version: str, other: str) -> bool:
    """
    Compare dotted version strings numerically, segment by segment.

    Missing trailing segments count as zero, so "1.7" == "1.7.0".
    """
    left = _version_key(version)
    right = _version_key(other)
    width = max(len(left), len(right))
    left += [0] * (width - len(left))
    right += [0] * (width - len(right))
    return left < right


def check_version(version: str, required: str) -> None:
    """
    Raise if version is older than required.

    Raises:
        UnsupportedVersionError: If version < required
    """
    if version_less_than(version, required):
        raise UnsupportedVersionError(found=version, required=required)


def ensure_identity_config(executable: str, defaults: dict[str, str]) -> None:
    """
    Make sure every identity key has a global value, writing defaults.

    Only the global scope is consulted; a repository that happens to be the
    working directory must not hide an unset global identity.

    Only a confirmed absent key gets the default. A read that fails for
    any other reason is reported instead of being mistaken for "unset".

    Raises:
        ConfigReadError: If a key could not be read
        ConfigWriteError: If a default could not be written
    """
    for key, default in defaults.items():
        result = run_command(
            [executable, "config", "--global", "--get", key],
            check=False,
            description=f"get global setting {key}",
        )
        value = result.stdout.strip()

        if result.success and value:
            logger.debug(f"Git {key} is set")
            continue

        if not result.success and (result.returncode != CONFIG_KEY_MISSING or value):
            raise ConfigReadError(
                f"Failed to get git {key} (rc={result.returncode}): {result.stderr.strip()}"
            )

        logger.info(f"Git {key} is not set, using default {default!r}")
        _set_global(executable, key, default)


def ensure_global_settings(executable: str, settings: Optional[dict[str, str]] = None) -> None:
    """
    Force required global settings, whatever their current value.

    Raises:
        ConfigWriteError: If a setting could not be written
    """
    for key, value in (settings or GLOBAL_SETTINGS).items():
        _set_global(executable, key, value)


def _set_global(executable: str, key: str, value: str) -> None:
    try:
        run_command(
            [executable, "config", "--global", key, value],
            description=f"set {key}",
        )
    except CommandError as e:
        raise ConfigWriteError(f"Failed to set git {key}: {e.stderr.strip()}") from e


def initialize(settings: Optional[Settings] = None) -> GitEnvironment:
    """
    Locate git, check its version and prepare global configuration.

    Args:
        settings: Settings to use (defaults to get_settings())

    Returns:
        Immutable GitEnvironment to hand to repositories

    Raises:
        InitError: If any startup check fails
    """
    if settings is None:
        settings = get_settings()

    executable = find_executable(settings.git_executable)

    try:
        version = binary_version(executable)
    except (CommandError, UnexpectedOutputError) as e:
        raise InitError(f"Git version missing: {e.message}") from e
    check_version(version, settings.min_git_version)

    ensure_identity_config(executable, settings.identity_defaults)
    ensure_global_settings(executable)

    logger.info(f"Using git {version} at {executable}")
    return GitEnvironment(executable=executable, version=version)


def get_git_environment(settings: Optional[Settings] = None) -> GitEnvironment:
    """
    Return the process-wide GitEnvironment, initializing it on first use.

    Initialization runs at most once; concurrent callers wait for it.
    """
    global _environment
    with _environment_lock:
        if _environment is None:
            _environment = initialize(settings)
        return _environment


def reset_git_environment() -> None:
    """Forget the cached environment and versions."""
    global _environment
    with _environment_lock:
        _environment = None
    with _version_lock:
        _version_cache.clear()
