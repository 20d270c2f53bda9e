"""Git command construction and subprocess execution."""

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Union

from gitbridge.errors import (
    CommandError,
    CommandTimeoutError,
    ExecutableNotFoundError,
    RepositoryError,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass(frozen=True)
class CommandResult:
    """Captured output of one finished subprocess."""

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        return self.returncode == 0


def normalize_timeout(timeout: Optional[float]) -> Optional[float]:
    """
    Map a caller timeout onto subprocess semantics.

    Zero and negative values mean "no timeout", never "expire immediately".

    Args:
        timeout: Seconds to wait, or None

    Returns:
        Positive timeout in seconds, or None to wait forever
    """
    if timeout is None or timeout <= 0:
        return None
    return timeout


def run_command(
    argv: list[str],
    cwd: Optional[PathLike] = None,
    timeout: Optional[float] = None,
    env: Optional[Mapping[str, str]] = None,
    check: bool = True,
    description: Optional[str] = None,
) -> CommandResult:
    """
    Run a subprocess command and capture its output.

    Args:
        argv: Command and arguments as list (no shell)
        cwd: Working directory (optional)
        timeout: Seconds before the child is killed; <= 0 or None waits forever
        env: Variables layered over the inherited environment for this call only
        check: Raise CommandError on non-zero exit
        description: Human-readable label for logs

    Returns:
        CommandResult with stdout, stderr and exit code

    Raises:
        CommandTimeoutError: If the timeout expired (the child is killed)
        CommandError: If the command fails and check=True
        ExecutableNotFoundError: If argv[0] cannot be executed
        RepositoryError: If cwd is not an existing directory
    """
    timeout = normalize_timeout(timeout)
    if cwd is not None and not Path(cwd).is_dir():
        logger.error(f"Working directory does not exist: {cwd}")
        raise RepositoryError(f"Working directory does not exist: {cwd}")

    if description:
        logger.debug(f"Running ({description}): {' '.join(argv)} (cwd={cwd})")
    else:
        logger.debug(f"Running: {' '.join(argv)} (cwd={cwd})")

    full_env: Optional[dict[str, str]] = None
    if env is not None:
        full_env = dict(os.environ)
        full_env.update(env)

    try:
        completed = subprocess.run(
            argv,
            cwd=cwd,
            env=full_env,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        logger.error(f"Command timed out after {timeout}s: {' '.join(argv)}")
        raise CommandTimeoutError(
            argv,
            timeout=e.timeout,
            stdout=_as_text(e.stdout),
            stderr=_as_text(e.stderr),
        ) from e
    except FileNotFoundError as e:
        # cwd may vanish between the check above and the spawn
        if cwd is not None and not Path(cwd).is_dir():
            raise RepositoryError(f"Working directory does not exist: {cwd}") from e
        logger.error(f"Executable not found: {argv[0]}")
        raise ExecutableNotFoundError(f"Executable not found: {argv[0]}") from e

    result = CommandResult(
        stdout=completed.stdout,
        stderr=completed.stderr,
        returncode=completed.returncode,
    )
    logger.debug(f"Exit code: {result.returncode}")

    if check and not result.success:
        error = CommandError(argv, result.returncode, result.stdout, result.stderr)
        logger.error(error.message)
        raise error

    return result


def _as_text(output: Union[str, bytes, None]) -> str:
    # TimeoutExpired carries bytes even when text=True was requested
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output


class GitCommand:
    """
    Ordered argument list for one git invocation.

    Arguments are kept exactly in the order they are added.
    """

    def __init__(self, *args: str, executable: str = "git"):
        self.executable = executable
        self._args: list[str] = list(args)

    def add_arguments(self, *args: str) -> "GitCommand":
        """Append arguments and return self for chaining."""
        self._args.extend(args)
        return self

    @property
    def args(self) -> list[str]:
        """Arguments after the executable."""
        return list(self._args)

    @property
    def argv(self) -> list[str]:
        """Full argument vector including the executable."""
        return [self.executable, *self._args]

    def __str__(self) -> str:
        return " ".join(self.argv)

    def __repr__(self) -> str:
        return f"GitCommand({self.argv!r})"

    def run_result(
        self,
        cwd: Optional[PathLike] = None,
        timeout: Optional[float] = None,
        env: Optional[Mapping[str, str]] = None,
        check: bool = True,
        description: Optional[str] = None,
    ) -> CommandResult:
        """Run the command and return the full CommandResult."""
        return run_command(
            self.argv,
            cwd=cwd,
            timeout=timeout,
            env=env,
            check=check,
            description=description,
        )

    def run(
        self,
        cwd: Optional[PathLike] = None,
        timeout: Optional[float] = None,
        env: Optional[Mapping[str, str]] = None,
        description: Optional[str] = None,
    ) -> str:
        """
        Run the command and return stdout.

        Raises:
            CommandError: If git exits non-zero
        """
        return self.run_result(
            cwd=cwd, timeout=timeout, env=env, check=True, description=description
        ).stdout
