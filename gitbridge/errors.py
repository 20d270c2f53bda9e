"""gitbridge exception hierarchy with exit codes."""

from typing import Optional

# Exit code constants
EXIT_SUCCESS = 0  # Operation succeeded
EXIT_ERROR = 1  # Generic error / failure
EXIT_NOT_READY = 2  # Git missing, too old, or not configurable
EXIT_USAGE = 5  # Invalid usage / arguments


class GitBridgeError(Exception):
    """Base exception for all gitbridge errors."""

    def __init__(self, message: str, exit_code: int = EXIT_ERROR):
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code


class InitError(GitBridgeError):
    """
    Startup precondition failed.

    Git cannot be used safely until the cause is fixed.
    """

    exit_code = EXIT_NOT_READY

    def __init__(self, message: str = "Git initialization failed"):
        super().__init__(message, exit_code=self.exit_code)


class ExecutableNotFoundError(InitError):
    """Git executable could not be located."""


class UnsupportedVersionError(InitError):
    """Installed git is older than the minimum supported version."""

    def __init__(self, found: str, required: str):
        super().__init__(f"Git version not supported: found {found}, requires at least {required}")
        self.found = found
        self.required = required


class ConfigReadError(InitError):
    """Global git configuration could not be read."""


class ConfigWriteError(InitError):
    """Global git configuration could not be written."""


class CommandError(GitBridgeError):
    """Git exited with a non-zero status."""

    def __init__(
        self,
        argv: list[str],
        returncode: int,
        stdout: str = "",
        stderr: str = "",
        message: Optional[str] = None,
    ):
        if message is None:
            message = f"Command failed (rc={returncode}): {' '.join(argv)}"
            if stderr.strip():
                message += f"\n{stderr.strip()}"
        super().__init__(message)
        self.argv = argv
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


class CommandTimeoutError(CommandError):
    """Git did not finish within its timeout and was killed."""

    def __init__(self, argv: list[str], timeout: float, stdout: str = "", stderr: str = ""):
        super().__init__(
            argv,
            returncode=-1,
            stdout=stdout,
            stderr=stderr,
            message=f"Command timed out after {timeout}s: {' '.join(argv)}",
        )
        self.timeout = timeout


class UnexpectedOutputError(GitBridgeError):
    """Git produced output of an unexpected shape."""


class InvalidObjectIDError(UnexpectedOutputError):
    """String is not a well-formed object id."""


class ObjectNotFoundError(GitBridgeError):
    """Requested object is missing or is not of the expected type."""


class RepositoryError(GitBridgeError):
    """Path is not a usable git repository."""
