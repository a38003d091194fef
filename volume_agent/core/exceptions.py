# volume_agent/core/exceptions.py

from typing import Optional

from volume_agent.models import ErrorKind


class VolumeError(Exception):
    """Base exception for volume backend failures. Carries an ErrorKind."""

    kind: ErrorKind = ErrorKind.IO_FAILURE

    def __init__(self, message: str, kind: Optional[ErrorKind] = None):
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind


class ConfigMismatchError(VolumeError):
    """Raised when a backend is handed a config for another backend kind."""

    kind = ErrorKind.CONFIG_MISMATCH

    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Provided config is not for {expected.upper()} backend (got '{actual}')"
        )


class AuthFailureError(VolumeError):
    """Raised for rejected credentials or unresolvable secret references."""

    kind = ErrorKind.AUTH_FAILURE


class UnreachableError(VolumeError):
    """Raised when the host or share cannot be found or reached."""

    kind = ErrorKind.UNREACHABLE


class AlreadyMountedElsewhereError(VolumeError):
    """Raised when the target path is occupied by a foreign mount."""

    kind = ErrorKind.ALREADY_MOUNTED_ELSEWHERE


class NotMountedError(VolumeError):
    kind = ErrorKind.NOT_MOUNTED

    def __init__(self, message: str = "Volume is not mounted"):
        super().__init__(message)


class OperationTimeoutError(VolumeError):
    """Raised when an operation exceeds its deadline."""

    kind = ErrorKind.TIMEOUT

    def __init__(self, operation: str, timeout: float):
        self.operation = operation
        self.timeout = timeout
        super().__init__(f"{operation} operation timed out after {timeout:g}s")


class VolumeIOError(VolumeError):
    kind = ErrorKind.IO_FAILURE


class UnsupportedBackendError(VolumeError):
    """Raised when a backend cannot run with this platform or capability set."""

    kind = ErrorKind.UNSUPPORTED


class UnsupportedPlatformError(Exception):
    """Raised when the operating system has no platform adapter."""
    pass


class CommandError(Exception):
    """Raised when an external command exits with a non-zero status."""

    def __init__(self, command: str, exit_code: int, stderr: str = "", stdout: str = ""):
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr
        self.stdout = stdout
        output = (stderr or stdout or "no output").strip()
        super().__init__(f"{command} exited with code {exit_code}: {output}")


class CommandNotStartedError(CommandError):
    """Raised when the executable is missing or cannot be started."""

    def __init__(self, command: str, reason: str):
        super().__init__(command, -1, stderr=reason)
