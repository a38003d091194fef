"""
Mount Error Classifier.

Maps mount tool output, Windows `net` system error codes and OSError errno
values onto ErrorKind so the orchestrator can decide between surfacing,
recovering and retrying.
"""

import errno
import re
from typing import Optional, Union

from ...core.exceptions import (
    AlreadyMountedElsewhereError,
    AuthFailureError,
    CommandError,
    CommandNotStartedError,
    UnreachableError,
    UnsupportedBackendError,
    VolumeError,
    VolumeIOError,
)
from ...models import ErrorKind

_NET_SYSTEM_ERROR = re.compile(r"system error (\d+)", re.IGNORECASE)


class MountErrorClassifier:
    """Classifies backend failures into the ErrorKind taxonomy."""

    AUTH_ERROR_STRINGS = (
        "permission denied",
        "mount error(13)",
        "logon failure",
        "nt_status_logon_failure",
        "nt_status_access_denied",
        "access denied",
        "access is denied",
        "the user name or password is incorrect",
        "key has been revoked",
    )

    ALREADY_MOUNTED_STRINGS = (
        "device or resource busy",
        "already mounted",
        "mount point busy",
        "target is busy",
        "mount error(16)",
        "the local device name is already in use",
        "multiple connections to a server or shared resource by the same user",
    )

    UNREACHABLE_STRINGS = (
        "host is down",
        "no route to host",
        "network is unreachable",
        "connection refused",
        "connection timed out",
        "could not resolve address",
        "unable to find suitable address",
        "mount error(112)",
        "mount error(115)",
        "mount error(2)",
        "no such file or directory",
        "bad unc",
        "the network path was not found",
        "the network name cannot be found",
        "the network location cannot be reached",
        "server not responding",
    )

    AUTH_ERRNO_CODES = {errno.EACCES, errno.EPERM}
    ALREADY_MOUNTED_ERRNO_CODES = {errno.EBUSY}
    UNREACHABLE_ERRNO_CODES = {
        errno.ENOENT,
        errno.EHOSTUNREACH,
        errno.ENETUNREACH,
        errno.ECONNREFUSED,
        errno.ETIMEDOUT,
        getattr(errno, "EHOSTDOWN", errno.EHOSTUNREACH),
    }

    # net use / Windows system error codes
    AUTH_NET_CODES = {5, 86, 1326, 1327, 1330, 1331, 1907, 2242}
    ALREADY_MOUNTED_NET_CODES = {85, 1219}
    UNREACHABLE_NET_CODES = {53, 67, 1222, 1231, 1311}

    def classify(self, error: Union[BaseException, str]) -> ErrorKind:
        if isinstance(error, VolumeError):
            return error.kind

        # A missing mount tool is a host setup problem, not a network one
        if isinstance(error, CommandNotStartedError):
            return ErrorKind.UNSUPPORTED

        if isinstance(error, OSError) and error.errno is not None:
            kind = self._classify_errno(error.errno)
            if kind is not None:
                return kind

        text = self._error_text(error)

        net_code = self.net_error_code(text)
        if net_code is not None:
            if net_code in self.AUTH_NET_CODES:
                return ErrorKind.AUTH_FAILURE
            if net_code in self.ALREADY_MOUNTED_NET_CODES:
                return ErrorKind.ALREADY_MOUNTED_ELSEWHERE
            if net_code in self.UNREACHABLE_NET_CODES:
                return ErrorKind.UNREACHABLE

        if any(indicator in text for indicator in self.AUTH_ERROR_STRINGS):
            return ErrorKind.AUTH_FAILURE
        if any(indicator in text for indicator in self.ALREADY_MOUNTED_STRINGS):
            return ErrorKind.ALREADY_MOUNTED_ELSEWHERE
        if any(indicator in text for indicator in self.UNREACHABLE_STRINGS):
            return ErrorKind.UNREACHABLE

        return ErrorKind.IO_FAILURE

    def to_volume_error(self, error: BaseException, context: str) -> VolumeError:
        """Wrap error as the VolumeError subclass for its classification."""
        if isinstance(error, VolumeError):
            return error

        kind = self.classify(error)
        message = f"{context}: {self._message(error)}"

        if kind == ErrorKind.AUTH_FAILURE:
            return AuthFailureError(message)
        if kind == ErrorKind.ALREADY_MOUNTED_ELSEWHERE:
            return AlreadyMountedElsewhereError(message)
        if kind == ErrorKind.UNREACHABLE:
            return UnreachableError(message)
        if kind == ErrorKind.UNSUPPORTED:
            return UnsupportedBackendError(message)
        return VolumeIOError(message)

    def _classify_errno(self, code: int):
        if code in self.AUTH_ERRNO_CODES:
            return ErrorKind.AUTH_FAILURE
        if code in self.ALREADY_MOUNTED_ERRNO_CODES:
            return ErrorKind.ALREADY_MOUNTED_ELSEWHERE
        if code in self.UNREACHABLE_ERRNO_CODES:
            return ErrorKind.UNREACHABLE
        return None

    @staticmethod
    def net_error_code(text: str) -> Optional[int]:
        """Windows system error code from `net` output (System error 1326 has occurred)."""
        match = _NET_SYSTEM_ERROR.search(text)
        return int(match.group(1)) if match else None

    @staticmethod
    def _error_text(error: Union[BaseException, str]) -> str:
        if isinstance(error, CommandError):
            return f"{error.stderr} {error.stdout}".lower()
        return str(error).lower()

    @staticmethod
    def _message(error: BaseException) -> str:
        if isinstance(error, CommandError):
            return (error.stderr or error.stdout or str(error)).strip()
        if isinstance(error, OSError) and error.strerror:
            return error.strerror
        return str(error)
