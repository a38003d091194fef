"""Windows Platform Adapter - UNC access through `net use`."""

import ntpath
import os
import re
from typing import List, Optional, Sequence, Tuple

from ...core.exceptions import UnsupportedBackendError
from .base_adapter import BasePlatformAdapter

_DRIVE_PREFIX = re.compile(r"^[A-Za-z]:")


class WindowsPlatformAdapter(BasePlatformAdapter):
    """Windows command templates and path rules. SMB shares are reached by UNC path, never mounted."""

    NET_BINARY = "net"

    def __init__(self, mount_table=None, current_drive: Optional[str] = None):
        super().__init__(mount_table)
        self._current_drive = current_drive

    @property
    def local_mount_points(self) -> bool:
        return False

    def get_platform_name(self) -> str:
        return "Windows"

    def normalize_path(self, path: str) -> str:
        normalized = ntpath.normpath(path)

        # "\data" or "\" without drive letter gets the current drive
        if normalized.startswith("\\") and not normalized.startswith("\\\\"):
            if not _DRIVE_PREFIX.match(normalized):
                return ntpath.join(self._get_current_drive(), normalized)

        return normalized

    def _get_current_drive(self) -> str:
        if self._current_drive:
            return self._current_drive
        return os.getcwd()[:2]  # e.g. "C:"

    def mount_command(
        self,
        fstype: str,
        source: str,
        target: str,
        options: Sequence[str],
        legacy: bool = False,
    ) -> List[str]:
        raise UnsupportedBackendError(f"Kernel {fstype} mounts are not available on Windows")

    def unmount_command(self, target: str, lazy: bool = False) -> List[str]:
        raise UnsupportedBackendError("Kernel unmounts are not available on Windows")

    def rclone_mount_command(self, remote_spec: str, target: str, read_only: bool = False) -> List[str]:
        raise UnsupportedBackendError("rclone mounts are not available on Windows")

    def connect_share_command(
        self, unc_path: str, password: Optional[str], user: Optional[str]
    ) -> List[str]:
        args = [self.NET_BINARY, "use", unc_path]
        if password:
            args.append(password)
        if user:
            args.append(f"/user:{user}")
        # Never let stale credentials survive a reboot
        args.append("/persistent:no")
        return args

    def disconnect_share_command(self, unc_path: str) -> List[str]:
        return [self.NET_BINARY, "use", unc_path, "/delete", "/y"]

    def process_owner(self) -> Tuple[int, int]:
        raise UnsupportedBackendError("Process owner ids are not available on Windows")
