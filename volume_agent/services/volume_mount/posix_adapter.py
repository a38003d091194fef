"""POSIX Platform Adapter - kernel mounts via mount(8)/umount(8)."""

import os
import posixpath
from typing import List, Optional, Sequence, Tuple

from ...core.exceptions import UnsupportedBackendError
from .base_adapter import BasePlatformAdapter


class PosixPlatformAdapter(BasePlatformAdapter):
    """Linux (and other POSIX) command templates and path rules."""

    MOUNT_BINARY = "mount"
    UNMOUNT_BINARY = "umount"
    RCLONE_BINARY = "rclone"

    @property
    def local_mount_points(self) -> bool:
        return True

    def get_platform_name(self) -> str:
        return "POSIX"

    def normalize_path(self, path: str) -> str:
        return posixpath.normpath(posixpath.abspath(path))

    def mount_command(
        self,
        fstype: str,
        source: str,
        target: str,
        options: Sequence[str],
        legacy: bool = False,
    ) -> List[str]:
        cmd = [self.MOUNT_BINARY]
        if legacy:
            # -i: skip the /sbin/mount.<type> helper and call mount(2) directly
            cmd.append("-i")
        cmd.extend(["-t", fstype])
        if options:
            cmd.extend(["-o", ",".join(options)])
        cmd.extend([source, target])
        return cmd

    def unmount_command(self, target: str, lazy: bool = False) -> List[str]:
        if lazy:
            return [self.UNMOUNT_BINARY, "-l", target]
        return [self.UNMOUNT_BINARY, target]

    def rclone_mount_command(self, remote_spec: str, target: str, read_only: bool = False) -> List[str]:
        cmd = [self.RCLONE_BINARY, "mount", remote_spec, target, "--daemon", "--allow-non-empty"]
        if read_only:
            cmd.append("--read-only")
        return cmd

    def connect_share_command(
        self, unc_path: str, password: Optional[str], user: Optional[str]
    ) -> List[str]:
        raise UnsupportedBackendError("UNC share connections are only available on Windows")

    def disconnect_share_command(self, unc_path: str) -> List[str]:
        raise UnsupportedBackendError("UNC share connections are only available on Windows")

    def process_owner(self) -> Tuple[int, int]:
        return os.getuid(), os.getgid()
