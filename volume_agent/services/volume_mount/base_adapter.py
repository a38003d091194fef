"""Abstract Platform Adapter - all OS-conditional mount behaviour lives behind this interface."""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Tuple

from ...utils.mountinfo import MountTableReader


class BasePlatformAdapter(ABC):
    """
    Supplies path rules and external command templates for one operating system.

    Backends read commands and paths from the adapter and never inspect the
    platform themselves.
    """

    def __init__(self, mount_table: Optional[MountTableReader] = None):
        self._mount_table = mount_table or MountTableReader()

    @property
    def mount_table(self) -> MountTableReader:
        return self._mount_table

    @property
    @abstractmethod
    def local_mount_points(self) -> bool:
        """True when network backends are mounted on a local directory."""

    @abstractmethod
    def get_platform_name(self) -> str:
        """Get platform name for logging."""

    @abstractmethod
    def normalize_path(self, path: str) -> str:
        """Return a clean absolute path for this platform."""

    def build_unc_path(self, server: str, share: str, subpath: Optional[str] = None) -> str:
        """Build \\\\server\\share or \\\\server\\share\\sub\\path."""
        base_path = f"\\\\{server}\\{share}"
        if subpath:
            normalized_subpath = subpath.replace("/", "\\").lstrip("\\")
            if normalized_subpath:
                return f"{base_path}\\{normalized_subpath}"
        return base_path

    @abstractmethod
    def mount_command(
        self,
        fstype: str,
        source: str,
        target: str,
        options: Sequence[str],
        legacy: bool = False,
    ) -> List[str]:
        """Command that mounts source at target with a kernel filesystem."""

    @abstractmethod
    def unmount_command(self, target: str, lazy: bool = False) -> List[str]:
        """Command that unmounts target."""

    @abstractmethod
    def rclone_mount_command(self, remote_spec: str, target: str, read_only: bool = False) -> List[str]:
        """Command that starts a daemonized rclone FUSE mount."""

    @abstractmethod
    def connect_share_command(
        self, unc_path: str, password: Optional[str], user: Optional[str]
    ) -> List[str]:
        """Command that authenticates against a UNC share without a drive letter."""

    @abstractmethod
    def disconnect_share_command(self, unc_path: str) -> List[str]:
        """Command that drops the network session for a UNC share."""

    @abstractmethod
    def process_owner(self) -> Tuple[int, int]:
        """(uid, gid) that mounted files should belong to."""
