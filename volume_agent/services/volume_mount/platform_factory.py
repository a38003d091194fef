"""Platform Factory - platform detection and adapter creation."""

import logging
import platform
from typing import Optional

from ...core.exceptions import UnsupportedPlatformError
from ...utils.mountinfo import MountTableReader
from .base_adapter import BasePlatformAdapter


class PlatformFactory:
    """Factory for creating platform adapters. Detection runs once, at startup."""

    def __init__(self, system_name: Optional[str] = None):
        self._system_name = system_name

    def detect_platform(self) -> str:
        """Detect current platform. Returns: linux, macos or windows."""
        system = (self._system_name or platform.system()).lower()

        if system == "linux":
            return "linux"
        elif system == "darwin":
            return "macos"
        elif system == "windows":
            return "windows"
        else:
            raise UnsupportedPlatformError(f"Platform {system} not supported for volume mounting")

    def create_adapter(self, mount_table: Optional[MountTableReader] = None) -> BasePlatformAdapter:
        """Create the adapter for the detected platform."""
        platform_name = self.detect_platform()

        if platform_name == "windows":
            from .windows_adapter import WindowsPlatformAdapter
            adapter: BasePlatformAdapter = WindowsPlatformAdapter(mount_table)
        else:
            from .posix_adapter import PosixPlatformAdapter
            adapter = PosixPlatformAdapter(mount_table)

        logging.info(f"Detected platform: {platform_name}, using {adapter.get_platform_name()} adapter")
        return adapter
