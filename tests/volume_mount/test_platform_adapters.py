"""
Tests for the platform adapters and PlatformFactory.
"""

import os

import pytest

from volume_agent.core.exceptions import UnsupportedBackendError, UnsupportedPlatformError
from volume_agent.services.volume_mount.platform_factory import PlatformFactory
from volume_agent.services.volume_mount.posix_adapter import PosixPlatformAdapter
from volume_agent.services.volume_mount.windows_adapter import WindowsPlatformAdapter


class TestUncPathBuilder:
    @pytest.fixture
    def adapter(self):
        return WindowsPlatformAdapter(current_drive="C:")

    def test_server_and_share(self, adapter):
        assert adapter.build_unc_path("nas", "backups") == "\\\\nas\\backups"

    def test_posix_subpath_is_converted(self, adapter):
        assert adapter.build_unc_path("nas", "backups", "/host1/daily") == "\\\\nas\\backups\\host1\\daily"

    def test_empty_subpath_is_ignored(self, adapter):
        assert adapter.build_unc_path("nas", "backups", "/") == "\\\\nas\\backups"


class TestWindowsPlatformAdapter:
    @pytest.fixture
    def adapter(self):
        return WindowsPlatformAdapter(current_drive="D:")

    def test_no_local_mount_points(self, adapter):
        assert adapter.local_mount_points is False
        assert adapter.get_platform_name() == "Windows"

    def test_rooted_path_gets_current_drive(self, adapter):
        assert adapter.normalize_path("\\data\\vol1") == "D:\\data\\vol1"

    def test_forward_slashes_are_normalized(self, adapter):
        assert adapter.normalize_path("C:/data/./vol1/") == "C:\\data\\vol1"

    def test_unc_path_is_kept(self, adapter):
        assert adapter.normalize_path("\\\\nas\\backups") == "\\\\nas\\backups"

    def test_connect_command(self, adapter):
        assert adapter.connect_share_command("\\\\nas\\backups", None, None) == [
            "net", "use", "\\\\nas\\backups", "/persistent:no"
        ]

    def test_kernel_mounts_are_unsupported(self, adapter):
        with pytest.raises(UnsupportedBackendError):
            adapter.mount_command("cifs", "//nas/backups", "C:\\mnt", [])
        with pytest.raises(UnsupportedBackendError):
            adapter.rclone_mount_command("s3:", "C:\\mnt")


class TestPosixPlatformAdapter:
    @pytest.fixture
    def adapter(self):
        return PosixPlatformAdapter()

    def test_normalize_path(self, adapter):
        assert adapter.normalize_path("/data//vol1/../vol2/") == "/data/vol2"

    def test_relative_path_becomes_absolute(self, adapter):
        assert adapter.normalize_path("data") == os.path.join(os.getcwd(), "data")

    def test_mount_command(self, adapter):
        assert adapter.mount_command("cifs", "//nas/share", "/mnt/x", ["guest", "ro"]) == [
            "mount", "-t", "cifs", "-o", "guest,ro", "//nas/share", "/mnt/x"
        ]

    def test_legacy_mount_command(self, adapter):
        assert adapter.mount_command("cifs", "//nas/share", "/mnt/x", [], legacy=True) == [
            "mount", "-i", "-t", "cifs", "//nas/share", "/mnt/x"
        ]

    def test_unmount_commands(self, adapter):
        assert adapter.unmount_command("/mnt/x") == ["umount", "/mnt/x"]
        assert adapter.unmount_command("/mnt/x", lazy=True) == ["umount", "-l", "/mnt/x"]

    def test_share_sessions_are_unsupported(self, adapter):
        with pytest.raises(UnsupportedBackendError):
            adapter.connect_share_command("\\\\nas\\backups", "pw", "bob")


class TestPlatformFactory:
    @pytest.mark.parametrize(
        "system,expected",
        [("Linux", "linux"), ("Darwin", "macos"), ("Windows", "windows")],
    )
    def test_detect_platform(self, system, expected):
        assert PlatformFactory(system_name=system).detect_platform() == expected

    def test_unknown_platform(self):
        with pytest.raises(UnsupportedPlatformError):
            PlatformFactory(system_name="Plan9").detect_platform()

    def test_create_adapter(self):
        assert isinstance(PlatformFactory(system_name="Windows").create_adapter(), WindowsPlatformAdapter)
        assert isinstance(PlatformFactory(system_name="Darwin").create_adapter(), PosixPlatformAdapter)
