"""Tests for system capability detection."""

import pytest

from volume_agent.config import Settings
from volume_agent.core.capabilities import (
    SystemCapabilities,
    detect_capabilities,
    detect_rclone,
    detect_sys_admin,
)

pytestmark = pytest.mark.asyncio

# Default Docker capability set, CAP_SYS_ADMIN not included
DOCKER_DEFAULT_CAPS = "00000000a80425fb"
# --privileged
FULL_CAPS = "000001ffffffffff"


def write_status(tmp_path, cap_eff):
    status = tmp_path / "status"
    status.write_text(f"Name:\tvolume-agent\nCapInh:\t0000000000000000\nCapEff:\t{cap_eff}\n")
    return str(status)


async def test_sys_admin_detected(tmp_path):
    assert await detect_sys_admin(write_status(tmp_path, FULL_CAPS), "linux") is True


async def test_sys_admin_missing(tmp_path):
    assert await detect_sys_admin(write_status(tmp_path, DOCKER_DEFAULT_CAPS), "linux") is False


async def test_sys_admin_unreadable_status(tmp_path):
    assert await detect_sys_admin(str(tmp_path / "missing"), "linux") is False


async def test_sys_admin_garbage_value(tmp_path):
    assert await detect_sys_admin(write_status(tmp_path, "zz"), "linux") is False


async def test_sys_admin_only_on_linux(tmp_path):
    assert await detect_sys_admin(write_status(tmp_path, FULL_CAPS), "macos") is False


async def test_rclone_needs_non_empty_config_dir(tmp_path):
    config_dir = tmp_path / "rclone"

    assert await detect_rclone(str(config_dir)) is False
    config_dir.mkdir()
    assert await detect_rclone(str(config_dir)) is False
    (config_dir / "rclone.conf").write_text("[s3]\ntype = s3\n")
    assert await detect_rclone(str(config_dir)) is True


async def test_detect_capabilities(tmp_path):
    config_dir = tmp_path / "rclone"
    config_dir.mkdir()
    (config_dir / "rclone.conf").write_text("[s3]\n")
    settings = Settings(rclone_config_dir=str(config_dir), proc_status_path=write_status(tmp_path, FULL_CAPS))

    capabilities = await detect_capabilities(settings, "linux")

    assert capabilities == SystemCapabilities(rclone=True, sys_admin=True)
