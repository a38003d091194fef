"""Tests for building the orchestration object graph."""

import pytest

from volume_agent.config import Settings
from volume_agent.core.capabilities import SystemCapabilities
from volume_agent.core.events.volume_events import VolumeMountedEvent
from volume_agent.dependencies import create_mount_orchestrator
from volume_agent.models import BackendStatus

pytestmark = pytest.mark.asyncio


@pytest.fixture
def settings(tmp_path, mounts_file, mount_base):
    status = tmp_path / "status"
    status.write_text("CapEff:\t000001ffffffffff\n")
    return Settings(
        volume_mount_base=mount_base,
        proc_mounts_path=str(mounts_file),
        proc_status_path=str(status),
        rclone_config_dir=str(tmp_path / "no-rclone"),
        operation_timeout_seconds=2,
    )


async def test_orchestrators_are_independent(settings):
    first = await create_mount_orchestrator(settings, capabilities=SystemCapabilities())
    second = await create_mount_orchestrator(settings, capabilities=SystemCapabilities())

    assert first is not second


async def test_built_orchestrator_mounts_volume(settings, posix_adapter, fake_runner, event_bus, nfs_volume):
    received = []

    async def on_mounted(event):
        received.append(event)

    await event_bus.subscribe(VolumeMountedEvent, on_mounted)
    orchestrator = await create_mount_orchestrator(
        settings,
        event_bus=event_bus,
        adapter=posix_adapter,
        capabilities=SystemCapabilities(sys_admin=True),
        runner=fake_runner,
    )

    result = await orchestrator.ensure_mounted(nfs_volume)

    assert result.status == BackendStatus.MOUNTED
    assert [event.volume_id for event in received] == [nfs_volume.id]
    assert orchestrator.get_volume_path(nfs_volume).startswith(settings.volume_mount_base)


async def test_store_secrets_are_wired(settings, posix_adapter, fake_runner, smb_volume):
    orchestrator = await create_mount_orchestrator(
        settings,
        secret_store={"nas-password": "s3cret"},
        adapter=posix_adapter,
        capabilities=SystemCapabilities(sys_admin=True),
        runner=fake_runner,
    )

    result = await orchestrator.ensure_mounted(smb_volume)

    assert result.status == BackendStatus.MOUNTED
    assert "pass=s3cret" in fake_runner.commands_for("mount")[0][4]
