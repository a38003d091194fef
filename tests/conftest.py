"""
Pytest configuration and shared fixtures.

Network backends are exercised against a fake mount table: FakeCommandRunner
records every command and edits a temporary /proc/self/mounts file the way
mount(8), umount(8) and rclone would.
"""

import asyncio
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pytest

from volume_agent.core.capabilities import SystemCapabilities
from volume_agent.core.events.event_bus import DomainEventBus
from volume_agent.core.mount_state_registry import MountStateRegistry
from volume_agent.models import DirectoryConfig, NfsConfig, RcloneConfig, SmbConfig, Volume
from volume_agent.services.secrets.secret_resolver import SecretResolver
from volume_agent.services.secrets.secret_sources import StoreSecretSource
from volume_agent.services.volume_mount.backend_factory import BackendFactory
from volume_agent.services.volume_mount.mount_orchestrator import MountOrchestrator
from volume_agent.services.volume_mount.posix_adapter import PosixPlatformAdapter
from volume_agent.utils.mountinfo import MountTableReader
from volume_agent.utils.process_runner import CommandResult, CommandRunner

ROOT_MOUNT_LINE = "/dev/sda1 / ext4 rw,relatime 0 0\n"


def _escape(field: str) -> str:
    return field.replace("\\", "\\134").replace(" ", "\\040")


class FakeCommandRunner(CommandRunner):
    """CommandRunner that never spawns processes."""

    def __init__(self, mounts_file: Path):
        self.mounts_file = mounts_file
        self.commands: List[List[str]] = []
        self.queued_results: Dict[str, List[CommandResult]] = {}
        self.delay = 0.0
        self.fstype_override: Optional[str] = None

    def fail_next(self, executable: str, stderr: str, exit_code: int = 32, times: int = 1) -> None:
        """Make the next `times` calls of executable exit non-zero without side effects."""
        results = self.queued_results.setdefault(executable, [])
        results.extend(CommandResult(exit_code=exit_code, stdout="", stderr=stderr) for _ in range(times))

    def commands_for(self, executable: str) -> List[List[str]]:
        return [command for command in self.commands if command[0] == executable]

    async def run(self, command: Sequence[str], timeout: float, secrets: Sequence[str] = ()) -> CommandResult:
        command = list(command)
        self.commands.append(command)

        if self.delay:
            await asyncio.sleep(self.delay)

        queued = self.queued_results.get(command[0])
        if queued:
            return queued.pop(0)

        self._apply(command)
        return CommandResult(exit_code=0, stdout="", stderr="")

    def add_mount(self, source: str, target: str, fstype: str) -> None:
        with open(self.mounts_file, "a", encoding="utf-8") as f:
            f.write(f"{_escape(source)} {_escape(target)} {fstype} rw 0 0\n")

    def remove_mount(self, target: str) -> None:
        lines = self.mounts_file.read_text(encoding="utf-8").splitlines(keepends=True)
        kept = [line for line in lines if line.split()[1] != _escape(target)]
        self.mounts_file.write_text("".join(kept), encoding="utf-8")

    def _apply(self, command: List[str]) -> None:
        if command[0] == "mount":
            fstype = command[command.index("-t") + 1]
            self.add_mount(command[-2], command[-1], self.fstype_override or fstype)
        elif command[0] == "umount":
            self.remove_mount(command[-1])
        elif command[0] == "rclone":
            self.add_mount(command[2], command[3], self.fstype_override or "fuse.rclone")


@pytest.fixture
def mounts_file(tmp_path):
    path = tmp_path / "mounts"
    path.write_text(ROOT_MOUNT_LINE, encoding="utf-8")
    return path


@pytest.fixture
def mount_base(tmp_path):
    return str(tmp_path / "volumes")


@pytest.fixture
def fake_runner(mounts_file):
    return FakeCommandRunner(mounts_file)


@pytest.fixture
def posix_adapter(mounts_file):
    return PosixPlatformAdapter(MountTableReader(str(mounts_file)))


@pytest.fixture
def capabilities():
    return SystemCapabilities(rclone=True, sys_admin=True)


@pytest.fixture
def secret_store():
    return {"nas-password": "s3cret"}


@pytest.fixture
def secret_resolver(secret_store):
    return SecretResolver([StoreSecretSource(secret_store)])


@pytest.fixture
def event_bus():
    return DomainEventBus()


@pytest.fixture
def registry():
    return MountStateRegistry()


@pytest.fixture
def orchestrator_factory(posix_adapter, fake_runner, secret_resolver, capabilities, mount_base, registry, event_bus):
    """Build a MountOrchestrator; keyword arguments override the default collaborators."""

    def _make(adapter=None, caps=None, timeout=1.0, runner=None) -> MountOrchestrator:
        adapter = adapter or posix_adapter
        caps = caps or capabilities
        factory = BackendFactory(
            adapter=adapter,
            runner=runner or fake_runner,
            secret_resolver=secret_resolver,
            capabilities=caps,
            timeout=timeout,
        )
        return MountOrchestrator(
            backend_factory=factory,
            registry=registry,
            adapter=adapter,
            mount_base=mount_base,
            operation_timeout=timeout,
            event_bus=event_bus,
        )

    return _make


@pytest.fixture
def orchestrator(orchestrator_factory):
    return orchestrator_factory()


@pytest.fixture
def nfs_volume():
    return Volume(
        id="vol-nfs",
        short_id="nfs01",
        name="NAS exports",
        config=NfsConfig(server="nas.local", export_path="/export/backups"),
    )


@pytest.fixture
def smb_volume():
    return Volume(
        id="vol-smb",
        short_id="smb01",
        name="Office share",
        config=SmbConfig(
            server="fileserver",
            share="backup",
            username="bob",
            password="store:nas-password",
            domain="CORP",
        ),
    )


@pytest.fixture
def rclone_volume():
    return Volume(
        id="vol-rclone",
        short_id="rc01",
        name="Cloud bucket",
        config=RcloneConfig(remote="s3", path="/backups"),
    )


@pytest.fixture
def directory_volume(tmp_path):
    data_dir = tmp_path / "local-data"
    data_dir.mkdir()
    return Volume(
        id="vol-dir",
        short_id="dir01",
        name="Local data",
        config=DirectoryConfig(path=str(data_dir)),
    )


@pytest.fixture
def target_for(mount_base):
    """Managed mount point of a network volume."""

    def _target(volume: Volume) -> str:
        return str(Path(mount_base) / volume.short_id / "_data")

    return _target
