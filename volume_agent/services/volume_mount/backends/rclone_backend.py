"""rclone backend - cloud remotes exposed through a daemonized rclone FUSE mount."""

from ....models import BackendKind, RcloneConfig
from .kernel_mount_backend import KernelMountBackend


class RcloneMountBackend(KernelMountBackend):
    kind = BackendKind.RCLONE
    config_type = RcloneConfig
    expected_fstypes = ("fuse.rclone",)

    # A foreign FUSE mount may belong to a running rclone that is still
    # flushing its write cache; never force it away.
    stale_mount_recovery = False

    async def _run_mount(self, config: RcloneConfig, target: str) -> None:
        remote_spec = f"{config.remote}:{config.path.lstrip('/')}"
        args = self._adapter.rclone_mount_command(remote_spec, target, read_only=config.read_only)
        await self._runner.run_checked(args, self._timeout)
