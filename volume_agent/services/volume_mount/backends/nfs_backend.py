"""NFS backend - kernel NFS mount on a managed mount point."""

from typing import List

from ....models import BackendKind, NfsConfig
from .kernel_mount_backend import KernelMountBackend


class NfsMountBackend(KernelMountBackend):
    kind = BackendKind.NFS
    config_type = NfsConfig
    expected_fstypes = ("nfs", "nfs4")

    async def _run_mount(self, config: NfsConfig, target: str) -> None:
        source = f"{config.server}:{config.export_path}"
        args = self._adapter.mount_command("nfs", source, target, self._build_options(config))
        await self._runner.run_checked(args, self._timeout)

    @staticmethod
    def _build_options(config: NfsConfig) -> List[str]:
        options = [f"port={config.port}", f"vers={config.version}"]
        if config.read_only:
            options.append("ro")
        return options
