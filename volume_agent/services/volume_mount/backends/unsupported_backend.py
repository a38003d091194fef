"""Placeholder strategy for backends this platform or capability set cannot serve."""

from ....core.exceptions import UnsupportedBackendError
from ....models import BackendKind, OperationResult
from .base_backend import VolumeBackend


class UnsupportedBackend(VolumeBackend):
    """Every mount and health check fails with the reason; unmount is a no-op."""

    def __init__(self, kind: BackendKind, config_type: type, reason: str, adapter, runner, timeout: float):
        super().__init__(adapter, runner, timeout)
        self.kind = kind
        self.config_type = config_type
        self._reason = reason

    async def _do_mount(self, config, target: str) -> OperationResult:
        raise UnsupportedBackendError(self._reason)

    async def _do_unmount(self, config, target: str) -> OperationResult:
        return OperationResult.unmounted()

    async def _do_check_health(self, config, target: str) -> OperationResult:
        raise UnsupportedBackendError(self._reason)
