"""Backend Factory - exhaustive selection of a backend strategy per config variant."""

import logging
from typing import Optional, assert_never

from ...core.capabilities import SystemCapabilities
from ...models import BackendKind, DirectoryConfig, NfsConfig, RcloneConfig, SmbConfig
from ...utils.process_runner import CommandRunner
from ..secrets.secret_resolver import SecretResolver
from .backends import (
    CifsMountBackend,
    DirectoryBackend,
    NfsMountBackend,
    RcloneMountBackend,
    SmbShareBackend,
    UnsupportedBackend,
    VolumeBackend,
)
from .base_adapter import BasePlatformAdapter
from .error_classifier import MountErrorClassifier


class BackendFactory:
    """
    Picks the strategy for a VolumeConfig.

    Platform variance and capabilities are decided here, once per backend
    kind, so the strategies themselves never look at the OS.
    """

    def __init__(
        self,
        adapter: BasePlatformAdapter,
        runner: CommandRunner,
        secret_resolver: SecretResolver,
        capabilities: SystemCapabilities,
        timeout: float,
        classifier: Optional[MountErrorClassifier] = None,
    ):
        self._adapter = adapter
        self._runner = runner
        self._timeout = timeout
        classifier = classifier or MountErrorClassifier()

        self._directory = DirectoryBackend(adapter, runner, timeout, classifier)

        if not adapter.local_mount_points:
            self._smb: VolumeBackend = SmbShareBackend(adapter, runner, timeout, secret_resolver, classifier)
        elif capabilities.sys_admin:
            self._smb = CifsMountBackend(adapter, runner, timeout, secret_resolver, classifier)
        else:
            self._smb = self._unsupported(
                BackendKind.SMB, SmbConfig, "SMB volumes require mount privileges (CAP_SYS_ADMIN)"
            )

        if adapter.local_mount_points and capabilities.sys_admin:
            self._nfs: VolumeBackend = NfsMountBackend(adapter, runner, timeout, classifier)
        else:
            self._nfs = self._unsupported(
                BackendKind.NFS,
                NfsConfig,
                f"NFS volumes are not supported on {adapter.get_platform_name()} without mount privileges",
            )

        if adapter.local_mount_points and capabilities.rclone:
            self._rclone: VolumeBackend = RcloneMountBackend(adapter, runner, timeout, classifier)
        else:
            self._rclone = self._unsupported(
                BackendKind.RCLONE, RcloneConfig, "rclone is not available on this system"
            )

        logging.info(
            f"Backends ready on {adapter.get_platform_name()}: "
            f"smb={type(self._smb).__name__}, nfs={type(self._nfs).__name__}, "
            f"rclone={type(self._rclone).__name__}"
        )

    def create(self, config) -> VolumeBackend:
        match config:
            case DirectoryConfig():
                return self._directory
            case SmbConfig():
                return self._smb
            case NfsConfig():
                return self._nfs
            case RcloneConfig():
                return self._rclone
            case _:
                assert_never(config)

    def _unsupported(self, kind: BackendKind, config_type: type, reason: str) -> UnsupportedBackend:
        return UnsupportedBackend(kind, config_type, reason, self._adapter, self._runner, self._timeout)
