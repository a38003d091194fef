"""Resolves where a volume's content is reachable (its MountTarget)."""

import os
from typing import assert_never

from ...models import DirectoryConfig, NfsConfig, RcloneConfig, SmbConfig, Volume
from .base_adapter import BasePlatformAdapter

MOUNT_DATA_DIRNAME = "_data"


def get_volume_path(volume: Volume, adapter: BasePlatformAdapter, mount_base: str) -> str:
    """
    Directory volumes use the configured path (normalized). Network volumes get
    <mount_base>/<short_id>/_data, except SMB on platforms without local mount
    points, where the UNC path is the target.
    """
    config = volume.config
    match config:
        case DirectoryConfig():
            return adapter.normalize_path(config.path)
        case SmbConfig() if not adapter.local_mount_points:
            return adapter.build_unc_path(config.server, config.share)
        case SmbConfig() | NfsConfig() | RcloneConfig():
            return adapter.normalize_path(os.path.join(mount_base, volume.short_id, MOUNT_DATA_DIRNAME))
        case _:
            assert_never(config)
