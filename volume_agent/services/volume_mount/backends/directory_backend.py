"""Directory backend - a local directory used in place, nothing to mount."""

import logging

import aiofiles.os

from ....core.exceptions import UnreachableError, VolumeIOError
from ....models import BackendKind, DirectoryConfig, OperationResult
from .base_backend import VolumeBackend


class DirectoryBackend(VolumeBackend):
    kind = BackendKind.DIRECTORY
    config_type = DirectoryConfig

    async def _do_mount(self, config: DirectoryConfig, target: str) -> OperationResult:
        return OperationResult.mounted()

    async def _do_unmount(self, config: DirectoryConfig, target: str) -> OperationResult:
        return OperationResult.unmounted()

    async def _do_check_health(self, config: DirectoryConfig, target: str) -> OperationResult:
        path = self._adapter.normalize_path(config.path)

        if not await aiofiles.os.path.exists(path):
            raise UnreachableError(f"Directory {path} does not exist")

        if not await aiofiles.os.path.isdir(path):
            raise VolumeIOError(f"Path {path} is not a directory")

        logging.debug(f"Directory volume at {path} is healthy.")
        return OperationResult.mounted()
