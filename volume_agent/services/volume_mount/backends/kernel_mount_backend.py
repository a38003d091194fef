"""Shared behaviour for backends mounted on a local directory through the kernel mount table."""

import logging
import os
from abc import abstractmethod
from typing import Tuple

import aiofiles.os

from ....core.exceptions import (
    AlreadyMountedElsewhereError,
    CommandError,
    NotMountedError,
    VolumeIOError,
)
from ....models import OperationResult
from .base_backend import VolumeBackend


class KernelMountBackend(VolumeBackend):
    """
    Mount point lifecycle for CIFS, NFS and rclone mounts.

    Health means: the target exists, the mount table has an entry whose mount
    point is exactly the target, and its filesystem type is one we expect.
    """

    expected_fstypes: Tuple[str, ...] = ()

    # Unmount a foreign or stale mount occupying the target before mounting
    stale_mount_recovery: bool = True

    @abstractmethod
    async def _run_mount(self, config, target: str) -> None:
        """Invoke the mount tool. Raises CommandError or VolumeError on failure."""

    async def _do_check_health(self, config, target: str) -> OperationResult:
        if not await aiofiles.os.path.exists(target):
            raise NotMountedError()

        entry = await self._adapter.mount_table.get_mount_for_path(target)
        if entry is None or os.path.normpath(entry.mount_point) != os.path.normpath(target):
            raise NotMountedError()

        if entry.fstype not in self.expected_fstypes:
            raise AlreadyMountedElsewhereError(
                f"Path {target} is not mounted as {self.label} (found {entry.fstype})."
            )

        logging.debug(f"{self.label} volume at {target} is healthy and mounted.")
        return OperationResult.mounted()

    async def _do_mount(self, config, target: str) -> OperationResult:
        health = await self.check_health(config, target)
        if not health.is_error:
            logging.debug(f"{self.label} volume at {target} already mounted, skipping mount")
            return health

        if await self._adapter.mount_table.is_mount_point(target):
            if not self.stale_mount_recovery:
                raise AlreadyMountedElsewhereError(
                    f"Path {target} is occupied by another mount: {health.error}"
                )
            logging.debug(f"Trying to unmount existing mount at {target} before mounting...")
            await self._unmount_stale(target)

        await aiofiles.os.makedirs(target, exist_ok=True)

        logging.debug(f"Mounting {self.label} volume {target}...")
        await self._run_mount(config, target)

        verified = await self.check_health(config, target)
        if verified.is_error:
            raise VolumeIOError(
                f"{self.label} mount command succeeded but {target} is not usable: {verified.error}"
            )

        logging.info(f"{self.label} volume at {target} mounted successfully.")
        return OperationResult.mounted()

    async def _do_unmount(self, config, target: str) -> OperationResult:
        if not await self._adapter.mount_table.is_mount_point(target):
            logging.debug(f"Path {target} is not a mount point. Skipping unmount.")
            return OperationResult.unmounted()

        await self._runner.run_checked(self._adapter.unmount_command(target), self._timeout)
        await self._remove_mount_directory(target)

        logging.info(f"{self.label} volume at {target} unmounted successfully.")
        return OperationResult.unmounted()

    async def _unmount_stale(self, target: str) -> None:
        try:
            await self._runner.run_checked(self._adapter.unmount_command(target), self._timeout)
            return
        except CommandError as e:
            logging.warning(f"Unmount of stale mount at {target} failed, retrying lazily: {e}")

        try:
            await self._runner.run_checked(self._adapter.unmount_command(target, lazy=True), self._timeout)
        except CommandError as e:
            raise AlreadyMountedElsewhereError(
                f"Path {target} is occupied by a mount that could not be removed: {e.stderr.strip() or e}"
            )

    async def _remove_mount_directory(self, target: str) -> None:
        """Remove <base>/<short_id>/_data and <base>/<short_id> once they are empty."""
        for path in (target, os.path.dirname(target)):
            try:
                await aiofiles.os.rmdir(path)
            except OSError as e:
                logging.debug(f"Leaving mount directory {path} in place: {e}")
                return
