import asyncio
import logging
from typing import Awaitable, Callable, Iterable, Optional

from ...models import ErrorKind, MountState, Volume
from .mount_orchestrator import MountOrchestrator

VolumeProvider = Callable[[], Awaitable[Iterable[Volume]]]

# Failures that will not heal by remounting, or must not be retried blindly
NON_RECOVERABLE_KINDS = {
    ErrorKind.CONFIG_MISMATCH,
    ErrorKind.AUTH_FAILURE,
    ErrorKind.TIMEOUT,
    ErrorKind.UNSUPPORTED,
}


class VolumeHealthMonitor:
    """
    Periodically probes mounted volumes and remounts the ones that dropped.

    Volumes come from the persistence layer through volume_provider. Only
    volumes the orchestrator considers MOUNTED or ERROR are probed.
    """

    def __init__(
        self,
        orchestrator: MountOrchestrator,
        volume_provider: VolumeProvider,
        interval_seconds: float,
        auto_remount: bool = True,
    ):
        self._orchestrator = orchestrator
        self._volume_provider = volume_provider
        self._interval_seconds = interval_seconds
        self._auto_remount = auto_remount

        self._is_running = False
        self._monitor_task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._is_running

    async def start_monitoring(self) -> None:
        if self._is_running:
            logging.warning("Volume health monitoring already running")
            return

        self._is_running = True
        self._monitor_task = asyncio.create_task(self._monitoring_loop())
        logging.info("Volume health monitoring started")

    async def stop_monitoring(self) -> None:
        if not self._is_running:
            return

        self._is_running = False

        if self._monitor_task:
            self._monitor_task.cancel()
            try:
                await self._monitor_task
            except asyncio.CancelledError:
                pass
            self._monitor_task = None

        logging.info("Volume health monitoring stopped")

    async def _monitoring_loop(self) -> None:
        logging.info(f"Volume health loop starting - checking every {self._interval_seconds}s")
        try:
            while self._is_running:
                try:
                    await self.check_all_volumes()
                except Exception as e:
                    logging.error(f"Error in volume health loop: {e}")

                await asyncio.sleep(self._interval_seconds)

        except asyncio.CancelledError:
            logging.debug("Volume health loop cancelled")
            raise

    async def check_all_volumes(self) -> None:
        volumes = list(await self._volume_provider())
        await asyncio.gather(*(self.check_volume(volume) for volume in volumes))

    async def check_volume(self, volume: Volume) -> None:
        record = self._orchestrator.get_state(volume.id)
        if record.state not in (MountState.MOUNTED, MountState.ERROR):
            return

        if record.state == MountState.ERROR and record.last_error_kind in NON_RECOVERABLE_KINDS:
            logging.debug(
                f"Skipping volume {volume.display_name}: last error is {record.last_error_kind.value}"
            )
            return

        result = await self._orchestrator.probe(volume)
        if not result.is_error:
            return

        logging.warning(f"Volume {volume.display_name} failed health check: {result.error}")
        if not self._auto_remount or result.error_kind in NON_RECOVERABLE_KINDS:
            return

        remount = await self._orchestrator.ensure_mounted(volume)
        if remount.is_error:
            logging.error(f"Automatic remount of volume {volume.display_name} failed: {remount.error}")
        else:
            logging.info(f"Volume {volume.display_name} remounted after failed health check")
