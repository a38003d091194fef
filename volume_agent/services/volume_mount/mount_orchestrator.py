"""Mount Orchestrator - the only entry point collaborators use to mount, release and probe volumes."""

import asyncio
import logging
from typing import Awaitable, Dict, Iterable, List, Optional

from ...core.events.domain_event import DomainEvent
from ...core.events.event_bus import DomainEventBus
from ...core.events.volume_events import VolumeMountedEvent, VolumeUnmountedEvent, VolumeUpdatedEvent
from ...core.exceptions import OperationTimeoutError
from ...core.mount_state_registry import MountStateRegistry
from ...models import ErrorKind, MountState, MountStateRecord, OperationResult, Volume
from .backend_factory import BackendFactory
from .base_adapter import BasePlatformAdapter
from .volume_paths import get_volume_path


class MountOrchestrator:
    """
    Drives the per-volume state machine.

    Every backend call runs under the volume's lock and a fixed deadline.
    A second caller for the same volume waits for the in-flight operation
    and then sees its outcome. Nothing raises past this class: every
    failure path ends in an error OperationResult and an ERROR state.
    """

    def __init__(
        self,
        backend_factory: BackendFactory,
        registry: MountStateRegistry,
        adapter: BasePlatformAdapter,
        mount_base: str,
        operation_timeout: float,
        event_bus: Optional[DomainEventBus] = None,
    ):
        self._backends = backend_factory
        self._registry = registry
        self._adapter = adapter
        self._mount_base = mount_base
        self._timeout = operation_timeout
        self._event_bus = event_bus
        logging.info(
            f"MountOrchestrator initialized - mount base: {mount_base}, "
            f"operation timeout: {operation_timeout:g}s"
        )

    def get_volume_path(self, volume: Volume) -> str:
        return get_volume_path(volume, self._adapter, self._mount_base)

    def get_state(self, volume_id: str) -> MountStateRecord:
        return self._registry.get(volume_id)

    def forget(self, volume_id: str) -> bool:
        """Drop the state of a deleted volume."""
        return self._registry.evict(volume_id)

    async def ensure_mounted(self, volume: Volume) -> OperationResult:
        """
        Make sure volume is mounted and healthy.

        A volume already MOUNTED only gets a health re-check; a failed
        re-check falls through to a fresh mount. A re-check that times out
        is surfaced as is, so one call never spends more than one deadline.
        """
        async with self._registry.lock_for(volume.id):
            before = self._registry.get(volume.id)

            result = None
            if before.state == MountState.MOUNTED:
                health = await self._run(volume, "health check", "check_health")
                if not health.is_error:
                    return health
                if health.error_kind == ErrorKind.TIMEOUT:
                    result = health
                else:
                    logging.warning(
                        f"Volume {volume.display_name} is marked mounted but unhealthy, remounting: {health.error}"
                    )

            if result is None:
                self._registry.set_state(volume.id, MountState.MOUNTING)
                logging.info(f"Mounting volume {volume.display_name}")
                result = await self._run(volume, "mount", "mount")
            after = self._settle(volume.id, result, success_state=MountState.MOUNTED)

        await self._announce(volume, before, after)
        return result

    async def release(self, volume: Volume) -> OperationResult:
        """Unmount volume. A volume already UNMOUNTED issues no unmount command."""
        async with self._registry.lock_for(volume.id):
            before = self._registry.get(volume.id)
            if before.state == MountState.UNMOUNTED:
                logging.debug(f"Volume {volume.display_name} already unmounted")
                return OperationResult.unmounted()

            self._registry.set_state(volume.id, MountState.UNMOUNTING)
            logging.info(f"Unmounting volume {volume.display_name}")
            result = await self._run(volume, "unmount", "unmount")
            after = self._settle(volume.id, result, success_state=MountState.UNMOUNTED)

        await self._announce(volume, before, after)
        return result

    async def probe(self, volume: Volume) -> OperationResult:
        """
        Health-check volume without mounting or unmounting anything.

        Healthy -> MOUNTED, failure -> ERROR. An UNMOUNTED volume that is
        simply not mounted stays UNMOUNTED.
        """
        async with self._registry.lock_for(volume.id):
            before = self._registry.get(volume.id)
            result = await self._run(volume, "health check", "check_health")

            if before.state in (MountState.MOUNTING, MountState.UNMOUNTING):
                return result
            if (
                before.state == MountState.UNMOUNTED
                and result.error_kind == ErrorKind.NOT_MOUNTED
            ):
                return result

            after = self._settle(volume.id, result, success_state=MountState.MOUNTED)

        await self._announce(volume, before, after)
        return result

    async def mount_all(self, volumes: Iterable[Volume]) -> Dict[str, OperationResult]:
        """ensure_mounted for many volumes concurrently, keyed by volume id."""
        return await self._for_each(volumes, self.ensure_mounted)

    async def release_all(self, volumes: Iterable[Volume]) -> Dict[str, OperationResult]:
        return await self._for_each(volumes, self.release)

    async def _for_each(self, volumes: Iterable[Volume], operation) -> Dict[str, OperationResult]:
        volume_list: List[Volume] = list(volumes)
        results = await asyncio.gather(*(operation(volume) for volume in volume_list))
        return {volume.id: result for volume, result in zip(volume_list, results)}

    async def _run(self, volume: Volume, operation: str, action: str) -> OperationResult:
        """
        Call backend.<action>(config, target) under the operation deadline.

        On timeout the call is cancelled, which kills any external process it
        was waiting on. Every failure is converted to an error result.
        """
        label = f"{volume.config.backend.upper()} {operation}"
        try:
            backend = self._backends.create(volume.config)
            target = self.get_volume_path(volume)
            call: Awaitable[OperationResult] = getattr(backend, action)(volume.config, target)
            return await asyncio.wait_for(call, timeout=self._timeout)
        except asyncio.TimeoutError:
            error = OperationTimeoutError(label, self._timeout)
            logging.error(f"Volume {volume.display_name}: {error.message}")
            return OperationResult.failed(error.message, ErrorKind.TIMEOUT)
        except Exception as e:
            logging.error(f"Unexpected error during {label} of volume {volume.display_name}: {e}", exc_info=True)
            return OperationResult.failed(f"Unexpected error during {label}: {e}", ErrorKind.IO_FAILURE)

    def _settle(self, volume_id: str, result: OperationResult, success_state: MountState) -> MountStateRecord:
        if result.is_error:
            _, record = self._registry.set_state(
                volume_id, MountState.ERROR, error=result.error, error_kind=result.error_kind
            )
        else:
            _, record = self._registry.set_state(volume_id, success_state)
        return record

    async def _announce(self, volume: Volume, before: MountStateRecord, after: MountStateRecord) -> None:
        """Publish state-change events. Runs after the volume lock is released."""
        if self._event_bus is None:
            return
        if before.state == after.state and before.last_error == after.last_error:
            return

        events: List[DomainEvent] = []
        if after.state == MountState.MOUNTED:
            events.append(VolumeMountedEvent(volume_id=volume.id, volume_name=volume.display_name))
        elif after.state == MountState.UNMOUNTED:
            events.append(VolumeUnmountedEvent(volume_id=volume.id, volume_name=volume.display_name))

        events.append(
            VolumeUpdatedEvent(
                volume_id=volume.id,
                volume_name=volume.display_name,
                old_state=before.state,
                new_state=after.state,
                error=after.last_error,
                error_kind=after.last_error_kind,
            )
        )

        for event in events:
            await self._event_bus.publish(event)
