"""
Explicit construction of the orchestration object graph.

Platform and capability detection run once here; the resulting values are
injected. There are no module-level singletons: the caller owns what
create_mount_orchestrator returns and may build as many as it likes (tests
build one per test).
"""

import logging
from typing import Any, Optional

from .config import Settings
from .core.capabilities import SystemCapabilities, detect_capabilities
from .core.events.event_bus import DomainEventBus
from .core.mount_state_registry import MountStateRegistry
from .services.secrets.secret_resolver import SecretResolver
from .services.volume_mount.backend_factory import BackendFactory
from .services.volume_mount.base_adapter import BasePlatformAdapter
from .services.volume_mount.mount_orchestrator import MountOrchestrator
from .services.volume_mount.platform_factory import PlatformFactory
from .utils.mountinfo import MountTableReader
from .utils.process_runner import CommandRunner


async def create_mount_orchestrator(
    settings: Settings,
    event_bus: Optional[DomainEventBus] = None,
    secret_store: Optional[Any] = None,
    adapter: Optional[BasePlatformAdapter] = None,
    capabilities: Optional[SystemCapabilities] = None,
    runner: Optional[CommandRunner] = None,
    registry: Optional[MountStateRegistry] = None,
) -> MountOrchestrator:
    """
    Build a MountOrchestrator for settings.

    Args:
        settings: Loaded application settings
        event_bus: Bus the orchestrator publishes volume events on
        secret_store: Credential store backing store: secret references
        adapter, capabilities, runner, registry: Overrides, detected or
            created when omitted
    """
    platform_factory = PlatformFactory()
    if adapter is None:
        adapter = platform_factory.create_adapter(MountTableReader(settings.proc_mounts_path))

    if capabilities is None:
        capabilities = await detect_capabilities(settings, platform_factory.detect_platform())

    runner = runner or CommandRunner()
    backend_factory = BackendFactory(
        adapter=adapter,
        runner=runner,
        secret_resolver=SecretResolver.from_settings(settings, store=secret_store),
        capabilities=capabilities,
        timeout=settings.operation_timeout_seconds,
    )

    orchestrator = MountOrchestrator(
        backend_factory=backend_factory,
        registry=registry or MountStateRegistry(),
        adapter=adapter,
        mount_base=settings.volume_mount_base,
        operation_timeout=settings.operation_timeout_seconds,
        event_bus=event_bus or DomainEventBus(),
    )
    logging.info("Volume orchestration layer ready")
    return orchestrator
