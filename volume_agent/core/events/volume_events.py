"""
Domain events emitted by the mount orchestrator.
"""

from dataclasses import dataclass
from typing import ClassVar, Optional

from volume_agent.core.events.domain_event import DomainEvent
from volume_agent.models import ErrorKind, MountState


@dataclass(frozen=True)
class VolumeMountedEvent(DomainEvent):
    """Event published when a volume reaches the mounted state."""

    event_name: ClassVar[str] = "volume:mounted"

    volume_id: str
    volume_name: str


@dataclass(frozen=True)
class VolumeUnmountedEvent(DomainEvent):
    """Event published when a volume is released."""

    event_name: ClassVar[str] = "volume:unmounted"

    volume_id: str
    volume_name: str


@dataclass(frozen=True)
class VolumeUpdatedEvent(DomainEvent):
    """Event published on every volume state change, errors included."""

    event_name: ClassVar[str] = "volume:updated"

    volume_id: str
    volume_name: str
    old_state: MountState
    new_state: MountState
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
