"""
Volume Mount Module - backend orchestration for backup volumes.

Components:
- MountOrchestrator: per-volume state machine, deadlines and serialization
- BackendFactory: picks the backend strategy for a VolumeConfig
- Backends: Directory, SMB (CIFS mount or UNC session), NFS, rclone
- Platform adapters: POSIX and Windows command templates and path rules
- PlatformFactory: platform detection and adapter creation
- VolumeHealthMonitor: periodic probe and automatic remount
"""

from .backend_factory import BackendFactory
from .base_adapter import BasePlatformAdapter
from .health_monitor import VolumeHealthMonitor
from .mount_orchestrator import MountOrchestrator
from .platform_factory import PlatformFactory

__all__ = [
    "MountOrchestrator",
    "BackendFactory",
    "BasePlatformAdapter",
    "PlatformFactory",
    "VolumeHealthMonitor",
]
