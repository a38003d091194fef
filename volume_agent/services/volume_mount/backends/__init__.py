from .base_backend import VolumeBackend
from .directory_backend import DirectoryBackend
from .nfs_backend import NfsMountBackend
from .rclone_backend import RcloneMountBackend
from .smb_backend import CifsMountBackend, SmbShareBackend
from .unsupported_backend import UnsupportedBackend

__all__ = [
    "VolumeBackend",
    "DirectoryBackend",
    "CifsMountBackend",
    "SmbShareBackend",
    "NfsMountBackend",
    "RcloneMountBackend",
    "UnsupportedBackend",
]
