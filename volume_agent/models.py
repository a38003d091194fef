from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class BackendKind(str, Enum):
    """Storage backend kinds a volume can be backed by."""

    DIRECTORY = "directory"
    SMB = "smb"
    NFS = "nfs"
    RCLONE = "rclone"


class MountState(str, Enum):
    """
    Lifecycle state of a volume, owned by the MountOrchestrator.

    Workflow: Unmounted -> Mounting -> Mounted -> Unmounting -> Unmounted
    Alternative: -> Error (not terminal, every operation may be retried)
    """

    UNMOUNTED = "unmounted"
    MOUNTING = "mounting"
    MOUNTED = "mounted"
    UNMOUNTING = "unmounting"
    ERROR = "error"


class BackendStatus(str, Enum):
    """Outcome status of a single backend operation."""

    MOUNTED = "mounted"
    UNMOUNTED = "unmounted"
    ERROR = "error"


class ErrorKind(str, Enum):
    """Failure classification used to decide recovery and retry."""

    CONFIG_MISMATCH = "config_mismatch"  # Wrong backend for config, always fatal
    AUTH_FAILURE = "auth_failure"  # Bad credentials or unresolvable secret
    UNREACHABLE = "unreachable"  # Host or share not found
    ALREADY_MOUNTED_ELSEWHERE = "already_mounted_elsewhere"  # Foreign mount at target
    NOT_MOUNTED = "not_mounted"  # Nothing mounted at target
    TIMEOUT = "timeout"  # Operation exceeded deadline
    UNSUPPORTED = "unsupported"  # Backend unavailable on this platform
    IO_FAILURE = "io_failure"  # Generic


SecretRef = Annotated[
    str,
    Field(
        min_length=1,
        description="Opaque reference to a stored credential (env:, file:, store:, encv1:)",
    ),
]


class DirectoryConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    backend: Literal["directory"] = "directory"
    path: str = Field(..., min_length=1, description="Local directory backing the volume")


class SmbConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    backend: Literal["smb"] = "smb"
    server: str = Field(..., min_length=1)
    share: str = Field(..., min_length=1)
    port: int = Field(default=445, ge=1, le=65535)
    username: str = ""
    password: Optional[SecretRef] = None
    domain: Optional[str] = None
    vers: Optional[str] = Field(default="auto", description="SMB dialect, 'auto' lets the client negotiate")
    read_only: bool = False


class NfsConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    backend: Literal["nfs"] = "nfs"
    server: str = Field(..., min_length=1)
    export_path: str = Field(..., min_length=1)
    port: int = Field(default=2049, ge=1, le=65535)
    version: str = "4.1"
    read_only: bool = False


class RcloneConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    backend: Literal["rclone"] = "rclone"
    remote: str = Field(..., min_length=1, description="Name of a configured rclone remote")
    path: str = ""
    read_only: bool = False


VolumeConfig = Annotated[
    Union[DirectoryConfig, SmbConfig, NfsConfig, RcloneConfig],
    Field(discriminator="backend"),
]


class Volume(BaseModel):
    """Volume record handed to the orchestrator for each operation."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    short_id: str = Field(..., min_length=1, pattern=r"^[A-Za-z0-9_-]+$")
    name: str = ""
    config: VolumeConfig

    @property
    def display_name(self) -> str:
        return self.name or self.short_id


class OperationResult(BaseModel):
    """Result of every backend and orchestrator operation."""

    model_config = ConfigDict(frozen=True)

    status: BackendStatus
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None

    @classmethod
    def mounted(cls) -> "OperationResult":
        return cls(status=BackendStatus.MOUNTED)

    @classmethod
    def unmounted(cls) -> "OperationResult":
        return cls(status=BackendStatus.UNMOUNTED)

    @classmethod
    def failed(cls, error: str, kind: ErrorKind = ErrorKind.IO_FAILURE) -> "OperationResult":
        return cls(status=BackendStatus.ERROR, error=error, error_kind=kind)

    @property
    def is_error(self) -> bool:
        return self.status == BackendStatus.ERROR


class MountStateRecord(BaseModel):
    """Current lifecycle state of one volume."""

    volume_id: str
    state: MountState = Field(default=MountState.UNMOUNTED)
    last_error: Optional[str] = Field(
        default=None, description="Last error message when state is ERROR"
    )
    last_error_kind: Optional[ErrorKind] = None
    last_error_at: Optional[datetime] = None
    updated_at: datetime = Field(default_factory=datetime.now)
