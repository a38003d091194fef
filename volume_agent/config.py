from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .utils.host_config import get_hostname_settings_file


class Settings(BaseSettings):
    # Mount layout
    volume_mount_base: str = "/var/lib/volume-agent/volumes"  # One subdirectory per network volume

    # Timing
    operation_timeout_seconds: float = Field(default=5.0, gt=0)  # Shared by mount, unmount and health
    health_check_interval_seconds: int = 30
    auto_remount: bool = True  # Remount volumes that fail a periodic health check

    # Credentials
    secret_key: Optional[str] = None  # Fernet key for encv1: secret references

    # Capability detection
    rclone_config_dir: str = ""  # Empty means ~/.config/rclone (%APPDATA%\rclone on Windows)
    proc_status_path: str = "/proc/self/status"

    # Mount table
    proc_mounts_path: str = "/proc/self/mounts"

    # Logging
    log_level: str = "INFO"
    log_file_path: str = "logs/volume_agent.log"
    log_retention_days: int = 30

    model_config = SettingsConfigDict(
        env_file=get_hostname_settings_file(), env_file_encoding="utf-8", extra="ignore"
    )

    @property
    def log_directory(self) -> Path:
        return Path(self.log_file_path).parent

    @property
    def mount_base_path(self) -> Path:
        return Path(self.volume_mount_base)
