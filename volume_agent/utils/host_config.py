"""
Host-specific configuration management utility.

Handles automatic creation and selection of hostname-specific volume settings files.
"""

import logging
import socket
from pathlib import Path

BASE_SETTINGS_FILE = "volumes.env"


def get_hostname() -> str:
    """Get the current hostname (without domain)."""
    return socket.gethostname().split('.')[0]


def get_hostname_settings_file(base_dir: str = ".") -> str:
    """
    Get the settings file for this host.

    If {hostname}-volumes.env does not exist it is created from volumes.env
    with a header naming the host. Falls back to volumes.env when neither can
    be used.

    Returns:
        str: Path to the settings file to load
    """
    base = Path(base_dir)
    base_settings = base / BASE_SETTINGS_FILE
    hostname = get_hostname()
    host_settings = base / f"{hostname}-{BASE_SETTINGS_FILE}"

    try:
        if host_settings.exists():
            logging.debug(f"Using existing host-specific configuration: {host_settings}")
            return str(host_settings)

        if not base_settings.exists():
            logging.debug(f"{base_settings} not found, using defaults and environment")
            return str(base_settings)

        content = base_settings.read_text(encoding="utf-8")
        host_header = (
            f"# Host-specific volume configuration for: {hostname}\n"
            f"# Generated from {BASE_SETTINGS_FILE}, edit freely for this machine\n\n"
        )
        host_settings.write_text(host_header + content, encoding="utf-8")
        logging.info(f"Created host-specific configuration: {host_settings}")
        return str(host_settings)

    except OSError as e:
        logging.error(f"Error handling host-specific settings: {e}")
        return str(base_settings)


def list_all_settings_files(base_dir: str = ".") -> list[str]:
    """List the base settings file and every host-specific one."""
    base = Path(base_dir)
    settings_files = []

    if (base / BASE_SETTINGS_FILE).exists():
        settings_files.append(str(base / BASE_SETTINGS_FILE))

    for file_path in sorted(base.glob(f"*-{BASE_SETTINGS_FILE}")):
        settings_files.append(str(file_path))

    return settings_files
