"""
System capability detection.

Capabilities are detected once at startup and passed into the orchestrator
as an immutable value; nothing reads them from process-wide state later.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

import aiofiles
import aiofiles.os

from ..config import Settings

CAP_SYS_ADMIN_BIT = 21


@dataclass(frozen=True)
class SystemCapabilities:
    rclone: bool = False
    sys_admin: bool = False


def default_rclone_config_dir(platform_name: str) -> str:
    if platform_name == "windows":
        appdata = os.environ.get("APPDATA") or str(Path.home() / "AppData" / "Roaming")
        return str(Path(appdata) / "rclone")
    return str(Path.home() / ".config" / "rclone")


async def detect_capabilities(settings: Settings, platform_name: str) -> SystemCapabilities:
    """Detect which optional capabilities are available in the current environment."""
    capabilities = SystemCapabilities(
        rclone=await detect_rclone(settings.rclone_config_dir or default_rclone_config_dir(platform_name)),
        sys_admin=await detect_sys_admin(settings.proc_status_path, platform_name),
    )
    logging.info(f"System capabilities: rclone={capabilities.rclone}, sysAdmin={capabilities.sys_admin}")
    return capabilities


async def detect_rclone(config_dir: str) -> bool:
    """rclone counts as available when its config directory exists and is not empty."""
    try:
        entries = await aiofiles.os.listdir(config_dir)
    except OSError:
        logging.warning(f"rclone capability: disabled. To enable: create rclone config at {config_dir}")
        return False

    if not entries:
        logging.warning(f"rclone capability: disabled. rclone config directory is empty: {config_dir}")
        return False

    logging.info("rclone capability: enabled")
    return True


async def detect_sys_admin(proc_status_path: str, platform_name: str) -> bool:
    """Detect CAP_SYS_ADMIN from the effective capability mask (Linux only)."""
    if platform_name != "linux":
        logging.info(f"sysAdmin capability: not applicable on {platform_name}")
        return False

    try:
        async with aiofiles.open(proc_status_path, "r", encoding="utf-8") as f:
            content = await f.read()
    except OSError as e:
        logging.warning(f"sysAdmin capability: disabled. Could not read {proc_status_path}: {e}")
        return False

    cap_eff_line = next((line for line in content.splitlines() if line.startswith("CapEff:")), None)
    if cap_eff_line is None:
        logging.warning(f"sysAdmin capability: disabled. No CapEff line in {proc_status_path}")
        return False

    parts = cap_eff_line.split()
    try:
        cap_value = int(parts[1], 16)
    except (IndexError, ValueError):
        logging.warning("sysAdmin capability: disabled. Could not parse CapEff value")
        return False

    if cap_value & (1 << CAP_SYS_ADMIN_BIT):
        logging.info("sysAdmin capability: enabled (CAP_SYS_ADMIN detected)")
        return True

    logging.warning("sysAdmin capability: disabled. Network volumes need CAP_SYS_ADMIN to mount")
    return False
