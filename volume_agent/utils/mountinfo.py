"""Reader for the kernel mount table (/proc/self/mounts format)."""

import logging
import os
import re
from dataclasses import dataclass
from typing import List, Optional

import aiofiles

DEFAULT_MOUNTS_PATH = "/proc/self/mounts"

_OCTAL_ESCAPE = re.compile(r"\\([0-7]{3})")


@dataclass(frozen=True)
class MountEntry:
    source: str
    mount_point: str
    fstype: str
    options: str = ""


def _unescape(field: str) -> str:
    # Spaces, tabs and backslashes are written as \040, \011, \134
    return _OCTAL_ESCAPE.sub(lambda m: chr(int(m.group(1), 8)), field)


def parse_mounts(content: str) -> List[MountEntry]:
    entries = []
    for line in content.splitlines():
        fields = line.split()
        if len(fields) < 3:
            continue
        entries.append(
            MountEntry(
                source=_unescape(fields[0]),
                mount_point=_unescape(fields[1]),
                fstype=fields[2],
                options=fields[3] if len(fields) > 3 else "",
            )
        )
    return entries


class MountTableReader:
    """Answers which mount covers a path, and with which filesystem type."""

    def __init__(self, mounts_path: str = DEFAULT_MOUNTS_PATH):
        self._mounts_path = mounts_path

    async def read_entries(self) -> List[MountEntry]:
        try:
            async with aiofiles.open(self._mounts_path, "r", encoding="utf-8") as f:
                content = await f.read()
        except FileNotFoundError:
            logging.debug(f"Mount table not available: {self._mounts_path}")
            return []
        return parse_mounts(content)

    async def get_mount_for_path(self, path: str) -> Optional[MountEntry]:
        """
        Return the mount entry with the longest mount point containing path.

        When the same mount point appears several times, the last entry wins,
        since it is the one stacked on top.
        """
        target = os.path.normpath(path)
        best: Optional[MountEntry] = None

        for entry in await self.read_entries():
            mount_point = os.path.normpath(entry.mount_point)
            if not self._contains(mount_point, target):
                continue
            if best is None or len(mount_point) >= len(os.path.normpath(best.mount_point)):
                best = entry

        return best

    async def is_mount_point(self, path: str) -> bool:
        entry = await self.get_mount_for_path(path)
        return entry is not None and os.path.normpath(entry.mount_point) == os.path.normpath(path)

    @staticmethod
    def _contains(mount_point: str, target: str) -> bool:
        if mount_point == "/":
            return target.startswith("/")
        return target == mount_point or target.startswith(mount_point + "/")
