"""
Mount State Registry - in-memory record of every volume's lifecycle state.
"""

import asyncio
import logging
from datetime import datetime
from typing import Dict, Optional, Tuple

from volume_agent.models import ErrorKind, MountState, MountStateRecord


class MountStateRegistry:
    """
    Authoritative lifecycle state per volume id.

    Only the MountOrchestrator writes here, and only while holding the lock
    returned by lock_for() for that volume. Each volume has its own lock so
    a hung mount on one share never blocks another volume. Records are created
    lazily in the UNMOUNTED state and live until evict() is called.
    """

    def __init__(self):
        self._records: Dict[str, MountStateRecord] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        logging.info("MountStateRegistry initialized")

    def lock_for(self, volume_id: str) -> asyncio.Lock:
        lock = self._locks.get(volume_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[volume_id] = lock
        return lock

    def get(self, volume_id: str) -> MountStateRecord:
        """Current record for volume_id (a copy; mutate through set_state)."""
        return self._get_or_create(volume_id).model_copy()

    def get_state(self, volume_id: str) -> MountState:
        return self._get_or_create(volume_id).state

    def set_state(
        self,
        volume_id: str,
        state: MountState,
        error: Optional[str] = None,
        error_kind: Optional[ErrorKind] = None,
    ) -> Tuple[MountState, MountStateRecord]:
        """
        Record a new state for volume_id.

        Leaving ERROR clears the last error. Entering ERROR stamps the error
        message, kind and time.

        Returns:
            (old_state, updated copy of the record)
        """
        record = self._get_or_create(volume_id)
        old_state = record.state
        now = datetime.now()

        record.state = state
        record.updated_at = now
        if state == MountState.ERROR:
            record.last_error = error or "Unknown error"
            record.last_error_kind = error_kind or ErrorKind.IO_FAILURE
            record.last_error_at = now
        else:
            record.last_error = None
            record.last_error_kind = None

        if old_state != state:
            logging.debug(f"Volume {volume_id}: {old_state.value} -> {state.value}")
        return old_state, record.model_copy()

    def evict(self, volume_id: str) -> bool:
        """
        Forget a deleted volume. Refuses while an operation holds its lock.

        The lock itself stays registered: a caller queued on it must keep
        sharing it with every later caller for the same id.
        """
        lock = self._locks.get(volume_id)
        if lock is not None and lock.locked():
            logging.warning(f"Cannot evict volume {volume_id} while an operation is in flight")
            return False
        return self._records.pop(volume_id, None) is not None

    def snapshot(self) -> Dict[str, MountStateRecord]:
        return {volume_id: record.model_copy() for volume_id, record in self._records.items()}

    def __contains__(self, volume_id: str) -> bool:
        return volume_id in self._records

    def _get_or_create(self, volume_id: str) -> MountStateRecord:
        record = self._records.get(volume_id)
        if record is None:
            record = MountStateRecord(volume_id=volume_id)
            self._records[volume_id] = record
        return record
