"""Local spool for attendance writes made while the database is unreachable.

Records are kept in a JSON file and flushed with one bulk insert. The spool is
shared by every session on the server, so each write gets its own
``offline_<ms>_<hex>`` client id and the queue holds at most one write per
attendee (member id or visitor name) and event.
"""

from __future__ import annotations

import json
import logging
import threading
import uuid
from dataclasses import replace
from pathlib import Path
from typing import Callable, List, Optional

import mysql.connector

from ..common.datetime_utils import now_local
from .model import NewAttendance
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def is_offline_error(exc: BaseException) -> bool:
    """True when the error means the store could not be reached at all."""
    if isinstance(exc, (mysql.connector.errors.InterfaceError, mysql.connector.errors.OperationalError)):
        return True
    message = str(exc).lower()
    return "offline" in message or "unavailable" in message


class OfflineAttendanceQueue:
    def __init__(self, path: str | Path, *, clock: Callable = now_local):
        self._path = Path(path)
        self._clock = clock
        self._lock = threading.Lock()

    def _read(self) -> List[dict]:
        if not self._path.exists():
            return []
        text = self._path.read_text(encoding="utf-8").strip()
        return json.loads(text) if text else []

    def _write(self, items: List[dict]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(items, ensure_ascii=False), encoding="utf-8")
        tmp.replace(self._path)

    def add(self, record: NewAttendance) -> NewAttendance:
        """Queue a write. A second write for the same attendee and event returns the first one."""
        stamp = int(self._clock().timestamp() * 1000)
        queued = replace(record, client_id=f"offline_{stamp}_{uuid.uuid4().hex[:12]}")

        with self._lock:
            items = self._read()
            for item in items:
                earlier = NewAttendance.from_json(item)
                if earlier.attendee_key == queued.attendee_key:
                    logger.info("Attendance for event_id=%s already queued as %s", earlier.event_id, earlier.client_id)
                    return earlier
            items.append(queued.to_json())
            self._write(items)

        logger.warning("Attendance queued offline client_id=%s event_id=%s", queued.client_id, queued.event_id)
        return queued

    def pending(self) -> List[NewAttendance]:
        with self._lock:
            return [NewAttendance.from_json(i) for i in self._read()]

    def count(self) -> int:
        with self._lock:
            return len(self._read())

    def clear(self) -> None:
        with self._lock:
            self._write([])

    def sync(
        self,
        repository: AttendanceRepository,
        *,
        accept: Optional[Callable[[NewAttendance], bool]] = None,
    ) -> int:
        """Bulk-insert every queued record and empty the queue.

        ``accept`` may drop records that are no longer valid (they are
        discarded, not re-queued). Only the first write per attendee and
        event is sent. Returns how many queued records were flushed. On
        failure the queue is left untouched and the error propagates.
        """

        records = self.pending()
        if not records:
            return 0

        try:
            seen = set()
            to_insert = []
            for r in records:
                if r.attendee_key in seen or (accept is not None and not accept(r)):
                    continue
                seen.add(r.attendee_key)
                to_insert.append(r)
            inserted = repository.bulk_create(to_insert)
        except Exception:
            logger.exception("Offline attendance sync failed; %d record(s) kept", len(records))
            raise

        self.clear()
        dropped = len(records) - len(to_insert)
        if dropped:
            logger.warning("Offline attendance sync dropped %d invalid record(s)", dropped)
        logger.info("Offline attendance synced: %d queued, %d inserted", len(records), inserted)
        return len(records)
