from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional, Protocol, Sequence

from .model import AttendanceRecord, NewAttendance


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_event_and_user(self, event_id: int, user_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def find_visitor(self, event_id: int, visitor_name: str) -> Optional[AttendanceRecord]:
        """Case-insensitive lookup of a visitor already marked for the event."""

        raise NotImplementedError

    def create(self, record: NewAttendance) -> int:
        raise NotImplementedError

    def bulk_create(self, records: Sequence[NewAttendance]) -> int:
        """Insert many records in one transaction. Duplicates are skipped; returns rows inserted."""

        raise NotImplementedError

    def list_for_user(self, user_id: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_event(self, event_id: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_all(self) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_between(self, start: datetime, end: datetime) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def count_by_user(self) -> Dict[int, int]:
        """Member attendance count keyed by user id."""

        raise NotImplementedError
