from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import AttendanceStatus, AttendanceType, MarkResultStatus


@dataclass(frozen=True)
class NewAttendance:
    """A not-yet-stored attendance write. This is also the offline queue payload."""

    event_id: int
    attendance_type: AttendanceType
    marked_at: datetime
    user_id: Optional[int] = None
    marked_latitude: Optional[float] = None
    marked_longitude: Optional[float] = None
    visitor_name: Optional[str] = None
    visitor_designation: Optional[str] = None
    visitor_club: Optional[str] = None
    visitor_comment: Optional[str] = None
    client_id: Optional[str] = None

    @property
    def attendee_key(self) -> tuple:
        """(event, member) or (event, visitor name); at most one record per key."""
        if self.attendance_type == AttendanceType.VISITOR:
            return (self.event_id, "visitor", (self.visitor_name or "").strip().lower())
        return (self.event_id, "member", self.user_id)

    def to_json(self) -> dict:
        data = asdict(self)
        data["attendance_type"] = self.attendance_type.value
        data["marked_at"] = self.marked_at.isoformat()
        return data

    @classmethod
    def from_json(cls, data: dict) -> "NewAttendance":
        data = dict(data)
        data["attendance_type"] = AttendanceType(data["attendance_type"])
        data["marked_at"] = datetime.fromisoformat(data["marked_at"])
        return cls(**data)


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one check-in. Created once, never updated."""

    attendance_id: int
    event_id: int
    attendance_type: AttendanceType
    status: AttendanceStatus
    marked_at: datetime
    user_id: Optional[int] = None
    marked_latitude: Optional[float] = None
    marked_longitude: Optional[float] = None
    visitor_name: Optional[str] = None
    visitor_designation: Optional[str] = None
    visitor_club: Optional[str] = None
    visitor_comment: Optional[str] = None
    client_id: Optional[str] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["attendance_type"] = self.attendance_type.value
        data["status"] = self.status.value
        data["marked_at"] = self.marked_at.isoformat()
        return data


@dataclass(frozen=True)
class MarkAttendanceResult:
    status: MarkResultStatus
    message: str
    record: Optional[AttendanceRecord] = None

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "message": self.message,
            "record": self.record.to_dict() if self.record else None,
        }
