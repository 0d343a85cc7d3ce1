from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import now_local
from ..common.validators import require_min_length
from ..core.enums import AttendanceType, MarkResultStatus
from ..core.exceptions import ConflictError, GeofenceError, NotFoundError, ValidationError
from ..events.model import Event
from ..events.repository import EventRepository
from ..triggers import signals
from ..users.repository import UserRepository
from .factory import CheckInPolicyFactory
from .model import AttendanceRecord, MarkAttendanceResult, NewAttendance
from .offline_queue import OfflineAttendanceQueue, is_offline_error
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        events: EventRepository,
        users: UserRepository,
        *,
        policy_factory: CheckInPolicyFactory | None = None,
        offline_queue: OfflineAttendanceQueue | None = None,
    ):
        self._attendance = attendance
        self._events = events
        self._users = users
        self._factory = policy_factory or CheckInPolicyFactory()
        self._queue = offline_queue

    def _get_event(self, event_id: int) -> Event:
        event = self._events.get_by_id(event_id)
        if not event:
            raise NotFoundError("Event not found")
        return event

    def _check_location(self, event: Event, latitude: Optional[float], longitude: Optional[float]) -> None:
        policy = self._factory.for_event(event)
        decision = policy.decide(event=event, latitude=latitude, longitude=longitude)
        if not decision.accepted:
            raise GeofenceError(
                decision.note or "You are outside the event area",
                distance_meters=decision.distance_meters,
                radius_meters=self._factory.radius_meters,
            )

    def _queue_offline(self, record: NewAttendance, exc: Exception) -> MarkAttendanceResult:
        if self._queue is None or not is_offline_error(exc):
            raise exc
        self._queue.add(record)
        return MarkAttendanceResult(
            status=MarkResultStatus.QUEUED,
            message="You're offline. Attendance was saved and will sync when the connection is back.",
        )

    def _store(self, event: Event, record: NewAttendance) -> AttendanceRecord:
        attendance_id = self._attendance.create(record)
        stored = self._attendance.get_by_id(attendance_id)
        signals.attendance_created.send(self, record=stored, event=event)
        return stored

    def mark_member_attendance(
        self,
        event_id: int,
        user_id: int,
        *,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        now: datetime | None = None,
    ) -> MarkAttendanceResult:
        """Record that an approved member attended an event.

        Raises ``GeofenceError`` when the event has a geofence and the given
        position is missing or outside it. A second call for the same
        (event, member) returns ``already_marked`` with the stored record.
        """

        now = now or now_local()
        new = NewAttendance(
            event_id=event_id,
            user_id=user_id,
            attendance_type=AttendanceType.MEMBER,
            marked_at=now,
            marked_latitude=latitude,
            marked_longitude=longitude,
        )

        try:
            event = self._get_event(event_id)
            user = self._users.get_by_id(user_id)
            if not user:
                raise NotFoundError("Member not found")
            if not user.is_approved:
                raise ValidationError("Your account must be approved before marking attendance")

            self._check_location(event, latitude, longitude)

            existing = self._attendance.get_for_event_and_user(event_id, user_id)
            if not existing:
                try:
                    stored = self._store(event, new)
                except ConflictError:
                    # Another request inserted the same check-in first.
                    existing = self._attendance.get_for_event_and_user(event_id, user_id)
                    if not existing:
                        raise
            if existing:
                return MarkAttendanceResult(
                    status=MarkResultStatus.ALREADY_MARKED,
                    message="Attendance already marked for this event",
                    record=existing,
                )
        except (ConflictError, GeofenceError, NotFoundError, ValidationError):
            raise
        except Exception as e:
            return self._queue_offline(new, e)

        logger.info("Attendance marked event_id=%s user_id=%s", event_id, user_id)
        return MarkAttendanceResult(status=MarkResultStatus.SUCCESS, message="Attendance marked", record=stored)

    def mark_visitor_attendance(
        self,
        event_id: int,
        *,
        name: str,
        designation: str,
        club: str,
        comment: Optional[str] = None,
        now: datetime | None = None,
    ) -> MarkAttendanceResult:
        name = require_min_length(name, "Visitor name", 2)
        designation = require_min_length(designation, "Designation", 2)
        club = require_min_length(club, "Club", 2)
        comment = (comment or "").strip() or None

        new = NewAttendance(
            event_id=event_id,
            attendance_type=AttendanceType.VISITOR,
            marked_at=now or now_local(),
            visitor_name=name,
            visitor_designation=designation,
            visitor_club=club,
            visitor_comment=comment,
        )

        try:
            event = self._get_event(event_id)
            existing = self._attendance.find_visitor(event_id, name)
            if not existing:
                try:
                    stored = self._store(event, new)
                except ConflictError:
                    existing = self._attendance.find_visitor(event_id, name)
                    if not existing:
                        raise
            if existing:
                return MarkAttendanceResult(
                    status=MarkResultStatus.ALREADY_MARKED,
                    message=f"{name} is already marked for this event",
                    record=existing,
                )
        except (ConflictError, NotFoundError, ValidationError):
            raise
        except Exception as e:
            return self._queue_offline(new, e)

        logger.info("Visitor attendance marked event_id=%s", event_id)
        return MarkAttendanceResult(status=MarkResultStatus.SUCCESS, message="Visitor attendance marked", record=stored)

    def _still_valid(self, record: NewAttendance) -> bool:
        event = self._events.get_by_id(record.event_id)
        if not event:
            return False
        if record.attendance_type == AttendanceType.VISITOR:
            return self._attendance.find_visitor(record.event_id, record.visitor_name or "") is None

        try:
            self._check_location(event, record.marked_latitude, record.marked_longitude)
        except GeofenceError:
            return False
        return self._attendance.get_for_event_and_user(record.event_id, record.user_id) is None

    def flush_offline_queue(self) -> int:
        """Push queued offline writes to the store. Returns the number of queued records flushed."""
        if self._queue is None:
            return 0

        pending = self._queue.pending()
        flushed = self._queue.sync(self._attendance, accept=self._still_valid)

        for record in pending:
            if record.attendance_type != AttendanceType.MEMBER or record.user_id is None:
                continue
            stored = self._attendance.get_for_event_and_user(record.event_id, record.user_id)
            if stored and stored.client_id == record.client_id:
                signals.attendance_created.send(self, record=stored, event=self._events.get_by_id(record.event_id))
        return flushed

    def offline_pending_count(self) -> int:
        return self._queue.count() if self._queue else 0

    def bulk_add(self, records) -> int:
        return self._attendance.bulk_create(list(records))

    def history_for_user(self, user_id: int):
        return self._attendance.list_for_user(user_id)

    def records_for_event(self, event_id: int):
        self._get_event(event_id)
        return self._attendance.list_for_event(event_id)

    def all_records(self):
        return self._attendance.list_all()

    def records_between(self, start: datetime, end: datetime):
        return self._attendance.list_between(start, end)

    def count_for_user(self, user_id: int) -> int:
        return self._attendance.count_by_user().get(user_id, 0)
