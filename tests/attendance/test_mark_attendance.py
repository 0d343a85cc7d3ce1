from __future__ import annotations

import pytest

from src.leo_portal.leo_portal.attendance.factory import CheckInPolicyFactory
from src.leo_portal.leo_portal.attendance.service import AttendanceService
from src.leo_portal.leo_portal.core.enums import AttendanceType, MarkResultStatus, UserStatus
from src.leo_portal.leo_portal.core.exceptions import ConflictError, GeofenceError, NotFoundError, ValidationError

from tests.fakes import InMemoryAttendance, InMemoryEvents, InMemoryUsers, make_event, make_user

VENUE = (6.9271, 79.8612)


def _service(*, events=(), users=(), attendance=None, offline_queue=None):
    attendance = attendance or InMemoryAttendance()
    svc = AttendanceService(
        attendance,
        InMemoryEvents(events),
        InMemoryUsers(users),
        policy_factory=CheckInPolicyFactory(radius_meters=500),
        offline_queue=offline_queue,
    )
    return svc, attendance


def test_member_checkin_inside_geofence(fixed_now):
    svc, repo = _service(
        events=[make_event(1, latitude=VENUE[0], longitude=VENUE[1])],
        users=[make_user(7, "Nimal")],
    )

    result = svc.mark_member_attendance(1, 7, latitude=6.9275, longitude=79.8615, now=fixed_now)

    assert result.status == MarkResultStatus.SUCCESS
    assert result.record.user_id == 7
    assert result.record.marked_at == fixed_now
    assert result.record.marked_latitude == 6.9275
    assert len(repo.records) == 1


def test_member_checkin_outside_geofence_is_rejected(fixed_now):
    svc, repo = _service(
        events=[make_event(1, latitude=VENUE[0], longitude=VENUE[1])],
        users=[make_user(7)],
    )

    with pytest.raises(GeofenceError) as err:
        svc.mark_member_attendance(1, 7, latitude=7.2906, longitude=80.6337, now=fixed_now)

    assert err.value.radius_meters == 500
    assert err.value.distance_meters > 500
    assert repo.records == {}


def test_geofenced_event_needs_location(fixed_now):
    svc, _ = _service(events=[make_event(1, latitude=VENUE[0], longitude=VENUE[1])], users=[make_user(7)])

    with pytest.raises(GeofenceError):
        svc.mark_member_attendance(1, 7, now=fixed_now)


def test_event_without_geofence_accepts_any_position(fixed_now):
    svc, _ = _service(events=[make_event(1)], users=[make_user(7)])

    result = svc.mark_member_attendance(1, 7, now=fixed_now)

    assert result.status == MarkResultStatus.SUCCESS


def test_second_checkin_returns_already_marked_with_first_record(fixed_now):
    svc, repo = _service(events=[make_event(1)], users=[make_user(7)])
    first = svc.mark_member_attendance(1, 7, now=fixed_now)

    second = svc.mark_member_attendance(1, 7, now=fixed_now)

    assert second.status == MarkResultStatus.ALREADY_MARKED
    assert second.record.attendance_id == first.record.attendance_id
    assert len(repo.records) == 1


def test_pending_member_cannot_check_in(fixed_now):
    svc, _ = _service(events=[make_event(1)], users=[make_user(7, status=UserStatus.PENDING)])

    with pytest.raises(ValidationError):
        svc.mark_member_attendance(1, 7, now=fixed_now)


def test_unknown_event_raises_not_found(fixed_now):
    svc, _ = _service(users=[make_user(7)])

    with pytest.raises(NotFoundError):
        svc.mark_member_attendance(99, 7, now=fixed_now)


def test_visitor_checkin_and_case_insensitive_duplicate(fixed_now):
    svc, repo = _service(events=[make_event(1)])

    first = svc.mark_visitor_attendance(
        1, name="Kasun Perera", designation="Secretary", club="Leo Club of Kandy", now=fixed_now
    )
    again = svc.mark_visitor_attendance(
        1, name="  kasun perera ", designation="Secretary", club="Leo Club of Kandy", now=fixed_now
    )

    assert first.status == MarkResultStatus.SUCCESS
    assert first.record.attendance_type == AttendanceType.VISITOR
    assert first.record.visitor_club == "Leo Club of Kandy"
    assert again.status == MarkResultStatus.ALREADY_MARKED
    assert len(repo.records) == 1


def test_visitor_needs_name_designation_and_club(fixed_now):
    svc, _ = _service(events=[make_event(1)])

    with pytest.raises(ValidationError):
        svc.mark_visitor_attendance(1, name="K", designation="Member", club="Leo Club", now=fixed_now)
    with pytest.raises(ValidationError):
        svc.mark_visitor_attendance(1, name="Kasun", designation="", club="Leo Club", now=fixed_now)


def test_member_history_and_counts(fixed_now):
    svc, _ = _service(events=[make_event(1), make_event(2, "Blood Drive")], users=[make_user(7)])
    svc.mark_member_attendance(1, 7, now=fixed_now)
    svc.mark_member_attendance(2, 7, now=fixed_now)
    svc.mark_visitor_attendance(1, name="Guest One", designation="Member", club="Leo Club", now=fixed_now)

    assert svc.count_for_user(7) == 2
    assert {r.event_id for r in svc.history_for_user(7)} == {1, 2}
    assert len(svc.records_for_event(1)) == 2


class RacingAttendance(InMemoryAttendance):
    """Lookups miss the row a concurrent request has just inserted."""

    blind_lookups = 0

    def get_for_event_and_user(self, event_id, user_id):
        if self.blind_lookups:
            self.blind_lookups -= 1
            return None
        return super().get_for_event_and_user(event_id, user_id)

    def find_visitor(self, event_id, visitor_name):
        if self.blind_lookups:
            self.blind_lookups -= 1
            return None
        return super().find_visitor(event_id, visitor_name)


def test_concurrent_duplicate_member_checkin_is_already_marked(fixed_now):
    repo = RacingAttendance()
    svc, _ = _service(events=[make_event(1)], users=[make_user(7)], attendance=repo)
    first = svc.mark_member_attendance(1, 7, now=fixed_now)
    repo.blind_lookups = 1

    result = svc.mark_member_attendance(1, 7, now=fixed_now)

    assert result.status == MarkResultStatus.ALREADY_MARKED
    assert result.record.attendance_id == first.record.attendance_id
    assert len(repo.records) == 1


def test_concurrent_duplicate_visitor_checkin_is_already_marked(fixed_now):
    repo = RacingAttendance()
    svc, _ = _service(events=[make_event(1)], attendance=repo)
    svc.mark_visitor_attendance(1, name="Kasun", designation="Secretary", club="Leo Club of Kandy", now=fixed_now)
    repo.blind_lookups = 1

    result = svc.mark_visitor_attendance(
        1, name="kasun", designation="Secretary", club="Leo Club of Kandy", now=fixed_now
    )

    assert result.status == MarkResultStatus.ALREADY_MARKED
    assert len(repo.records) == 1


def test_conflict_that_cannot_be_reread_propagates(fixed_now):
    repo = RacingAttendance()
    svc, _ = _service(events=[make_event(1)], users=[make_user(7)], attendance=repo)
    svc.mark_member_attendance(1, 7, now=fixed_now)
    repo.blind_lookups = 2

    with pytest.raises(ConflictError):
        svc.mark_member_attendance(1, 7, now=fixed_now)
