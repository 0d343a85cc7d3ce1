from __future__ import annotations

import json
from dataclasses import replace

import mysql.connector
import pytest

from src.leo_portal.leo_portal.attendance.factory import CheckInPolicyFactory
from src.leo_portal.leo_portal.attendance.model import NewAttendance
from src.leo_portal.leo_portal.attendance.offline_queue import is_offline_error
from src.leo_portal.leo_portal.attendance.service import AttendanceService
from src.leo_portal.leo_portal.core.enums import AttendanceType, MarkResultStatus

from tests.fakes import InMemoryAttendance, InMemoryEvents, InMemoryUsers, make_event, make_user


def _member_write(event_id, user_id, when):
    return NewAttendance(event_id=event_id, user_id=user_id, attendance_type=AttendanceType.MEMBER, marked_at=when)


def test_offline_errors_are_recognised():
    assert is_offline_error(mysql.connector.errors.InterfaceError("Can't connect"))
    assert is_offline_error(mysql.connector.errors.OperationalError("Lost connection"))
    assert is_offline_error(RuntimeError("Firestore is unavailable"))
    assert not is_offline_error(ValueError("Duplicate entry"))


def _visitor_write(event_id, name, when):
    return NewAttendance(
        event_id=event_id,
        attendance_type=AttendanceType.VISITOR,
        marked_at=when,
        visitor_name=name,
        visitor_designation="Member",
        visitor_club="Leo Club of Kandy",
    )


def test_writes_in_the_same_millisecond_are_all_kept(offline_queue, fixed_now):
    a = offline_queue.add(_member_write(1, 7, fixed_now))
    b = offline_queue.add(_member_write(1, 8, fixed_now))
    c = offline_queue.add(_visitor_write(1, "Kasun", fixed_now))

    assert a.client_id.startswith("offline_")
    assert len({a.client_id, b.client_id, c.client_id}) == 3
    assert offline_queue.count() == 3
    assert [r.user_id for r in offline_queue.pending()] == [7, 8, None]
    assert offline_queue.pending()[0].marked_at == fixed_now


def test_same_attendee_is_queued_once(offline_queue, fixed_now):
    first = offline_queue.add(_member_write(1, 7, fixed_now))
    again = offline_queue.add(_member_write(1, 7, fixed_now))
    offline_queue.add(_visitor_write(1, "Kasun", fixed_now))
    offline_queue.add(_visitor_write(1, " kasun ", fixed_now))
    offline_queue.add(_member_write(2, 7, fixed_now))

    assert again.client_id == first.client_id
    assert offline_queue.count() == 3


def test_sync_sends_one_write_per_visitor(offline_queue, fixed_now, tmp_path):
    # A spool written before de-duplication on add may hold repeats.
    raw = [_visitor_write(1, "Kasun", fixed_now), _visitor_write(1, "KASUN", fixed_now)]
    (tmp_path / "offline_attendance.json").write_text(
        json.dumps([replace(r, client_id=f"offline_{i}").to_json() for i, r in enumerate(raw)]),
        encoding="utf-8",
    )
    sent = []

    class Spy(InMemoryAttendance):
        def bulk_create(self, records):
            sent.extend(records)
            return super().bulk_create(records)

    repo = Spy()

    assert offline_queue.sync(repo) == 2
    assert [r.client_id for r in sent] == ["offline_0"]
    assert len(repo.records) == 1


def test_sync_inserts_everything_and_empties_queue(offline_queue, fixed_now):
    repo = InMemoryAttendance()
    offline_queue.add(_member_write(1, 7, fixed_now))
    offline_queue.add(_member_write(1, 8, fixed_now))

    assert offline_queue.sync(repo) == 2
    assert offline_queue.count() == 0
    assert len(repo.records) == 2


def test_failed_sync_keeps_the_queue(offline_queue, fixed_now):
    repo = InMemoryAttendance()
    repo.fail_with = RuntimeError("database unavailable")
    offline_queue.add(_member_write(1, 7, fixed_now))

    with pytest.raises(RuntimeError):
        offline_queue.sync(repo)

    assert offline_queue.count() == 1
    assert repo.records == {}


def test_sync_drops_records_rejected_by_accept(offline_queue, fixed_now):
    repo = InMemoryAttendance()
    offline_queue.add(_member_write(1, 7, fixed_now))
    offline_queue.add(_member_write(2, 7, fixed_now))

    flushed = offline_queue.sync(repo, accept=lambda r: r.event_id == 1)

    assert flushed == 2
    assert offline_queue.count() == 0
    assert [r.event_id for r in repo.records.values()] == [1]


def test_empty_queue_sync_is_a_no_op(offline_queue):
    assert offline_queue.sync(InMemoryAttendance()) == 0


def test_service_queues_when_store_is_unreachable_and_flushes_later(offline_queue, fixed_now):
    repo = InMemoryAttendance()
    repo.fail_with = RuntimeError("database unavailable")
    svc = AttendanceService(
        repo,
        InMemoryEvents([make_event(1)]),
        InMemoryUsers([make_user(7)]),
        policy_factory=CheckInPolicyFactory(radius_meters=500),
        offline_queue=offline_queue,
    )

    result = svc.mark_member_attendance(1, 7, now=fixed_now)

    assert result.status == MarkResultStatus.QUEUED
    assert result.record is None
    assert svc.offline_pending_count() == 1

    repo.fail_with = None
    assert svc.flush_offline_queue() == 1
    assert svc.offline_pending_count() == 0
    stored = repo.get_for_event_and_user(1, 7)
    assert stored is not None
    assert stored.client_id.startswith("offline_")


def test_flush_skips_members_already_marked_online(offline_queue, fixed_now):
    repo = InMemoryAttendance()
    svc = AttendanceService(
        repo,
        InMemoryEvents([make_event(1)]),
        InMemoryUsers([make_user(7)]),
        offline_queue=offline_queue,
    )
    offline_queue.add(_member_write(1, 7, fixed_now))
    svc.mark_member_attendance(1, 7, now=fixed_now)

    assert svc.flush_offline_queue() == 1
    assert len(repo.records) == 1


def test_non_offline_errors_are_not_queued(offline_queue, fixed_now):
    repo = InMemoryAttendance()
    repo.fail_with = ValueError("bad row")
    svc = AttendanceService(
        repo, InMemoryEvents([make_event(1)]), InMemoryUsers([make_user(7)]), offline_queue=offline_queue
    )

    with pytest.raises(ValueError):
        svc.mark_member_attendance(1, 7, now=fixed_now)
    assert offline_queue.count() == 0


def test_flush_without_queue_returns_zero():
    svc = AttendanceService(InMemoryAttendance(), InMemoryEvents(), InMemoryUsers())

    assert svc.flush_offline_queue() == 0
    assert svc.offline_pending_count() == 0
