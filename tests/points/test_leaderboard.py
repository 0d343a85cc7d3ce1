from __future__ import annotations

from datetime import date, datetime

import pytest

from src.leo_portal.leo_portal.attendance.model import NewAttendance
from src.leo_portal.leo_portal.core.constants import PARTICIPATION_CATEGORY, SYSTEM_ACTOR
from src.leo_portal.leo_portal.core.enums import AttendanceType, Badge, Role, UserStatus
from src.leo_portal.leo_portal.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.leo_portal.leo_portal.points.badges import compute_badges, is_club_leader
from src.leo_portal.leo_portal.points.service import PointsService

from tests.fakes import InMemoryAttendance, InMemoryPoints, InMemoryUsers, make_event, make_user

WHEN = datetime(2026, 3, 14, 10, 0)


def _attend(repo: InMemoryAttendance, user_id: int, *event_ids: int) -> None:
    for event_id in event_ids:
        repo.create(NewAttendance(event_id=event_id, user_id=user_id, attendance_type=AttendanceType.MEMBER, marked_at=WHEN))


def test_club_leader_by_role_or_designation():
    assert is_club_leader(make_user(1, role=Role.ADMIN))
    assert is_club_leader(make_user(2, designation="Vice President"))
    assert is_club_leader(make_user(3, designation="Club Treasurer"))
    assert not is_club_leader(make_user(4, designation="Member"))


def test_badges_thresholds():
    member = make_user(1)

    assert compute_badges(member, attendance_count=0, top_count=0) == []
    assert compute_badges(member, attendance_count=2, top_count=5) == []
    assert compute_badges(member, attendance_count=3, top_count=5) == [Badge.ACTIVE_LEO]
    assert compute_badges(member, attendance_count=5, top_count=5) == [Badge.TOP_VOLUNTEER, Badge.ACTIVE_LEO]


def test_leaderboard_ranks_members_by_attendance_then_name():
    users = InMemoryUsers(
        [
            make_user(1, "Zara"),
            make_user(2, "amal"),
            make_user(3, "Bimal"),
            make_user(4, "Admin", role=Role.ADMIN),
            make_user(5, "Pending", status=UserStatus.PENDING),
            make_user(6, "Nobody"),
        ]
    )
    attendance = InMemoryAttendance()
    _attend(attendance, 1, 1, 2, 3)
    _attend(attendance, 2, 1, 2, 3)
    _attend(attendance, 3, 1)
    _attend(attendance, 4, 1, 2, 3, 4)
    _attend(attendance, 5, 1, 2, 3, 4, 5)

    board = PointsService(InMemoryPoints(), users, attendance).leaderboard()

    assert [(e.rank, e.name, e.attendance_count) for e in board] == [(1, "amal", 3), (2, "Zara", 3), (3, "Bimal", 1)]
    assert board[0].badges == ["top_volunteer", "active_leo"]
    assert board[1].badges == ["top_volunteer", "active_leo"]
    assert board[2].badges == []


def test_leaderboard_limit():
    users = InMemoryUsers([make_user(i, f"M{i}") for i in range(1, 5)])
    attendance = InMemoryAttendance()
    for i in range(1, 5):
        _attend(attendance, i, *range(1, i + 1))

    board = PointsService(InMemoryPoints(), users, attendance).leaderboard(limit=2)

    assert [e.user_id for e in board] == [4, 3]


def test_award_for_attendance_uses_event_points():
    users = InMemoryUsers([make_user(7, "Nimal")])
    attendance = InMemoryAttendance()
    points = InMemoryPoints()
    _attend(attendance, 7, 1)
    record = attendance.get_for_event_and_user(1, 7)
    svc = PointsService(points, users, attendance)

    entry_id = svc.award_for_attendance(record, make_event(1, "Beach Cleanup", points=15))

    entry = points.entries[entry_id]
    assert entry.points == 15
    assert entry.category == PARTICIPATION_CATEGORY
    assert entry.added_by == SYSTEM_ACTOR
    assert entry.description == "Participated in Beach Cleanup"
    assert svc.total_points(7) == 15


def test_no_award_for_zero_point_event():
    users = InMemoryUsers([make_user(7)])
    attendance = InMemoryAttendance()
    _attend(attendance, 7, 1)
    svc = PointsService(InMemoryPoints(), users, attendance)

    assert svc.award_for_attendance(attendance.get_for_event_and_user(1, 7), make_event(1, points=0)) is None


def test_manual_entry_rules():
    users = InMemoryUsers([make_user(7)])
    svc = PointsService(InMemoryPoints(), users, InMemoryAttendance())

    with pytest.raises(AuthorizationError):
        svc.add_entry(current_role=Role.MEMBER, added_by="x", user_id=7, description="d", points=5, category="meeting")
    with pytest.raises(ValidationError):
        svc.add_entry(current_role=Role.ADMIN, added_by="x", user_id=7, description="d", points=0, category="meeting")
    with pytest.raises(NotFoundError):
        svc.add_entry(current_role=Role.ADMIN, added_by="x", user_id=99, description="d", points=5, category="meeting")

    svc.add_entry(
        current_role=Role.ADMIN,
        added_by="Admin",
        user_id=7,
        description="Chaired the meeting",
        points=-2,
        category="meeting",
        entry_date=date(2026, 3, 1),
    )
    assert svc.total_points(7) == -2


def test_save_monthly_sheet():
    users = InMemoryUsers([make_user(7, "Nimal"), make_user(8, "Kamal")])
    points = InMemoryPoints()
    svc = PointsService(points, users, InMemoryAttendance())

    saved = svc.save_monthly(
        current_role=Role.ADMIN,
        year=2026,
        month=3,
        rows=[{"user_id": 7, "meeting_points": "5", "oc_points": 2}, {"user_id": "8"}],
    )

    assert saved == 2
    sheet = {m.user_id: m for m in svc.get_monthly(year=2026, month=3)}
    assert sheet[7].total_points == 7
    assert sheet[8].total_points == 0
    assert sheet[7].user_name == "Nimal"

    with pytest.raises(ValidationError):
        svc.save_monthly(current_role=Role.ADMIN, year=2026, month=13, rows=[])
    with pytest.raises(ValidationError):
        svc.save_monthly(current_role=Role.ADMIN, year=2026, month=3, rows=[{"user_id": 7, "oc_points": "many"}])
