from __future__ import annotations

from datetime import datetime

from src.leo_portal.leo_portal.core.enums import ProjectIdeaStatus, Role, UserStatus
from src.leo_portal.leo_portal.events.service import EventInput
from src.leo_portal.leo_portal.project_ideas.service import IdeaInput
from src.leo_portal.leo_portal.triggers.handlers import connect_handlers, disconnect_handlers

from tests.fakes import SAMPLE_PROPOSAL, make_event, make_user


def _seed(portal, *users, events=()):
    for u in users:
        portal.repos.users.users[u.user_id] = u
    for e in events:
        portal.repos.events.events[e.event_id] = e


def test_approval_sends_welcome_push_and_email_and_mirrors_row(wired_portal):
    p = wired_portal
    _seed(p, make_user(5, "Nimal", email="nimal@leo.test", status=UserStatus.PENDING, fcm_token="tok-5"))

    p.container.user_service.approve(current_role=Role.ADMIN, user_id=5)

    push = p.integrations.push.sent
    assert push[0]["tokens"] == ["tok-5"]
    mail = p.integrations.mailer.sent
    assert mail[0]["to"] == ["nimal@leo.test"]
    assert "http://portal.test" in mail[0]["html"]
    assert p.integrations.user_sheet.upserted == [5]


def test_rejection_emails_then_removes_sheet_row(wired_portal):
    p = wired_portal
    _seed(p, make_user(5, "Nimal", email="nimal@leo.test", status=UserStatus.PENDING))

    p.container.user_service.reject(current_role=Role.ADMIN, user_id=5)

    assert p.integrations.mailer.sent[0]["to"] == ["nimal@leo.test"]
    assert p.integrations.user_sheet.deleted == [5]


def test_signup_is_mirrored_to_sheet(wired_portal):
    p = wired_portal

    user_id = p.container.auth_service.signup(name="Kamal", email="kamal@leo.test", password="secret1")

    assert p.integrations.user_sheet.upserted == [user_id]


def test_new_event_is_pushed_to_approved_members(wired_portal):
    p = wired_portal
    _seed(
        p,
        make_user(1, fcm_token="tok-1"),
        make_user(2),
        make_user(3, status=UserStatus.PENDING, fcm_token="tok-3"),
    )

    p.container.event_service.create(
        current_role=Role.ADMIN,
        created_by=1,
        data=EventInput(
            name="Blood Drive",
            start_at=datetime(2026, 4, 2, 9, 0),
            location="Town Hall",
            description="Annual blood donation campaign",
        ),
    )

    assert p.integrations.push.sent == [
        {"tokens": ["tok-1"], "title": "New event: Blood Drive", "body": "02 Apr 2026 09:00 at Town Hall"}
    ]


def test_submitted_idea_notifies_admins(wired_portal):
    p = wired_portal
    _seed(p, make_user(1, "Admin", email="admin@leo.test", role=Role.ADMIN), make_user(7, "Nimal"))
    ideas = p.container.project_idea_service
    idea = ideas.save_draft(
        author_id=7,
        author_name="Nimal",
        data=IdeaInput(
            project_name="Green Schools",
            goal="Plant trees in ten schools",
            target_audience="Students",
            budget="LKR 50,000",
            timeline="April",
        ),
        proposal=SAMPLE_PROPOSAL,
    )

    submitted = ideas.submit_for_review(user_id=7, idea_id=idea.idea_id)

    assert submitted.status == ProjectIdeaStatus.PENDING_REVIEW
    assert p.integrations.mailer.sent[0]["to"] == ["admin@leo.test"]
    assert "Green Schools" in p.integrations.mailer.sent[0]["subject"]


def test_attendance_awards_event_points(wired_portal, fixed_now):
    p = wired_portal
    _seed(p, make_user(7, "Nimal"), events=[make_event(1, "Beach Cleanup", points=20)])

    p.container.attendance_service.mark_member_attendance(1, 7, now=fixed_now)
    p.container.attendance_service.mark_member_attendance(1, 7, now=fixed_now)

    assert p.container.points_service.total_points(7) == 20


def test_failing_side_effect_does_not_fail_the_write(wired_portal):
    p = wired_portal

    def broken(*args, **kwargs):
        raise RuntimeError("sheet quota exceeded")

    p.integrations.user_sheet.upsert_user = broken
    _seed(p, make_user(5, status=UserStatus.PENDING))

    approved = p.container.user_service.approve(current_role=Role.ADMIN, user_id=5)

    assert approved.status == UserStatus.APPROVED
    assert len(p.integrations.mailer.sent) == 1


def test_disconnected_handlers_stop_reacting(portal, fixed_now):
    handlers = connect_handlers(portal.container)
    disconnect_handlers(handlers)
    _seed(portal, make_user(7), events=[make_event(1, points=20)])

    portal.container.attendance_service.mark_member_attendance(1, 7, now=fixed_now)

    assert portal.container.points_service.total_points(7) == 0
