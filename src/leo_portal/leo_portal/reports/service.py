from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional

from ..attendance.service import AttendanceService
from ..common.datetime_utils import month_bounds, now_local
from ..core.enums import AttendanceType
from ..core.exceptions import ValidationError
from ..events.model import Event
from ..events.service import EventService
from ..finance.model import FinanceSummary
from ..finance.service import FinanceService
from ..points.service import PointsService
from ..tasks.service import TaskService
from ..users.service import UserService
from . import exporters


@dataclass(frozen=True)
class MemberDashboard:
    upcoming_events: List[Event]
    attendance_count: int
    total_points: int
    badges: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class AdminOverview:
    pending_approvals: int
    member_count: int
    month_finance: FinanceSummary
    open_tasks: int
    offline_pending: int


class ReportService:
    """Read-only views across modules: dashboards and export row sets."""

    def __init__(
        self,
        *,
        users: UserService,
        events: EventService,
        attendance: AttendanceService,
        finance: FinanceService,
        points: PointsService,
        tasks: TaskService,
    ):
        self._users = users
        self._events = events
        self._attendance = attendance
        self._finance = finance
        self._points = points
        self._tasks = tasks

    def member_dashboard(self, user_id: int, *, now: Optional[datetime] = None) -> MemberDashboard:
        user = self._users.get(user_id)
        return MemberDashboard(
            upcoming_events=list(self._events.list_upcoming(limit=5, now=now or now_local())),
            attendance_count=self._attendance.count_for_user(user_id),
            total_points=self._points.total_points(user_id),
            badges=[b.value for b in self._points.badges_for(user)],
        )

    def admin_overview(self, *, today: Optional[date] = None) -> AdminOverview:
        today = today or now_local().date()
        start, _ = month_bounds(today.year, today.month)
        return AdminOverview(
            pending_approvals=len(self._users.list_pending()),
            member_count=len(self._users.list_approved()),
            month_finance=self._finance.summarize(start=start.date(), end=today),
            open_tasks=self._tasks.count_open(),
            offline_pending=self._attendance.offline_pending_count(),
        )

    def member_rows(self) -> List[dict]:
        return exporters.member_rows(self._users.list_users())

    def event_rows(self) -> List[dict]:
        return exporters.event_rows(self._events.list_events())

    def attendance_rows(
        self,
        *,
        event_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[dict]:
        """Attendance log, optionally narrowed to one event and/or an inclusive date range."""
        if start and end and end < start:
            raise ValidationError("End date must not be before start date")

        if event_id is not None:
            records = self._attendance.records_for_event(event_id)
        else:
            records = self._attendance.all_records()
        if start:
            records = [r for r in records if r.marked_at.date() >= start]
        if end:
            records = [r for r in records if r.marked_at.date() <= end]

        user_ids = {r.user_id for r in records if r.attendance_type == AttendanceType.MEMBER and r.user_id}
        users_by_id = {u.user_id: u for u in self._users.list_by_ids(sorted(user_ids))} if user_ids else {}
        events_by_id = {e.event_id: e for e in self._events.list_events()}
        return exporters.attendance_rows(records, events_by_id=events_by_id, users_by_id=users_by_id)

    def transaction_rows(self, *, start: Optional[date] = None, end: Optional[date] = None) -> List[dict]:
        return exporters.transaction_rows(self._finance.list_transactions(start=start, end=end))

    def event_attendance_pdf(self, event_id: int, *, now: Optional[datetime] = None) -> bytes:
        event = self._events.get(event_id)
        rows = self.attendance_rows(event_id=event_id)
        return exporters.event_attendance_pdf(event, rows, generated_at=now or now_local())

    def finance_statement_pdf(self, *, start: date, end: date, now: Optional[datetime] = None) -> bytes:
        summary = self._finance.summarize(start=start, end=end)
        transactions = self._finance.list_transactions(start=start, end=end)
        return exporters.finance_statement_pdf(summary, transactions, generated_at=now or now_local())
