from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.validators import require_non_empty
from ..core.constants import MONTHLY_POINT_FIELDS, PARTICIPATION_CATEGORY, SYSTEM_ACTOR
from ..core.enums import AttendanceType, Badge, Role, UserStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..events.model import Event
from ..users.model import User
from ..users.repository import UserRepository
from .badges import compute_badges
from .model import LeaderboardEntry, MonthlyPoints, PointsEntry
from .repository import PointsRepository

logger = logging.getLogger(__name__)


class PointsService:
    """Use case: points ledger, monthly sheets, leaderboard and badges."""

    def __init__(self, points: PointsRepository, users: UserRepository, attendance: AttendanceRepository):
        self._points = points
        self._users = users
        self._attendance = attendance

    def add_entry(
        self,
        *,
        current_role: Role,
        added_by: str,
        user_id: int,
        description: str,
        points: int,
        category: str,
        entry_date: Optional[date] = None,
        event_id: Optional[int] = None,
    ) -> int:
        if not current_role.is_admin:
            raise AuthorizationError("Only admins can award points")
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("Member not found")
        description = require_non_empty(description, "Description")
        category = require_non_empty(category, "Category")
        try:
            points = int(points)
        except (TypeError, ValueError):
            raise ValidationError("Points must be a whole number")
        if points == 0:
            raise ValidationError("Points cannot be zero")

        return self._points.add_entry(
            user_id=user.user_id,
            user_name=user.name,
            entry_date=entry_date or date.today(),
            description=description,
            points=points,
            category=category,
            added_by=added_by,
            event_id=event_id,
        )

    def list_entries(self, *, user_id: Optional[int] = None) -> Sequence[PointsEntry]:
        return self._points.list_entries(user_id=user_id)

    def delete_entry(self, *, current_role: Role, entry_id: int) -> None:
        if not current_role.is_admin:
            raise AuthorizationError("Only admins can remove points")
        if not self._points.delete_entry(entry_id):
            raise NotFoundError("Points entry not found")

    def total_points(self, user_id: int) -> int:
        return self._points.total_for_user(user_id)

    def award_for_attendance(self, record: AttendanceRecord, event: Event) -> Optional[int]:
        """Create the automatic participation entry for a member check-in."""
        if record.attendance_type != AttendanceType.MEMBER or record.user_id is None:
            return None
        if not event or event.points <= 0:
            return None
        user = self._users.get_by_id(record.user_id)
        if not user:
            return None

        entry_id = self._points.add_entry(
            user_id=user.user_id,
            user_name=user.name,
            entry_date=record.marked_at.date(),
            description=f"Participated in {event.name}",
            points=event.points,
            category=PARTICIPATION_CATEGORY,
            added_by=SYSTEM_ACTOR,
            event_id=event.event_id,
        )
        logger.info("Awarded %s points to user_id=%s for event_id=%s", event.points, user.user_id, event.event_id)
        return entry_id

    def get_monthly(self, *, year: int, month: int) -> Sequence[MonthlyPoints]:
        return self._points.get_monthly(year=year, month=month)

    def save_monthly(self, *, current_role: Role, year: int, month: int, rows: Sequence[dict]) -> int:
        if not current_role.is_admin:
            raise AuthorizationError("Only admins can edit monthly points")
        if not 1 <= int(month) <= 12:
            raise ValidationError("Month must be between 1 and 12")

        users = {u.user_id: u for u in self._users.list_by_ids([int(r["user_id"]) for r in rows])}
        sheet: List[MonthlyPoints] = []
        for r in rows:
            user = users.get(int(r["user_id"]))
            if not user:
                raise NotFoundError(f"Member {r['user_id']} not found")
            values = {}
            for f in MONTHLY_POINT_FIELDS:
                try:
                    values[f] = int(r.get(f) or 0)
                except (TypeError, ValueError):
                    raise ValidationError(f"{f} must be a whole number")
            sheet.append(MonthlyPoints(year=int(year), month=int(month), user_id=user.user_id, user_name=user.name, **values))

        return self._points.save_monthly_batch(sheet)

    def _member_counts(self) -> dict:
        counts = self._attendance.count_by_user()
        members = self._users.list_all(status=UserStatus.APPROVED)
        return {u.user_id: (u, counts.get(u.user_id, 0)) for u in members if u.role == Role.MEMBER}

    def leaderboard(self, *, limit: Optional[int] = None) -> List[LeaderboardEntry]:
        """Approved members ranked by attendance count (members with none are left out)."""
        ranked = sorted(
            ((u, c) for u, c in self._member_counts().values() if c > 0),
            key=lambda uc: (-uc[1], uc[0].name.lower()),
        )
        top = ranked[0][1] if ranked else 0

        entries = []
        for i, (user, count) in enumerate(ranked, start=1):
            badges = compute_badges(user, attendance_count=count, top_count=top)
            entries.append(
                LeaderboardEntry(
                    rank=i,
                    user_id=user.user_id,
                    name=user.name,
                    attendance_count=count,
                    photo_url=user.photo_url,
                    designation=user.designation,
                    badges=[b.value for b in badges],
                )
            )
        return entries[:limit] if limit else entries

    def badges_for(self, user: User) -> List[Badge]:
        counts = self._attendance.count_by_user()
        member_counts = [c for u, c in self._member_counts().values()]
        top = max(member_counts) if member_counts else 0
        return compute_badges(user, attendance_count=counts.get(user.user_id, 0), top_count=top)
