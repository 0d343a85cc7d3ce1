from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional

from ..core.constants import MONTHLY_POINT_FIELDS


@dataclass(frozen=True)
class PointsEntry:
    entry_id: int
    user_id: int
    user_name: str
    entry_date: date
    description: str
    points: int
    category: str
    added_by: str
    event_id: Optional[int] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "entry_id": self.entry_id,
            "user_id": self.user_id,
            "user_name": self.user_name,
            "entry_date": self.entry_date.isoformat(),
            "description": self.description,
            "points": self.points,
            "category": self.category,
            "added_by": self.added_by,
            "event_id": self.event_id,
        }


@dataclass(frozen=True)
class MonthlyPoints:
    """Per-member points sheet for one month, keyed by (year, month, user_id)."""

    year: int
    month: int
    user_id: int
    user_name: str
    chair_sec_tre_points: int = 0
    oc_points: int = 0
    meeting_points: int = 0
    club_project_points: int = 0
    district_project_points: int = 0
    multiple_project_points: int = 0

    @property
    def total_points(self) -> int:
        return sum(int(getattr(self, f)) for f in MONTHLY_POINT_FIELDS)

    def to_dict(self) -> dict:
        data = {"year": self.year, "month": self.month, "user_id": self.user_id, "user_name": self.user_name}
        for f in MONTHLY_POINT_FIELDS:
            data[f] = int(getattr(self, f))
        data["total_points"] = self.total_points
        return data


@dataclass(frozen=True)
class LeaderboardEntry:
    rank: int
    user_id: int
    name: str
    attendance_count: int
    photo_url: Optional[str] = None
    designation: Optional[str] = None
    badges: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "rank": self.rank,
            "user_id": self.user_id,
            "name": self.name,
            "attendance_count": self.attendance_count,
            "photo_url": self.photo_url,
            "designation": self.designation,
            "badges": list(self.badges),
        }
