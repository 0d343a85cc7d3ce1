from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import MonthlyPoints, PointsEntry


class PointsRepository(Protocol):
    def add_entry(
        self,
        *,
        user_id: int,
        user_name: str,
        entry_date: date,
        description: str,
        points: int,
        category: str,
        added_by: str,
        event_id: Optional[int] = None,
    ) -> int:
        raise NotImplementedError

    def list_entries(self, *, user_id: Optional[int] = None) -> Sequence[PointsEntry]:
        raise NotImplementedError

    def delete_entry(self, entry_id: int) -> bool:
        raise NotImplementedError

    def total_for_user(self, user_id: int) -> int:
        raise NotImplementedError

    def get_monthly(self, *, year: int, month: int) -> Sequence[MonthlyPoints]:
        raise NotImplementedError

    def save_monthly_batch(self, rows: Sequence[MonthlyPoints]) -> int:
        """Upsert all rows in one transaction."""

        raise NotImplementedError
