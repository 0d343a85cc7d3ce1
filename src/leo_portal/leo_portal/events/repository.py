from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Event


class EventRepository(Protocol):
    def get_by_id(self, event_id: int) -> Optional[Event]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Event]:
        raise NotImplementedError

    def list_upcoming(self, *, now: datetime, limit: int) -> Sequence[Event]:
        raise NotImplementedError

    def list_between(self, start: datetime, end: datetime) -> Sequence[Event]:
        """Events with start_at in [start, end), ordered by start."""
        raise NotImplementedError

    def create_event(
        self,
        *,
        name: str,
        start_at: datetime,
        end_at: Optional[datetime],
        location: str,
        description: str,
        latitude: Optional[float],
        longitude: Optional[float],
        points: int,
        created_by: Optional[int],
    ) -> int:
        raise NotImplementedError

    def update_event(
        self,
        event_id: int,
        *,
        name: str,
        start_at: datetime,
        end_at: Optional[datetime],
        location: str,
        description: str,
        latitude: Optional[float],
        longitude: Optional[float],
        points: int,
    ) -> bool:
        raise NotImplementedError

    def delete_by_id(self, event_id: int) -> bool:
        raise NotImplementedError
