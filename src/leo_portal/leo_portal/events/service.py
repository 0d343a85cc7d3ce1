from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import month_bounds, now_local
from ..common.validators import require_min_length
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..triggers import signals
from .calendar_view import MonthCalendar, build_month
from .model import Event
from .repository import EventRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EventInput:
    name: str
    start_at: datetime
    location: str
    description: str
    end_at: Optional[datetime] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    points: int = 0


def _validated(data: EventInput) -> EventInput:
    name = require_min_length(data.name, "Event name", 3)
    location = require_min_length(data.location, "Location", 3)
    description = require_min_length(data.description, "Description", 10)

    if data.start_at is None:
        raise ValidationError("Start date is required")
    if data.end_at is not None and data.end_at <= data.start_at:
        raise ValidationError("End date must be after the start date")

    if (data.latitude is None) != (data.longitude is None):
        raise ValidationError("Latitude and longitude must be given together")
    if data.latitude is not None and not -90 <= data.latitude <= 90:
        raise ValidationError("Latitude must be between -90 and 90")
    if data.longitude is not None and not -180 <= data.longitude <= 180:
        raise ValidationError("Longitude must be between -180 and 180")

    points = int(data.points or 0)
    if points < 0:
        raise ValidationError("Points cannot be negative")

    return EventInput(
        name=name,
        start_at=data.start_at,
        end_at=data.end_at,
        location=location,
        description=description,
        latitude=data.latitude,
        longitude=data.longitude,
        points=points,
    )


class EventService:
    """Use case: schedule and maintain club events (admin writes, everyone reads)."""

    def __init__(self, events: EventRepository):
        self._events = events

    def get(self, event_id: int) -> Event:
        event = self._events.get_by_id(event_id)
        if not event:
            raise NotFoundError("Event not found")
        return event

    def list_events(self):
        return self._events.list_all()

    def list_upcoming(self, *, limit: int = 5, now: datetime | None = None):
        return self._events.list_upcoming(now=now or now_local(), limit=limit)

    def events_in_month(self, year: int, month: int):
        """Events starting in the given month, earliest first."""
        if not 1 <= int(month) <= 12:
            raise ValidationError("Month must be between 1 and 12")
        if not 1 <= int(year) <= 9998:
            raise ValidationError("Year is out of range")
        start, end = month_bounds(int(year), int(month))
        return self._events.list_between(start, end)

    def month_calendar(self, year: int, month: int) -> MonthCalendar:
        return build_month(int(year), int(month), self.events_in_month(year, month))

    def create(self, *, current_role: Role, created_by: int, data: EventInput) -> Event:
        if not current_role.is_admin:
            raise AuthorizationError("Only admins can create events")
        data = _validated(data)

        event_id = self._events.create_event(
            name=data.name,
            start_at=data.start_at,
            end_at=data.end_at,
            location=data.location,
            description=data.description,
            latitude=data.latitude,
            longitude=data.longitude,
            points=data.points,
            created_by=created_by,
        )
        event = self.get(event_id)
        logger.info("Event created event_id=%s geofenced=%s", event_id, event.is_geofenced)
        signals.event_created.send(self, event=event)
        return event

    def update(self, *, current_role: Role, event_id: int, data: EventInput) -> Event:
        if not current_role.is_admin:
            raise AuthorizationError("Only admins can edit events")
        self.get(event_id)
        data = _validated(data)

        # Coordinates omitted on edit means the geofence is switched off.
        self._events.update_event(
            event_id,
            name=data.name,
            start_at=data.start_at,
            end_at=data.end_at,
            location=data.location,
            description=data.description,
            latitude=data.latitude,
            longitude=data.longitude,
            points=data.points,
        )
        return self.get(event_id)

    def delete(self, *, current_role: Role, event_id: int) -> None:
        if not current_role.is_admin:
            raise AuthorizationError("Only admins can delete events")
        if not self._events.delete_by_id(event_id):
            raise NotFoundError("Event not found")
        logger.info("Event deleted event_id=%s", event_id)
