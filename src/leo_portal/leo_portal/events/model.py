from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Event:
    """Domain entity: a club event with an optional geofence centre."""

    event_id: int
    name: str
    start_at: datetime
    end_at: Optional[datetime]
    location: str
    description: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    points: int = 0
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None

    @property
    def is_geofenced(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def to_dict(self) -> dict:
        return {
            "event_id": self.event_id,
            "name": self.name,
            "start_at": self.start_at.isoformat(),
            "end_at": self.end_at.isoformat() if self.end_at else None,
            "location": self.location,
            "description": self.description,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "points": self.points,
            "geofenced": self.is_geofenced,
        }
