from __future__ import annotations

from typing import Optional

from ...events.model import Event
from .base import CheckInPolicy, LocationDecision


class OpenPolicy(CheckInPolicy):
    """Event without a geofence: any position (or none) is accepted."""

    def decide(self, *, event: Event, latitude: Optional[float], longitude: Optional[float]) -> LocationDecision:
        return LocationDecision(accepted=True)
