from __future__ import annotations

from typing import Optional

from ...common.geo import haversine_meters
from ...events.model import Event
from .base import CheckInPolicy, LocationDecision


class GeofencedPolicy(CheckInPolicy):
    """Accept only positions within ``radius_meters`` of the event centre (inclusive)."""

    def __init__(self, radius_meters: float):
        self.radius_meters = float(radius_meters)

    def decide(self, *, event: Event, latitude: Optional[float], longitude: Optional[float]) -> LocationDecision:
        if latitude is None or longitude is None:
            return LocationDecision(accepted=False, note="Location is required to check in to this event")

        distance = haversine_meters(latitude, longitude, event.latitude, event.longitude)
        if distance <= self.radius_meters:
            return LocationDecision(accepted=True, distance_meters=distance)
        return LocationDecision(
            accepted=False,
            distance_meters=distance,
            note=f"You are {distance:.0f} m from the venue (limit {self.radius_meters:.0f} m)",
        )
