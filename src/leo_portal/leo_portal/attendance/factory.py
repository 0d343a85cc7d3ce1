from __future__ import annotations

from dataclasses import dataclass

from ..core.constants import DEFAULT_ATTENDANCE_RADIUS_METERS
from ..events.model import Event
from .policies.base import CheckInPolicy
from .policies.geofenced_policy import GeofencedPolicy
from .policies.open_policy import OpenPolicy


@dataclass
class CheckInPolicyFactory:
    """Factory Pattern: choose the location policy for an event."""

    radius_meters: float = DEFAULT_ATTENDANCE_RADIUS_METERS

    def for_event(self, event: Event) -> CheckInPolicy:
        if event.is_geofenced:
            return GeofencedPolicy(self.radius_meters)
        return OpenPolicy()
