from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ...events.model import Event


@dataclass(frozen=True)
class LocationDecision:
    accepted: bool
    distance_meters: Optional[float] = None
    note: Optional[str] = None


class CheckInPolicy(ABC):
    """Strategy Pattern: decide whether a check-in position is acceptable for an event."""

    @abstractmethod
    def decide(self, *, event: Event, latitude: Optional[float], longitude: Optional[float]) -> LocationDecision:
        raise NotImplementedError
