"""Month grid for the events calendar page."""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Sequence, Tuple

from .model import Event


@dataclass(frozen=True)
class CalendarDay:
    day: date
    in_month: bool
    events: Tuple[Event, ...] = ()


@dataclass(frozen=True)
class MonthCalendar:
    year: int
    month: int
    weeks: List[List[CalendarDay]] = field(default_factory=list)

    @property
    def title(self) -> str:
        return f"{calendar.month_name[self.month]} {self.year}"

    @property
    def previous(self) -> Tuple[int, int]:
        return (self.year - 1, 12) if self.month == 1 else (self.year, self.month - 1)

    @property
    def next(self) -> Tuple[int, int]:
        return (self.year + 1, 1) if self.month == 12 else (self.year, self.month + 1)

    def to_dict(self) -> dict:
        days = [d for week in self.weeks for d in week if d.in_month and d.events]
        return {
            "year": self.year,
            "month": self.month,
            "title": self.title,
            "days": [{"date": d.day.isoformat(), "events": [e.to_dict() for e in d.events]} for d in days],
        }


def build_month(year: int, month: int, events: Sequence[Event]) -> MonthCalendar:
    """Monday-first weeks; each event sits on the day it starts."""
    by_day: Dict[date, List[Event]] = {}
    for e in sorted(events, key=lambda e: e.start_at):
        by_day.setdefault(e.start_at.date(), []).append(e)

    weeks = [
        [CalendarDay(day=d, in_month=d.month == month, events=tuple(by_day.get(d, ()))) for d in week]
        for week in calendar.Calendar(firstweekday=calendar.MONDAY).monthdatescalendar(year, month)
    ]
    return MonthCalendar(year=year, month=month, weeks=weeks)
