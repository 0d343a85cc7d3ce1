from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Event
from .repository import EventRepository

_EVENT_COLUMNS = """
    event_id, name, start_at, end_at, location, description,
    latitude, longitude, points, created_by, created_at
"""


def _row_to_event(row: dict) -> Event:
    return Event(
        event_id=int(row["event_id"]),
        name=row["name"],
        start_at=row["start_at"],
        end_at=row.get("end_at"),
        location=row["location"],
        description=row["description"],
        latitude=float(row["latitude"]) if row.get("latitude") is not None else None,
        longitude=float(row["longitude"]) if row.get("longitude") is not None else None,
        points=int(row.get("points") or 0),
        created_by=row.get("created_by"),
        created_at=row.get("created_at"),
    )


class MySQLEventRepository(EventRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, event_id: int) -> Optional[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_EVENT_COLUMNS} FROM events WHERE event_id=%s", (event_id,))
            row = fetchone(cur)
            return _row_to_event(row) if row else None

    def list_all(self) -> Sequence[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_EVENT_COLUMNS} FROM events ORDER BY start_at DESC")
            return [_row_to_event(r) for r in fetchall(cur)]

    def list_upcoming(self, *, now: datetime, limit: int) -> Sequence[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_EVENT_COLUMNS} FROM events
                WHERE COALESCE(end_at, start_at) >= %s
                ORDER BY start_at ASC
                LIMIT %s
                """,
                (now, int(limit)),
            )
            return [_row_to_event(r) for r in fetchall(cur)]

    def list_between(self, start: datetime, end: datetime) -> Sequence[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_EVENT_COLUMNS} FROM events WHERE start_at >= %s AND start_at < %s ORDER BY start_at ASC",
                (start, end),
            )
            return [_row_to_event(r) for r in fetchall(cur)]

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO events(name, start_at, end_at, location, description, latitude, longitude, points, created_by)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (name, start_at, end_at, location, description, latitude, longitude, points, created_by),
            )
            return int(cur.lastrowid)

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE events
                SET name=%s, start_at=%s, end_at=%s, location=%s, description=%s,
                    latitude=%s, longitude=%s, points=%s
                WHERE event_id=%s
                """,
                (name, start_at, end_at, location, description, latitude, longitude, points, event_id),
            )
            return cur.rowcount > 0

    def delete_by_id(self, event_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM events WHERE event_id=%s", (event_id,))
            return cur.rowcount > 0
