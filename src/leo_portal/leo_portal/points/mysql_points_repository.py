from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.constants import MONTHLY_POINT_FIELDS
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import MonthlyPoints, PointsEntry
from .repository import PointsRepository

_MONTHLY_COLUMNS = ", ".join(("year", "month", "user_id", "user_name") + MONTHLY_POINT_FIELDS)


def _row_to_entry(row: dict) -> PointsEntry:
    return PointsEntry(
        entry_id=int(row["entry_id"]),
        user_id=int(row["user_id"]),
        user_name=row["user_name"],
        entry_date=row["entry_date"],
        description=row["description"],
        points=int(row["points"]),
        category=row["category"],
        added_by=row["added_by"],
        event_id=row.get("event_id"),
        created_at=row.get("created_at"),
    )


class MySQLPointsRepository(PointsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO points_entries(user_id, user_name, entry_date, description, points, category, added_by, event_id)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (user_id, user_name, entry_date, description, points, category, added_by, event_id),
            )
            return int(cur.lastrowid)

    def list_entries(self, *, user_id: Optional[int] = None) -> Sequence[PointsEntry]:
        sql = """
            SELECT entry_id, user_id, user_name, entry_date, description, points, category, added_by, event_id, created_at
            FROM points_entries
        """
        params: tuple = ()
        if user_id is not None:
            sql += " WHERE user_id=%s"
            params = (user_id,)
        sql += " ORDER BY entry_date DESC, entry_id DESC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return [_row_to_entry(r) for r in fetchall(cur)]

    def delete_entry(self, entry_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM points_entries WHERE entry_id=%s", (entry_id,))
            return cur.rowcount > 0

    def total_for_user(self, user_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COALESCE(SUM(points), 0) AS total FROM points_entries WHERE user_id=%s", (user_id,))
            row = fetchone(cur)
            return int(row["total"]) if row else 0

    def get_monthly(self, *, year: int, month: int) -> Sequence[MonthlyPoints]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_MONTHLY_COLUMNS} FROM monthly_points WHERE year=%s AND month=%s ORDER BY user_name",
                (year, month),
            )
            return [
                MonthlyPoints(
                    year=int(r["year"]),
                    month=int(r["month"]),
                    user_id=int(r["user_id"]),
                    user_name=r["user_name"],
                    **{f: int(r.get(f) or 0) for f in MONTHLY_POINT_FIELDS},
                )
                for r in fetchall(cur)
            ]

    def save_monthly_batch(self, rows: Sequence[MonthlyPoints]) -> int:
        if not rows:
            return 0
        placeholders = ",".join(["%s"] * (5 + len(MONTHLY_POINT_FIELDS)))
        updates = ", ".join(f"{c}=VALUES({c})" for c in ("user_name",) + MONTHLY_POINT_FIELDS + ("total_points",))
        sql = f"""
            INSERT INTO monthly_points({_MONTHLY_COLUMNS}, total_points)
            VALUES({placeholders})
            ON DUPLICATE KEY UPDATE {updates}
        """
        params = [
            (r.year, r.month, r.user_id, r.user_name, *[int(getattr(r, f)) for f in MONTHLY_POINT_FIELDS], r.total_points)
            for r in rows
        ]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(sql, params)
        return len(rows)
