from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..core.enums import AttendanceStatus, AttendanceType
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord, NewAttendance
from .repository import AttendanceRepository

_ATTENDANCE_COLUMNS = """
    attendance_id, event_id, user_id, attendance_type, status, marked_at,
    marked_latitude, marked_longitude, visitor_name, visitor_designation,
    visitor_club, visitor_comment, client_id
"""

_INSERT_SQL = """
    INSERT INTO attendance(
        event_id, user_id, attendance_type, status, marked_at, marked_latitude, marked_longitude,
        visitor_name, visitor_designation, visitor_club, visitor_comment, client_id
    )
    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
"""


def _row_to_record(row: dict) -> AttendanceRecord:
    def _f(key: str) -> Optional[float]:
        return float(row[key]) if row.get(key) is not None else None

    return AttendanceRecord(
        attendance_id=int(row["attendance_id"]),
        event_id=int(row["event_id"]),
        user_id=int(row["user_id"]) if row.get("user_id") is not None else None,
        attendance_type=AttendanceType(row["attendance_type"]),
        status=AttendanceStatus(row.get("status") or "present"),
        marked_at=row["marked_at"],
        marked_latitude=_f("marked_latitude"),
        marked_longitude=_f("marked_longitude"),
        visitor_name=row.get("visitor_name"),
        visitor_designation=row.get("visitor_designation"),
        visitor_club=row.get("visitor_club"),
        visitor_comment=row.get("visitor_comment"),
        client_id=row.get("client_id"),
    )


def _insert_params(r: NewAttendance) -> tuple:
    return (
        r.event_id,
        r.user_id,
        r.attendance_type.value,
        AttendanceStatus.PRESENT.value,
        r.marked_at,
        r.marked_latitude,
        r.marked_longitude,
        r.visitor_name,
        r.visitor_designation,
        r.visitor_club,
        r.visitor_comment,
        r.client_id,
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_ATTENDANCE_COLUMNS} FROM attendance WHERE attendance_id=%s", (attendance_id,))
            row = fetchone(cur)
            return _row_to_record(row) if row else None

    def get_for_event_and_user(self, event_id: int, user_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_ATTENDANCE_COLUMNS} FROM attendance WHERE event_id=%s AND user_id=%s",
                (event_id, user_id),
            )
            row = fetchone(cur)
            return _row_to_record(row) if row else None

    def find_visitor(self, event_id: int, visitor_name: str) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ATTENDANCE_COLUMNS} FROM attendance
                WHERE event_id=%s AND attendance_type='visitor' AND LOWER(visitor_name)=LOWER(%s)
                LIMIT 1
                """,
                (event_id, visitor_name.strip()),
            )
            row = fetchone(cur)
            return _row_to_record(row) if row else None

    def create(self, record: NewAttendance) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(_INSERT_SQL, _insert_params(record))
                return int(cur.lastrowid)
        except mysql.connector.errors.IntegrityError as e:
            if e.errno == errorcode.ER_DUP_ENTRY:
                raise ConflictError("Attendance already marked for this event") from e
            raise

    def bulk_create(self, records: Sequence[NewAttendance]) -> int:
        if not records:
            return 0
        # INSERT IGNORE skips rows that hit uq_attendance_event_user or uq_attendance_event_visitor.
        sql = _INSERT_SQL.replace("INSERT INTO", "INSERT IGNORE INTO", 1)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(sql, [_insert_params(r) for r in records])
            return int(cur.rowcount or 0)

    def list_for_user(self, user_id: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_ATTENDANCE_COLUMNS} FROM attendance WHERE user_id=%s ORDER BY marked_at DESC",
                (user_id,),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def list_for_event(self, event_id: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_ATTENDANCE_COLUMNS} FROM attendance WHERE event_id=%s ORDER BY marked_at ASC",
                (event_id,),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def list_all(self) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_ATTENDANCE_COLUMNS} FROM attendance ORDER BY marked_at DESC")
            return [_row_to_record(r) for r in fetchall(cur)]

    def list_between(self, start: datetime, end: datetime) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ATTENDANCE_COLUMNS} FROM attendance
                WHERE marked_at >= %s AND marked_at < %s
                ORDER BY marked_at ASC
                """,
                (start, end),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def count_by_user(self) -> Dict[int, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, COUNT(*) AS cnt
                FROM attendance
                WHERE attendance_type='member' AND user_id IS NOT NULL
                GROUP BY user_id
                """
            )
            return {int(r["user_id"]): int(r["cnt"]) for r in fetchall(cur)}
