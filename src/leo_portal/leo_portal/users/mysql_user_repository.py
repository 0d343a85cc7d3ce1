from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import MembershipFeeStatus, Role, UserStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import User
from .repository import UserRepository

_USER_COLUMNS = """
    user_id, name, email, password_hash, role, status, photo_url, designation, nic,
    date_of_birth, gender, mobile_number, membership_fee_status, fcm_token, created_at
"""


def _row_to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        name=row["name"],
        email=row["email"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        status=UserStatus(row["status"]),
        photo_url=row.get("photo_url"),
        designation=row.get("designation"),
        nic=row.get("nic"),
        date_of_birth=row.get("date_of_birth"),
        gender=row.get("gender"),
        mobile_number=row.get("mobile_number"),
        membership_fee_status=MembershipFeeStatus(row.get("membership_fee_status") or "pending"),
        fcm_token=row.get("fcm_token"),
        created_at=row.get("created_at"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE user_id=%s", (user_id,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE email=%s", (email.strip().lower(),))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def create_user(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        photo_url: str,
        role: Role,
        status: UserStatus,
        designation: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(name, email, password_hash, photo_url, role, status, designation)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (name, email, password_hash, photo_url, role.value, status.value, designation),
            )
            return int(cur.lastrowid)

    def set_status(self, user_id: int, status: UserStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET status=%s WHERE user_id=%s", (status.value, user_id))
            return cur.rowcount > 0

    def set_password_hash(self, user_id: int, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET password_hash=%s WHERE user_id=%s", (password_hash, user_id))
            return cur.rowcount > 0

    def update_admin_fields(self, user_id: int, *, name: str, role: Role, designation: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET name=%s, role=%s, designation=%s WHERE user_id=%s",
                (name, role.value, designation, user_id),
            )
            return cur.rowcount > 0

    def update_profile(
        self,
        user_id: int,
        *,
        name: str,
        nic: Optional[str],
        date_of_birth: Optional[date],
        gender: Optional[str],
        mobile_number: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE users
                SET name=%s, nic=%s, date_of_birth=%s, gender=%s, mobile_number=%s
                WHERE user_id=%s
                """,
                (name, nic, date_of_birth, gender, mobile_number, user_id),
            )
            return cur.rowcount > 0

    def set_fcm_token(self, user_id: int, token: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET fcm_token=%s WHERE user_id=%s", (token, user_id))
            return cur.rowcount > 0

    def set_membership_fee_status(self, user_id: int, status: MembershipFeeStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET membership_fee_status=%s WHERE user_id=%s",
                (status.value, user_id),
            )
            return cur.rowcount > 0

    def delete_by_id(self, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE user_id=%s", (user_id,))
            return cur.rowcount > 0

    def list_all(self, *, status: Optional[UserStatus] = None) -> Sequence[User]:
        sql = f"SELECT {_USER_COLUMNS} FROM users"
        params: tuple = ()
        if status is not None:
            sql += " WHERE status=%s"
            params = (status.value,)
        sql += " ORDER BY name"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return [_row_to_user(r) for r in fetchall(cur)]

    def list_by_ids(self, user_ids: Sequence[int]) -> Sequence[User]:
        if not user_ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE user_id IN ({in_clause(user_ids)}) ORDER BY name",
                tuple(int(u) for u in user_ids),
            )
            return [_row_to_user(r) for r in fetchall(cur)]
