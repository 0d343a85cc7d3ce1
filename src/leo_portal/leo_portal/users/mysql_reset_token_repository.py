from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import PasswordResetToken
from .repository import PasswordResetTokenRepository


class MySQLPasswordResetTokenRepository(PasswordResetTokenRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, user_id: int, token_hash: str, expires_at: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO password_reset_tokens(user_id, token_hash, expires_at) VALUES(%s,%s,%s)",
                (user_id, token_hash, expires_at),
            )
            return int(cur.lastrowid)

    def find_active(self, token_hash: str, now: datetime) -> Optional[PasswordResetToken]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT token_id, user_id, token_hash, expires_at, used_at
                FROM password_reset_tokens
                WHERE token_hash=%s AND used_at IS NULL AND expires_at > %s
                """,
                (token_hash, now),
            )
            row = fetchone(cur)
            if not row:
                return None
            return PasswordResetToken(
                token_id=int(row["token_id"]),
                user_id=int(row["user_id"]),
                token_hash=row["token_hash"],
                expires_at=row["expires_at"],
                used_at=row.get("used_at"),
            )

    def mark_used(self, token_id: int, used_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            # Single use even when two resets race.
            cur.execute(
                "UPDATE password_reset_tokens SET used_at=%s WHERE token_id=%s AND used_at IS NULL",
                (used_at, token_id),
            )
            return cur.rowcount > 0
