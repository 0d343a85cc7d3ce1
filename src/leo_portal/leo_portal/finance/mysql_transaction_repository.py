from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import TransactionType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Transaction
from .repository import TransactionRepository

_TX_COLUMNS = "transaction_id, type, tx_date, amount, category, source, notes, created_by, created_at"


def _row_to_tx(row: dict) -> Transaction:
    return Transaction(
        transaction_id=int(row["transaction_id"]),
        type=TransactionType(row["type"]),
        tx_date=row["tx_date"],
        amount=Decimal(str(row["amount"])),
        category=row["category"],
        source=row["source"],
        notes=row.get("notes"),
        created_by=row.get("created_by"),
        created_at=row.get("created_at"),
    )


class MySQLTransactionRepository(TransactionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, transaction_id: int) -> Optional[Transaction]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_TX_COLUMNS} FROM transactions WHERE transaction_id=%s", (transaction_id,))
            row = fetchone(cur)
            return _row_to_tx(row) if row else None

    def list_all(self, *, start: Optional[date] = None, end: Optional[date] = None) -> Sequence[Transaction]:
        where = []
        params: list = []
        if start is not None:
            where.append("tx_date >= %s")
            params.append(start)
        if end is not None:
            where.append("tx_date <= %s")
            params.append(end)

        sql = f"SELECT {_TX_COLUMNS} FROM transactions"
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY tx_date DESC, transaction_id DESC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_tx(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        type: TransactionType,
        tx_date: date,
        amount: Decimal,
        category: str,
        source: str,
        notes: Optional[str],
        created_by: Optional[int],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO transactions(type, tx_date, amount, category, source, notes, created_by)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (type.value, tx_date, amount, category, source, notes, created_by),
            )
            return int(cur.lastrowid)

    def update(
        self,
        transaction_id: int,
        *,
        type: TransactionType,
        tx_date: date,
        amount: Decimal,
        category: str,
        source: str,
        notes: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE transactions
                SET type=%s, tx_date=%s, amount=%s, category=%s, source=%s, notes=%s
                WHERE transaction_id=%s
                """,
                (type.value, tx_date, amount, category, source, notes, transaction_id),
            )
            return cur.rowcount > 0

    def delete_by_id(self, transaction_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM transactions WHERE transaction_id=%s", (transaction_id,))
            return cur.rowcount > 0
