from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import TransactionType
from .model import Transaction


class TransactionRepository(Protocol):
    def get_by_id(self, transaction_id: int) -> Optional[Transaction]:
        raise NotImplementedError

    def list_all(self, *, start: Optional[date] = None, end: Optional[date] = None) -> Sequence[Transaction]:
        """Newest first; ``start``/``end`` are inclusive when given."""

        raise NotImplementedError

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
        raise NotImplementedError

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
        raise NotImplementedError

    def delete_by_id(self, transaction_id: int) -> bool:
        raise NotImplementedError
