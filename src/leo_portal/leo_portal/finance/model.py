from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import TransactionType


@dataclass(frozen=True)
class Transaction:
    transaction_id: int
    type: TransactionType
    tx_date: date
    amount: Decimal
    category: str
    source: str
    notes: Optional[str] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "transaction_id": self.transaction_id,
            "type": self.type.value,
            "date": self.tx_date.isoformat(),
            "amount": float(self.amount),
            "category": self.category,
            "source": self.source,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class FinanceSummary:
    start: date
    end: date
    total_income: Decimal
    total_expenses: Decimal

    @property
    def net(self) -> Decimal:
        return self.total_income - self.total_expenses

    def to_dict(self) -> dict:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "total_income": float(self.total_income),
            "total_expenses": float(self.total_expenses),
            "net": float(self.net),
        }
