from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional

from ..common.validators import require_min_length
from ..core.constants import EXPENSE_CATEGORIES, INCOME_CATEGORIES
from ..core.enums import Role, TransactionType
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import FinanceSummary, Transaction
from .repository import TransactionRepository

logger = logging.getLogger(__name__)

CATEGORIES = {
    TransactionType.INCOME: INCOME_CATEGORIES,
    TransactionType.EXPENSE: EXPENSE_CATEGORIES,
}


@dataclass(frozen=True)
class TransactionInput:
    type: TransactionType
    tx_date: date
    amount: Decimal
    category: str
    source: str
    notes: Optional[str] = None


def _validated(data: TransactionInput) -> TransactionInput:
    try:
        amount = Decimal(str(data.amount)).quantize(Decimal("0.01"))
    except (InvalidOperation, ValueError):
        raise ValidationError("Amount must be a number")
    if amount <= 0:
        raise ValidationError("Amount must be greater than zero")

    if data.category not in CATEGORIES[data.type]:
        raise ValidationError(f"'{data.category}' is not a valid {data.type.value} category")
    if data.tx_date is None:
        raise ValidationError("Date is required")

    return TransactionInput(
        type=data.type,
        tx_date=data.tx_date,
        amount=amount,
        category=data.category,
        source=require_min_length(data.source, "Source", 2),
        notes=(data.notes or "").strip() or None,
    )


class FinanceService:
    """Use case: club ledger (admins only)."""

    def __init__(self, transactions: TransactionRepository):
        self._transactions = transactions

    @staticmethod
    def _require_admin(role: Role) -> None:
        if not role.is_admin:
            raise AuthorizationError("Only admins can manage finances")

    def list_transactions(self, *, start: Optional[date] = None, end: Optional[date] = None):
        return self._transactions.list_all(start=start, end=end)

    def get(self, transaction_id: int) -> Transaction:
        tx = self._transactions.get_by_id(transaction_id)
        if not tx:
            raise NotFoundError("Transaction not found")
        return tx

    def add(self, *, current_role: Role, created_by: int, data: TransactionInput) -> int:
        self._require_admin(current_role)
        data = _validated(data)
        tx_id = self._transactions.create(
            type=data.type,
            tx_date=data.tx_date,
            amount=data.amount,
            category=data.category,
            source=data.source,
            notes=data.notes,
            created_by=created_by,
        )
        logger.info("Transaction %s recorded: %s %s", tx_id, data.type.value, data.amount)
        return tx_id

    def update(self, *, current_role: Role, transaction_id: int, data: TransactionInput) -> Transaction:
        self._require_admin(current_role)
        self.get(transaction_id)
        data = _validated(data)
        self._transactions.update(
            transaction_id,
            type=data.type,
            tx_date=data.tx_date,
            amount=data.amount,
            category=data.category,
            source=data.source,
            notes=data.notes,
        )
        return self.get(transaction_id)

    def delete(self, *, current_role: Role, transaction_id: int) -> None:
        self._require_admin(current_role)
        if not self._transactions.delete_by_id(transaction_id):
            raise NotFoundError("Transaction not found")

    def summarize(self, *, start: date, end: date) -> FinanceSummary:
        """Totals for transactions dated within [start, end]."""
        if end < start:
            raise ValidationError("End date must not be before start date")

        income = Decimal("0")
        expenses = Decimal("0")
        for tx in self._transactions.list_all(start=start, end=end):
            if tx.type == TransactionType.INCOME:
                income += tx.amount
            else:
                expenses += tx.amount
        return FinanceSummary(start=start, end=end, total_income=income, total_expenses=expenses)
