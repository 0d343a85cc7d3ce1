from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from src.leo_portal.leo_portal.core.enums import Role, TransactionType
from src.leo_portal.leo_portal.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.leo_portal.leo_portal.finance.service import FinanceService, TransactionInput

from tests.fakes import InMemoryTransactions


def _tx(type_=TransactionType.INCOME, *, day=10, amount="1500", category="membership_fees", source="March dues"):
    return TransactionInput(
        type=type_, tx_date=date(2026, 3, day), amount=amount, category=category, source=source
    )


def test_summary_totals_income_expenses_and_net():
    svc = FinanceService(InMemoryTransactions())
    svc.add(current_role=Role.ADMIN, created_by=1, data=_tx(amount="1500"))
    svc.add(current_role=Role.ADMIN, created_by=1, data=_tx(amount="250.50", category="donations", source="Alumni"))
    svc.add(
        current_role=Role.ADMIN,
        created_by=1,
        data=_tx(TransactionType.EXPENSE, amount="400", category="supplies", source="Gloves"),
    )
    svc.add(current_role=Role.ADMIN, created_by=1, data=_tx(day=31, amount="999"))

    summary = svc.summarize(start=date(2026, 3, 1), end=date(2026, 3, 30))

    assert summary.total_income == Decimal("1750.50")
    assert summary.total_expenses == Decimal("400.00")
    assert summary.net == Decimal("1350.50")
    assert summary.to_dict()["net"] == 1350.5


def test_summary_range_is_inclusive_and_ordered():
    svc = FinanceService(InMemoryTransactions())
    svc.add(current_role=Role.ADMIN, created_by=1, data=_tx(day=1))
    svc.add(current_role=Role.ADMIN, created_by=1, data=_tx(day=31))

    assert svc.summarize(start=date(2026, 3, 1), end=date(2026, 3, 31)).total_income == Decimal("3000.00")
    with pytest.raises(ValidationError):
        svc.summarize(start=date(2026, 3, 31), end=date(2026, 3, 1))


@pytest.mark.parametrize(
    "data",
    [
        _tx(amount="0"),
        _tx(amount="-5"),
        _tx(amount="abc"),
        _tx(category="supplies"),
        _tx(TransactionType.EXPENSE, category="donations"),
        _tx(source=" "),
    ],
)
def test_invalid_transactions_are_rejected(data):
    with pytest.raises(ValidationError):
        FinanceService(InMemoryTransactions()).add(current_role=Role.ADMIN, created_by=1, data=data)


def test_members_cannot_touch_the_ledger():
    svc = FinanceService(InMemoryTransactions())

    with pytest.raises(AuthorizationError):
        svc.add(current_role=Role.MEMBER, created_by=2, data=_tx())
    with pytest.raises(AuthorizationError):
        svc.delete(current_role=Role.MEMBER, transaction_id=1)


def test_update_and_delete():
    svc = FinanceService(InMemoryTransactions())
    tx_id = svc.add(current_role=Role.ADMIN, created_by=1, data=_tx())

    updated = svc.update(current_role=Role.ADMIN, transaction_id=tx_id, data=_tx(amount="2000", source="Late dues"))
    assert updated.amount == Decimal("2000.00")
    assert updated.source == "Late dues"

    svc.delete(current_role=Role.ADMIN, transaction_id=tx_id)
    with pytest.raises(NotFoundError):
        svc.get(tx_id)
