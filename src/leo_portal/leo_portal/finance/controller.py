from __future__ import annotations

from datetime import date

from flask import Flask, flash, render_template, request

from ..common.datetime_utils import parse_iso_date
from ..common.web import admin_required, current_role, current_user_id, json_api, json_ok, request_data
from ..core.enums import TransactionType
from ..core.exceptions import ValidationError
from ..container import Container
from .service import CATEGORIES, TransactionInput


def _tx_input(data: dict) -> TransactionInput:
    try:
        tx_type = TransactionType(data.get("type", ""))
    except ValueError:
        raise ValidationError("Type must be 'income' or 'expense'")
    try:
        tx_date = parse_iso_date((data.get("date") or "").strip())
    except ValueError:
        raise ValidationError("Date must be YYYY-MM-DD")

    return TransactionInput(
        type=tx_type,
        tx_date=tx_date,
        amount=data.get("amount"),
        category=(data.get("category") or "").strip(),
        source=data.get("source", ""),
        notes=data.get("notes"),
    )


def _date_range() -> tuple[date, date]:
    today = date.today()
    try:
        start = parse_iso_date(request.args["start"]) if request.args.get("start") else today.replace(day=1)
        end = parse_iso_date(request.args["end"]) if request.args.get("end") else today
    except ValueError:
        raise ValidationError("Dates must be YYYY-MM-DD")
    return start, end


def register(app: Flask, container: Container) -> None:
    @app.route("/admin/finance", endpoint="finance")
    @admin_required
    def finance_page():
        try:
            start, end = _date_range()
        except ValidationError as e:
            flash(str(e), "warning")
            start, end = date.today().replace(day=1), date.today()
        return render_template(
            "admin/finance.html",
            transactions=container.finance_service.list_transactions(start=start, end=end),
            summary=container.finance_service.summarize(start=start, end=end),
            categories={t.value: c for t, c in CATEGORIES.items()},
            active_page="finance",
        )

    @app.route("/api/finance/transactions", methods=["GET"], endpoint="api_transactions")
    @admin_required
    @json_api
    def api_transactions():
        try:
            start = parse_iso_date(request.args["start"]) if request.args.get("start") else None
            end = parse_iso_date(request.args["end"]) if request.args.get("end") else None
        except ValueError:
            raise ValidationError("Dates must be YYYY-MM-DD")
        txs = container.finance_service.list_transactions(start=start, end=end)
        return json_ok([t.to_dict() for t in txs])

    @app.route("/api/finance/transactions", methods=["POST"], endpoint="api_add_transaction")
    @admin_required
    @json_api
    def api_add_transaction():
        tx_id = container.finance_service.add(
            current_role=current_role(),
            created_by=current_user_id(),
            data=_tx_input(request_data()),
        )
        return json_ok({"transaction_id": tx_id}, 201, message="Transaction recorded")

    @app.route("/api/finance/transactions/<int:tx_id>", methods=["PUT"], endpoint="api_update_transaction")
    @admin_required
    @json_api
    def api_update_transaction(tx_id: int):
        tx = container.finance_service.update(
            current_role=current_role(), transaction_id=tx_id, data=_tx_input(request_data())
        )
        return json_ok(tx.to_dict(), message="Transaction updated")

    @app.route("/api/finance/transactions/<int:tx_id>", methods=["DELETE"], endpoint="api_delete_transaction")
    @admin_required
    @json_api
    def api_delete_transaction(tx_id: int):
        container.finance_service.delete(current_role=current_role(), transaction_id=tx_id)
        return json_ok(message="Transaction deleted")

    @app.route("/api/finance/summary", methods=["GET"], endpoint="api_finance_summary")
    @admin_required
    @json_api
    def api_finance_summary():
        start, end = _date_range()
        return json_ok(container.finance_service.summarize(start=start, end=end).to_dict())
