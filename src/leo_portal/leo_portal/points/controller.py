from __future__ import annotations

from datetime import date

from flask import Flask, render_template, request, session

from ..common.datetime_utils import parse_iso_date
from ..common.web import admin_required, current_role, current_user_id, json_api, json_ok, login_required, request_data
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/leaderboard", endpoint="leaderboard")
    @login_required
    def leaderboard():
        entries = container.points_service.leaderboard()
        return render_template("leaderboard.html", entries=entries, active_page="leaderboard")

    @app.route("/api/leaderboard", methods=["GET"], endpoint="api_leaderboard")
    @login_required
    @json_api
    def api_leaderboard():
        limit = request.args.get("limit", type=int)
        return json_ok([e.to_dict() for e in container.points_service.leaderboard(limit=limit)])

    @app.route("/api/points", methods=["GET"], endpoint="api_points")
    @login_required
    @json_api
    def api_points():
        # Members only see their own ledger.
        user_id = request.args.get("user_id", type=int)
        if not current_role().is_admin:
            user_id = current_user_id()
        entries = container.points_service.list_entries(user_id=user_id)
        return json_ok([e.to_dict() for e in entries])

    @app.route("/api/points", methods=["POST"], endpoint="api_add_points")
    @admin_required
    @json_api
    def api_add_points():
        data = request_data()
        entry_s = (data.get("entry_date") or "").strip()
        try:
            entry_date = parse_iso_date(entry_s) if entry_s else date.today()
            user_id = int(data.get("user_id") or 0)
        except ValueError:
            raise ValidationError("Invalid member or date")

        entry_id = container.points_service.add_entry(
            current_role=current_role(),
            added_by=session.get("name") or str(current_user_id()),
            user_id=user_id,
            description=data.get("description", ""),
            points=data.get("points"),
            category=data.get("category", ""),
            entry_date=entry_date,
            event_id=int(data["event_id"]) if data.get("event_id") else None,
        )
        return json_ok({"entry_id": entry_id}, 201, message="Points added")

    @app.route("/api/points/<int:entry_id>", methods=["DELETE"], endpoint="api_delete_points")
    @admin_required
    @json_api
    def api_delete_points(entry_id: int):
        container.points_service.delete_entry(current_role=current_role(), entry_id=entry_id)
        return json_ok(message="Points entry removed")

    @app.route("/api/points/monthly/<int:year>/<int:month>", methods=["GET"], endpoint="api_monthly_points")
    @login_required
    @json_api
    def api_monthly_points(year: int, month: int):
        rows = container.points_service.get_monthly(year=year, month=month)
        return json_ok([r.to_dict() for r in rows])

    @app.route("/api/points/monthly/<int:year>/<int:month>", methods=["PUT"], endpoint="api_save_monthly_points")
    @admin_required
    @json_api
    def api_save_monthly_points(year: int, month: int):
        rows = (request.get_json(silent=True) or {}).get("rows") or []
        if not isinstance(rows, list):
            raise ValidationError("rows must be a list")
        saved = container.points_service.save_monthly(current_role=current_role(), year=year, month=month, rows=rows)
        return json_ok({"saved": saved}, message="Monthly points saved")
