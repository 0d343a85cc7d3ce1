from __future__ import annotations

from flask import Flask, render_template

from ..common.web import admin_required, current_role, json_api, json_ok, request_data
from ..container import Container
from ..core.exceptions import ValidationError


def _as_list(value) -> list:
    if value is None or value == "":
        return []
    if isinstance(value, str):
        return [v.strip() for v in value.replace(";", ",").split(",") if v.strip()]
    if isinstance(value, list):
        return value
    raise ValidationError("Recipients must be a list")


def register(app: Flask, container: Container) -> None:
    svc = container.communication_service

    @app.route("/admin/communication", methods=["GET"], endpoint="admin_communication")
    @admin_required
    def admin_communication():
        return render_template(
            "admin/communication.html",
            groups=container.group_service.list_groups(),
            members=container.user_service.list_approved(),
            active_page="communication",
        )

    @app.route("/api/communication/bulk-email", methods=["POST"], endpoint="api_bulk_email")
    @admin_required
    @json_api
    def api_bulk_email():
        data = request_data()
        try:
            group_ids = [int(g) for g in _as_list(data.get("group_ids"))]
        except (TypeError, ValueError):
            raise ValidationError("group_ids must contain group ids")

        result = svc.send_bulk_email(
            current_role=current_role(),
            subject=data.get("subject", ""),
            body=data.get("body", ""),
            recipients=_as_list(data.get("recipients")),
            group_ids=group_ids,
        )
        body = result.to_dict()
        return json_ok(status=200 if result.success else 502, **body)

    @app.route("/api/communication/draft", methods=["POST"], endpoint="api_draft_communication")
    @admin_required
    @json_api
    def api_draft_communication():
        data = request_data()
        return json_ok(svc.draft(current_role=current_role(), topic=data.get("topic", "")))
