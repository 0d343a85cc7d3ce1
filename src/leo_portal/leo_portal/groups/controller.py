from __future__ import annotations

from flask import Flask

from ..common.web import admin_required, current_role, json_api, json_ok, request_data
from ..core.exceptions import ValidationError
from ..container import Container


def _member_ids(data: dict) -> list[int]:
    raw = data.get("member_ids") or []
    if not isinstance(raw, list):
        raise ValidationError("member_ids must be a list")
    try:
        return [int(m) for m in raw]
    except (TypeError, ValueError):
        raise ValidationError("member_ids must contain member ids")


def register(app: Flask, container: Container) -> None:
    svc = container.group_service

    @app.route("/api/groups", methods=["GET"], endpoint="api_groups")
    @admin_required
    @json_api
    def api_groups():
        return json_ok([g.to_dict() for g in svc.list_groups()])

    @app.route("/api/groups", methods=["POST"], endpoint="api_create_group")
    @admin_required
    @json_api
    def api_create_group():
        data = request_data()
        group = svc.create(current_role=current_role(), name=data.get("name", ""), member_ids=_member_ids(data))
        return json_ok(group.to_dict(), 201, message="Group created")

    @app.route("/api/groups/<int:group_id>", methods=["PUT"], endpoint="api_update_group")
    @admin_required
    @json_api
    def api_update_group(group_id: int):
        data = request_data()
        group = svc.update(
            current_role=current_role(), group_id=group_id, name=data.get("name", ""), member_ids=_member_ids(data)
        )
        return json_ok(group.to_dict(), message="Group updated")

    @app.route("/api/groups/<int:group_id>", methods=["DELETE"], endpoint="api_delete_group")
    @admin_required
    @json_api
    def api_delete_group(group_id: int):
        svc.delete(current_role=current_role(), group_id=group_id)
        return json_ok(message="Group deleted")

    @app.route("/api/groups/<int:group_id>/members/<int:user_id>", methods=["POST"], endpoint="api_add_group_member")
    @admin_required
    @json_api
    def api_add_group_member(group_id: int, user_id: int):
        group = svc.add_member(current_role=current_role(), group_id=group_id, user_id=user_id)
        return json_ok(group.to_dict())

    @app.route(
        "/api/groups/<int:group_id>/members/<int:user_id>", methods=["DELETE"], endpoint="api_remove_group_member"
    )
    @admin_required
    @json_api
    def api_remove_group_member(group_id: int, user_id: int):
        group = svc.remove_member(current_role=current_role(), group_id=group_id, user_id=user_id)
        return json_ok(group.to_dict())
