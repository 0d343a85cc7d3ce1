from __future__ import annotations

import logging

from flask import Flask, abort, jsonify, render_template, request

from ..common.validators import optional_float
from ..common.web import admin_required, current_user_id, json_api, json_ok, login_required, request_data
from ..core.enums import MarkResultStatus
from ..core.exceptions import DomainError, GeofenceError, NotFoundError, ValidationError
from ..container import Container
from .model import MarkAttendanceResult
from .qr import decode_qr_image, parse_event_qr

logger = logging.getLogger(__name__)

_HTTP_BY_STATUS = {
    MarkResultStatus.SUCCESS: 201,
    MarkResultStatus.ALREADY_MARKED: 200,
    MarkResultStatus.QUEUED: 202,
}


def _result_response(result: MarkAttendanceResult):
    return jsonify({"success": result.status != MarkResultStatus.ERROR, **result.to_dict()}), _HTTP_BY_STATUS.get(
        result.status, 400
    )


def _error_response(exc: DomainError):
    body = MarkAttendanceResult(status=MarkResultStatus.ERROR, message=str(exc)).to_dict()
    if isinstance(exc, GeofenceError):
        body["distance_meters"] = exc.distance_meters
        body["radius_meters"] = exc.radius_meters
    return jsonify({"success": False, **body}), 404 if isinstance(exc, NotFoundError) else 400


def register(app: Flask, container: Container) -> None:
    def _mark_member(event_id: int, data: dict):
        try:
            result = container.attendance_service.mark_member_attendance(
                event_id,
                current_user_id(),
                latitude=optional_float(data.get("latitude"), "Latitude"),
                longitude=optional_float(data.get("longitude"), "Longitude"),
            )
        except DomainError as e:
            return _error_response(e)
        except Exception:
            logger.exception("Marking attendance failed event_id=%s", event_id)
            body = MarkAttendanceResult(status=MarkResultStatus.ERROR, message="Could not mark attendance, please retry")
            return jsonify({"success": False, **body.to_dict()}), 500
        return _result_response(result)

    @app.route("/attendance/checkin/<int:event_id>", endpoint="attendance_checkin")
    @login_required
    def attendance_checkin(event_id: int):
        """Landing page for the venue QR; the page posts the browser location."""
        try:
            event = container.event_service.get(event_id)
        except NotFoundError:
            abort(404)
        return render_template("checkin.html", event=event, active_page="events")

    @app.route("/api/events/<int:event_id>/attendance", methods=["POST"], endpoint="api_mark_attendance")
    @login_required
    def api_mark_attendance(event_id: int):
        return _mark_member(event_id, request_data())

    @app.route("/api/attendance/scan", methods=["POST"], endpoint="api_attendance_scan")
    @login_required
    def api_attendance_scan():
        """Check in by uploading a photo of the venue QR code."""
        file = request.files.get("image")
        if not file:
            return _error_response(ValidationError("Please attach a photo of the QR code"))
        try:
            event_id = parse_event_qr(decode_qr_image(file.stream))
        except DomainError as e:
            return _error_response(e)
        return _mark_member(event_id, request.form.to_dict())

    @app.route("/api/events/<int:event_id>/visitors", methods=["POST"], endpoint="api_mark_visitor")
    @login_required
    def api_mark_visitor(event_id: int):
        data = request_data()
        try:
            result = container.attendance_service.mark_visitor_attendance(
                event_id,
                name=data.get("name", ""),
                designation=data.get("designation", ""),
                club=data.get("club", ""),
                comment=data.get("comment"),
            )
        except DomainError as e:
            return _error_response(e)
        return _result_response(result)

    @app.route("/api/attendance/me", methods=["GET"], endpoint="api_my_attendance")
    @login_required
    @json_api
    def api_my_attendance():
        records = container.attendance_service.history_for_user(current_user_id())
        return json_ok([r.to_dict() for r in records])

    @app.route("/api/events/<int:event_id>/attendance", methods=["GET"], endpoint="api_event_attendance")
    @admin_required
    @json_api
    def api_event_attendance(event_id: int):
        records = container.attendance_service.records_for_event(event_id)
        return json_ok([r.to_dict() for r in records])

    @app.route("/api/attendance/offline", methods=["GET"], endpoint="api_offline_status")
    @admin_required
    @json_api
    def api_offline_status():
        return json_ok({"pending": container.attendance_service.offline_pending_count()})

    @app.route("/api/attendance/offline/sync", methods=["POST"], endpoint="api_offline_sync")
    @admin_required
    @json_api
    def api_offline_sync():
        count = container.attendance_service.flush_offline_queue()
        return json_ok({"synced": count}, message=f"{count} offline record(s) synced")
