from __future__ import annotations

import io

import qrcode
from flask import Flask, abort, current_app, flash, render_template, request, send_file

from ..attendance.qr import event_qr_payload
from ..common.datetime_utils import now_local, parse_iso_datetime
from ..common.validators import optional_float
from ..common.web import admin_required, current_role, current_user_id, json_api, json_ok, login_required, request_data
from ..core.exceptions import NotFoundError, ValidationError
from ..container import Container
from .service import EventInput


def _event_input(data: dict) -> EventInput:
    start_s = (data.get("start_at") or "").strip()
    end_s = (data.get("end_at") or "").strip()
    if not start_s:
        raise ValidationError("Start date is required")
    try:
        start_at = parse_iso_datetime(start_s)
        end_at = parse_iso_datetime(end_s) if end_s else None
    except ValueError:
        raise ValidationError("Dates must be ISO formatted (YYYY-MM-DDTHH:MM)")

    try:
        points = int(data.get("points") or 0)
    except (TypeError, ValueError):
        raise ValidationError("Points must be a whole number")

    return EventInput(
        name=data.get("name", ""),
        start_at=start_at,
        end_at=end_at,
        location=data.get("location", ""),
        description=data.get("description", ""),
        latitude=optional_float(data.get("latitude"), "Latitude"),
        longitude=optional_float(data.get("longitude"), "Longitude"),
        points=points,
    )


def _requested_month() -> tuple[int, int]:
    today = now_local()
    try:
        year = int(request.args.get("year") or today.year)
        month = int(request.args.get("month") or today.month)
    except ValueError:
        raise ValidationError("Year and month must be numbers")
    return year, month


def register(app: Flask, container: Container) -> None:
    @app.route("/calendar", endpoint="events_calendar")
    @login_required
    def calendar_page():
        try:
            cal = container.event_service.month_calendar(*_requested_month())
        except ValidationError as e:
            flash(str(e), "danger")
            today = now_local()
            cal = container.event_service.month_calendar(today.year, today.month)
        return render_template("calendar.html", cal=cal, today=now_local().date(), active_page="calendar")

    @app.route("/api/events/calendar", methods=["GET"], endpoint="api_events_calendar")
    @login_required
    @json_api
    def api_events_calendar():
        return json_ok(container.event_service.month_calendar(*_requested_month()).to_dict())

    @app.route("/events", endpoint="events")
    @login_required
    def events_page():
        events = container.event_service.list_events()
        return render_template("events.html", events=events, active_page="events")

    @app.route("/api/events", methods=["GET"], endpoint="api_events")
    @login_required
    @json_api
    def api_events():
        return json_ok([e.to_dict() for e in container.event_service.list_events()])

    @app.route("/api/events/<int:event_id>", methods=["GET"], endpoint="api_event")
    @login_required
    @json_api
    def api_event(event_id: int):
        return json_ok(container.event_service.get(event_id).to_dict())

    @app.route("/api/events", methods=["POST"], endpoint="api_create_event")
    @admin_required
    @json_api
    def api_create_event():
        event = container.event_service.create(
            current_role=current_role(),
            created_by=current_user_id(),
            data=_event_input(request_data()),
        )
        return json_ok(event.to_dict(), 201, message="Event created")

    @app.route("/api/events/<int:event_id>", methods=["PUT"], endpoint="api_update_event")
    @admin_required
    @json_api
    def api_update_event(event_id: int):
        event = container.event_service.update(
            current_role=current_role(),
            event_id=event_id,
            data=_event_input(request_data()),
        )
        return json_ok(event.to_dict(), message="Event updated")

    @app.route("/api/events/<int:event_id>", methods=["DELETE"], endpoint="api_delete_event")
    @admin_required
    @json_api
    def api_delete_event(event_id: int):
        container.event_service.delete(current_role=current_role(), event_id=event_id)
        return json_ok(message="Event deleted")

    @app.route("/events/<int:event_id>/qr.png", endpoint="event_qr")
    @admin_required
    def event_qr(event_id: int):
        """Printable check-in QR for the event venue."""
        try:
            event = container.event_service.get(event_id)
        except NotFoundError:
            abort(404)

        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_L,
            box_size=10,
            border=2,
        )
        qr.add_data(event_qr_payload(current_app.config.get("PORTAL_BASE_URL", ""), event.event_id))
        qr.make(fit=True)
        img = qr.make_image(fill_color="black", back_color="white")

        buf = io.BytesIO()
        img.save(buf, format="PNG")
        buf.seek(0)
        return send_file(buf, mimetype="image/png", download_name=f"event_{event.event_id}_qr.png")
