from __future__ import annotations

from datetime import date
from typing import Optional

from flask import Flask, abort, flash, redirect, render_template, request, url_for

from ..common.datetime_utils import parse_iso_date
from ..common.web import admin_required, current_role, current_user_id, login_required
from ..container import Container
from ..core.exceptions import NotFoundError, ValidationError
from . import exporters


def _optional_date(name: str) -> Optional[date]:
    value = (request.args.get(name) or "").strip()
    if not value:
        return None
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError("Dates must be YYYY-MM-DD")


def register(app: Flask, container: Container) -> None:
    reports = container.report_service

    def _download(payload: bytes, *, mimetype: str, filename: str):
        return app.response_class(
            payload,
            mimetype=mimetype,
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    def _csv(rows, fieldnames, filename: str):
        return _download(exporters.to_csv_bytes(rows, fieldnames), mimetype="text/csv", filename=filename)

    @app.route("/dashboard", methods=["GET"], endpoint="dashboard")
    @login_required
    def dashboard():
        user_id = current_user_id()
        overview = reports.admin_overview() if current_role().is_admin else None
        return render_template(
            "dashboard.html",
            me=reports.member_dashboard(user_id),
            overview=overview,
            active_page="dashboard",
        )

    @app.route("/admin/reports", methods=["GET"], endpoint="admin_reports")
    @admin_required
    def admin_reports():
        return render_template(
            "admin/reports.html",
            events=container.event_service.list_events(),
            today=date.today().isoformat(),
            month_start=date.today().replace(day=1).isoformat(),
            active_page="reports",
        )

    @app.route("/admin/reports/members.csv", methods=["GET"], endpoint="export_members_csv")
    @admin_required
    def export_members_csv():
        return _csv(reports.member_rows(), exporters.MEMBER_FIELDS, "members.csv")

    @app.route("/admin/reports/events.csv", methods=["GET"], endpoint="export_events_csv")
    @admin_required
    def export_events_csv():
        return _csv(reports.event_rows(), exporters.EVENT_FIELDS, "events.csv")

    def _attendance_rows():
        event_id = request.args.get("event_id", type=int)
        return reports.attendance_rows(event_id=event_id, start=_optional_date("start"), end=_optional_date("end"))

    @app.route("/admin/reports/attendance.csv", methods=["GET"], endpoint="export_attendance_csv")
    @admin_required
    def export_attendance_csv():
        try:
            rows = _attendance_rows()
        except ValidationError as e:
            flash(str(e), "warning")
            return redirect(url_for("admin_reports"))
        return _csv(rows, exporters.ATTENDANCE_FIELDS, "attendance_log.csv")

    @app.route("/admin/reports/attendance.xlsx", methods=["GET"], endpoint="export_attendance_xlsx")
    @admin_required
    def export_attendance_xlsx():
        try:
            rows = _attendance_rows()
        except ValidationError as e:
            flash(str(e), "warning")
            return redirect(url_for("admin_reports"))
        return _download(
            exporters.to_xlsx_bytes(rows, exporters.ATTENDANCE_FIELDS, sheet_name="Attendance"),
            mimetype="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            filename="attendance_log.xlsx",
        )

    @app.route("/admin/reports/transactions.csv", methods=["GET"], endpoint="export_transactions_csv")
    @admin_required
    def export_transactions_csv():
        try:
            rows = reports.transaction_rows(start=_optional_date("start"), end=_optional_date("end"))
        except ValidationError as e:
            flash(str(e), "warning")
            return redirect(url_for("admin_reports"))
        return _csv(rows, exporters.TRANSACTION_FIELDS, "transactions.csv")

    @app.route("/admin/reports/events/<int:event_id>/attendance.pdf", methods=["GET"], endpoint="export_event_pdf")
    @admin_required
    def export_event_pdf(event_id: int):
        try:
            pdf = reports.event_attendance_pdf(event_id)
        except NotFoundError:
            abort(404)
        return _download(pdf, mimetype="application/pdf", filename=f"event_{event_id}_attendance.pdf")

    @app.route("/admin/reports/finance.pdf", methods=["GET"], endpoint="export_finance_pdf")
    @admin_required
    def export_finance_pdf():
        try:
            start = _optional_date("start") or date.today().replace(day=1)
            end = _optional_date("end") or date.today()
            pdf = reports.finance_statement_pdf(start=start, end=end)
        except ValidationError as e:
            flash(str(e), "warning")
            return redirect(url_for("admin_reports"))
        return _download(
            pdf,
            mimetype="application/pdf",
            filename=f"finance_statement_{start:%Y%m%d}_{end:%Y%m%d}.pdf",
        )
