"""Row builders and file writers for CSV, XLSX and PDF downloads.

Every writer emits exactly one data row per input row, in input order.
"""

from __future__ import annotations

import csv
import io
from datetime import datetime
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

import pandas as pd
from reportlab.lib.pagesizes import letter
from reportlab.lib.units import inch
from reportlab.pdfgen import canvas

from ..attendance.model import AttendanceRecord
from ..events.model import Event
from ..finance.model import FinanceSummary, Transaction
from ..users.model import User

MEMBER_FIELDS = [
    "user_id",
    "name",
    "email",
    "designation",
    "role",
    "status",
    "membership_fee_status",
    "mobile_number",
    "date_of_birth",
    "created_at",
]

EVENT_FIELDS = ["event_id", "name", "start_at", "end_at", "location", "points", "geofenced", "description"]

ATTENDANCE_FIELDS = [
    "attendance_id",
    "event_id",
    "event_name",
    "type",
    "attendee",
    "email",
    "designation",
    "club",
    "marked_at",
    "comment",
]

TRANSACTION_FIELDS = ["transaction_id", "date", "type", "category", "source", "amount", "notes"]


def _fmt_dt(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value else ""


def member_rows(users: Iterable[User]) -> List[dict]:
    return [
        {
            "user_id": u.user_id,
            "name": u.name,
            "email": u.email,
            "designation": u.designation or "",
            "role": u.role.value,
            "status": u.status.value,
            "membership_fee_status": u.membership_fee_status.value,
            "mobile_number": u.mobile_number or "",
            "date_of_birth": u.date_of_birth.isoformat() if u.date_of_birth else "",
            "created_at": _fmt_dt(u.created_at),
        }
        for u in users
    ]


def event_rows(events: Iterable[Event]) -> List[dict]:
    return [
        {
            "event_id": e.event_id,
            "name": e.name,
            "start_at": _fmt_dt(e.start_at),
            "end_at": _fmt_dt(e.end_at),
            "location": e.location,
            "points": e.points,
            "geofenced": "yes" if e.is_geofenced else "no",
            "description": e.description,
        }
        for e in events
    ]


def attendance_rows(
    records: Iterable[AttendanceRecord],
    *,
    events_by_id: Mapping[int, Event],
    users_by_id: Mapping[int, User],
) -> List[dict]:
    rows = []
    for r in records:
        event = events_by_id.get(r.event_id)
        user = users_by_id.get(r.user_id) if r.user_id is not None else None
        rows.append(
            {
                "attendance_id": r.attendance_id,
                "event_id": r.event_id,
                "event_name": event.name if event else "",
                "type": r.attendance_type.value,
                "attendee": user.name if user else (r.visitor_name or ""),
                "email": user.email if user else "",
                "designation": (user.designation if user else r.visitor_designation) or "",
                "club": r.visitor_club or "",
                "marked_at": _fmt_dt(r.marked_at),
                "comment": r.visitor_comment or "",
            }
        )
    return rows


def transaction_rows(transactions: Iterable[Transaction]) -> List[dict]:
    return [
        {
            "transaction_id": t.transaction_id,
            "date": t.tx_date.isoformat(),
            "type": t.type.value,
            "category": t.category,
            "source": t.source,
            "amount": f"{t.amount:.2f}",
            "notes": t.notes or "",
        }
        for t in transactions
    ]


def to_csv_bytes(rows: Sequence[Dict], fieldnames: Sequence[str]) -> bytes:
    """CSV with a UTF-8 BOM so Excel opens non-ASCII names correctly."""
    out = io.StringIO()
    writer = csv.DictWriter(out, fieldnames=list(fieldnames), extrasaction="ignore")
    writer.writeheader()
    for row in rows:
        writer.writerow(row)
    return out.getvalue().encode("utf-8-sig")


def to_xlsx_bytes(rows: Sequence[Dict], fieldnames: Sequence[str], *, sheet_name: str = "Sheet1") -> bytes:
    df = pd.DataFrame(list(rows), columns=list(fieldnames))
    out = io.BytesIO()
    with pd.ExcelWriter(out, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name)
    return out.getvalue()


class _PdfTable:
    """Draws a simple column table, repeating the header after each page break."""

    LINE_HEIGHT = 0.22 * inch

    def __init__(self, c: canvas.Canvas, columns: Sequence[tuple]):
        self._c = c
        self._columns = columns
        self._width, self._height = letter
        self.y = self._height - 1 * inch

    def header(self) -> None:
        self._c.setFont("Helvetica-Bold", 11)
        for label, x, _ in self._columns:
            self._c.drawString(x * inch, self.y, label)
        self.y -= self.LINE_HEIGHT
        self._c.setFont("Helvetica", 10)

    def text(self, line: str, *, bold: bool = False, size: int = 10) -> None:
        self._break_if_needed(repeat_header=False)
        self._c.setFont("Helvetica-Bold" if bold else "Helvetica", size)
        self._c.drawString(1 * inch, self.y, line)
        self.y -= self.LINE_HEIGHT
        self._c.setFont("Helvetica", 10)

    def row(self, values: Sequence[str]) -> None:
        self._break_if_needed(repeat_header=True)
        for (_, x, max_chars), value in zip(self._columns, values):
            self._c.drawString(x * inch, self.y, str(value)[:max_chars])
        self.y -= self.LINE_HEIGHT

    def _break_if_needed(self, *, repeat_header: bool) -> None:
        if self.y < 1 * inch:
            self._c.showPage()
            self.y = self._height - 1 * inch
            if repeat_header:
                self.header()


def _title_block(table: _PdfTable, title: str, generated_at: datetime) -> None:
    table.text(title, bold=True, size=14)
    table.text(f"Generated on {generated_at:%Y-%m-%d %H:%M}")
    table.y -= table.LINE_HEIGHT


def event_attendance_pdf(event: Event, rows: Sequence[dict], *, generated_at: datetime) -> bytes:
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    table = _PdfTable(c, [("Attendee", 1.0, 26), ("Type", 3.2, 10), ("Designation / Club", 4.2, 22), ("Time", 6.3, 16)])

    _title_block(table, f"Attendance Summary - {event.name}", generated_at)
    table.text(f"Date: {_fmt_dt(event.start_at)}    Location: {event.location}")
    members = sum(1 for r in rows if r["type"] == "member")
    table.text(f"Total: {len(rows)}    Members: {members}    Visitors: {len(rows) - members}")
    table.y -= table.LINE_HEIGHT

    table.header()
    if not rows:
        table.text("No attendance recorded for this event.")
    for r in rows:
        affiliation = r["designation"] if r["type"] == "member" else " / ".join(v for v in (r["designation"], r["club"]) if v)
        table.row([r["attendee"], r["type"], affiliation, r["marked_at"]])

    c.showPage()
    c.save()
    return buf.getvalue()


def finance_statement_pdf(summary: FinanceSummary, transactions: Sequence[Transaction], *, generated_at: datetime) -> bytes:
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    table = _PdfTable(c, [("Date", 1.0, 12), ("Type", 2.1, 9), ("Category", 3.0, 18), ("Source", 4.6, 20), ("Amount", 6.6, 14)])

    _title_block(table, f"Finance Statement {summary.start:%Y-%m-%d} to {summary.end:%Y-%m-%d}", generated_at)
    table.text(f"Total income: {summary.total_income:,.2f}")
    table.text(f"Total expenses: {summary.total_expenses:,.2f}")
    table.text(f"Net: {summary.net:,.2f}", bold=True)
    table.y -= table.LINE_HEIGHT

    table.header()
    if not transactions:
        table.text("No transactions in this period.")
    for t in transactions:
        table.row([t.tx_date.isoformat(), t.type.value, t.category, t.source, f"{t.amount:,.2f}"])

    c.showPage()
    c.save()
    return buf.getvalue()
