from __future__ import annotations

import csv
import io
import re
from datetime import date, datetime
from decimal import Decimal

import pandas as pd
from pypdf import PdfReader

from src.leo_portal.leo_portal.attendance.model import AttendanceRecord
from src.leo_portal.leo_portal.core.enums import AttendanceStatus, AttendanceType, TransactionType
from src.leo_portal.leo_portal.finance.model import FinanceSummary, Transaction
from src.leo_portal.leo_portal.reports import exporters

from tests.fakes import make_event, make_user


def _records():
    return [
        AttendanceRecord(
            attendance_id=1,
            event_id=1,
            attendance_type=AttendanceType.MEMBER,
            status=AttendanceStatus.PRESENT,
            marked_at=datetime(2026, 3, 14, 9, 5),
            user_id=7,
        ),
        AttendanceRecord(
            attendance_id=2,
            event_id=1,
            attendance_type=AttendanceType.VISITOR,
            status=AttendanceStatus.PRESENT,
            marked_at=datetime(2026, 3, 14, 9, 10),
            visitor_name="Kasun, Jr.",
            visitor_designation="Secretary",
            visitor_club="Leo Club of Kandy",
            visitor_comment="Came with \"friends\"",
        ),
    ]


def _attendance_rows():
    return exporters.attendance_rows(
        _records(),
        events_by_id={1: make_event(1, "Beach Cleanup")},
        users_by_id={7: make_user(7, "Nimal", designation="Director")},
    )


def test_attendance_rows_describe_members_and_visitors():
    member, visitor = _attendance_rows()

    assert member["attendee"] == "Nimal"
    assert member["designation"] == "Director"
    assert member["event_name"] == "Beach Cleanup"
    assert member["marked_at"] == "2026-03-14 09:05"
    assert visitor["type"] == "visitor"
    assert visitor["club"] == "Leo Club of Kandy"
    assert visitor["email"] == ""


def test_csv_has_header_plus_one_line_per_row_and_quotes_commas():
    data = exporters.to_csv_bytes(_attendance_rows(), exporters.ATTENDANCE_FIELDS)

    assert data.startswith(b"\xef\xbb\xbf")
    rows = list(csv.DictReader(io.StringIO(data.decode("utf-8-sig"))))
    assert len(rows) == 2
    assert list(rows[0]) == exporters.ATTENDANCE_FIELDS
    assert rows[1]["attendee"] == "Kasun, Jr."
    assert rows[1]["comment"] == 'Came with "friends"'


def test_empty_csv_is_header_only():
    data = exporters.to_csv_bytes([], exporters.MEMBER_FIELDS).decode("utf-8-sig")

    assert data.strip().split("\r\n") == [",".join(exporters.MEMBER_FIELDS)]


def test_xlsx_round_trips_through_pandas():
    data = exporters.to_xlsx_bytes(_attendance_rows(), exporters.ATTENDANCE_FIELDS, sheet_name="Attendance")

    df = pd.read_excel(io.BytesIO(data), sheet_name="Attendance")
    assert list(df.columns) == exporters.ATTENDANCE_FIELDS
    assert len(df) == 2


def test_transaction_rows_format_amounts():
    tx = Transaction(
        transaction_id=3,
        type=TransactionType.EXPENSE,
        tx_date=date(2026, 3, 2),
        amount=Decimal("1250.5"),
        category="supplies",
        source="Gloves",
    )

    (row,) = exporters.transaction_rows([tx])

    assert row["amount"] == "1250.50"
    assert row["type"] == "expense"
    assert row["notes"] == ""


def _pdf_text(data: bytes) -> str:
    return "\n".join(page.extract_text() or "" for page in PdfReader(io.BytesIO(data)).pages)


def test_attendance_pdf_has_one_line_per_record_across_pages():
    member, visitor = _attendance_rows()
    rows = [dict(member if i % 2 else visitor, attendee=f"Guest-{i:03d}") for i in range(120)]

    pdf = exporters.event_attendance_pdf(make_event(1), rows, generated_at=datetime(2026, 3, 14, 18, 0))

    assert pdf.startswith(b"%PDF")
    assert len(PdfReader(io.BytesIO(pdf)).pages) > 1
    text = _pdf_text(pdf)
    assert sorted(re.findall(r"Guest-\d{3}", text)) == [r["attendee"] for r in rows]
    assert re.search(r"Total: 120\s+Members: 60\s+Visitors: 60", text)


def test_finance_statement_pdf_lists_every_transaction():
    txs = [
        Transaction(
            transaction_id=i,
            type=TransactionType.INCOME,
            tx_date=date(2026, 3, 1 + i % 28),
            amount=Decimal("100"),
            category="donations",
            source=f"Donor-{i:03d}",
        )
        for i in range(75)
    ]
    summary = FinanceSummary(
        start=date(2026, 3, 1),
        end=date(2026, 3, 31),
        total_income=Decimal("7500"),
        total_expenses=Decimal("0"),
    )

    statement = exporters.finance_statement_pdf(summary, txs, generated_at=datetime(2026, 4, 1, 9, 0))

    assert sorted(re.findall(r"Donor-\d{3}", _pdf_text(statement))) == [t.source for t in txs]


def test_empty_finance_statement_says_so():
    summary = FinanceSummary(
        start=date(2026, 3, 1), end=date(2026, 3, 31), total_income=Decimal("0"), total_expenses=Decimal("0")
    )

    statement = exporters.finance_statement_pdf(summary, [], generated_at=datetime(2026, 4, 1, 9, 0))

    text = _pdf_text(statement)
    assert "No transactions in this period." in text
    assert re.findall(r"Donor-\d{3}", text) == []
