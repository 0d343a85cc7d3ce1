"""HTML bodies for outgoing club email.

Every message goes through ``wrap_html`` so members see the same header and
footer no matter which job or handler sent it.
"""

from __future__ import annotations

from typing import Iterable, Tuple

from markupsafe import escape

CLUB_NAME = "LEO Club Portal"

_WRAPPER = """<!DOCTYPE html>
<html>
<body style="margin:0;padding:0;background:#f4f6fb;font-family:Arial,Helvetica,sans-serif;color:#1f2937;">
  <table width="100%" cellpadding="0" cellspacing="0" style="padding:24px 0;">
    <tr><td align="center">
      <table width="600" cellpadding="0" cellspacing="0" style="background:#ffffff;border-radius:8px;overflow:hidden;">
        <tr><td style="background:#1e3a8a;color:#ffffff;padding:18px 24px;font-size:20px;font-weight:bold;">{club}</td></tr>
        <tr><td style="padding:24px;">
          <h2 style="margin-top:0;color:#1e3a8a;">{title}</h2>
          {content}
        </td></tr>
        <tr><td style="background:#f9fafb;color:#6b7280;padding:12px 24px;font-size:12px;">
          You are receiving this email as a member of the {club}.
        </td></tr>
      </table>
    </td></tr>
  </table>
</body>
</html>"""


def text_to_html(body: str) -> str:
    """Plain text paragraphs (blank-line separated) to escaped <p> blocks."""
    paragraphs = [p.strip() for p in body.replace("\r\n", "\n").split("\n\n") if p.strip()]
    return "".join(
        '<p style="line-height:1.5;">{}</p>'.format(escape(p).replace("\n", "<br>")) for p in paragraphs
    )


def wrap_html(title: str, content_html: str) -> str:
    return _WRAPPER.format(club=CLUB_NAME, title=escape(title), content=content_html)


def _table(rows: Iterable[Tuple[str, str]]) -> str:
    cells = "".join(
        '<tr><td style="padding:6px 12px;border-bottom:1px solid #e5e7eb;">{}</td>'
        '<td style="padding:6px 12px;border-bottom:1px solid #e5e7eb;text-align:right;"><b>{}</b></td></tr>'.format(
            escape(label), escape(value)
        )
        for label, value in rows
    )
    return f'<table cellpadding="0" cellspacing="0" style="width:100%;border-collapse:collapse;">{cells}</table>'


def bulk_message(subject: str, body: str) -> str:
    return wrap_html(subject, text_to_html(body))


def welcome_message(name: str, portal_url: str) -> Tuple[str, str]:
    subject = "Welcome to the LEO Club Portal"
    content = text_to_html(
        f"Hi {name},\n\nYour membership has been approved. You can now sign in, "
        "check in to events and track your points."
    ) + f'<p><a href="{escape(portal_url)}" style="color:#1e3a8a;">Open the portal</a></p>'
    return subject, wrap_html(subject, content)


def rejection_message(name: str) -> Tuple[str, str]:
    subject = "Your LEO Club Portal registration"
    content = text_to_html(
        f"Hi {name},\n\nThank you for your interest. Unfortunately we could not approve "
        "your registration at this time. Please contact a club officer if you think this is a mistake."
    )
    return subject, wrap_html(subject, content)


def idea_submitted_message(idea_title: str, author_name: str) -> Tuple[str, str]:
    subject = f"New project idea for review: {idea_title}"
    content = text_to_html(
        f"{author_name} submitted the project idea \"{idea_title}\" for review.\n\n"
        "Open the admin project ideas page to approve, decline or request changes."
    )
    return subject, wrap_html(subject, content)


def birthday_message(name: str) -> Tuple[str, str]:
    subject = f"Happy Birthday, {name}!"
    content = text_to_html(
        f"Dear {name},\n\nEveryone at the club wishes you a wonderful birthday. "
        "Thank you for everything you do for our community!"
    )
    return subject, wrap_html(subject, content)


def monthly_report_message(period: str, income: float, expenses: float, attendance_count: int) -> Tuple[str, str]:
    subject = f"Monthly club report: {period}"
    content = text_to_html(f"Here is the club summary for {period}.") + _table(
        [
            ("Total income", f"{income:,.2f}"),
            ("Total expenses", f"{expenses:,.2f}"),
            ("Net balance", f"{income - expenses:,.2f}"),
            ("Attendance check-ins", str(attendance_count)),
        ]
    )
    return subject, wrap_html(subject, content)


def password_reset_message(name: str, reset_url: str, valid_minutes: int) -> Tuple[str, str]:
    subject = "Reset your LEO Club Portal password"
    content = text_to_html(
        f"Hi {name},\n\nWe received a request to reset your password. "
        f"The link below works once and expires in {valid_minutes} minutes.\n\n"
        "If you did not ask for this, you can ignore this email."
    ) + f'<p><a href="{escape(reset_url)}" style="color:#1e3a8a;">Choose a new password</a></p>'
    return subject, wrap_html(subject, content)
