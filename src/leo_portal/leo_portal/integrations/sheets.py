from __future__ import annotations

import logging
from typing import List, Optional, Protocol

import gspread

from ..users.model import User

logger = logging.getLogger(__name__)

SHEET_HEADER = [
    "User ID",
    "Name",
    "Email",
    "Designation",
    "NIC",
    "Date of Birth",
    "Gender",
    "Mobile",
    "Role",
    "Status",
    "Created At",
]

_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


def user_to_row(user: User) -> List[str]:
    return [
        str(user.user_id),
        user.name,
        user.email,
        user.designation or "",
        user.nic or "",
        user.date_of_birth.isoformat() if user.date_of_birth else "",
        user.gender or "",
        user.mobile_number or "",
        user.role.value,
        user.status.value,
        user.created_at.isoformat(sep=" ", timespec="seconds") if user.created_at else "",
    ]


class UserSheet(Protocol):
    def upsert_user(self, user: User) -> None:
        raise NotImplementedError

    def delete_user(self, user_id: int) -> None:
        raise NotImplementedError


class GoogleUserSheet:
    """Mirrors user records into a Google Sheet, one row per user keyed by column A."""

    def __init__(
        self,
        *,
        sheet_id: Optional[str],
        client_email: Optional[str],
        private_key: Optional[str],
        worksheet: str = "Users",
    ):
        self._sheet_id = sheet_id
        self._client_email = client_email
        # Keys pasted into env vars usually carry literal "\n".
        self._private_key = (private_key or "").replace("\\n", "\n")
        self._worksheet_name = worksheet
        self._worksheet = None

    @property
    def configured(self) -> bool:
        return bool(self._sheet_id and self._client_email and self._private_key)

    def _get_worksheet(self):
        if self._worksheet is not None:
            return self._worksheet

        client = gspread.service_account_from_dict(
            {
                "type": "service_account",
                "client_email": self._client_email,
                "private_key": self._private_key,
                "token_uri": "https://oauth2.googleapis.com/token",
            },
            scopes=_SCOPES,
        )
        spreadsheet = client.open_by_key(self._sheet_id)
        try:
            ws = spreadsheet.worksheet(self._worksheet_name)
        except gspread.exceptions.WorksheetNotFound:
            ws = spreadsheet.add_worksheet(title=self._worksheet_name, rows=1000, cols=len(SHEET_HEADER))
        if ws.row_values(1) != SHEET_HEADER:
            ws.update(range_name="A1", values=[SHEET_HEADER])
        self._worksheet = ws
        return ws

    def _find_row(self, ws, user_id: int) -> Optional[int]:
        cell = ws.find(str(user_id), in_column=1)
        return cell.row if cell and cell.row > 1 else None

    def upsert_user(self, user: User) -> None:
        if not self.configured:
            logger.debug("Sheet mirror not configured; skipped user_id=%s", user.user_id)
            return
        ws = self._get_worksheet()
        row = self._find_row(ws, user.user_id)
        if row:
            ws.update(range_name=f"A{row}", values=[user_to_row(user)])
        else:
            ws.append_row(user_to_row(user), value_input_option="RAW")
        logger.info("Sheet mirror updated for user_id=%s", user.user_id)

    def delete_user(self, user_id: int) -> None:
        if not self.configured:
            return
        ws = self._get_worksheet()
        row = self._find_row(ws, user_id)
        if row:
            ws.delete_rows(row)
            logger.info("Sheet mirror row removed for user_id=%s", user_id)
