from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence

from ..ai.flows import JsonModel, generate_communication
from ..common.validators import is_valid_email, require_min_length, require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError
from ..groups.service import GroupService
from ..integrations.mail import Mailer
from ..users.service import UserService
from . import emails

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BulkEmailResult:
    sent: int
    failed: int

    @property
    def success(self) -> bool:
        return self.sent > 0

    @property
    def message(self) -> str:
        if not self.failed:
            return f"Email sent to {self.sent} recipient(s)"
        return f"Email sent to {self.sent} recipient(s), {self.failed} failed"

    def to_dict(self) -> dict:
        return {"success": self.success, "message": self.message, "sent": self.sent, "failed": self.failed}


class CommunicationService:
    """Use case: admin bulk email plus AI-drafted announcements."""

    def __init__(self, *, mailer: Mailer, users: UserService, groups: GroupService, ai: JsonModel):
        self._mailer = mailer
        self._users = users
        self._groups = groups
        self._ai = ai

    def resolve_recipients(self, *, recipients: Sequence[str] = (), group_ids: Sequence[int] = ()) -> List[str]:
        """Explicit addresses plus the emails of every member of the given groups, deduplicated."""
        addresses: List[str] = []
        for raw in recipients:
            email = (raw or "").strip()
            if not email:
                continue
            if not is_valid_email(email):
                raise ValidationError(f"Invalid email address: {email}")
            addresses.append(email.lower())

        if group_ids:
            member_ids = self._groups.member_ids_for(group_ids)
            addresses.extend(u.email.lower() for u in self._users.list_by_ids(member_ids) if u.email)

        return list(dict.fromkeys(addresses))

    def send_bulk_email(
        self,
        *,
        current_role: Role,
        subject: str,
        body: str,
        recipients: Sequence[str] = (),
        group_ids: Sequence[int] = (),
    ) -> BulkEmailResult:
        if not current_role.is_admin:
            raise AuthorizationError("Only admins can send bulk email")

        subject = require_non_empty(subject, "Subject")
        body = require_non_empty(body, "Message")
        to = self.resolve_recipients(recipients=recipients, group_ids=group_ids)
        if not to:
            raise ValidationError("At least one recipient is required")

        html = emails.bulk_message(subject, body)
        sent = failed = 0
        # One message per recipient so addresses are not disclosed to each other.
        for address in to:
            if self._mailer.send(to=[address], subject=subject, html=html, text=body):
                sent += 1
            else:
                failed += 1

        logger.info("Bulk email %r: sent=%d failed=%d", subject, sent, failed)
        return BulkEmailResult(sent=sent, failed=failed)

    def draft(self, *, current_role: Role, topic: str) -> Dict[str, str]:
        if not current_role.is_admin:
            raise AuthorizationError("Only admins can draft announcements")
        return generate_communication(self._ai, require_min_length(topic, "Topic", 3))
