from __future__ import annotations

import logging
from typing import Optional, Protocol, Sequence

from flask_mail import Mail, Message

logger = logging.getLogger(__name__)


class Mailer(Protocol):
    def send(self, *, to: Sequence[str], subject: str, html: str, text: Optional[str] = None) -> bool:
        raise NotImplementedError


class FlaskMailer:
    """Sends through Flask-Mail. Needs an application context."""

    def __init__(self, mail: Mail, *, enabled: bool = True):
        self._mail = mail
        self._enabled = enabled

    def send(self, *, to: Sequence[str], subject: str, html: str, text: Optional[str] = None) -> bool:
        recipients = [r for r in to if r]
        if not recipients:
            return False
        if not self._enabled:
            logger.info("Mail disabled; skipped %r to %d recipient(s)", subject, len(recipients))
            return False

        msg = Message(subject, recipients=recipients, html=html, body=text)
        try:
            self._mail.send(msg)
            return True
        except Exception:
            logger.exception("Email send failed: %r", subject)
            return False
