from __future__ import annotations

import logging
from typing import Dict, Optional, Protocol, Sequence

import firebase_admin
from firebase_admin import credentials, messaging

logger = logging.getLogger(__name__)


class PushSender(Protocol):
    def send(self, *, tokens: Sequence[str], title: str, body: str, data: Optional[Dict[str, str]] = None) -> int:
        raise NotImplementedError


class FirebasePushSender:
    """Firebase Cloud Messaging; the Firebase app is created on first use."""

    def __init__(self, credentials_path: Optional[str]):
        self._credentials_path = credentials_path
        self._app = None

    @property
    def configured(self) -> bool:
        return bool(self._credentials_path)

    def _get_app(self):
        if self._app is None:
            try:
                self._app = firebase_admin.get_app()
            except ValueError:
                cred = credentials.Certificate(self._credentials_path)
                self._app = firebase_admin.initialize_app(cred)
        return self._app

    def send(self, *, tokens: Sequence[str], title: str, body: str, data: Optional[Dict[str, str]] = None) -> int:
        tokens = [t for t in tokens if t]
        if not tokens:
            return 0
        if not self.configured:
            logger.info("Push disabled; skipped %r to %d device(s)", title, len(tokens))
            return 0

        message = messaging.MulticastMessage(
            tokens=tokens,
            notification=messaging.Notification(title=title, body=body),
            data={k: str(v) for k, v in (data or {}).items()},
        )
        try:
            response = messaging.send_each_for_multicast(message, app=self._get_app())
        except Exception:
            logger.exception("Push send failed: %r", title)
            return 0

        if response.failure_count:
            logger.warning("Push %r: %d of %d failed", title, response.failure_count, len(tokens))
        return int(response.success_count)
