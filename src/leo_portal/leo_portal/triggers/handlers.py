"""Side effects that run after domain writes.

Each receiver is connected for one specific service instance, so two apps
built in the same process (tests) never hear each other's signals. A failing
side effect is logged; it never undoes or fails the write that fired it.
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import Callable, List, Tuple

from ..communication import emails
from . import signals

logger = logging.getLogger(__name__)


def _isolated(handler: Callable) -> Callable:
    @wraps(handler)
    def wrapper(*args, **kwargs):
        try:
            handler(*args, **kwargs)
        except Exception:
            logger.exception("Trigger %s failed", handler.__name__)

    return wrapper


class TriggerHandlers:
    def __init__(self, container):
        self._c = container

    def _portal_url(self) -> str:
        return self._c.settings.get("PORTAL_BASE_URL", "http://localhost:5000")

    @_isolated
    def on_user_approved(self, sender, *, user, **_):
        self._c.push.send(
            tokens=[user.fcm_token] if user.fcm_token else [],
            title="Welcome to the club!",
            body="Your membership has been approved. You can now sign in.",
            data={"type": "user_approved"},
        )
        subject, html = emails.welcome_message(user.name, self._portal_url())
        self._c.mailer.send(to=[user.email], subject=subject, html=html)

    @_isolated
    def on_user_rejected(self, sender, *, user, **_):
        subject, html = emails.rejection_message(user.name)
        self._c.mailer.send(to=[user.email], subject=subject, html=html)

    @_isolated
    def on_event_created(self, sender, *, event, **_):
        tokens = [u.fcm_token for u in self._c.user_service.list_approved() if u.fcm_token]
        sent = self._c.push.send(
            tokens=tokens,
            title=f"New event: {event.name}",
            body=f"{event.start_at:%d %b %Y %H:%M} at {event.location}",
            data={"type": "event_created", "event_id": str(event.event_id)},
        )
        logger.info("Event %s announced to %d device(s)", event.event_id, sent)

    @_isolated
    def on_project_idea_submitted(self, sender, *, idea, **_):
        admins = [a.email for a in self._c.user_service.list_admins()]
        if not admins:
            logger.warning("No admins to notify about idea_id=%s", idea.idea_id)
            return
        subject, html = emails.idea_submitted_message(idea.project_name, idea.author_name)
        self._c.mailer.send(to=admins, subject=subject, html=html)

    @_isolated
    def on_attendance_created(self, sender, *, record, event, **_):
        self._c.points_service.award_for_attendance(record, event)

    @_isolated
    def on_user_changed(self, sender, *, user, **_):
        self._c.user_sheet.upsert_user(user)

    @_isolated
    def on_user_deleted(self, sender, *, user_id, **_):
        self._c.user_sheet.delete_user(user_id)

    def subscriptions(self) -> List[Tuple[object, Callable, object]]:
        c = self._c
        return [
            (signals.user_approved, self.on_user_approved, c.user_service),
            (signals.user_rejected, self.on_user_rejected, c.user_service),
            (signals.user_changed, self.on_user_changed, c.user_service),
            (signals.user_changed, self.on_user_changed, c.auth_service),
            (signals.user_deleted, self.on_user_deleted, c.user_service),
            (signals.event_created, self.on_event_created, c.event_service),
            (signals.project_idea_submitted, self.on_project_idea_submitted, c.project_idea_service),
            (signals.attendance_created, self.on_attendance_created, c.attendance_service),
        ]


def connect_handlers(container) -> TriggerHandlers:
    handlers = TriggerHandlers(container)
    for signal, receiver, sender in handlers.subscriptions():
        signal.connect(receiver, sender=sender, weak=False)
    return handlers


def disconnect_handlers(handlers: TriggerHandlers) -> None:
    for signal, receiver, sender in handlers.subscriptions():
        signal.disconnect(receiver, sender=sender)
