"""Recurring club jobs and the APScheduler wiring that runs them.

The job bodies are plain methods on ``ClubJobs`` so they can be called
directly from tests or a one-off script; ``build_scheduler`` wraps each in
an application context (Flask-Mail needs one) and registers the cron rules.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger
from flask import Flask

from ..common.datetime_utils import month_bounds, now_local, previous_month
from ..communication import emails
from ..core.constants import DEFAULT_TIMEZONE

logger = logging.getLogger(__name__)


class ClubJobs:
    def __init__(self, container):
        self._c = container

    def monthly_report(self, today: Optional[date] = None) -> bool:
        """Email admins last month's income, expenses, net and attendance count."""
        today = today or now_local().date()
        year, month = previous_month(today)
        start, end = month_bounds(year, month)

        # month_bounds is half-open; summarize takes an inclusive end date.
        summary = self._c.finance_service.summarize(start=start.date(), end=(end - timedelta(days=1)).date())
        attendance_count = len(self._c.attendance_service.records_between(start, end))
        period = datetime(year, month, 1).strftime("%B %Y")

        admins = [a.email for a in self._c.user_service.list_admins()]
        if not admins:
            logger.warning("Monthly report for %s skipped: no admins", period)
            return False

        subject, html = emails.monthly_report_message(
            period, float(summary.total_income), float(summary.total_expenses), attendance_count
        )
        ok = self._c.mailer.send(to=admins, subject=subject, html=html)
        logger.info("Monthly report for %s sent=%s", period, ok)
        return ok

    def fee_reminders(self) -> int:
        members = self._c.user_service.members_with_pending_fees()
        tokens = [m.fcm_token for m in members if m.fcm_token]
        sent = self._c.push.send(
            tokens=tokens,
            title="Membership fee reminder",
            body="Your membership fee is still pending. Please settle it with the treasurer.",
            data={"type": "fee_reminder"},
        )
        logger.info("Fee reminders: %d pending member(s), %d push(es) delivered", len(members), sent)
        return sent

    def birthday_greetings(self, today: Optional[date] = None) -> int:
        today = today or now_local().date()
        sent = 0
        for member in self._c.user_service.members_with_birthday(today):
            subject, html = emails.birthday_message(member.name)
            if self._c.mailer.send(to=[member.email], subject=subject, html=html):
                sent += 1
        logger.info("Birthday greetings sent: %d", sent)
        return sent

    def flush_offline(self) -> int:
        flushed = self._c.attendance_service.flush_offline_queue()
        if flushed:
            logger.info("Flushed %d offline attendance record(s)", flushed)
        return flushed


def _in_app_context(app: Flask, func):
    def run():
        with app.app_context():
            try:
                func()
            except Exception:
                logger.exception("Scheduled job %s failed", func.__name__)

    run.__name__ = func.__name__
    return run


def build_scheduler(app: Flask, container, *, blocking: bool = False):
    tz = app.config.get("SCHEDULER_TIMEZONE", DEFAULT_TIMEZONE)
    scheduler = BlockingScheduler(timezone=tz) if blocking else BackgroundScheduler(timezone=tz)
    jobs = ClubJobs(container)

    scheduler.add_job(
        _in_app_context(app, jobs.monthly_report),
        CronTrigger(day=1, hour=9, minute=0, timezone=tz),
        id="monthly-report",
        replace_existing=True,
    )
    scheduler.add_job(
        _in_app_context(app, jobs.fee_reminders),
        CronTrigger(day_of_week="mon", hour=9, minute=0, timezone=tz),
        id="weekly-fee-reminders",
        replace_existing=True,
    )
    scheduler.add_job(
        _in_app_context(app, jobs.birthday_greetings),
        CronTrigger(hour=8, minute=0, timezone=tz),
        id="daily-birthday-greetings",
        replace_existing=True,
    )
    scheduler.add_job(
        _in_app_context(app, jobs.flush_offline),
        CronTrigger(minute="*/15", timezone=tz),
        id="offline-attendance-flush",
        replace_existing=True,
    )
    return scheduler
