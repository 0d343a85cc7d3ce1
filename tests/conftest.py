from __future__ import annotations

from datetime import datetime
from types import SimpleNamespace

import pytest

from src.leo_portal.leo_portal.attendance.offline_queue import OfflineAttendanceQueue
from src.leo_portal.leo_portal.container import Integrations, Repositories, wire
from src.leo_portal.leo_portal.documents.storage import LocalDocumentStorage
from src.leo_portal.leo_portal.triggers.handlers import connect_handlers, disconnect_handlers

from tests.fakes import (
    SAMPLE_PROPOSAL,
    CannedModel,
    InMemoryAttendance,
    InMemoryDocuments,
    InMemoryEvents,
    InMemoryGroups,
    InMemoryPoints,
    InMemoryProjectIdeas,
    InMemoryResetTokens,
    InMemoryTasks,
    InMemoryTransactions,
    InMemoryUsers,
    RecordingMailer,
    RecordingPush,
    RecordingSheet,
)


@pytest.fixture
def fixed_now():
    return datetime(2026, 3, 14, 10, 30)


@pytest.fixture
def offline_queue(tmp_path, fixed_now):
    return OfflineAttendanceQueue(tmp_path / "offline_attendance.json", clock=lambda: fixed_now)


@pytest.fixture
def portal(tmp_path, offline_queue):
    """Every service wired to in-memory stores and recording integrations."""
    repos = Repositories(
        users=InMemoryUsers(),
        reset_tokens=InMemoryResetTokens(),
        events=InMemoryEvents(),
        attendance=InMemoryAttendance(),
        points=InMemoryPoints(),
        transactions=InMemoryTransactions(),
        project_ideas=InMemoryProjectIdeas(),
        tasks=InMemoryTasks(),
        documents=InMemoryDocuments(),
        groups=InMemoryGroups(),
    )
    integrations = Integrations(
        mailer=RecordingMailer(),
        push=RecordingPush(),
        user_sheet=RecordingSheet(),
        ai=CannedModel(SAMPLE_PROPOSAL),
        offline_queue=offline_queue,
        storage=LocalDocumentStorage(tmp_path / "uploads"),
    )
    settings = {
        "TESTING": True,
        "PORTAL_BASE_URL": "http://portal.test",
        "ATTENDANCE_RADIUS_METERS": 500,
        "SCHEDULER_TIMEZONE": "Asia/Colombo",
    }
    container = wire(settings=settings, repos=repos, integrations=integrations)
    return SimpleNamespace(container=container, repos=repos, integrations=integrations, settings=settings)


@pytest.fixture
def wired_portal(portal):
    """``portal`` with the signal handlers connected for the duration of the test."""
    handlers = connect_handlers(portal.container)
    yield portal
    disconnect_handlers(handlers)
