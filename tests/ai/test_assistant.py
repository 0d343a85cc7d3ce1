from __future__ import annotations

from datetime import datetime

import pytest

from src.leo_portal.leo_portal.ai.assistant import AssistantService
from src.leo_portal.leo_portal.ai.flows import answer_profile_question, answer_schedule_question, describe_events
from src.leo_portal.leo_portal.core.exceptions import IntegrationError, ValidationError
from src.leo_portal.leo_portal.events.service import EventService

from tests.fakes import CannedModel, InMemoryEvents, make_event


def _service(payload, events=()):
    model = CannedModel(payload)
    return AssistantService(EventService(InMemoryEvents(events)), model), model


def test_describe_events_lists_one_line_per_event():
    text = describe_events([make_event(1, "Beach Cleanup"), make_event(2, "Blood Drive", start_at=datetime(2026, 4, 2, 8))])

    assert text.splitlines() == [
        "Beach Cleanup on 2026-03-14 at Mount Lavinia. Description: Clean the beach with the district clubs",
        "Blood Drive on 2026-04-02 at Mount Lavinia. Description: Clean the beach with the district clubs",
    ]
    assert describe_events([]) == "No events are scheduled."


def test_schedule_question_sends_events_earliest_first():
    svc, model = _service(
        {"answer": "The blood drive is on 2 April."},
        events=[make_event(2, "Blood Drive", start_at=datetime(2026, 4, 2, 8)), make_event(1, "Beach Cleanup")],
    )

    answer = svc.ask(question="When is the blood drive?", context="schedule")

    assert answer == "The blood drive is on 2 April."
    prompt = model.prompts[0]
    assert "answers questions about the event schedule" in prompt
    assert prompt.index("Beach Cleanup on 2026-03-14") < prompt.index("Blood Drive on 2026-04-02")
    assert "Question: When is the blood drive?" in prompt


def test_profile_question_uses_profile_prompt():
    svc, model = _service({"answer": "Open the Profile page and edit your mobile number."})

    answer = svc.ask(question="  How do I change my phone number? ", context="Profile")

    assert answer.startswith("Open the Profile page")
    assert "update their profile" in model.prompts[0]
    assert "Question: How do I change my phone number?" in model.prompts[0]


@pytest.mark.parametrize(
    "question, context, message",
    [
        ("", "schedule", "Question is required"),
        ("   ", "profile", "Question is required"),
        ("When?", "finance", "Invalid query context"),
        ("When?", None, "Invalid query context"),
    ],
)
def test_ask_validation(question, context, message):
    svc, model = _service({"answer": "unused"})

    with pytest.raises(ValidationError, match=message):
        svc.ask(question=question, context=context)
    assert model.prompts == []


def test_plain_string_answer_is_accepted():
    assert answer_profile_question(CannedModel("  Ask an admin.  "), "Can I change my email?") == "Ask an admin."


@pytest.mark.parametrize("payload", [{}, {"answer": "  "}, ["no"], None])
def test_missing_answer_is_an_integration_error(payload):
    with pytest.raises(IntegrationError):
        answer_schedule_question(CannedModel(payload), "When?", [make_event(1)])
