from __future__ import annotations

import logging

from ..common.validators import require_non_empty
from ..core.enums import AssistantTopic
from ..core.exceptions import ValidationError
from ..events.service import EventService
from . import flows
from .flows import JsonModel

logger = logging.getLogger(__name__)


class AssistantService:
    """Use case: the dashboard assistant answering schedule and profile questions."""

    def __init__(self, events: EventService, ai: JsonModel):
        self._events = events
        self._ai = ai

    def ask(self, *, question: str, context: str) -> str:
        question = require_non_empty(question or "", "Question")
        try:
            topic = AssistantTopic(str(context or "").strip().lower())
        except ValueError:
            raise ValidationError("Invalid query context") from None

        if topic == AssistantTopic.SCHEDULE:
            events = sorted(self._events.list_events(), key=lambda e: e.start_at)
            answer = flows.answer_schedule_question(self._ai, question, events)
        else:
            answer = flows.answer_profile_question(self._ai, question)

        logger.info("Assistant answered a %s question", topic.value)
        return answer
