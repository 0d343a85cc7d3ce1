"""Prompt flows: club-specific prompts plus normalisation of the model's JSON."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Protocol

from ..core.exceptions import IntegrationError


class JsonModel(Protocol):
    def generate_json(self, prompt: str) -> Any:
        raise NotImplementedError


PROPOSAL_LIST_FIELDS = (
    "implementation_challenges",
    "challenge_solutions",
    "community_involvement",
    "resource_personals",
)

_PROPOSAL_PROMPT = """You are an experienced Leo club project coordinator.
Write a complete community service project proposal as JSON with exactly these keys:
project_idea (string, a short paragraph),
proposed_action_plan (object with objective (string), pre_event_plan, execution_plan, post_event_plan (lists of strings)),
implementation_challenges (list of strings), challenge_solutions (list of strings),
community_involvement (list of strings),
pr_plan (list of objects with activity, date, time),
estimated_expenses (list of objects with item and cost),
resource_personals (list of strings).

Project name: {project_name}
Goal: {goal}
Target audience: {target_audience}
Budget: {budget}
Timeline: {timeline}
Special considerations: {special_considerations}
"""

_COMMUNICATION_PROMPT = """You write announcements for a Leo club (youth community service club).
Write a friendly, concise email to club members about the topic below.
Respond as JSON with keys "subject" (string) and "body" (plain text, paragraphs separated by blank lines).

Topic: {topic}
"""

_SCHEDULE_PROMPT = """You are an AI assistant that answers questions about the event schedule.
Use the following information about upcoming events to answer the question.
Respond as JSON with a single key "answer" (string).

Events:
{events}

Question: {question}
"""

_PROFILE_PROMPT = """You are a helpful AI assistant. A member will ask you a question about how to update their profile on the club portal.
Members change their name, NIC, date of birth, gender and mobile number on the Profile page.
Email, role and designation can only be changed by a club admin.
Answer in a concise and easy-to-understand manner.
Respond as JSON with a single key "answer" (string).

Question: {question}
"""


def _str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    return [str(v).strip() for v in value if str(v).strip()]


def _obj_list(value: Any, keys: tuple) -> List[Dict[str, str]]:
    if not isinstance(value, list):
        return []
    out = []
    for item in value:
        if isinstance(item, dict):
            out.append({k: str(item.get(k, "")).strip() for k in keys})
    return out


def normalize_proposal(raw: Any) -> dict:
    """Coerce model output into the proposal shape the portal stores."""
    if not isinstance(raw, dict):
        raise IntegrationError("The AI proposal was not in the expected format")

    plan = raw.get("proposed_action_plan") or {}
    if not isinstance(plan, dict):
        plan = {}

    proposal = {
        "project_idea": str(raw.get("project_idea") or "").strip(),
        "proposed_action_plan": {
            "objective": str(plan.get("objective") or "").strip(),
            "pre_event_plan": _str_list(plan.get("pre_event_plan")),
            "execution_plan": _str_list(plan.get("execution_plan")),
            "post_event_plan": _str_list(plan.get("post_event_plan")),
        },
        "pr_plan": _obj_list(raw.get("pr_plan"), ("activity", "date", "time")),
        "estimated_expenses": _obj_list(raw.get("estimated_expenses"), ("item", "cost")),
    }
    for key in PROPOSAL_LIST_FIELDS:
        proposal[key] = _str_list(raw.get(key))

    if not proposal["project_idea"]:
        raise IntegrationError("The AI proposal was empty, please try again")
    return proposal


def generate_project_proposal(model: JsonModel, **fields: str) -> dict:
    prompt = _PROPOSAL_PROMPT.format(
        project_name=fields.get("project_name", ""),
        goal=fields.get("goal", ""),
        target_audience=fields.get("target_audience", ""),
        budget=fields.get("budget", ""),
        timeline=fields.get("timeline", ""),
        special_considerations=fields.get("special_considerations") or "None",
    )
    return normalize_proposal(model.generate_json(prompt))


def generate_communication(model: JsonModel, topic: str) -> dict:
    raw = model.generate_json(_COMMUNICATION_PROMPT.format(topic=topic.strip()))
    if not isinstance(raw, dict) or not raw.get("subject") or not raw.get("body"):
        raise IntegrationError("The AI draft was incomplete, please try again")
    return {"subject": str(raw["subject"]).strip(), "body": str(raw["body"]).strip()}


def describe_events(events: Iterable) -> str:
    """One line per event, the way the schedule prompt expects them."""
    lines = [
        f"{e.name} on {e.start_at:%Y-%m-%d} at {e.location}. Description: {e.description}" for e in events
    ]
    return "\n".join(lines) or "No events are scheduled."


def _answer(raw: Any) -> str:
    if isinstance(raw, dict):
        raw = raw.get("answer")
    answer = raw.strip() if isinstance(raw, str) else ""
    if not answer:
        raise IntegrationError("The AI assistant did not return an answer, please try again")
    return answer


def answer_schedule_question(model: JsonModel, question: str, events: Iterable) -> str:
    prompt = _SCHEDULE_PROMPT.format(events=describe_events(events), question=question.strip())
    return _answer(model.generate_json(prompt))


def answer_profile_question(model: JsonModel, question: str) -> str:
    return _answer(model.generate_json(_PROFILE_PROMPT.format(question=question.strip())))
