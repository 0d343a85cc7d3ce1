from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..ai.flows import JsonModel, generate_project_proposal, normalize_proposal
from ..common.validators import require_min_length, require_non_empty
from ..core.enums import ProjectIdeaStatus, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..triggers import signals
from .model import AUTHOR_EDITABLE, REVIEW_OUTCOMES, ProjectIdea
from .repository import ProjectIdeaRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IdeaInput:
    project_name: str
    goal: str
    target_audience: str
    budget: str
    timeline: str
    special_considerations: Optional[str] = None


def _validated(data: IdeaInput) -> IdeaInput:
    return IdeaInput(
        project_name=require_min_length(data.project_name, "Project name", 3),
        goal=require_min_length(data.goal, "Goal", 10),
        target_audience=require_non_empty(data.target_audience, "Target audience"),
        budget=require_non_empty(data.budget, "Budget"),
        timeline=require_non_empty(data.timeline, "Timeline"),
        special_considerations=(data.special_considerations or "").strip() or None,
    )


class ProjectIdeaService:
    """Use case: AI-assisted proposals and the admin review workflow.

    Status flow::

        draft -> pending_review -> approved | declined | needs_revision
        needs_revision -> pending_review

    Authors may edit only while the idea is ``draft`` or ``needs_revision``.
    Only admins move an idea out of ``pending_review``.
    """

    def __init__(self, ideas: ProjectIdeaRepository, ai: JsonModel):
        self._ideas = ideas
        self._ai = ai

    def _get(self, idea_id: int) -> ProjectIdea:
        idea = self._ideas.get_by_id(idea_id)
        if not idea:
            raise NotFoundError("Project idea not found")
        return idea

    def get(self, *, user_id: int, current_role: Role, idea_id: int) -> ProjectIdea:
        idea = self._get(idea_id)
        if idea.author_id != user_id and not current_role.is_admin:
            raise AuthorizationError("You can only view your own project ideas")
        if idea.author_id != user_id and idea.status == ProjectIdeaStatus.DRAFT:
            raise AuthorizationError("This idea has not been submitted yet")
        return idea

    def generate_proposal(self, data: IdeaInput) -> dict:
        data = _validated(data)
        logger.info("Generating AI proposal for %r", data.project_name)
        return generate_project_proposal(
            self._ai,
            project_name=data.project_name,
            goal=data.goal,
            target_audience=data.target_audience,
            budget=data.budget,
            timeline=data.timeline,
            special_considerations=data.special_considerations or "",
        )

    def save_draft(
        self,
        *,
        author_id: int,
        author_name: str,
        data: IdeaInput,
        proposal: Optional[dict] = None,
        submit: bool = False,
    ) -> ProjectIdea:
        """Store a new idea. With ``submit`` it goes straight to review; nothing is stored if it cannot."""
        data = _validated(data)
        proposal = normalize_proposal(proposal) if proposal else None
        if submit and not proposal:
            raise ValidationError("Generate a proposal before submitting")

        idea_id = self._ideas.create(
            author_id=author_id,
            author_name=author_name,
            project_name=data.project_name,
            goal=data.goal,
            target_audience=data.target_audience,
            budget=data.budget,
            timeline=data.timeline,
            special_considerations=data.special_considerations,
            proposal=proposal,
            status=ProjectIdeaStatus.DRAFT,
        )
        if submit:
            return self.submit_for_review(user_id=author_id, idea_id=idea_id)
        return self._get(idea_id)

    def update_by_author(
        self, *, user_id: int, idea_id: int, data: IdeaInput, proposal: Optional[dict] = None
    ) -> ProjectIdea:
        idea = self._get(idea_id)
        if idea.author_id != user_id:
            raise AuthorizationError("Only the author can edit this idea")
        if idea.status not in AUTHOR_EDITABLE:
            raise ValidationError(f"An idea that is {idea.status.value} can no longer be edited")

        data = _validated(data)
        self._ideas.update_content(
            idea_id,
            project_name=data.project_name,
            goal=data.goal,
            target_audience=data.target_audience,
            budget=data.budget,
            timeline=data.timeline,
            special_considerations=data.special_considerations,
            proposal=normalize_proposal(proposal) if proposal else idea.proposal,
        )
        return self._get(idea_id)

    def submit_for_review(self, *, user_id: int, idea_id: int) -> ProjectIdea:
        idea = self._get(idea_id)
        if idea.author_id != user_id:
            raise AuthorizationError("Only the author can submit this idea")
        if idea.status not in AUTHOR_EDITABLE:
            raise ValidationError(f"An idea that is {idea.status.value} cannot be submitted")
        if not idea.proposal:
            raise ValidationError("Generate a proposal before submitting")

        self._ideas.set_status(idea_id, ProjectIdeaStatus.PENDING_REVIEW)
        submitted = self._get(idea_id)
        logger.info("Project idea %s submitted for review", idea_id)
        signals.project_idea_submitted.send(self, idea=submitted)
        return submitted

    def review(
        self,
        *,
        current_role: Role,
        reviewer_id: int,
        idea_id: int,
        decision: ProjectIdeaStatus,
        comment: Optional[str] = None,
    ) -> ProjectIdea:
        if not current_role.is_admin:
            raise AuthorizationError("Only admins can review project ideas")
        if decision not in REVIEW_OUTCOMES:
            raise ValidationError("Decision must be approved, declined or needs_revision")

        idea = self._get(idea_id)
        if idea.status != ProjectIdeaStatus.PENDING_REVIEW:
            raise ValidationError("Only ideas pending review can be reviewed")

        comment = (comment or "").strip() or None
        if decision == ProjectIdeaStatus.NEEDS_REVISION and not comment:
            raise ValidationError("Tell the author what to revise")

        self._ideas.set_status(idea_id, decision, admin_comment=comment, reviewed_by=reviewer_id)
        logger.info("Project idea %s reviewed: %s", idea_id, decision.value)
        return self._get(idea_id)

    def delete(self, *, user_id: int, current_role: Role, idea_id: int) -> None:
        idea = self._get(idea_id)
        own_draft = idea.author_id == user_id and idea.status == ProjectIdeaStatus.DRAFT
        if not (current_role.is_admin or own_draft):
            raise AuthorizationError("Only drafts can be deleted by their author")
        self._ideas.delete_by_id(idea_id)

    def list_for_author(self, author_id: int):
        return self._ideas.list_for_author(author_id)

    def list_for_review(self, *, current_role: Role):
        if not current_role.is_admin:
            raise AuthorizationError("Only admins can review project ideas")
        return self._ideas.list_submitted()
