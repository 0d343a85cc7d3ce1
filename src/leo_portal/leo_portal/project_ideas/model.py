from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import ProjectIdeaStatus

AUTHOR_EDITABLE = frozenset({ProjectIdeaStatus.DRAFT, ProjectIdeaStatus.NEEDS_REVISION})
REVIEW_OUTCOMES = frozenset(
    {ProjectIdeaStatus.APPROVED, ProjectIdeaStatus.DECLINED, ProjectIdeaStatus.NEEDS_REVISION}
)


@dataclass(frozen=True)
class ProjectIdea:
    """A member-authored project proposal moving through admin review."""

    idea_id: int
    author_id: int
    author_name: str
    project_name: str
    goal: str
    target_audience: str
    budget: str
    timeline: str
    status: ProjectIdeaStatus
    special_considerations: Optional[str] = None
    proposal: Optional[dict] = None
    admin_comment: Optional[str] = None
    reviewed_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def editable_by_author(self) -> bool:
        return self.status in AUTHOR_EDITABLE

    def to_dict(self) -> dict:
        return {
            "idea_id": self.idea_id,
            "author_id": self.author_id,
            "author_name": self.author_name,
            "project_name": self.project_name,
            "goal": self.goal,
            "target_audience": self.target_audience,
            "budget": self.budget,
            "timeline": self.timeline,
            "special_considerations": self.special_considerations,
            "proposal": self.proposal,
            "status": self.status.value,
            "admin_comment": self.admin_comment,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
