from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import ProjectIdeaStatus
from .model import ProjectIdea


class ProjectIdeaRepository(Protocol):
    def get_by_id(self, idea_id: int) -> Optional[ProjectIdea]:
        raise NotImplementedError

    def create(
        self,
        *,
        author_id: int,
        author_name: str,
        project_name: str,
        goal: str,
        target_audience: str,
        budget: str,
        timeline: str,
        special_considerations: Optional[str],
        proposal: Optional[dict],
        status: ProjectIdeaStatus,
    ) -> int:
        raise NotImplementedError

    def update_content(
        self,
        idea_id: int,
        *,
        project_name: str,
        goal: str,
        target_audience: str,
        budget: str,
        timeline: str,
        special_considerations: Optional[str],
        proposal: Optional[dict],
    ) -> bool:
        raise NotImplementedError

    def set_status(
        self,
        idea_id: int,
        status: ProjectIdeaStatus,
        *,
        admin_comment: Optional[str] = None,
        reviewed_by: Optional[int] = None,
    ) -> bool:
        raise NotImplementedError

    def list_for_author(self, author_id: int) -> Sequence[ProjectIdea]:
        raise NotImplementedError

    def list_submitted(self) -> Sequence[ProjectIdea]:
        """Every idea that has left draft."""

        raise NotImplementedError

    def delete_by_id(self, idea_id: int) -> bool:
        raise NotImplementedError
