from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import CommunicationGroup


class GroupRepository(Protocol):
    def get_by_id(self, group_id: int) -> Optional[CommunicationGroup]:
        raise NotImplementedError

    def list_all(self) -> Sequence[CommunicationGroup]:
        """Ordered by name."""

        raise NotImplementedError

    def create(self, *, name: str, member_ids: Sequence[int]) -> int:
        raise NotImplementedError

    def update(self, group_id: int, *, name: str, member_ids: Sequence[int]) -> bool:
        raise NotImplementedError

    def delete_by_id(self, group_id: int) -> bool:
        raise NotImplementedError
