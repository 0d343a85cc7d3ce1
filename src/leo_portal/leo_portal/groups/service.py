from __future__ import annotations

from typing import Iterable, List, Sequence

from ..common.validators import require_min_length
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError
from .model import CommunicationGroup
from .repository import GroupRepository


def _unique(ids: Iterable[int]) -> List[int]:
    seen: List[int] = []
    for i in ids:
        i = int(i)
        if i not in seen:
            seen.append(i)
    return seen


class GroupService:
    """Use case: admin-managed communication groups."""

    def __init__(self, groups: GroupRepository):
        self._groups = groups

    @staticmethod
    def _require_admin(role: Role) -> None:
        if not role.is_admin:
            raise AuthorizationError("Only admins can manage groups")

    def get(self, group_id: int) -> CommunicationGroup:
        group = self._groups.get_by_id(group_id)
        if not group:
            raise NotFoundError("Group not found")
        return group

    def list_groups(self) -> Sequence[CommunicationGroup]:
        return self._groups.list_all()

    def create(self, *, current_role: Role, name: str, member_ids: Sequence[int] = ()) -> CommunicationGroup:
        self._require_admin(current_role)
        group_id = self._groups.create(name=require_min_length(name, "Group name", 2), member_ids=_unique(member_ids))
        return self.get(group_id)

    def update(self, *, current_role: Role, group_id: int, name: str, member_ids: Sequence[int]) -> CommunicationGroup:
        self._require_admin(current_role)
        self.get(group_id)
        self._groups.update(group_id, name=require_min_length(name, "Group name", 2), member_ids=_unique(member_ids))
        return self.get(group_id)

    def add_member(self, *, current_role: Role, group_id: int, user_id: int) -> CommunicationGroup:
        self._require_admin(current_role)
        group = self.get(group_id)
        if int(user_id) in group.member_ids:
            return group
        self._groups.update(group_id, name=group.name, member_ids=list(group.member_ids) + [int(user_id)])
        return self.get(group_id)

    def remove_member(self, *, current_role: Role, group_id: int, user_id: int) -> CommunicationGroup:
        self._require_admin(current_role)
        group = self.get(group_id)
        if int(user_id) not in group.member_ids:
            return group
        self._groups.update(group_id, name=group.name, member_ids=[m for m in group.member_ids if m != int(user_id)])
        return self.get(group_id)

    def delete(self, *, current_role: Role, group_id: int) -> None:
        self._require_admin(current_role)
        if not self._groups.delete_by_id(group_id):
            raise NotFoundError("Group not found")

    def member_ids_for(self, group_ids: Iterable[int]) -> List[int]:
        ids: List[int] = []
        for gid in group_ids:
            ids.extend(self.get(int(gid)).member_ids)
        return _unique(ids)
