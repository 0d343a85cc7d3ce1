from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import TaskPriority, TaskStatus
from .model import ChecklistItem, Task, TaskComment


class TaskRepository(Protocol):
    def get_by_id(self, task_id: int) -> Optional[Task]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Task]:
        raise NotImplementedError

    def create(
        self,
        *,
        title: str,
        description: Optional[str],
        assignee_ids: Sequence[int],
        event_id: Optional[int],
        priority: TaskPriority,
        due_date: Optional[date],
        status: TaskStatus,
        created_by: Optional[int],
    ) -> int:
        raise NotImplementedError

    def update(
        self,
        task_id: int,
        *,
        title: str,
        description: Optional[str],
        assignee_ids: Sequence[int],
        event_id: Optional[int],
        priority: TaskPriority,
        due_date: Optional[date],
    ) -> bool:
        raise NotImplementedError

    def set_status(self, task_id: int, status: TaskStatus) -> bool:
        raise NotImplementedError

    def set_checklist(self, task_id: int, items: Sequence[ChecklistItem]) -> bool:
        raise NotImplementedError

    def delete_by_id(self, task_id: int) -> bool:
        raise NotImplementedError

    def add_comment(self, *, task_id: int, author_id: int, author_name: str, body: str) -> int:
        raise NotImplementedError

    def list_comments(self, task_id: int) -> Sequence[TaskComment]:
        raise NotImplementedError
