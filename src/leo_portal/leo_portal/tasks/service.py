from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from datetime import date
from typing import Dict, List, Optional, Sequence

from ..common.validators import require_min_length, require_non_empty
from ..core.enums import Role, TaskPriority, TaskStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import ChecklistItem, Task, TaskComment
from .repository import TaskRepository

logger = logging.getLogger(__name__)

_PRIORITY_ORDER = {TaskPriority.HIGH: 0, TaskPriority.MEDIUM: 1, TaskPriority.LOW: 2}


@dataclass(frozen=True)
class TaskInput:
    title: str
    description: Optional[str] = None
    assignee_ids: Sequence[int] = ()
    event_id: Optional[int] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[date] = None


class TaskService:
    """Use case: Kanban board (todo -> in_progress -> done, any direction)."""

    def __init__(self, tasks: TaskRepository):
        self._tasks = tasks

    def get(self, task_id: int) -> Task:
        task = self._tasks.get_by_id(task_id)
        if not task:
            raise NotFoundError("Task not found")
        return task

    def list_tasks(self) -> Sequence[Task]:
        return self._tasks.list_all()

    def board(self) -> Dict[str, List[Task]]:
        """Tasks grouped by status column, high priority first, then earliest due."""
        columns: Dict[str, List[Task]] = {s.value: [] for s in TaskStatus}
        for task in self._tasks.list_all():
            columns[task.status.value].append(task)
        for items in columns.values():
            items.sort(key=lambda t: (_PRIORITY_ORDER[t.priority], t.due_date or date.max))
        return columns

    def count_open(self) -> int:
        return sum(1 for t in self._tasks.list_all() if t.status != TaskStatus.DONE)

    def _can_work_on(self, task: Task, user_id: int, role: Role) -> bool:
        return role.is_admin or user_id in task.assignee_ids

    def create(self, *, current_role: Role, created_by: int, data: TaskInput) -> Task:
        if not current_role.is_admin:
            raise AuthorizationError("Only admins can create tasks")
        title = require_min_length(data.title, "Title", 3)

        task_id = self._tasks.create(
            title=title,
            description=(data.description or "").strip() or None,
            assignee_ids=sorted({int(a) for a in data.assignee_ids}),
            event_id=data.event_id,
            priority=data.priority,
            due_date=data.due_date,
            status=TaskStatus.TODO,
            created_by=created_by,
        )
        logger.info("Task %s created", task_id)
        return self.get(task_id)

    def update(self, *, current_role: Role, task_id: int, data: TaskInput) -> Task:
        if not current_role.is_admin:
            raise AuthorizationError("Only admins can edit tasks")
        self.get(task_id)
        self._tasks.update(
            task_id,
            title=require_min_length(data.title, "Title", 3),
            description=(data.description or "").strip() or None,
            assignee_ids=sorted({int(a) for a in data.assignee_ids}),
            event_id=data.event_id,
            priority=data.priority,
            due_date=data.due_date,
        )
        return self.get(task_id)

    def move(self, *, user_id: int, current_role: Role, task_id: int, status: TaskStatus) -> Task:
        """Drag-and-drop between columns."""
        task = self.get(task_id)
        if not self._can_work_on(task, user_id, current_role):
            raise AuthorizationError("Only assignees or admins can move this task")
        if task.status != status:
            self._tasks.set_status(task_id, status)
            logger.info("Task %s moved %s -> %s", task_id, task.status.value, status.value)
        return self.get(task_id)

    def delete(self, *, current_role: Role, task_id: int) -> None:
        if not current_role.is_admin:
            raise AuthorizationError("Only admins can delete tasks")
        if not self._tasks.delete_by_id(task_id):
            raise NotFoundError("Task not found")

    def add_checklist_item(self, *, user_id: int, current_role: Role, task_id: int, text: str) -> Task:
        task = self.get(task_id)
        if not self._can_work_on(task, user_id, current_role):
            raise AuthorizationError("Only assignees or admins can edit the checklist")
        item = ChecklistItem(item_id=uuid.uuid4().hex[:12], text=require_non_empty(text, "Checklist item"))
        self._tasks.set_checklist(task_id, list(task.checklist) + [item])
        return self.get(task_id)

    def toggle_checklist_item(self, *, user_id: int, current_role: Role, task_id: int, item_id: str) -> Task:
        task = self.get(task_id)
        if not self._can_work_on(task, user_id, current_role):
            raise AuthorizationError("Only assignees or admins can edit the checklist")
        if not any(i.item_id == item_id for i in task.checklist):
            raise NotFoundError("Checklist item not found")
        items = [replace(i, done=not i.done) if i.item_id == item_id else i for i in task.checklist]
        self._tasks.set_checklist(task_id, items)
        return self.get(task_id)

    def remove_checklist_item(self, *, user_id: int, current_role: Role, task_id: int, item_id: str) -> Task:
        task = self.get(task_id)
        if not self._can_work_on(task, user_id, current_role):
            raise AuthorizationError("Only assignees or admins can edit the checklist")
        items = [i for i in task.checklist if i.item_id != item_id]
        if len(items) == len(task.checklist):
            raise NotFoundError("Checklist item not found")
        self._tasks.set_checklist(task_id, items)
        return self.get(task_id)

    def add_comment(self, *, task_id: int, author_id: int, author_name: str, body: str) -> TaskComment:
        self.get(task_id)
        body = require_non_empty(body, "Comment")
        if len(body) > 2000:
            raise ValidationError("Comment is too long")
        comment_id = self._tasks.add_comment(task_id=task_id, author_id=author_id, author_name=author_name, body=body)
        return next(c for c in self._tasks.list_comments(task_id) if c.comment_id == comment_id)

    def list_comments(self, task_id: int) -> Sequence[TaskComment]:
        self.get(task_id)
        return self._tasks.list_comments(task_id)
