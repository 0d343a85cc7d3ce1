from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Tuple

from ..core.enums import TaskPriority, TaskStatus


@dataclass(frozen=True)
class ChecklistItem:
    item_id: str
    text: str
    done: bool = False

    def to_dict(self) -> dict:
        return {"item_id": self.item_id, "text": self.text, "done": self.done}


@dataclass(frozen=True)
class Task:
    task_id: int
    title: str
    status: TaskStatus
    priority: TaskPriority
    description: Optional[str] = None
    assignee_ids: Tuple[int, ...] = ()
    event_id: Optional[int] = None
    due_date: Optional[date] = None
    checklist: Tuple[ChecklistItem, ...] = field(default_factory=tuple)
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def checklist_progress(self) -> Tuple[int, int]:
        return sum(1 for i in self.checklist if i.done), len(self.checklist)

    def to_dict(self) -> dict:
        done, total = self.checklist_progress
        return {
            "task_id": self.task_id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "priority": self.priority.value,
            "assignee_ids": list(self.assignee_ids),
            "event_id": self.event_id,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "checklist": [i.to_dict() for i in self.checklist],
            "checklist_done": done,
            "checklist_total": total,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class TaskComment:
    comment_id: int
    task_id: int
    author_id: int
    author_name: str
    body: str
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "comment_id": self.comment_id,
            "task_id": self.task_id,
            "author_id": self.author_id,
            "author_name": self.author_name,
            "body": self.body,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
