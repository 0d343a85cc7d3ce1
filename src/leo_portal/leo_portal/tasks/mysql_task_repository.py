from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import TaskPriority, TaskStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json
from .model import ChecklistItem, Task, TaskComment
from .repository import TaskRepository

_TASK_COLUMNS = """
    task_id, title, description, assignee_ids, event_id, priority, due_date,
    status, checklist, created_by, created_at, updated_at
"""


def _row_to_task(row: dict) -> Task:
    checklist = load_json(row.get("checklist"), [])
    return Task(
        task_id=int(row["task_id"]),
        title=row["title"],
        description=row.get("description"),
        assignee_ids=tuple(int(a) for a in load_json(row.get("assignee_ids"), [])),
        event_id=row.get("event_id"),
        priority=TaskPriority(row["priority"]),
        due_date=row.get("due_date"),
        status=TaskStatus(row["status"]),
        checklist=tuple(
            ChecklistItem(item_id=str(i["item_id"]), text=i["text"], done=bool(i.get("done"))) for i in checklist
        ),
        created_by=row.get("created_by"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class MySQLTaskRepository(TaskRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, task_id: int) -> Optional[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_TASK_COLUMNS} FROM tasks WHERE task_id=%s", (task_id,))
            row = fetchone(cur)
            return _row_to_task(row) if row else None

    def list_all(self) -> Sequence[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_TASK_COLUMNS} FROM tasks ORDER BY created_at DESC, task_id DESC")
            return [_row_to_task(r) for r in fetchall(cur)]

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO tasks(title, description, assignee_ids, event_id, priority, due_date, status, checklist, created_by)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    title,
                    description,
                    dump_json(list(assignee_ids)),
                    event_id,
                    priority.value,
                    due_date,
                    status.value,
                    dump_json([]),
                    created_by,
                ),
            )
            return int(cur.lastrowid)

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE tasks
                SET title=%s, description=%s, assignee_ids=%s, event_id=%s, priority=%s, due_date=%s
                WHERE task_id=%s
                """,
                (title, description, dump_json(list(assignee_ids)), event_id, priority.value, due_date, task_id),
            )
            return cur.rowcount > 0

    def set_status(self, task_id: int, status: TaskStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE tasks SET status=%s WHERE task_id=%s", (status.value, task_id))
            return cur.rowcount > 0

    def set_checklist(self, task_id: int, items: Sequence[ChecklistItem]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE tasks SET checklist=%s WHERE task_id=%s",
                (dump_json([i.to_dict() for i in items]), task_id),
            )
            return cur.rowcount > 0

    def delete_by_id(self, task_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM tasks WHERE task_id=%s", (task_id,))
            return cur.rowcount > 0

    def add_comment(self, *, task_id: int, author_id: int, author_name: str, body: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO task_comments(task_id, author_id, author_name, body) VALUES(%s,%s,%s,%s)",
                (task_id, author_id, author_name, body),
            )
            return int(cur.lastrowid)

    def list_comments(self, task_id: int) -> Sequence[TaskComment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT comment_id, task_id, author_id, author_name, body, created_at
                FROM task_comments
                WHERE task_id=%s
                ORDER BY created_at ASC, comment_id ASC
                """,
                (task_id,),
            )
            return [
                TaskComment(
                    comment_id=int(r["comment_id"]),
                    task_id=int(r["task_id"]),
                    author_id=int(r["author_id"]),
                    author_name=r["author_name"],
                    body=r["body"],
                    created_at=r.get("created_at"),
                )
                for r in fetchall(cur)
            ]
