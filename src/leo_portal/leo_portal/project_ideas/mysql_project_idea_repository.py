from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import ProjectIdeaStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json
from .model import ProjectIdea
from .repository import ProjectIdeaRepository

_IDEA_COLUMNS = """
    idea_id, author_id, author_name, project_name, goal, target_audience, budget, timeline,
    special_considerations, proposal, status, admin_comment, reviewed_by, created_at, updated_at
"""


def _row_to_idea(row: dict) -> ProjectIdea:
    return ProjectIdea(
        idea_id=int(row["idea_id"]),
        author_id=int(row["author_id"]),
        author_name=row["author_name"],
        project_name=row["project_name"],
        goal=row["goal"],
        target_audience=row["target_audience"],
        budget=row["budget"],
        timeline=row["timeline"],
        special_considerations=row.get("special_considerations"),
        proposal=load_json(row.get("proposal")),
        status=ProjectIdeaStatus(row["status"]),
        admin_comment=row.get("admin_comment"),
        reviewed_by=row.get("reviewed_by"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class MySQLProjectIdeaRepository(ProjectIdeaRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, idea_id: int) -> Optional[ProjectIdea]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_IDEA_COLUMNS} FROM project_ideas WHERE idea_id=%s", (idea_id,))
            row = fetchone(cur)
            return _row_to_idea(row) if row else None

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO project_ideas(
                    author_id, author_name, project_name, goal, target_audience, budget, timeline,
                    special_considerations, proposal, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    author_id,
                    author_name,
                    project_name,
                    goal,
                    target_audience,
                    budget,
                    timeline,
                    special_considerations,
                    dump_json(proposal),
                    status.value,
                ),
            )
            return int(cur.lastrowid)

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE project_ideas
                SET project_name=%s, goal=%s, target_audience=%s, budget=%s, timeline=%s,
                    special_considerations=%s, proposal=%s
                WHERE idea_id=%s
                """,
                (
                    project_name,
                    goal,
                    target_audience,
                    budget,
                    timeline,
                    special_considerations,
                    dump_json(proposal),
                    idea_id,
                ),
            )
            return cur.rowcount > 0

    def set_status(
        self,
        idea_id: int,
        status: ProjectIdeaStatus,
        *,
        admin_comment: Optional[str] = None,
        reviewed_by: Optional[int] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE project_ideas
                SET status=%s, admin_comment=COALESCE(%s, admin_comment), reviewed_by=COALESCE(%s, reviewed_by)
                WHERE idea_id=%s
                """,
                (status.value, admin_comment, reviewed_by, idea_id),
            )
            return cur.rowcount > 0

    def list_for_author(self, author_id: int) -> Sequence[ProjectIdea]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_IDEA_COLUMNS} FROM project_ideas WHERE author_id=%s ORDER BY updated_at DESC",
                (author_id,),
            )
            return [_row_to_idea(r) for r in fetchall(cur)]

    def list_submitted(self) -> Sequence[ProjectIdea]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_IDEA_COLUMNS} FROM project_ideas
                WHERE status <> 'draft'
                ORDER BY FIELD(status, 'pending_review', 'needs_revision', 'approved', 'declined'), created_at DESC
                """
            )
            return [_row_to_idea(r) for r in fetchall(cur)]

    def delete_by_id(self, idea_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM project_ideas WHERE idea_id=%s", (idea_id,))
            return cur.rowcount > 0
