from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json
from .model import CommunicationGroup
from .repository import GroupRepository


def _row_to_group(row: dict) -> CommunicationGroup:
    return CommunicationGroup(
        group_id=int(row["group_id"]),
        name=row["name"],
        member_ids=tuple(int(m) for m in load_json(row.get("member_ids"), [])),
        created_at=row.get("created_at"),
    )


class MySQLGroupRepository(GroupRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, group_id: int) -> Optional[CommunicationGroup]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT group_id, name, member_ids, created_at FROM communication_groups WHERE group_id=%s",
                (group_id,),
            )
            row = fetchone(cur)
            return _row_to_group(row) if row else None

    def list_all(self) -> Sequence[CommunicationGroup]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT group_id, name, member_ids, created_at FROM communication_groups ORDER BY name")
            return [_row_to_group(r) for r in fetchall(cur)]

    def create(self, *, name: str, member_ids: Sequence[int]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO communication_groups(name, member_ids) VALUES(%s,%s)",
                (name, dump_json(list(member_ids))),
            )
            return int(cur.lastrowid)

    def update(self, group_id: int, *, name: str, member_ids: Sequence[int]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE communication_groups SET name=%s, member_ids=%s WHERE group_id=%s",
                (name, dump_json(list(member_ids)), group_id),
            )
            return cur.rowcount > 0

    def delete_by_id(self, group_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM communication_groups WHERE group_id=%s", (group_id,))
            return cur.rowcount > 0
