from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Child
from .repository import ChildRepository


class MySQLChildRepository(ChildRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, child_id: int) -> Optional[Child]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT child_id, parent_id, group_id, name, surname
                FROM children
                WHERE child_id=%s
                """,
                (int(child_id),),
            )
            row = fetchone(cur)
            if not row:
                return None
            return Child(
                child_id=int(row["child_id"]),
                parent_id=row.get("parent_id"),
                group_id=row.get("group_id"),
                name=row.get("name") or "",
                surname=row.get("surname") or "",
            )

    def list_ids_for_parent(self, parent_id: int) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT child_id FROM children WHERE parent_id=%s ORDER BY child_id",
                (int(parent_id),),
            )
            return [int(r["child_id"]) for r in fetchall(cur)]
