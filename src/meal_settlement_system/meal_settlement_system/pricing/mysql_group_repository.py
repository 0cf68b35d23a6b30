from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, normalize_mysql_decimal
from .model import Group, PriceTable
from .repository import GroupRepository


class MySQLGroupRepository(GroupRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, group_id: int) -> Optional[Group]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT group_id, group_name, breakfast_price, lunch_price, snack_price
                FROM child_groups
                WHERE group_id=%s
                """,
                (int(group_id),),
            )
            row = fetchone(cur)
            if not row:
                return None
            return Group(
                group_id=int(row["group_id"]),
                name=row["group_name"],
                prices=PriceTable(
                    breakfast_price=normalize_mysql_decimal(row.get("breakfast_price")),
                    lunch_price=normalize_mysql_decimal(row.get("lunch_price")),
                    snack_price=normalize_mysql_decimal(row.get("snack_price")),
                ),
            )
