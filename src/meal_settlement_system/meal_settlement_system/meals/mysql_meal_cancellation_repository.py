from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

import mysql.connector

from ..core.enums import MealType
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    fetchall,
    fetchone,
    in_clause,
    is_duplicate_key,
    normalize_mysql_date,
    normalize_mysql_decimal,
)
from ..pricing.model import PriceTable
from .model import CancellationRow, MealCancellation
from .repository import MealCancellationRepository

_ROW_SELECT = """
    SELECT mc.cancellation_id, mc.child_id, mc.meal_date, mc.meal_type, mc.reason,
           mc.refunded, mc.created_at,
           c.name AS child_name, c.surname AS child_surname, c.group_id,
           g.group_name, g.breakfast_price, g.lunch_price, g.snack_price
    FROM meal_cancellations mc
    JOIN children c ON c.child_id = mc.child_id
    LEFT JOIN child_groups g ON g.group_id = c.group_id
"""


def _to_cancellation(r: Dict[str, Any]) -> MealCancellation:
    return MealCancellation(
        cancellation_id=int(r["cancellation_id"]),
        child_id=int(r["child_id"]),
        meal_date=normalize_mysql_date(r["meal_date"]),
        meal_type=MealType(r["meal_type"]),
        reason=r.get("reason"),
        refunded=bool(r.get("refunded")),
        created_at=r.get("created_at"),
    )


def _to_row(r: Dict[str, Any]) -> CancellationRow:
    # Group prices are joined at read time and never stored on the cancellation.
    prices = None
    if r.get("group_id") is not None and r.get("group_name") is not None:
        prices = PriceTable(
            breakfast_price=normalize_mysql_decimal(r.get("breakfast_price")),
            lunch_price=normalize_mysql_decimal(r.get("lunch_price")),
            snack_price=normalize_mysql_decimal(r.get("snack_price")),
        )
    return CancellationRow(
        cancellation=_to_cancellation(r),
        child_name=r.get("child_name") or "",
        child_surname=r.get("child_surname") or "",
        group_id=r.get("group_id"),
        group_name=r.get("group_name"),
        prices=prices,
    )


class MySQLMealCancellationRepository(MealCancellationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, cancellation_id: int) -> Optional[MealCancellation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT cancellation_id, child_id, meal_date, meal_type, reason, refunded, created_at
                FROM meal_cancellations
                WHERE cancellation_id=%s
                """,
                (int(cancellation_id),),
            )
            row = fetchone(cur)
            return _to_cancellation(row) if row else None

    def find(self, *, child_id: int, meal_date: date, meal_type: MealType) -> Optional[MealCancellation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT cancellation_id, child_id, meal_date, meal_type, reason, refunded, created_at
                FROM meal_cancellations
                WHERE child_id=%s AND meal_date=%s AND meal_type=%s
                """,
                (int(child_id), meal_date, meal_type.value),
            )
            row = fetchone(cur)
            return _to_cancellation(row) if row else None

    def create(
        self,
        *,
        child_id: int,
        meal_date: date,
        meal_type: MealType,
        reason: Optional[str] = None,
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO meal_cancellations(child_id, meal_date, meal_type, reason, refunded)
                    VALUES(%s,%s,%s,%s,0)
                    """,
                    (int(child_id), meal_date, meal_type.value, reason),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as exc:
            if is_duplicate_key(exc):
                raise ConflictError("This meal has already been cancelled") from exc
            raise

    def list_rows(
        self,
        *,
        child_ids: Optional[Sequence[int]] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        refunded: Optional[bool] = None,
        group_id: Optional[int] = None,
        cancellation_ids: Optional[Sequence[int]] = None,
    ) -> Sequence[CancellationRow]:
        if child_ids is not None and not child_ids:
            return []
        if cancellation_ids is not None and not cancellation_ids:
            return []

        where: list[str] = []
        params: list[Any] = []

        if child_ids is not None:
            where.append(f"mc.child_id IN ({in_clause(child_ids)})")
            params.extend(int(c) for c in child_ids)
        if cancellation_ids is not None:
            where.append(f"mc.cancellation_id IN ({in_clause(cancellation_ids)})")
            params.extend(int(c) for c in cancellation_ids)
        if start_date:
            where.append("mc.meal_date >= %s")
            params.append(start_date)
        if end_date:
            where.append("mc.meal_date <= %s")
            params.append(end_date)
        if refunded is not None:
            where.append("mc.refunded = %s")
            params.append(1 if refunded else 0)
        if group_id:
            where.append("c.group_id = %s")
            params.append(int(group_id))

        sql = _ROW_SELECT
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY mc.meal_date DESC, mc.cancellation_id DESC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_row(r) for r in fetchall(cur)]

    def delete_unrefunded(self, cancellation_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM meal_cancellations WHERE cancellation_id=%s AND refunded=0",
                (int(cancellation_id),),
            )
            return cur.rowcount > 0

    def mark_refunded(self, cancellation_ids: Sequence[int]) -> int:
        if not cancellation_ids:
            return 0
        ids = tuple(int(c) for c in cancellation_ids)
        placeholders = in_clause(ids)
        with db_cursor(self._conn_factory) as (_, cur):
            # rowcount after UPDATE counts changed rows only; report matched rows instead.
            cur.execute(
                f"SELECT COUNT(*) AS matched FROM meal_cancellations WHERE cancellation_id IN ({placeholders}) FOR UPDATE",
                ids,
            )
            matched = int((fetchone(cur) or {}).get("matched") or 0)
            cur.execute(
                f"UPDATE meal_cancellations SET refunded=1 WHERE cancellation_id IN ({placeholders}) AND refunded=0",
                ids,
            )
            return matched
