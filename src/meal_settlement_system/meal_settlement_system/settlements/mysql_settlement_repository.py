from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import PaymentStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, in_clause
from ..payments.model import Payment
from ..payments.mysql_payment_repository import insert_payment
from .repository import SettlementStore


class MySQLSettlementRepository(SettlementStore):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def settle_with_payment(
        self,
        *,
        child_id: int,
        cancellation_ids: Sequence[int],
        amount: Decimal,
        description: str,
        paid_at: datetime,
    ) -> Optional[Payment]:
        ids = tuple(int(c) for c in cancellation_ids)
        if not ids:
            return None
        placeholders = in_clause(ids)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT cancellation_id
                FROM meal_cancellations
                WHERE cancellation_id IN ({placeholders}) AND child_id=%s AND refunded=0
                FOR UPDATE
                """,
                ids + (int(child_id),),
            )
            locked = {int(r["cancellation_id"]) for r in fetchall(cur)}
            if locked != set(ids):
                return None

            payment = insert_payment(
                cur,
                child_id=child_id,
                amount=amount,
                description=description,
                due_date=paid_at,
                status=PaymentStatus.PAID,
                paid_date=paid_at,
            )
            cur.execute(
                f"UPDATE meal_cancellations SET refunded=1 WHERE cancellation_id IN ({placeholders})",
                ids,
            )
            return payment
