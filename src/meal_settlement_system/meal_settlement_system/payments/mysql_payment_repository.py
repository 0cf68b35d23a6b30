from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..core.constants import MONEY_QUANTUM
from ..core.enums import PaymentStatus
from .model import Payment


def insert_payment(
    cur,
    *,
    child_id: int,
    amount: Decimal,
    description: str,
    due_date: datetime,
    status: PaymentStatus,
    paid_date: Optional[datetime] = None,
) -> Payment:
    """Write one ledger entry on the caller's cursor; the caller owns the transaction."""

    amount = Decimal(amount).quantize(MONEY_QUANTUM)
    cur.execute(
        """
        INSERT INTO payments(child_id, amount, description, due_date, status, paid_date)
        VALUES(%s,%s,%s,%s,%s,%s)
        """,
        (int(child_id), amount, description, due_date, status.value, paid_date),
    )
    return Payment(
        payment_id=int(cur.lastrowid),
        child_id=int(child_id),
        amount=amount,
        description=description,
        due_date=due_date,
        status=status,
        paid_date=paid_date,
    )
