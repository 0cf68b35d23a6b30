from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import PaymentStatus


@dataclass(frozen=True)
class Payment:
    """Entry of the facility's payment ledger (owned outside this engine)."""

    payment_id: int
    child_id: int
    amount: Decimal
    description: str
    due_date: datetime
    status: PaymentStatus
    paid_date: Optional[datetime] = None
