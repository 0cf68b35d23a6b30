from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..payments.model import Payment


class SettlementStore(Protocol):
    def settle_with_payment(
        self,
        *,
        child_id: int,
        cancellation_ids: Sequence[int],
        amount: Decimal,
        description: str,
        paid_at: datetime,
    ) -> Optional[Payment]:
        """Record a reversing payment and flag its cancellations refunded, atomically.

        The cancellations are locked first. If any of them is no longer an
        unrefunded cancellation of `child_id`, nothing is written and None is
        returned. A failure at any step leaves neither the payment nor the
        flags behind.
        """

        raise NotImplementedError
