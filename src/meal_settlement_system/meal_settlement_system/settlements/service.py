from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Iterable, Optional

from ..access.model import Caller
from ..access.policy import AccessPolicy
from ..common.datetime_utils import now_local
from ..common.validators import require_id_list
from ..core.constants import REFUND_DESCRIPTION, ZERO_AMOUNT
from ..meals.repository import MealCancellationRepository
from ..meals.service import to_view
from ..payments.model import Payment
from .calculator.base import SettlementCalculator
from .calculator.standard_calculator import StandardSettlementCalculator
from .model import SettlementReport
from .repository import SettlementStore

logger = logging.getLogger(__name__)


class SettlementService:
    """Use cases for the finance side: settlement views and reconciliation.

    Every operation is reserved to managers and checks the role before any
    data is read.
    """

    def __init__(
        self,
        cancellations: MealCancellationRepository,
        store: SettlementStore,
        access: AccessPolicy,
        *,
        calculator: Optional[SettlementCalculator] = None,
    ):
        self._cancellations = cancellations
        self._store = store
        self._access = access
        self._calculator = calculator or StandardSettlementCalculator()

    def list_settlements(
        self,
        caller: Optional[Caller],
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        group_id: Optional[int] = None,
        child_id: Optional[int] = None,
        only_unrefunded: bool = False,
    ) -> SettlementReport:
        self._access.require_manager(caller)

        rows = self._cancellations.list_rows(
            child_ids=[int(child_id)] if child_id else None,
            start_date=start_date,
            end_date=end_date,
            refunded=False if only_unrefunded else None,
            group_id=group_id,
        )
        return self._calculator.build_report([to_view(r) for r in rows])

    def mark_refunded(self, caller: Optional[Caller], cancellation_ids: Iterable[Any]) -> int:
        caller = self._access.require_manager(caller)
        ids = require_id_list(cancellation_ids, "cancellationIds")

        count = self._cancellations.mark_refunded(ids)
        logger.info(
            "Meal cancellations marked as refunded",
            extra={"requested": len(ids), "count": count, "caller_id": caller.user_id},
        )
        return count

    def generate_reversing_payments(
        self,
        caller: Optional[Caller],
        cancellation_ids: Iterable[Any],
        *,
        now: datetime | None = None,
    ) -> list[Payment]:
        caller = self._access.require_manager(caller)
        ids = require_id_list(cancellation_ids, "cancellationIds")

        # Already refunded ids are left out so nothing is reimbursed twice.
        rows = self._cancellations.list_rows(cancellation_ids=ids, refunded=False)
        refunds = self._calculator.refunds_by_child([to_view(r) for r in rows])

        now = now or now_local()
        payments: list[Payment] = []
        for refund in refunds:
            if refund.total <= ZERO_AMOUNT:
                # TODO: decide with finance whether zero-value cancellations should be auto-marked refunded.
                logger.info(
                    "Skipping reversing payment with zero total",
                    extra={"child_id": refund.child_id, "cancellations": len(refund.cancellation_ids)},
                )
                continue

            payment = self._store.settle_with_payment(
                child_id=refund.child_id,
                cancellation_ids=refund.cancellation_ids,
                amount=-refund.total,
                description=REFUND_DESCRIPTION.format(count=len(refund.cancellation_ids)),
                paid_at=now,
            )
            if payment is None:
                logger.warning(
                    "Reversing payment skipped, cancellations changed concurrently",
                    extra={"child_id": refund.child_id, "cancellations": len(refund.cancellation_ids)},
                )
                continue
            payments.append(payment)
            logger.info(
                "Reversing payment created",
                extra={
                    "payment_id": payment.payment_id,
                    "child_id": refund.child_id,
                    "amount": str(payment.amount),
                    "cancellations": len(refund.cancellation_ids),
                    "caller_id": caller.user_id,
                },
            )

        return payments
