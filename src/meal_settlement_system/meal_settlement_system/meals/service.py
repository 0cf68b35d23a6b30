from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Optional

from ..access.model import Caller
from ..access.policy import AccessPolicy
from ..children.repository import ChildRepository
from ..common.datetime_utils import now_local, parse_iso_date
from ..common.validators import parse_meal_type, require_positive_id
from ..core.exceptions import ConflictError, DeadlinePassedError, NotFoundError, ValidationError
from ..pricing.resolver import PriceResolver, price_from_table
from .deadline import CancellationDeadlinePolicy
from .model import CancellationRow, CancellationView
from .repository import MealCancellationRepository

logger = logging.getLogger(__name__)


def to_view(row: CancellationRow) -> CancellationView:
    return CancellationView(
        cancellation=row.cancellation,
        child_name=row.child_name,
        child_surname=row.child_surname,
        group_id=row.group_id,
        group_name=row.group_name,
        meal_price=price_from_table(row.prices, row.cancellation.meal_type),
    )


class MealCancellationService:
    """Use cases: list, cancel and un-cancel meals for a child."""

    def __init__(
        self,
        cancellations: MealCancellationRepository,
        children: ChildRepository,
        access: AccessPolicy,
        prices: PriceResolver,
        *,
        deadline: CancellationDeadlinePolicy | None = None,
    ):
        self._cancellations = cancellations
        self._children = children
        self._access = access
        self._prices = prices
        self._deadline = deadline or CancellationDeadlinePolicy()

    @staticmethod
    def _as_date(value: Any) -> date:
        if value is None or value == "":
            raise ValidationError("date is required")
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        return parse_iso_date(str(value))

    def list_cancellations(
        self,
        caller: Optional[Caller],
        *,
        child_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        refunded: Optional[bool] = None,
    ) -> list[CancellationView]:
        caller = self._access.require_caller(caller)
        child_ids = self._access.scope_child_ids(caller, child_id)
        if child_ids is not None and not child_ids:
            return []

        rows = self._cancellations.list_rows(
            child_ids=child_ids,
            start_date=start_date,
            end_date=end_date,
            refunded=refunded,
        )
        return [to_view(r) for r in rows]

    def cancel_meal(
        self,
        caller: Optional[Caller],
        *,
        child_id: Any,
        meal_date: Any,
        meal_type: Any,
        reason: Optional[str] = None,
        now: datetime | None = None,
    ) -> CancellationView:
        caller = self._access.require_caller(caller)
        child_id = require_positive_id(child_id, "childId")
        meal_date = self._as_date(meal_date)
        meal_type = parse_meal_type(meal_type)

        child = self._children.get_by_id(child_id)
        if not child:
            raise NotFoundError("Child does not exist")
        self._access.ensure_can_access_child(caller, child)

        now = now or now_local()
        try:
            self._deadline.ensure_open(meal_date, now)
        except DeadlinePassedError:
            logger.warning(
                "Meal cancellation rejected after cutoff",
                extra={"child_id": child_id, "meal_date": meal_date.isoformat(), "meal_type": meal_type.value},
            )
            raise

        conflict = {"child_id": child_id, "meal_date": meal_date.isoformat(), "meal_type": meal_type.value}
        if self._cancellations.find(child_id=child_id, meal_date=meal_date, meal_type=meal_type):
            logger.warning("Duplicate meal cancellation rejected", extra=conflict)
            raise ConflictError("This meal has already been cancelled")

        reason = (reason or "").strip() or None
        try:
            cancellation_id = self._cancellations.create(
                child_id=child_id,
                meal_date=meal_date,
                meal_type=meal_type,
                reason=reason,
            )
        except ConflictError:
            # lost the race against a concurrent insert
            logger.warning("Duplicate meal cancellation rejected by store", extra=conflict)
            raise
        logger.info(
            "Meal cancelled",
            extra={
                "cancellation_id": cancellation_id,
                "child_id": child_id,
                "meal_date": meal_date.isoformat(),
                "meal_type": meal_type.value,
                "caller_id": caller.user_id,
            },
        )

        record = self._cancellations.get_by_id(cancellation_id)
        if not record:
            raise NotFoundError("Cancellation disappeared right after it was created")
        group = self._prices.group_of(child)
        return CancellationView(
            cancellation=record,
            child_name=child.name,
            child_surname=child.surname,
            group_id=child.group_id,
            group_name=group.name if group else None,
            meal_price=self._prices.resolve_price(child, meal_type),
        )

    def uncancel_meal(self, caller: Optional[Caller], cancellation_id: Any, *, now: datetime | None = None) -> None:
        caller = self._access.require_caller(caller)
        cancellation_id = require_positive_id(cancellation_id, "id")

        record = self._cancellations.get_by_id(cancellation_id)
        if not record:
            raise NotFoundError("Cancellation does not exist")

        child = self._children.get_by_id(record.child_id)
        if not child:
            raise NotFoundError("Child does not exist")
        self._access.ensure_can_access_child(caller, child)

        # A refunded cancellation has already been settled; it is frozen like a passed cutoff.
        if record.refunded:
            raise DeadlinePassedError("A refunded cancellation can no longer be undone")

        now = now or now_local()
        self._deadline.ensure_open(record.meal_date, now, message="This meal cancellation can no longer be undone")

        if not self._cancellations.delete_unrefunded(cancellation_id):
            if self._cancellations.get_by_id(cancellation_id) is None:
                raise NotFoundError("Cancellation does not exist")
            raise DeadlinePassedError("A refunded cancellation can no longer be undone")

        logger.info(
            "Meal cancellation removed",
            extra={"cancellation_id": cancellation_id, "child_id": record.child_id, "caller_id": caller.user_id},
        )
