from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import MealType
from ..pricing.model import PriceTable


@dataclass(frozen=True)
class MealCancellation:
    """Domain entity: one cancelled meal for one child on one day."""

    cancellation_id: int
    child_id: int
    meal_date: date
    meal_type: MealType
    reason: Optional[str] = None
    refunded: bool = False
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class CancellationRow:
    """Read-model: a cancellation joined with its child and current group prices."""

    cancellation: MealCancellation
    child_name: str
    child_surname: str
    group_id: Optional[int]
    group_name: Optional[str]
    prices: Optional[PriceTable]


@dataclass(frozen=True)
class CancellationView:
    """What callers get back: the row plus the price resolved at read time."""

    cancellation: MealCancellation
    child_name: str
    child_surname: str
    group_id: Optional[int]
    group_name: Optional[str]
    meal_price: Decimal

    @property
    def cancellation_id(self) -> int:
        return self.cancellation.cancellation_id

    @property
    def child_id(self) -> int:
        return self.cancellation.child_id

    @property
    def refunded(self) -> bool:
        return self.cancellation.refunded
