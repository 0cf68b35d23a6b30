from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ..core.enums import MealType


@dataclass(frozen=True)
class PriceTable:
    """Per-group unit prices; None means the price is not configured."""

    breakfast_price: Optional[Decimal] = None
    lunch_price: Optional[Decimal] = None
    snack_price: Optional[Decimal] = None

    def price_for(self, meal_type: MealType) -> Optional[Decimal]:
        return {
            MealType.BREAKFAST: self.breakfast_price,
            MealType.LUNCH: self.lunch_price,
            MealType.SNACK: self.snack_price,
        }.get(meal_type)


@dataclass(frozen=True)
class Group:
    group_id: int
    name: str
    prices: PriceTable
