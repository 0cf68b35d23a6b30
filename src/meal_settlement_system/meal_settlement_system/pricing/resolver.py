from __future__ import annotations

from decimal import Decimal
from typing import Optional

from ..children.model import Child
from ..core.constants import MONEY_QUANTUM, ZERO_AMOUNT
from ..core.enums import MealType
from .model import Group, PriceTable
from .repository import GroupRepository


def price_from_table(table: Optional[PriceTable], meal_type: MealType) -> Decimal:
    """Unit price from an already-loaded price table.

    Missing group or unconfigured price resolves to zero, never an error:
    a cancellation must still be recordable when prices are not set up.
    """

    if table is None:
        return ZERO_AMOUNT
    price = table.price_for(meal_type)
    if price is None:
        return ZERO_AMOUNT
    return Decimal(price).quantize(MONEY_QUANTUM)


class PriceResolver:
    """Resolve the current meal price for a child from its group's table.

    Prices are looked up on every call; the settlement therefore reflects the
    configuration at settlement time, not at cancellation time.
    """

    def __init__(self, groups: GroupRepository):
        self._groups = groups

    def group_of(self, child: Child) -> Optional[Group]:
        if not child.group_id:
            return None
        return self._groups.get_by_id(int(child.group_id))

    def resolve_price(self, child: Child, meal_type: MealType) -> Decimal:
        group = self.group_of(child)
        return price_from_table(group.prices if group else None, meal_type)
