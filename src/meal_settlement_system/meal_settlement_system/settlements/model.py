from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

from ..core.constants import ZERO_AMOUNT
from ..core.enums import MealType


@dataclass(frozen=True)
class SettlementLine:
    cancellation_id: int
    meal_date: date
    meal_type: MealType
    meal_price: Decimal
    refunded: bool


@dataclass
class ChildSettlement:
    """Per-child fold of cancellations in the queried window."""

    child_id: int
    child_name: str
    child_surname: str
    group_id: Optional[int]
    group_name: Optional[str]
    cancellations: list[SettlementLine] = field(default_factory=list)
    total_unrefunded: Decimal = ZERO_AMOUNT
    total_refunded: Decimal = ZERO_AMOUNT


@dataclass(frozen=True)
class SettlementSummary:
    total_children: int
    total_cancellations: int
    grand_total_unrefunded: Decimal
    grand_total_refunded: Decimal


@dataclass(frozen=True)
class SettlementReport:
    settlements: list[ChildSettlement]
    summary: SettlementSummary


@dataclass(frozen=True)
class ChildRefund:
    """Unrefunded cancellations of one child that a reversing payment would cover."""

    child_id: int
    total: Decimal
    cancellation_ids: tuple[int, ...]
