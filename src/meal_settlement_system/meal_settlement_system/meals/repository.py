from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import MealType
from .model import CancellationRow, MealCancellation


class MealCancellationRepository(Protocol):
    def get_by_id(self, cancellation_id: int) -> Optional[MealCancellation]:
        raise NotImplementedError

    def find(self, *, child_id: int, meal_date: date, meal_type: MealType) -> Optional[MealCancellation]:
        raise NotImplementedError

    def create(
        self,
        *,
        child_id: int,
        meal_date: date,
        meal_type: MealType,
        reason: Optional[str] = None,
    ) -> int:
        """Insert a new, unrefunded cancellation.

        Must raise ConflictError when (child, date, meal) already exists,
        including when a concurrent insert wins the race.
        """

        raise NotImplementedError

    def list_rows(
        self,
        *,
        child_ids: Optional[Sequence[int]] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        refunded: Optional[bool] = None,
        group_id: Optional[int] = None,
        cancellation_ids: Optional[Sequence[int]] = None,
    ) -> Sequence[CancellationRow]:
        """Rows ordered by meal date, newest first.

        `child_ids=None` means no restriction; an empty sequence matches nothing.
        """

        raise NotImplementedError

    def delete_unrefunded(self, cancellation_id: int) -> bool:
        """Delete only if still unrefunded; False when nothing was deleted."""

        raise NotImplementedError

    def mark_refunded(self, cancellation_ids: Sequence[int]) -> int:
        """Flag ids as refunded; returns how many of the ids exist."""

        raise NotImplementedError
