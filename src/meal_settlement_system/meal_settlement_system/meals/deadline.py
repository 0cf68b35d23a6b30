from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time

from ..core.constants import DEFAULT_CANCELLATION_CUTOFF_HOUR, DEFAULT_CANCELLATION_CUTOFF_MINUTE
from ..core.exceptions import DeadlinePassedError


@dataclass(frozen=True)
class CancellationDeadlinePolicy:
    """Daily cutoff after which a meal's cancellation state is frozen.

    Kitchen orders are placed at the cutoff, so both cancelling a meal and
    undoing a cancellation are only allowed strictly before it.
    """

    cutoff_hour: int = DEFAULT_CANCELLATION_CUTOFF_HOUR
    cutoff_minute: int = DEFAULT_CANCELLATION_CUTOFF_MINUTE

    def __post_init__(self):
        if not 0 <= int(self.cutoff_hour) <= 23:
            raise ValueError(f"cutoff_hour out of range: {self.cutoff_hour!r}")
        if not 0 <= int(self.cutoff_minute) <= 59:
            raise ValueError(f"cutoff_minute out of range: {self.cutoff_minute!r}")

    def cutoff_for(self, meal_date: date) -> datetime:
        return datetime.combine(meal_date, time(int(self.cutoff_hour), int(self.cutoff_minute)))

    def is_open(self, meal_date: date, now: datetime) -> bool:
        if now.tzinfo is not None:
            # Cutoff is a local wall-clock instant.
            now = now.astimezone().replace(tzinfo=None)
        return now < self.cutoff_for(meal_date)

    def ensure_open(self, meal_date: date, now: datetime, *, message: str | None = None) -> None:
        if not self.is_open(meal_date, now):
            raise DeadlinePassedError(
                message or f"Meals can only be changed until {self.cutoff_label()} on the day of the meal"
            )

    def cutoff_label(self) -> str:
        return f"{int(self.cutoff_hour):02d}:{int(self.cutoff_minute):02d}"
