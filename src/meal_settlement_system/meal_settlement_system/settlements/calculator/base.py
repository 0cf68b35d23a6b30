from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from ...meals.model import CancellationView
from ..model import ChildRefund, SettlementReport


class SettlementCalculator(ABC):
    """Calculator interface (Strategy Pattern for settlements)."""

    @abstractmethod
    def build_report(self, views: Sequence[CancellationView]) -> SettlementReport:
        raise NotImplementedError

    @abstractmethod
    def refunds_by_child(self, views: Sequence[CancellationView]) -> list[ChildRefund]:
        raise NotImplementedError
