from __future__ import annotations

from typing import Sequence

from ...core.constants import ZERO_AMOUNT
from ...meals.model import CancellationView
from ..model import ChildRefund, ChildSettlement, SettlementLine, SettlementReport, SettlementSummary
from .base import SettlementCalculator


class StandardSettlementCalculator(SettlementCalculator):
    """Standard rule: each cancellation is worth its group's current unit price.

    Refunded and unrefunded amounts are kept apart, so for any window
    unrefunded + refunded equals the sum of all resolved prices.
    """

    def build_report(self, views: Sequence[CancellationView]) -> SettlementReport:
        by_child: dict[int, ChildSettlement] = {}

        for v in views:
            s = by_child.get(v.child_id)
            if s is None:
                s = ChildSettlement(
                    child_id=v.child_id,
                    child_name=v.child_name,
                    child_surname=v.child_surname,
                    group_id=v.group_id,
                    group_name=v.group_name,
                )
                by_child[v.child_id] = s

            c = v.cancellation
            s.cancellations.append(
                SettlementLine(
                    cancellation_id=c.cancellation_id,
                    meal_date=c.meal_date,
                    meal_type=c.meal_type,
                    meal_price=v.meal_price,
                    refunded=c.refunded,
                )
            )
            if c.refunded:
                s.total_refunded += v.meal_price
            else:
                s.total_unrefunded += v.meal_price

        settlements = sorted(by_child.values(), key=lambda s: (s.child_surname, s.child_name, s.child_id))
        for s in settlements:
            s.cancellations.sort(key=lambda line: (line.meal_date, line.cancellation_id), reverse=True)

        summary = SettlementSummary(
            total_children=len(settlements),
            total_cancellations=len(views),
            grand_total_unrefunded=sum((s.total_unrefunded for s in settlements), ZERO_AMOUNT),
            grand_total_refunded=sum((s.total_refunded for s in settlements), ZERO_AMOUNT),
        )
        return SettlementReport(settlements=settlements, summary=summary)

    def refunds_by_child(self, views: Sequence[CancellationView]) -> list[ChildRefund]:
        totals: dict[int, list] = {}
        for v in views:
            if v.refunded:
                continue
            entry = totals.setdefault(v.child_id, [ZERO_AMOUNT, []])
            entry[0] += v.meal_price
            entry[1].append(v.cancellation_id)

        return [
            ChildRefund(child_id=child_id, total=total, cancellation_ids=tuple(ids))
            for child_id, (total, ids) in totals.items()
        ]
