from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

import pytest

from meal_settlement_system.access.model import Caller
from meal_settlement_system.children.model import Child
from meal_settlement_system.container import build_services
from meal_settlement_system.core.enums import MealType, PaymentStatus, Role
from meal_settlement_system.core.exceptions import ConflictError
from meal_settlement_system.meals.model import CancellationRow, MealCancellation
from meal_settlement_system.payments.model import Payment
from meal_settlement_system.pricing.model import Group, PriceTable


class InMemoryChildren:
    def __init__(self, children: dict[int, Child]):
        self.children = children

    def get_by_id(self, child_id: int) -> Optional[Child]:
        return self.children.get(int(child_id))

    def list_ids_for_parent(self, parent_id: int) -> Sequence[int]:
        return sorted(c.child_id for c in self.children.values() if c.parent_id == parent_id)


class InMemoryGroups:
    def __init__(self, groups: dict[int, Group]):
        self.groups = groups
        self.lookups = 0

    def get_by_id(self, group_id: int) -> Optional[Group]:
        self.lookups += 1
        return self.groups.get(int(group_id))


class InMemoryCancellations:
    """Behaves like the MySQL table: unique (child, date, meal), prices joined on read."""

    def __init__(self, children: InMemoryChildren, groups: InMemoryGroups):
        self._children = children
        self._groups = groups
        self.records: dict[int, MealCancellation] = {}
        self.last_list_args = None
        self._next_id = 0

    def get_by_id(self, cancellation_id: int) -> Optional[MealCancellation]:
        return self.records.get(int(cancellation_id))

    def find(self, *, child_id: int, meal_date: date, meal_type: MealType) -> Optional[MealCancellation]:
        for r in self.records.values():
            if (r.child_id, r.meal_date, r.meal_type) == (child_id, meal_date, meal_type):
                return r
        return None

    def create(self, *, child_id: int, meal_date: date, meal_type: MealType, reason=None) -> int:
        if any((r.child_id, r.meal_date, r.meal_type) == (child_id, meal_date, meal_type) for r in self.records.values()):
            raise ConflictError("duplicate")
        self._next_id += 1
        self.records[self._next_id] = MealCancellation(
            cancellation_id=self._next_id,
            child_id=child_id,
            meal_date=meal_date,
            meal_type=meal_type,
            reason=reason,
            refunded=False,
            created_at=datetime(2025, 6, 1, 12, 0),
        )
        return self._next_id

    def _row(self, rec: MealCancellation) -> CancellationRow:
        child = self._children.get_by_id(rec.child_id)
        group = self._groups.groups.get(child.group_id) if child.group_id else None
        return CancellationRow(
            cancellation=rec,
            child_name=child.name,
            child_surname=child.surname,
            group_id=child.group_id,
            group_name=group.name if group else None,
            prices=group.prices if group else None,
        )

    def list_rows(
        self,
        *,
        child_ids=None,
        start_date=None,
        end_date=None,
        refunded=None,
        group_id=None,
        cancellation_ids=None,
    ) -> Sequence[CancellationRow]:
        self.last_list_args = {
            "child_ids": child_ids,
            "start_date": start_date,
            "end_date": end_date,
            "refunded": refunded,
            "group_id": group_id,
            "cancellation_ids": cancellation_ids,
        }
        out = []
        for rec in self.records.values():
            if child_ids is not None and rec.child_id not in child_ids:
                continue
            if cancellation_ids is not None and rec.cancellation_id not in cancellation_ids:
                continue
            if start_date and rec.meal_date < start_date:
                continue
            if end_date and rec.meal_date > end_date:
                continue
            if refunded is not None and rec.refunded != refunded:
                continue
            if group_id and self._children.get_by_id(rec.child_id).group_id != group_id:
                continue
            out.append(self._row(rec))
        out.sort(key=lambda r: (r.cancellation.meal_date, r.cancellation.cancellation_id), reverse=True)
        return out

    def delete_unrefunded(self, cancellation_id: int) -> bool:
        rec = self.records.get(int(cancellation_id))
        if not rec or rec.refunded:
            return False
        del self.records[int(cancellation_id)]
        return True

    def mark_refunded(self, cancellation_ids) -> int:
        count = 0
        for cid in cancellation_ids:
            rec = self.records.get(int(cid))
            if rec:
                self.records[int(cid)] = replace(rec, refunded=True)
                count += 1
        return count

    def add(self, *, child_id: int, meal_date: date, meal_type: MealType, refunded: bool = False) -> int:
        cid = self.create(child_id=child_id, meal_date=meal_date, meal_type=meal_type)
        if refunded:
            self.records[cid] = replace(self.records[cid], refunded=True)
        return cid


class InMemorySettlementStore:
    """Payment and refund flags are written together or not at all, like the MySQL transaction."""

    def __init__(self, cancellations: InMemoryCancellations):
        self._cancellations = cancellations
        self.payments: list[Payment] = []
        self.fail_when_flagging = 0

    def settle_with_payment(self, *, child_id, cancellation_ids, amount, description, paid_at) -> Optional[Payment]:
        records = self._cancellations.records
        ids = [int(c) for c in cancellation_ids]
        if not ids or any(i not in records or records[i].refunded or records[i].child_id != child_id for i in ids):
            return None

        payment = Payment(
            payment_id=len(self.payments) + 1,
            child_id=child_id,
            amount=amount,
            description=description,
            due_date=paid_at,
            status=PaymentStatus.PAID,
            paid_date=paid_at,
        )
        flagged = {i: replace(records[i], refunded=True) for i in ids}
        if self.fail_when_flagging:
            self.fail_when_flagging -= 1
            raise RuntimeError("connection lost while flagging cancellations")

        self.payments.append(payment)
        records.update(flagged)
        return payment


PARENT_A = 10
PARENT_B = 11


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 6, 10, 7, 0, 0)


@pytest.fixture
def meal_day() -> date:
    return date(2025, 6, 10)


@pytest.fixture
def groups_repo() -> InMemoryGroups:
    return InMemoryGroups(
        {
            1: Group(
                group_id=1,
                name="Ladybirds",
                prices=PriceTable(
                    breakfast_price=Decimal("4.50"),
                    lunch_price=Decimal("12.50"),
                    snack_price=Decimal("3.00"),
                ),
            ),
            2: Group(
                group_id=2,
                name="Squirrels",
                prices=PriceTable(breakfast_price=Decimal("5.00"), lunch_price=Decimal("11.00"), snack_price=None),
            ),
        }
    )


@pytest.fixture
def children_repo() -> InMemoryChildren:
    return InMemoryChildren(
        {
            1: Child(child_id=1, parent_id=PARENT_A, group_id=1, name="Ala", surname="Nowak"),
            2: Child(child_id=2, parent_id=PARENT_B, group_id=2, name="Jan", surname="Kowalski"),
            3: Child(child_id=3, parent_id=PARENT_A, group_id=None, name="Ola", surname="Wiśniewska"),
        }
    )


@pytest.fixture
def cancellations_repo(children_repo, groups_repo) -> InMemoryCancellations:
    return InMemoryCancellations(children_repo, groups_repo)


@pytest.fixture
def settlement_store(cancellations_repo) -> InMemorySettlementStore:
    return InMemorySettlementStore(cancellations_repo)


@pytest.fixture
def container(children_repo, groups_repo, cancellations_repo, settlement_store):
    return build_services(
        children_repo=children_repo,
        groups_repo=groups_repo,
        cancellations_repo=cancellations_repo,
        settlement_store=settlement_store,
        cutoff_hour=8,
    )


@pytest.fixture
def parent_a() -> Caller:
    return Caller(user_id=PARENT_A, role=Role.PARENT)


@pytest.fixture
def parent_b() -> Caller:
    return Caller(user_id=PARENT_B, role=Role.PARENT)


@pytest.fixture
def teacher() -> Caller:
    return Caller(user_id=2, role=Role.TEACHER)


@pytest.fixture
def headteacher() -> Caller:
    return Caller(user_id=1, role=Role.HEADTEACHER)
