from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from meal_settlement_system.core.enums import MealType, PaymentStatus
from meal_settlement_system.core.exceptions import AuthenticationError, AuthorizationError, ValidationError

NOW = datetime(2025, 6, 30, 15, 0)


@pytest.fixture
def june(cancellations_repo):
    """Child 1 (group 1) has two lunches and a snack, child 2 (group 2) one lunch and one snack."""
    return {
        "a_lunch_1": cancellations_repo.add(child_id=1, meal_date=date(2025, 6, 2), meal_type=MealType.LUNCH),
        "a_lunch_2": cancellations_repo.add(child_id=1, meal_date=date(2025, 6, 3), meal_type=MealType.LUNCH),
        "a_snack": cancellations_repo.add(child_id=1, meal_date=date(2025, 6, 3), meal_type=MealType.SNACK),
        "b_lunch": cancellations_repo.add(child_id=2, meal_date=date(2025, 6, 4), meal_type=MealType.LUNCH),
        "b_snack": cancellations_repo.add(child_id=2, meal_date=date(2025, 6, 5), meal_type=MealType.SNACK),
    }


def test_reversing_payment_per_child_marks_rows_refunded(container, headteacher, june, settlement_store, cancellations_repo):
    ids = [june["a_lunch_1"], june["a_lunch_2"]]

    payments = container.settlement_service.generate_reversing_payments(headteacher, ids, now=NOW)

    assert len(payments) == 1
    p = payments[0]
    assert p.child_id == 1
    assert p.amount == Decimal("-25.00")
    assert p.status == PaymentStatus.PAID
    assert p.due_date == NOW and p.paid_date == NOW
    assert "2" in p.description
    assert all(cancellations_repo.records[i].refunded for i in ids)
    assert cancellations_repo.records[june["a_snack"]].refunded is False


def test_settlement_list_totals_are_additive(container, headteacher, june):
    svc = container.settlement_service
    before = svc.list_settlements(headteacher)

    svc.mark_refunded(headteacher, [june["a_snack"], june["b_lunch"]])
    after = svc.list_settlements(headteacher)

    total_before = before.summary.grand_total_unrefunded + before.summary.grand_total_refunded
    total_after = after.summary.grand_total_unrefunded + after.summary.grand_total_refunded
    assert total_before == total_after == Decimal("39.00")
    assert after.summary.grand_total_refunded == Decimal("14.00")
    assert before.summary.total_children == 2
    assert [s.child_surname for s in after.settlements] == ["Kowalski", "Nowak"]


def test_refunded_rows_are_never_paid_twice(container, headteacher, june, settlement_store):
    svc = container.settlement_service
    svc.generate_reversing_payments(headteacher, [june["a_lunch_1"]], now=NOW)

    again = svc.generate_reversing_payments(headteacher, [june["a_lunch_1"], june["a_lunch_2"]], now=NOW)

    assert [p.amount for p in again] == [Decimal("-12.50")]
    assert len(settlement_store.payments) == 2


def test_zero_total_child_gets_no_payment_and_stays_unrefunded(container, headteacher, june, settlement_store, cancellations_repo):
    # group 2 has no snack price configured
    payments = container.settlement_service.generate_reversing_payments(headteacher, [june["b_snack"]], now=NOW)

    assert payments == []
    assert settlement_store.payments == []
    assert cancellations_repo.records[june["b_snack"]].refunded is False


def test_payments_are_split_per_child(container, headteacher, june):
    payments = container.settlement_service.generate_reversing_payments(
        headteacher, [june["a_snack"], june["b_lunch"], june["b_snack"]], now=NOW
    )

    assert sorted((p.child_id, p.amount) for p in payments) == [(1, Decimal("-3.00")), (2, Decimal("-11.00"))]


def test_mark_refunded_counts_matched_ids_and_is_idempotent(container, headteacher, june, cancellations_repo):
    svc = container.settlement_service

    assert svc.mark_refunded(headteacher, [june["a_lunch_1"], 9999]) == 1
    assert svc.mark_refunded(headteacher, [june["a_lunch_1"], june["a_lunch_1"]]) == 1
    assert cancellations_repo.records[june["a_lunch_1"]].refunded is True


@pytest.mark.parametrize("ids", [[], None, "1,2", 7, ["bogus", 0, -3]])
def test_empty_or_malformed_id_list_is_rejected(container, headteacher, ids):
    with pytest.raises(ValidationError):
        container.settlement_service.mark_refunded(headteacher, ids)
    with pytest.raises(ValidationError):
        container.settlement_service.generate_reversing_payments(headteacher, ids, now=NOW)


def test_non_managers_are_forbidden(container, teacher, parent_a, june, settlement_store, cancellations_repo):
    svc = container.settlement_service
    for caller in (teacher, parent_a):
        with pytest.raises(AuthorizationError):
            svc.list_settlements(caller)
        with pytest.raises(AuthorizationError):
            svc.mark_refunded(caller, [june["a_lunch_1"]])
        with pytest.raises(AuthorizationError):
            svc.generate_reversing_payments(caller, [june["a_lunch_1"]], now=NOW)

    assert settlement_store.payments == []
    assert not any(r.refunded for r in cancellations_repo.records.values())


def test_role_is_checked_before_input(container, teacher):
    with pytest.raises(AuthorizationError):
        container.settlement_service.mark_refunded(teacher, [])


def test_anonymous_caller_is_unauthenticated(container):
    with pytest.raises(AuthenticationError):
        container.settlement_service.list_settlements(None)


def test_list_filters_are_forwarded(container, headteacher, june, cancellations_repo):
    container.settlement_service.list_settlements(
        headteacher,
        start_date=date(2025, 6, 1),
        end_date=date(2025, 6, 30),
        group_id=2,
        child_id=2,
        only_unrefunded=True,
    )

    args = cancellations_repo.last_list_args
    assert args["child_ids"] == [2]
    assert args["group_id"] == 2
    assert args["refunded"] is False
    assert args["start_date"] == date(2025, 6, 1)


def test_group_filter_limits_report(container, headteacher, june):
    report = container.settlement_service.list_settlements(headteacher, group_id=1)

    assert [s.child_id for s in report.settlements] == [1]
    assert report.settlements[0].total_unrefunded == Decimal("28.00")


def test_malformed_ids_are_dropped_from_bulk_refund(container, headteacher, june, cancellations_repo):
    count = container.settlement_service.mark_refunded(headteacher, [june["a_lunch_1"], "bogus", 0, -3])

    assert count == 1
    assert cancellations_repo.records[june["a_lunch_1"]].refunded is True


def test_malformed_ids_are_dropped_from_payment_generation(container, headteacher, june, settlement_store):
    payments = container.settlement_service.generate_reversing_payments(
        headteacher, [june["a_lunch_1"], "bogus", 0], now=NOW
    )

    assert [(p.child_id, p.amount) for p in payments] == [(1, Decimal("-12.50"))]
    assert len(settlement_store.payments) == 1


def test_failed_refund_flagging_leaves_no_payment_and_retry_pays_once(
    container, headteacher, june, settlement_store, cancellations_repo
):
    svc = container.settlement_service
    settlement_store.fail_when_flagging = 1

    with pytest.raises(RuntimeError):
        svc.generate_reversing_payments(headteacher, [june["a_lunch_1"]], now=NOW)
    assert settlement_store.payments == []
    assert cancellations_repo.records[june["a_lunch_1"]].refunded is False

    svc.generate_reversing_payments(headteacher, [june["a_lunch_1"]], now=NOW)
    svc.generate_reversing_payments(headteacher, [june["a_lunch_1"]], now=NOW)

    assert [p.amount for p in settlement_store.payments] == [Decimal("-12.50")]


def test_rows_settled_by_someone_else_meanwhile_are_not_paid_again(
    container, headteacher, june, settlement_store, cancellations_repo
):
    real_list_rows = cancellations_repo.list_rows

    def list_then_settle_elsewhere(**kwargs):
        rows = real_list_rows(**kwargs)
        cancellations_repo.mark_refunded([june["a_lunch_1"]])
        return rows

    cancellations_repo.list_rows = list_then_settle_elsewhere

    payments = container.settlement_service.generate_reversing_payments(
        headteacher, [june["a_lunch_1"], june["b_lunch"]], now=NOW
    )

    assert [p.child_id for p in payments] == [2]
    assert len(settlement_store.payments) == 1


def test_single_lunch_refund_end_to_end(container, headteacher, cancellations_repo, settlement_store):
    cid = cancellations_repo.add(child_id=1, meal_date=date(2025, 6, 12), meal_type=MealType.LUNCH)
    svc = container.settlement_service

    before = svc.list_settlements(headteacher)
    [ala] = before.settlements
    assert ala.total_unrefunded == Decimal("12.50")
    assert ala.total_refunded == Decimal("0")

    [payment] = svc.generate_reversing_payments(headteacher, [cid], now=NOW)
    assert payment.amount == Decimal("-12.50")
    assert payment.status == PaymentStatus.PAID
    assert cancellations_repo.records[cid].refunded is True

    assert svc.generate_reversing_payments(headteacher, [cid], now=NOW) == []
    assert len(settlement_store.payments) == 1

    [after] = svc.list_settlements(headteacher).settlements
    assert after.total_unrefunded == Decimal("0")
    assert after.total_refunded == Decimal("12.50")
