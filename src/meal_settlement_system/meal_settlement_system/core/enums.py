from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Caller roles issued by the session layer."""

    PARENT = "PARENT"
    TEACHER = "TEACHER"
    HEADTEACHER = "HEADTEACHER"
    ADMIN = "ADMIN"


STAFF_ROLES = frozenset({Role.TEACHER, Role.HEADTEACHER, Role.ADMIN})
MANAGER_ROLES = frozenset({Role.HEADTEACHER, Role.ADMIN})


class MealType(str, Enum):
    """Meals a child can be signed up for on a given day."""

    BREAKFAST = "BREAKFAST"
    LUNCH = "LUNCH"
    SNACK = "SNACK"


class PaymentStatus(str, Enum):
    """Status values of the external payment ledger."""

    PENDING = "PENDING"
    PAID = "PAID"
    OVERDUE = "OVERDUE"
