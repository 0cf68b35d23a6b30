from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

import mysql.connector

from ..core.constants import MONEY_QUANTUM, MYSQL_DUPLICATE_KEY_ERRNO
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def in_clause(values: Sequence[Any]) -> str:
    """Placeholder list for `IN (...)`; callers must not pass an empty sequence."""
    return ", ".join(["%s"] * len(values))


def is_duplicate_key(exc: mysql.connector.Error) -> bool:
    return getattr(exc, "errno", None) == MYSQL_DUPLICATE_KEY_ERRNO


def normalize_mysql_decimal(value: Any) -> Optional[Decimal]:
    """Normalize DECIMAL columns to a 2-place Decimal.

    mysql-connector returns DECIMAL as Decimal, but pure-python mode and
    hand-written fixtures may hand back float, int or str.
    """

    if value is None:
        return None
    if isinstance(value, Decimal):
        return value.quantize(MONEY_QUANTUM)
    if isinstance(value, float):
        return Decimal(str(value)).quantize(MONEY_QUANTUM)
    if isinstance(value, (int, str)):
        return Decimal(value).quantize(MONEY_QUANTUM)
    raise TypeError(f"Unsupported MySQL DECIMAL value type: {type(value)!r}")


def normalize_mysql_date(value: Any) -> date:
    """Normalize DATE values (date, datetime or 'YYYY-MM-DD')."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return datetime.strptime(value.strip()[:10], "%Y-%m-%d").date()
    raise TypeError(f"Unsupported MySQL DATE value type: {type(value)!r}")
