from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Optional

from ..core.enums import MealType
from ..core.exceptions import ValidationError


def require_positive_id(value: Any, field_name: str) -> int:
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field_name} is required")
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is not a valid id")
    if parsed <= 0:
        raise ValidationError(f"{field_name} is not a valid id")
    return parsed


def optional_id(value: Any, field_name: str) -> Optional[int]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return require_positive_id(value, field_name)


def parse_meal_type(value: Any) -> MealType:
    if isinstance(value, MealType):
        return value
    if not value:
        raise ValidationError("mealType is required")
    try:
        return MealType(str(value).strip())
    except ValueError:
        raise ValidationError(f"Unknown meal type: {value!r}")


def require_id_list(values: Any, field_name: str) -> list[int]:
    """Normalize a bulk id list.

    Malformed or non-positive entries are dropped, duplicates removed and
    order kept; callers compare the returned count with what they sent. Only a
    missing list, a non-list, or a list with no usable id is rejected.
    """

    if values is None or isinstance(values, (str, bytes, dict)) or not isinstance(values, Iterable):
        raise ValidationError(f"{field_name} must be a non-empty list")
    out: list[int] = []
    for v in values:
        try:
            parsed = require_positive_id(v, field_name)
        except ValidationError:
            continue
        if parsed not in out:
            out.append(parsed)
    if not out:
        raise ValidationError(f"{field_name} must contain at least one valid id")
    return out
