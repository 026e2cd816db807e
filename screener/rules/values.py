"""Value coercion shared by the loader, answer normalization and evaluators.

Numbers are always compared as Decimal so that ``2``, ``"2"``, ``2.0`` and
``Decimal("2.00")`` are the same value.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any


def to_decimal(value: Any) -> Decimal | None:
    """Coerce a number or numeric string to a finite Decimal.

    Returns None when the value is not numeric. Booleans are not numbers here.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        text = value.strip() if isinstance(value, str) else str(value)
        if not text:
            return None
        try:
            result = Decimal(text)
        except InvalidOperation:
            return None
    else:
        return None
    if not result.is_finite():
        return None
    return result


def index_key(value: Any) -> Any:
    """Normalize a value used to index a threshold table."""
    number = to_decimal(value)
    if number is not None:
        return number
    if isinstance(value, str):
        return value.strip()
    return value
