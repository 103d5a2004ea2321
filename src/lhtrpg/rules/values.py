"""Lenient field types for persisted ``system`` bags.

Sheets are edited by hand, so stored numbers can be missing, cleared to null,
fractional or plain text. These types turn such values into a default instead
of failing validation, which keeps every stored actor derivable.
"""

import math
from functools import partial
from typing import Annotated, Any

from pydantic import BeforeValidator


def to_int(value: Any, default: int = 0) -> int:
    """
    Coerce a stored number to an int.

    Fractional values are truncated toward zero. Missing, non-numeric and
    non-finite values give ``default``.

    Examples:
        >>> to_int("2.5")
        2
        >>> to_int(None, default=1)
        1
        >>> to_int("1e400")
        0
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    if not math.isfinite(number):
        return default
    return math.trunc(number)


def to_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    return bool(value)


def to_key(value: Any) -> str:
    """Table keys; a cleared field is an empty key."""
    return "" if value is None else str(value)


Number = Annotated[int, BeforeValidator(to_int)]
Rank = Annotated[int, BeforeValidator(partial(to_int, default=1))]
Flag = Annotated[bool, BeforeValidator(to_flag)]
Key = Annotated[str, BeforeValidator(to_key)]
