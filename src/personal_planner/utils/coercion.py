"""
Primitive coercers for untrusted document values.

Every function here is total: it accepts any value and returns a safe
typed result (or the supplied fallback) instead of raising.
"""

import math
import re
from typing import Any, TypeVar

T = TypeVar("T")

ISO_DATE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


def is_plain_object(value: Any) -> bool:
    """Return True for JSON objects (dicts), False for lists and scalars."""
    return isinstance(value, dict)


def number_or_null(value: Any) -> float | None:
    """
    Convert a numeric or numeric-string value to a finite float.

    Args:
        value: Any value.

    Returns:
        Finite float, or None for booleans, blank strings and non-finite input.
    """
    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None

    return number if math.isfinite(number) else None


def int_or_null(value: Any) -> int | None:
    """Round a numeric value half-up to an int; None propagates."""
    number = number_or_null(value)
    if number is None:
        return None
    return math.floor(number + 0.5)


def clamp_int(value: Any, minimum: int, maximum: int, fallback: int) -> int:
    """
    Coerce to int and clamp into [minimum, maximum].

    Args:
        value: Any value.
        minimum: Lower bound (inclusive).
        maximum: Upper bound (inclusive).
        fallback: Returned when the value is not numeric.

    Returns:
        Clamped integer.
    """
    number = int_or_null(value)
    if number is None:
        return fallback
    return min(maximum, max(minimum, number))


def enum_or_default(value: Any, allowed: tuple[T, ...] | list[T], default: T) -> T:
    """Return value if it is exactly one of allowed, else default."""
    for candidate in allowed:
        if type(value) is type(candidate) and value == candidate:
            return value
    return default


def date_string_or_null(value: Any) -> str | None:
    """Return value (trimmed) only if it matches YYYY-MM-DD."""
    if not isinstance(value, str):
        return None
    text = value.strip()
    return text if ISO_DATE_PATTERN.fullmatch(text) else None


def string_or_default(value: Any, default: str) -> str:
    """Keep strings as-is, fall back to default for anything else."""
    return value if isinstance(value, str) else default


def text_or_empty(value: Any) -> str:
    """Stringify scalars, mapping None to an empty string."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return ""


def clamp_int_or_null(value: Any, minimum: int, maximum: int) -> int | None:
    """Like clamp_int, but None (non-numeric input) propagates."""
    number = int_or_null(value)
    if number is None:
        return None
    return min(maximum, max(minimum, number))
