"""
Identifier generation utilities.

Ids are a base-36 millisecond timestamp followed by a short random base-36
suffix, which is unique in practice within a single session.
"""

import random
import re
import string
import time

_BASE36_ALPHABET = string.digits + string.ascii_lowercase
_SUFFIX_LENGTH = 5


def to_base36(number: int) -> str:
    """
    Encode a non-negative integer in base 36.

    Args:
        number: Integer to encode.

    Returns:
        Lowercase base-36 string.
    """
    if number <= 0:
        return "0"

    digits: list[str] = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36_ALPHABET[remainder])

    return "".join(reversed(digits))


def make_id(now_ms: int | None = None) -> str:
    """
    Generate a fresh identifier.

    Args:
        now_ms: Optional timestamp in milliseconds (defaults to the current time).

    Returns:
        Identifier of the form ``<time36>-<random5>``.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)

    suffix = "".join(random.choices(_BASE36_ALPHABET, k=_SUFFIX_LENGTH))
    return f"{to_base36(now_ms)}-{suffix}"


def slugify_label(label: str) -> str:
    """Lowercase a label and keep only ``[a-z0-9-]`` with dashes for spaces."""
    slug = re.sub(r"\s+", "-", label.lower().strip())
    return re.sub(r"[^a-z0-9-]", "", slug)


def make_checklist_id(label: str) -> str:
    """Generate a checklist id prefixed with the slug of its label."""
    return f"{slugify_label(label)}-{make_id()}"
