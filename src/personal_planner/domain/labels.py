"""
Legacy exercise label parsing and serialization.

Older documents stored workout templates as free-text labels such as
``"Bench press — 4×6-8"``. This module maps those labels to structured
exercise fields and back.
"""

import re
from typing import Any

from pydantic import BaseModel

from personal_planner.domain.planner import SETS_RANGE, Exercise

EM_DASH = "—"
TIMES = "×"

_HYPHEN_SEPARATOR = re.compile(r"\s+-\s+")
_SETS_BY_REPS = re.compile(
    r"(?P<sets>\d+)\s*[x×]\s*(?P<reps>\d+(?:\s*[-–]\s*\d+)?)",
    re.IGNORECASE,
)
_SETS_ONLY = re.compile(r"(?P<sets>\d+)\s*sets?", re.IGNORECASE)


class ParsedLabel(BaseModel):
    """Structured fields recovered from a legacy label."""

    name: str = ""
    sets: int | None = None
    reps_target: str | None = None


def _split_label(label: str) -> tuple[str, str]:
    # An em-dash wins over " - " so hyphenated names survive a round-trip.
    if EM_DASH in label:
        name, meta = label.split(EM_DASH, 1)
        return name.strip(), meta.strip()

    match = _HYPHEN_SEPARATOR.search(label)
    if match:
        return label[: match.start()].strip(), label[match.end():].strip()

    return label.strip(), ""


def _sets_in_range(value: str) -> int | None:
    sets = int(value)
    if SETS_RANGE[0] <= sets <= SETS_RANGE[1]:
        return sets
    return None


def parse_label(label: Any) -> ParsedLabel:
    """
    Parse a legacy exercise label.

    The meta part after the separator is matched, in order, against
    ``N×R`` / ``NxR`` (R may be a range), then ``N sets``; anything else is
    kept verbatim as a free-text rep target.

    Args:
        label: Label text; non-strings yield an empty result.

    Returns:
        Parsed name, sets and rep target.
    """
    if not isinstance(label, str) or not label.strip():
        return ParsedLabel()

    name, meta = _split_label(label)
    if not meta:
        return ParsedLabel(name=name)

    match = _SETS_BY_REPS.fullmatch(meta)
    if match:
        sets = _sets_in_range(match.group("sets"))
        if sets is not None:
            return ParsedLabel(name=name, sets=sets, reps_target=match.group("reps"))

    match = _SETS_ONLY.fullmatch(meta)
    if match:
        sets = _sets_in_range(match.group("sets"))
        if sets is not None:
            return ParsedLabel(name=name, sets=sets)

    return ParsedLabel(name=name, reps_target=meta)


def serialize_exercise(exercise: Exercise | ParsedLabel) -> str:
    """
    Render an exercise as a legacy label.

    Args:
        exercise: Structured exercise (or parsed label).

    Returns:
        ``name — sets×reps``, ``name — N sets``, ``name — reps`` or ``name``.
    """
    name = (exercise.name or "").strip()
    reps = (exercise.reps_target or "").strip()
    sets = exercise.sets

    if sets is not None and reps:
        meta = f"{sets}{TIMES}{reps}"
    elif sets is not None:
        meta = f"{sets} sets"
    else:
        meta = reps

    if not meta:
        return name
    return f"{name} {EM_DASH} {meta}"
