"""Utilities for parsing 12-hour clock labels such as ``"9 AM"``."""

from __future__ import annotations

import re
from typing import Iterable, List, Tuple

_NUMBER_RE = re.compile(r"^\d{1,2}$")
_PERIODS = ("AM", "PM")


class InvalidLabelFormat(ValueError):
    """Raised when a time label is not of the form ``"<1-12> AM|PM"``."""

    def __init__(self, label: object, reason: str = "expected '<1-12> AM|PM'"):
        self.label = label
        super().__init__(f"invalid time label {label!r}: {reason}")


def parse_label(label: str) -> int:
    """Parse ``label`` into an hour of the day in ``[0, 23]``.

    ``"12 AM"`` is midnight (0) and ``"12 PM"`` is noon (12).
    :class:`InvalidLabelFormat` is raised on malformed input.
    """

    if not isinstance(label, str):
        raise InvalidLabelFormat(label, "not a string")
    parts = label.split()
    if len(parts) != 2:
        raise InvalidLabelFormat(label)
    number_s, period = parts
    if not _NUMBER_RE.match(number_s) or period not in _PERIODS:
        raise InvalidLabelFormat(label)
    number = int(number_s)
    if not 1 <= number <= 12:
        raise InvalidLabelFormat(label, "hour outside 1-12")

    if period == "PM" and number != 12:
        return number + 12
    if period == "AM" and number == 12:
        return 0
    return number


def format_label(hour: int) -> str:
    """Return the canonical 12-hour label for ``hour`` (0-23)."""

    if not 0 <= hour <= 23:
        raise ValueError(f"hour must be within 0-23, got {hour}")
    hour12 = hour % 12 or 12
    period = "PM" if hour >= 12 else "AM"
    return f"{hour12} {period}"


def label_hours(labels: Iterable[str]) -> List[int]:
    """Parse every label, failing on the first malformed one."""

    return [parse_label(label) for label in labels]


def available_hours(labels: Iterable[str]) -> List[Tuple[int, str]]:
    """Return the distinct hours present in ``labels`` with their labels.

    The result is sorted by hour and is suitable for offering range
    endpoints, e.g. ``[(9, "9 AM"), (13, "1 PM")]``.
    """

    hours = set(label_hours(labels))
    return [(h, format_label(h)) for h in sorted(hours)]
