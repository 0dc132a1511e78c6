"""Helpers for slicing aligned label histories."""

from __future__ import annotations

from typing import List, Sequence, TypeVar

import numpy as np

from ..types import HourRange, Span
from .timeparse import label_hours

T = TypeVar("T")


def tail_span(length: int, size: int) -> Span:
    """Return the span covering the last ``size`` of ``length`` elements.

    Histories shorter than ``size`` yield a span over everything.
    ``ValueError`` is raised if ``size`` is not positive.
    """

    if size <= 0:
        raise ValueError("size must be positive")
    if length < 0:
        raise ValueError("length must not be negative")
    return Span(max(0, length - size), length)


def hour_indices(labels: Sequence[str], hours: HourRange) -> List[int]:
    """Return the indices of ``labels`` whose hour falls inside ``hours``.

    Every label is parsed before anything is selected, so a malformed
    label raises :class:`~footflow.utils.timeparse.InvalidLabelFormat`
    instead of producing a partial selection.
    """

    parsed = np.asarray(label_hours(labels), dtype=int)
    if parsed.size == 0 or hours.is_empty:
        return []
    mask = (parsed >= hours.start) & (parsed <= hours.end)
    return np.flatnonzero(mask).tolist()


def take(data: Sequence[T], indices: Sequence[int]) -> List[T]:
    """Return the elements of ``data`` at ``indices``, in order."""

    return [data[i] for i in indices]
