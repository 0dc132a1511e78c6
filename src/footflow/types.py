"""Common type helpers for footflow.

This module defines the immutable containers exchanged between the feed,
the window manager and the metrics layer.  Sequences are stored as tuples
so that a held :class:`Window` can be handed to readers without copying
and without any risk of it changing underneath them.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional, Sequence, Tuple


class SnapshotMismatchError(ValueError):
    """Raised when a snapshot breaks the per-location alignment contract."""

    def __init__(self, message: str, *, name: Optional[str] = None):
        self.name = name
        super().__init__(message)


def _as_floats(values: Iterable[float]) -> Tuple[float, ...]:
    return tuple(float(v) for v in values)


@dataclass(frozen=True)
class LocationSeries:
    """Traffic and dwell values of one location over a label sequence."""

    name: str
    color: Optional[str] = None
    traffic: Tuple[float, ...] = ()
    dwell: Tuple[float, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "traffic", _as_floats(self.traffic))
        object.__setattr__(self, "dwell", _as_floats(self.dwell))

    def __len__(self) -> int:
        return len(self.traffic)

    @property
    def latest_traffic(self) -> float:
        return self.traffic[-1] if self.traffic else 0.0

    @property
    def latest_dwell(self) -> float:
        return self.dwell[-1] if self.dwell else 0.0

    def take(self, indices: Sequence[int]) -> "LocationSeries":
        """Return a copy holding only the points at ``indices``."""

        return LocationSeries(
            self.name,
            self.color,
            tuple(self.traffic[i] for i in indices),
            tuple(self.dwell[i] for i in indices),
        )

    def replace_values(
        self, traffic: Sequence[float], dwell: Sequence[float]
    ) -> "LocationSeries":
        return LocationSeries(self.name, self.color, tuple(traffic), tuple(dwell))


@dataclass(frozen=True)
class Snapshot:
    """Full-history push from the feed for every tracked location."""

    labels: Tuple[str, ...] = ()
    series: Tuple[LocationSeries, ...] = ()
    sequence: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "labels", tuple(self.labels))
        object.__setattr__(self, "series", tuple(self.series))

    def __len__(self) -> int:
        return len(self.labels)

    @property
    def last_label(self) -> Optional[str]:
        return self.labels[-1] if self.labels else None

    def names(self) -> list[str]:
        return [s.name for s in self.series]

    def get(self, name: str) -> Optional[LocationSeries]:
        for s in self.series:
            if s.name == name:
                return s
        return None

    def validate(self) -> None:
        """Check that every series is index-aligned with ``labels``.

        ``SnapshotMismatchError`` is raised for the first location whose
        traffic or dwell length differs from the label count, and for
        duplicate location names.
        """

        seen: set[str] = set()
        n = len(self.labels)
        for s in self.series:
            if s.name in seen:
                raise SnapshotMismatchError(
                    f"duplicate location name {s.name!r} in snapshot", name=s.name
                )
            seen.add(s.name)
            if len(s.traffic) != n or len(s.dwell) != n:
                raise SnapshotMismatchError(
                    f"location {s.name!r} has {len(s.traffic)} traffic and "
                    f"{len(s.dwell)} dwell values for {n} labels",
                    name=s.name,
                )


class WindowMode(str, enum.Enum):
    """Update discipline of the held window."""

    LIVE_TAIL = "live_tail"
    RANGE_SELECT = "range_select"


@dataclass(frozen=True)
class HourRange:
    """Inclusive hour-of-day interval ``[start, end]``."""

    start: int
    end: int

    def contains(self, hour: int) -> bool:
        return self.start <= hour <= self.end

    @property
    def is_empty(self) -> bool:
        return self.start > self.end


@dataclass(frozen=True)
class Span:
    """Index based span used for slicing label histories."""

    start: int
    end: int

    @property
    def width(self) -> int:
        """Return the number of elements covered by the span."""

        return self.end - self.start


@dataclass(frozen=True)
class Window:
    """Bounded view of the latest history currently on display."""

    mode: WindowMode = WindowMode.LIVE_TAIL
    labels: Tuple[str, ...] = ()
    series: Tuple[LocationSeries, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "labels", tuple(self.labels))
        object.__setattr__(self, "series", tuple(self.series))

    def __len__(self) -> int:
        return len(self.labels)

    def __iter__(self) -> Iterator[LocationSeries]:
        return iter(self.series)

    @property
    def last_label(self) -> Optional[str]:
        return self.labels[-1] if self.labels else None

    def names(self) -> list[str]:
        return [s.name for s in self.series]

    def get(self, name: str) -> Optional[LocationSeries]:
        for s in self.series:
            if s.name == name:
                return s
        return None


__all__ = [
    "HourRange",
    "LocationSeries",
    "Snapshot",
    "SnapshotMismatchError",
    "Span",
    "Window",
    "WindowMode",
]
