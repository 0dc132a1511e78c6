from __future__ import annotations

"""Stateful holder of the displayed window.

:class:`WindowManager` owns the only mutable piece of the dashboard: the
slice of every location's history that is currently on display.  It runs
in one of two modes:

``LIVE_TAIL``
    The window holds the last ``capacity`` points and advances as new
    snapshots arrive (see :mod:`footflow.core.reconcile`).

``RANGE_SELECT``
    The window holds every point of the full history whose hour of day
    falls inside a user supplied ``[start, end]`` range.  Each new range
    rebuilds the window from scratch; nothing is patched incrementally in
    this mode, which keeps the filter trivially correct at the cost of a
    full pass over a (small) history.

Every change replaces :attr:`WindowManager.window` with a new immutable
:class:`~footflow.types.Window`, and every rebuild is computed completely
before it is assigned, so failures never leave a half-applied window.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from ..config import Settings
from ..types import HourRange, LocationSeries, Snapshot, Window, WindowMode
from ..utils.timeparse import available_hours, label_hours, parse_label
from ..utils.windows import hour_indices, tail_span, take

logger = logging.getLogger(__name__)


class WindowStateError(RuntimeError):
    """Raised when an operation needs a history that has not arrived yet."""


class WindowManager:
    """Hold and update the displayed window of a multi-location feed.

    Parameters
    ----------
    capacity:
        Live-tail length ``K``.  Defaults to ``settings.window.capacity``.
    settings:
        Optional :class:`~footflow.config.Settings` supplying defaults.
    """

    def __init__(self, capacity: int | None = None, *, settings: Settings | None = None):
        if settings is None:
            settings = Settings()
        self.capacity = settings.window.capacity if capacity is None else capacity
        if self.capacity <= 0:
            raise ValueError("capacity must be positive")
        self._history: Optional[Snapshot] = None
        self._window = Window()
        self._hours: Optional[HourRange] = None
        self.forecast_visible = True

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def window(self) -> Window:
        return self._window

    @property
    def mode(self) -> WindowMode:
        return self._window.mode

    @property
    def hour_range(self) -> Optional[HourRange]:
        """Range the window currently covers (or was filtered by)."""

        return self._hours

    @property
    def history(self) -> Optional[Snapshot]:
        """Latest snapshot received, i.e. the full label history."""

        return self._history

    @property
    def initialized(self) -> bool:
        return self._history is not None

    def range_options(self) -> List[Tuple[int, str]]:
        """Hours available in the current history as ``(hour, label)``."""

        if self._history is None:
            return []
        return available_hours(self._history.labels)

    def _require_history(self) -> Snapshot:
        if self._history is None:
            raise WindowStateError("no snapshot has been received yet")
        return self._history

    # ------------------------------------------------------------------
    # Rebuilds
    # ------------------------------------------------------------------

    def _tail_window(self, snapshot: Snapshot) -> Tuple[Window, Optional[HourRange]]:
        span = tail_span(len(snapshot.labels), self.capacity)
        indices = range(span.start, span.end)
        labels = snapshot.labels[span.start : span.end]
        hours: Optional[HourRange] = None
        if labels:
            hours = HourRange(parse_label(labels[0]), parse_label(labels[-1]))
        window = Window(
            WindowMode.LIVE_TAIL,
            labels,
            tuple(s.take(indices) for s in snapshot.series),
        )
        return window, hours

    def initialize(self, snapshot: Snapshot) -> Window:
        """Start (or restart) live-tail mode from ``snapshot``.

        The window becomes the last ``capacity`` points of every location,
        or the whole history if it is shorter.  Locations that appear in
        ``snapshot`` but not in the old window are picked up here and only
        here.
        Every label of the history is parsed first; a malformed one raises
        :class:`~footflow.utils.timeparse.InvalidLabelFormat` and nothing
        changes.
        """

        snapshot.validate()
        label_hours(snapshot.labels)
        window, hours = self._tail_window(snapshot)
        self._history = snapshot
        self._window = window
        self._hours = hours
        self.forecast_visible = True
        logger.info(
            "live tail initialised with %d of %d labels for %d locations",
            len(window),
            len(snapshot),
            len(window.series),
        )
        return window

    def select_range(self, start: int, end: int) -> Window:
        """Switch to (or stay in) range-select mode for hours ``[start, end]``.

        The entire history is filtered, not just the held window.  A range
        with ``start > end`` yields an empty window.  Hours outside 0-23
        raise ``ValueError``; a malformed label in the history raises
        :class:`~footflow.utils.timeparse.InvalidLabelFormat`.  In both
        cases the previous state is left untouched.
        """

        for hour in (start, end):
            if not 0 <= hour <= 23:
                raise ValueError(f"hour must be within 0-23, got {hour}")
        history = self._require_history()
        hours = HourRange(start, end)
        indices = hour_indices(history.labels, hours)
        window = Window(
            WindowMode.RANGE_SELECT,
            tuple(take(history.labels, indices)),
            tuple(s.take(indices) for s in history.series),
        )
        previous = self.mode
        self._window = window
        self._hours = hours
        self.forecast_visible = False
        logger.info(
            "%s -> range select [%d, %d]: %d of %d labels",
            previous.value,
            start,
            end,
            len(window),
            len(history),
        )
        return window

    def reset_to_live_tail(self) -> Window:
        """Leave range-select mode and rebuild the live tail from history."""

        history = self._require_history()
        window, hours = self._tail_window(history)
        self._window = window
        self._hours = hours
        self.forecast_visible = True
        logger.info("reset to live tail with %d labels", len(window))
        return window

    def toggle_forecast(self) -> bool:
        self.forecast_visible = not self.forecast_visible
        return self.forecast_visible

    # ------------------------------------------------------------------
    # Incremental updates (live tail only, driven by the reconciler)
    # ------------------------------------------------------------------

    def record(self, snapshot: Snapshot) -> None:
        """Remember ``snapshot`` as the current history without touching
        the window."""

        self._require_history()
        self._history = snapshot

    def shift(self, snapshot: Snapshot) -> Window:
        """Advance the live tail by the latest point of ``snapshot``.

        Each held location drops its oldest point and gains the latest
        value of the same-named location in ``snapshot``.  While the
        window is shorter than ``capacity`` it grows instead of dropping.
        A held location missing from ``snapshot`` keeps its values as they
        are.  New locations in ``snapshot`` are not introduced.
        """

        self._require_history()
        held = self._window
        drop = 1 if len(held) >= self.capacity else 0
        label = snapshot.labels[-1]
        series: List[LocationSeries] = []
        for loc in held.series:
            incoming = snapshot.get(loc.name)
            if incoming is None or not len(incoming):
                logger.warning(
                    "location %r missing from snapshot; keeping its values unshifted",
                    loc.name,
                )
                series.append(loc)
                continue
            series.append(
                loc.replace_values(
                    loc.traffic[drop:] + (incoming.latest_traffic,),
                    loc.dwell[drop:] + (incoming.latest_dwell,),
                )
            )
        window = Window(WindowMode.LIVE_TAIL, held.labels[drop:] + (label,), tuple(series))
        self._history = snapshot
        self._window = window
        logger.debug("shifted window to %r (dropped %d)", label, drop)
        return window

    def patch(self, snapshot: Snapshot) -> Sequence[str]:
        """Overwrite the last point of held locations whose latest values
        changed in ``snapshot``.

        Labels and every earlier point are left as they are.  Returns the
        names of the locations that were patched; an empty result means
        the window object was not replaced at all.
        """

        self._require_history()
        held = self._window
        changed: List[str] = []
        series: List[LocationSeries] = []
        for loc in held.series:
            incoming = snapshot.get(loc.name)
            if incoming is None or not len(incoming) or not len(loc):
                series.append(loc)
                continue
            traffic, dwell = incoming.latest_traffic, incoming.latest_dwell
            if loc.traffic[-1] == traffic and loc.dwell[-1] == dwell:
                series.append(loc)
                continue
            changed.append(loc.name)
            series.append(
                loc.replace_values(loc.traffic[:-1] + (traffic,), loc.dwell[:-1] + (dwell,))
            )
        self._history = snapshot
        if changed:
            self._window = Window(held.mode, held.labels, tuple(series))
            logger.debug("patched latest point of %s", ", ".join(changed))
        return changed


__all__ = ["WindowManager", "WindowStateError"]
