"""High-level session object tying the feed to the derived view.

:class:`TrafficDashboard` wires together the pieces of :mod:`footflow.core`:

1. snapshots from the feed go through a :class:`~footflow.core.Reconciler`
   into the :class:`~footflow.core.WindowManager`;
2. user actions (range selection, reset, selection toggles, forecast
   toggle) are forwarded to the manager or the
   :class:`~footflow.core.SelectionFilter`;
3. :meth:`TrafficDashboard.view` takes the current immutable window and
   selection and computes every derived figure from scratch.

Each call runs to completion synchronously; nothing in a
:class:`DashboardView` is cached or shared with the next one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Tuple

from .config import Settings
from .core import (
    ReconcileAction,
    ReconcileResult,
    Reconciler,
    SelectionFilter,
    WindowManager,
    WindowMetrics,
    compute_metrics,
)
from .types import HourRange, Snapshot, Window

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardView:
    """Everything a renderer needs for one frame."""

    window: Window
    selection: FrozenSet[str]
    metrics: WindowMetrics
    hour_range: Optional[HourRange] = None
    forecast_visible: bool = True
    range_options: Tuple[Tuple[int, str], ...] = field(default_factory=tuple)


class TrafficDashboard:
    """Single owner of the window state for one dashboard.

    Parameters
    ----------
    settings:
        Optional :class:`~footflow.config.Settings`; the window capacity,
        metric parameters and initial selection are taken from it.
    capacity:
        Overrides ``settings.window.capacity``.
    """

    def __init__(self, settings: Settings | None = None, *, capacity: int | None = None):
        self.settings = settings or Settings()
        self.manager = WindowManager(capacity, settings=self.settings)
        self.reconciler = Reconciler(self.manager)
        self.selection = SelectionFilter()

    def on_snapshot(self, snapshot: Snapshot) -> ReconcileResult:
        """Feed one snapshot.

        The selection is seeded by the first initialization that brings
        locations, so an empty opening snapshot does not leave it empty.
        """

        result = self.reconciler.apply(snapshot)
        if result.action is ReconcileAction.INITIALIZE and not len(self.selection):
            wanted = self.settings.selection.initial
            names = snapshot.names()
            if wanted:
                names = [n for n in names if n in wanted] or names
            self.selection.initialize(names)
            logger.info("selection initialised with %d locations", len(names))
        return result

    def select_range(self, start: int, end: int) -> Window:
        return self.manager.select_range(start, end)

    def reset_to_live_tail(self) -> Window:
        return self.manager.reset_to_live_tail()

    def toggle_selection(self, name: str) -> bool:
        return self.selection.toggle(name)

    def toggle_forecast(self) -> bool:
        return self.manager.toggle_forecast()

    def view(self) -> DashboardView:
        """Compute a fresh :class:`DashboardView` from the current state."""

        window = self.manager.window
        selection = self.selection.active
        metrics = compute_metrics(window, selection, settings=self.settings)
        return DashboardView(
            window=window,
            selection=selection,
            metrics=metrics,
            hour_range=self.manager.hour_range,
            forecast_visible=self.manager.forecast_visible,
            range_options=tuple(self.manager.range_options()),
        )


__all__ = ["DashboardView", "TrafficDashboard"]
