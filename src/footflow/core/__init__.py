"""Core state machine and metrics for footflow."""

from .window import WindowManager, WindowStateError
from .reconcile import ReconcileAction, ReconcileResult, Reconciler, StaleSnapshotError, reconcile
from .selection import SelectionFilter
from .metrics import (
    DwellSummary,
    LocationStats,
    PathRanking,
    PathScore,
    SummaryMetrics,
    WindowMetrics,
    compute_metrics,
    path_scores,
    rank_paths,
    summary_metrics,
    window_stats,
)

__all__ = [
    "WindowManager",
    "WindowStateError",
    "ReconcileAction",
    "ReconcileResult",
    "Reconciler",
    "StaleSnapshotError",
    "reconcile",
    "SelectionFilter",
    "DwellSummary",
    "LocationStats",
    "PathRanking",
    "PathScore",
    "SummaryMetrics",
    "WindowMetrics",
    "compute_metrics",
    "path_scores",
    "rank_paths",
    "summary_metrics",
    "window_stats",
]
