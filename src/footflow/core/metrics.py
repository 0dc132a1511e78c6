from __future__ import annotations

"""Derived metrics computed from a held window.

All functions here are pure: they read a :class:`~footflow.types.Window`
(and optionally the active selection) and return fresh dataclasses.
Divisions by a zero dwell time are defined to yield ``0`` so that every
aggregate stays a finite number.

Rounding follows the half-up convention of the dashboard's display
formatting (``0.125 -> 0.13``) rather than Python's banker's rounding.
"""

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Collection, List, Optional, Sequence, Tuple

import numpy as np

from ..config import Settings
from ..types import LocationSeries, Window

NO_LOCATION = "N/A"


def round_half_up(value: float, digits: int) -> float:
    """Round ``value`` to ``digits`` decimals, ties away from zero."""

    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def point_ratios(traffic: Sequence[float], dwell: Sequence[float], decimals: int = 2) -> List[float]:
    """Return ``traffic[i] / dwell[i]`` per point, ``0`` where dwell <= 0."""

    t = np.asarray(traffic, dtype=float)
    d = np.asarray(dwell, dtype=float)
    if t.shape != d.shape:
        raise ValueError("traffic and dwell must have the same length")
    ratios = np.divide(t, d, out=np.zeros_like(t), where=d > 0)
    return [round_half_up(float(r), decimals) for r in ratios]


@dataclass(frozen=True)
class LocationStats:
    """Traffic-to-dwell ratios of one location over the window."""

    name: str
    color: Optional[str]
    ratios: Tuple[float, ...]
    current_ratio: float
    average_ratio: float
    current_traffic: float
    current_dwell: float


def location_stats(series: LocationSeries, *, decimals: int = 2) -> LocationStats:
    """Compute :class:`LocationStats` for a single location.

    ``average_ratio`` is the mean of the already rounded per-point ratios,
    rounded again.  An empty series reports zeros.
    """

    ratios = point_ratios(series.traffic, series.dwell, decimals)
    current = ratios[-1] if ratios else 0.0
    average = round_half_up(float(np.mean(ratios)), decimals) if ratios else 0.0
    return LocationStats(
        name=series.name,
        color=series.color,
        ratios=tuple(ratios),
        current_ratio=current,
        average_ratio=average,
        current_traffic=series.latest_traffic,
        current_dwell=series.latest_dwell,
    )


def window_stats(window: Window, *, settings: Settings | None = None, decimals: int | None = None) -> List[LocationStats]:
    """Compute :class:`LocationStats` for every location in ``window``."""

    if settings is None:
        settings = Settings()
    decimals = settings.metrics.ratio_decimals if decimals is None else decimals
    return [location_stats(s, decimals=decimals) for s in window.series]


# ---------------------------------------------------------------------------
# Path scores
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PathScore:
    """Efficiency of moving from ``source`` to ``target`` at the latest point."""

    source: str
    target: str
    score: float
    color: Optional[str] = None

    @property
    def label(self) -> str:
        return f"{self.source} → {self.target}"


@dataclass(frozen=True)
class PathRanking:
    """Most and least efficient paths.

    ``best`` is ordered from the highest score down; ``worst`` starts with
    the least efficient path.
    """

    best: Tuple[PathScore, ...] = ()
    worst: Tuple[PathScore, ...] = ()


def _active_series(window: Window, selection: Optional[Collection[str]]) -> List[LocationSeries]:
    if selection is None:
        return list(window.series)
    return [s for s in window.series if s.name in selection]


def path_scores(window: Window, selection: Optional[Collection[str]] = None) -> List[PathScore]:
    """Score every ordered pair of distinct active locations.

    ``score = min(traffic(source), traffic(target)) / dwell(target)`` using
    the latest point of each location, or ``0`` when the target dwell is
    not positive.  Pairs are generated source-major in window order.
    """

    latest = [
        (s.name, s.color, s.latest_traffic, s.latest_dwell)
        for s in _active_series(window, selection)
    ]
    scores: List[PathScore] = []
    for i, (src, color, src_traffic, _) in enumerate(latest):
        for j, (dst, _, dst_traffic, dst_dwell) in enumerate(latest):
            if i == j:
                continue
            flow = min(src_traffic, dst_traffic)
            score = flow / dst_dwell if dst_dwell > 0 else 0.0
            scores.append(PathScore(src, dst, score, color))
    return scores


def rank_paths(scores: Sequence[PathScore], size: int = 5) -> PathRanking:
    """Split ``scores`` into the ``size`` best and ``size`` worst paths.

    The sort is stable, so equal scores keep their generation order.
    """

    if size <= 0:
        return PathRanking()
    ordered = sorted(scores, key=lambda p: p.score, reverse=True)
    return PathRanking(best=tuple(ordered[:size]), worst=tuple(reversed(ordered[-size:])))


# ---------------------------------------------------------------------------
# Summary figures
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SummaryMetrics:
    """Headline figures computed from every location's latest point."""

    total_traffic: float = 0.0
    average_dwell: float = 0.0
    top_location: str = NO_LOCATION
    efficiency: float = 0.0


def summary_metrics(
    window: Window,
    *,
    settings: Settings | None = None,
    dwell_target: float | None = None,
    decimals: int | None = None,
) -> SummaryMetrics:
    """Compute total traffic, average dwell and the efficiency figure.

    ``efficiency`` is ``average_dwell / dwell_target * 100`` clamped to
    ``[0, 100]``, or ``0.0`` when there is no traffic at all.
    """

    if settings is None:
        settings = Settings()
    dwell_target = settings.metrics.dwell_target if dwell_target is None else dwell_target
    decimals = settings.metrics.efficiency_decimals if decimals is None else decimals

    if not window.series:
        return SummaryMetrics()
    traffic = np.array([s.latest_traffic for s in window.series], dtype=float)
    dwell = np.array([s.latest_dwell for s in window.series], dtype=float)
    total = float(traffic.sum())
    avg_dwell = float(dwell.mean())
    # argmax returns the first maximum, matching a stable descending sort
    top = window.series[int(np.argmax(traffic))].name

    efficiency = 0.0
    if total > 0:
        pct = min(100.0, max(0.0, avg_dwell / dwell_target * 100))
        efficiency = round_half_up(pct, decimals)
    return SummaryMetrics(
        total_traffic=total,
        average_dwell=avg_dwell,
        top_location=top,
        efficiency=efficiency,
    )


@dataclass(frozen=True)
class DwellSummary:
    """Distribution of held dwell values for one location."""

    name: str
    color: Optional[str]
    mean: float
    maximum: float
    minimum: float
    count: int


def dwell_summary(window: Window, *, decimals: int = 1) -> List[DwellSummary]:
    """Mean, max and min dwell per location over the window."""

    out: List[DwellSummary] = []
    for s in window.series:
        values = np.asarray(s.dwell, dtype=float)
        if values.size == 0:
            out.append(DwellSummary(s.name, s.color, 0.0, 0.0, 0.0, 0))
            continue
        out.append(
            DwellSummary(
                s.name,
                s.color,
                round_half_up(float(values.mean()), decimals),
                round_half_up(float(values.max()), decimals),
                round_half_up(float(values.min()), decimals),
                int(values.size),
            )
        )
    return out


@dataclass(frozen=True)
class WindowMetrics:
    """Every derived figure for one computation cycle."""

    stats: Tuple[LocationStats, ...] = ()
    summary: SummaryMetrics = field(default_factory=SummaryMetrics)
    ranking: PathRanking = field(default_factory=PathRanking)
    dwell: Tuple[DwellSummary, ...] = ()


def compute_metrics(
    window: Window,
    selection: Optional[Collection[str]] = None,
    *,
    settings: Settings | None = None,
) -> WindowMetrics:
    """Compute stats, summary, path ranking and dwell summary for ``window``.

    Path scores are restricted to ``selection``; an empty selection yields
    an empty ranking rather than an error.
    """

    if settings is None:
        settings = Settings()
    scores = path_scores(window, selection)
    return WindowMetrics(
        stats=tuple(window_stats(window, settings=settings)),
        summary=summary_metrics(window, settings=settings),
        ranking=rank_paths(scores, settings.metrics.rank_size),
        dwell=tuple(dwell_summary(window)),
    )


__all__ = [
    "DwellSummary",
    "LocationStats",
    "NO_LOCATION",
    "PathRanking",
    "PathScore",
    "SummaryMetrics",
    "WindowMetrics",
    "compute_metrics",
    "dwell_summary",
    "location_stats",
    "path_scores",
    "point_ratios",
    "rank_paths",
    "round_half_up",
    "summary_metrics",
    "window_stats",
]
