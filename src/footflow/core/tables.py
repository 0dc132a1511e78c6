"""Flat, serialisable representations of windows and metrics.

Two shapes are produced:

``window_records``
    One "tall" row per location and point, keyed by ``(name, idx)``:
    the label, its parsed hour and the traffic/dwell values.

``export_view``
    A JSON-friendly mapping of a whole :class:`~footflow.dashboard.DashboardView`
    with the window rows, per-location stats, summary figures and ranked
    path lists.

Rows are emitted in window order so exports are deterministic.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Dict, List, Mapping, Optional

from ..types import Window
from ..utils.timeparse import parse_label
from .metrics import PathScore

if TYPE_CHECKING:  # pragma: no cover
    from ..dashboard import DashboardView


@dataclass
class WindowRow:
    """Row representation of one held point."""

    name: str
    idx: int
    label: str
    hour: int
    traffic: Optional[float]
    dwell: Optional[float]


def window_records(window: Window) -> List[Mapping[str, object]]:
    """Return the held points of ``window`` as a list of dictionaries.

    A location whose values are shorter than the label sequence (possible
    after a degraded shift) reports ``None`` for the missing points.
    Labels are parsed again here; the reconciler only admits parsable
    labels, so a held window always converts.
    """

    hours = [parse_label(label) for label in window.labels]
    rows: List[Mapping[str, object]] = []
    for s in window.series:
        for idx, (label, hour) in enumerate(zip(window.labels, hours)):
            traffic = s.traffic[idx] if idx < len(s.traffic) else None
            dwell = s.dwell[idx] if idx < len(s.dwell) else None
            rows.append(asdict(WindowRow(s.name, idx, label, hour, traffic, dwell)))
    return rows


def _path_record(path: PathScore) -> Dict[str, object]:
    record = asdict(path)
    record["label"] = path.label
    return record


def export_view(view: "DashboardView") -> Dict[str, object]:
    """Export ``view`` as plain Python containers."""

    hours = view.hour_range
    return {
        "mode": view.window.mode.value,
        "labels": list(view.window.labels),
        "hour_range": None if hours is None else {"start": hours.start, "end": hours.end},
        "forecast_visible": view.forecast_visible,
        "selection": sorted(view.selection),
        "rows": window_records(view.window),
        "stats": [
            {**asdict(s), "ratios": list(s.ratios)} for s in view.metrics.stats
        ],
        "summary": asdict(view.metrics.summary),
        "best_paths": [_path_record(p) for p in view.metrics.ranking.best],
        "worst_paths": [_path_record(p) for p in view.metrics.ranking.worst],
        "dwell": [asdict(d) for d in view.metrics.dwell],
        "range_options": [{"hour": h, "label": label} for h, label in view.range_options],
    }


__all__ = ["WindowRow", "window_records", "export_view"]
