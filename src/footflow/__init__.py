"""Windowed, derived-metrics view over a live multi-location foot-traffic feed."""

from .config import Settings, load_settings
from .dashboard import DashboardView, TrafficDashboard
from .types import HourRange, LocationSeries, Snapshot, SnapshotMismatchError, Window, WindowMode
from .utils.timeparse import InvalidLabelFormat, format_label, parse_label

__version__ = "0.1.0"

__all__ = [
    "DashboardView",
    "HourRange",
    "InvalidLabelFormat",
    "LocationSeries",
    "Settings",
    "Snapshot",
    "SnapshotMismatchError",
    "TrafficDashboard",
    "Window",
    "WindowMode",
    "format_label",
    "load_settings",
    "parse_label",
]
