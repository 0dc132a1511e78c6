"""Utilities for reading snapshot files produced by the foot-traffic feed."""

from .snapshot import (
    SnapshotParseError,
    load_snapshot,
    read_snapshots,
    snapshot_from_dict,
    snapshot_to_dict,
)

__all__ = [
    "SnapshotParseError",
    "load_snapshot",
    "read_snapshots",
    "snapshot_from_dict",
    "snapshot_to_dict",
]
