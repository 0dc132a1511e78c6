# src/footflow/ingest/snapshot.py
"""Reader for offline snapshot files.

Supports:
A) A single JSON document:
   {"labels": ["9 AM", "10 AM"],
    "locations": [{"name": "Lobby", "color": "#3b82f6",
                   "traffic": [4, 7], "dwell": [120, 95]}],
    "sequence": 3}            (sequence optional)

B) JSON lines (``.jsonl`` / ``.ndjson``):
   one document of the form above per line, in feed order. Blank lines
   and lines starting with ``#`` are skipped.

Alignment between labels and values is not checked here; that is the
reconciler's job so that a bad push is rejected without mutating state.
"""

from __future__ import annotations

import json
import pathlib
from typing import Any, Iterator, Mapping, TextIO, Union

from ..types import LocationSeries, Snapshot

JSONL_SUFFIXES = {".jsonl", ".ndjson"}


class SnapshotParseError(ValueError):
    """Raised when a snapshot file cannot be parsed."""

    def __init__(self, message: str, *, path: Union[str, pathlib.Path], line: int):
        self.path = str(path)
        self.line = line
        super().__init__(f"{self.path}:{self.line}: {message}")


def _numbers(raw: Any, what: str) -> list[float]:
    if not isinstance(raw, list):
        raise ValueError(f"{what} must be a list")
    try:
        return [float(v) for v in raw]
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{what} must contain numbers") from exc


def snapshot_from_dict(data: Mapping[str, Any]) -> Snapshot:
    """Build a :class:`Snapshot` from its JSON mapping form."""

    if not isinstance(data, Mapping):
        raise ValueError("snapshot must be a JSON object")
    labels = data.get("labels")
    if not isinstance(labels, list) or not all(isinstance(x, str) for x in labels):
        raise ValueError("'labels' must be a list of strings")
    locations = data.get("locations", [])
    if not isinstance(locations, list):
        raise ValueError("'locations' must be a list")

    series = []
    for loc in locations:
        if not isinstance(loc, Mapping) or not isinstance(loc.get("name"), str):
            raise ValueError("every location needs a string 'name'")
        name = loc["name"]
        color = loc.get("color")
        series.append(
            LocationSeries(
                name,
                None if color is None else str(color),
                _numbers(loc.get("traffic", []), f"{name}.traffic"),
                _numbers(loc.get("dwell", []), f"{name}.dwell"),
            )
        )

    sequence = data.get("sequence")
    if sequence is not None and (isinstance(sequence, bool) or not isinstance(sequence, int)):
        raise ValueError("'sequence' must be an integer")
    return Snapshot(tuple(labels), tuple(series), sequence)


def snapshot_to_dict(snapshot: Snapshot) -> dict[str, Any]:
    """Inverse of :func:`snapshot_from_dict`."""

    data: dict[str, Any] = {
        "labels": list(snapshot.labels),
        "locations": [
            {
                "name": s.name,
                "color": s.color,
                "traffic": list(s.traffic),
                "dwell": list(s.dwell),
            }
            for s in snapshot.series
        ],
    }
    if snapshot.sequence is not None:
        data["sequence"] = snapshot.sequence
    return data


def _read_lines(fh: TextIO, *, path: Union[str, pathlib.Path]) -> Iterator[Snapshot]:
    for lineno, raw in enumerate(fh, start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        try:
            yield snapshot_from_dict(json.loads(line))
        except ValueError as e:
            raise SnapshotParseError(str(e), path=path, line=lineno) from e


def load_snapshot(path: Union[str, pathlib.Path]) -> Snapshot:
    """Load a single snapshot from a JSON file."""

    p = pathlib.Path(path)
    with open(p, "r", encoding="utf8") as fh:
        text = fh.read()
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise SnapshotParseError(e.msg, path=p, line=e.lineno) from e
    try:
        return snapshot_from_dict(data)
    except ValueError as e:
        raise SnapshotParseError(str(e), path=p, line=1) from e


def read_snapshots(path: Union[str, pathlib.Path, TextIO]) -> Iterator[Snapshot]:
    """Yield snapshots in file order.

    ``.jsonl``/``.ndjson`` files (and file-like objects) are read one
    snapshot per line; any other path is treated as a single JSON document.
    """

    if isinstance(path, (str, pathlib.Path)):
        p = pathlib.Path(path)
        if p.suffix.lower() in JSONL_SUFFIXES:
            with open(p, "r", encoding="utf8") as fh:
                yield from _read_lines(fh, path=p)
        else:
            yield load_snapshot(p)
    else:
        stream_name = getattr(path, "name", "<stream>")
        yield from _read_lines(path, path=stream_name)
