import io
import json

import pytest

from footflow.ingest import (
    SnapshotParseError,
    load_snapshot,
    read_snapshots,
    snapshot_from_dict,
    snapshot_to_dict,
)

DOC = {
    "labels": ["9 AM", "10 AM"],
    "locations": [
        {"name": "Lobby", "color": "#3b82f6", "traffic": [4, 7], "dwell": [120, 95]},
        {"name": "Gate", "traffic": [1, 2], "dwell": [30, 0]},
    ],
    "sequence": 3,
}


def test_snapshot_from_dict():
    snap = snapshot_from_dict(DOC)
    assert snap.labels == ("9 AM", "10 AM")
    assert snap.sequence == 3
    lobby = snap.get("Lobby")
    assert lobby.color == "#3b82f6"
    assert lobby.traffic == (4.0, 7.0)
    assert snap.get("Gate").color is None
    assert snapshot_to_dict(snap)["locations"][0]["dwell"] == [120.0, 95.0]


@pytest.mark.parametrize(
    "doc",
    [
        {"locations": []},
        {"labels": "9 AM"},
        {"labels": [], "locations": [{"traffic": []}]},
        {"labels": ["9 AM"], "locations": [{"name": "A", "traffic": ["x"], "dwell": [1]}]},
        {"labels": [], "sequence": "7"},
    ],
)
def test_snapshot_from_dict_rejects(doc):
    with pytest.raises(ValueError):
        snapshot_from_dict(doc)


def test_load_snapshot(tmp_path):
    p = tmp_path / "snap.json"
    p.write_text(json.dumps(DOC))
    snap = load_snapshot(p)
    assert snap.names() == ["Lobby", "Gate"]
    assert list(read_snapshots(p)) == [snap]


def test_read_snapshots_jsonl(tmp_path):
    p = tmp_path / "feed.jsonl"
    second = dict(DOC, sequence=4)
    p.write_text("# feed\n" + json.dumps(DOC) + "\n\n" + json.dumps(second) + "\n")
    snaps = list(read_snapshots(p))
    assert [s.sequence for s in snaps] == [3, 4]


def test_read_snapshots_reports_line(tmp_path):
    p = tmp_path / "feed.jsonl"
    p.write_text(json.dumps(DOC) + "\n{not json\n")
    with pytest.raises(SnapshotParseError) as excinfo:
        list(read_snapshots(p))
    assert excinfo.value.line == 2
    assert str(excinfo.value).startswith(f"{p}:2:")


def test_load_snapshot_bad_json(tmp_path):
    p = tmp_path / "snap.json"
    p.write_text('{"labels": [\n')
    with pytest.raises(SnapshotParseError) as excinfo:
        load_snapshot(p)
    assert excinfo.value.path == str(p)


def test_read_snapshots_file_object():
    stream = io.StringIO(json.dumps(DOC) + "\n")
    snaps = list(read_snapshots(stream))
    assert len(snaps) == 1
