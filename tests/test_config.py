import json

import pytest
from pydantic import ValidationError

from footflow.config import SelectionSettings, Settings, load_settings


def test_defaults():
    s = Settings()
    assert s.window.capacity == 10
    assert s.metrics.ratio_decimals == 2
    assert s.metrics.efficiency_decimals == 1
    assert s.metrics.dwell_target == 180.0
    assert s.metrics.rank_size == 5
    assert s.selection.initial == []
    assert s.feed.path is None
    assert s.logging.level == "WARNING"


def test_from_env(monkeypatch):
    monkeypatch.setenv("FOOTFLOW_WINDOW__CAPACITY", "12")
    monkeypatch.setenv("FOOTFLOW_METRICS__DWELL_TARGET", "240")
    s = Settings()
    assert s.window.capacity == 12
    assert s.metrics.dwell_target == 240.0


def test_selection_accepts_comma_list():
    assert SelectionSettings(initial="Lobby, Gate,").initial == ["Lobby", "Gate"]


def test_validation():
    with pytest.raises(ValidationError):
        Settings.model_validate({"window": {"capacity": 0}})
    with pytest.raises(ValidationError):
        Settings.model_validate({"metrics": {"dwell_target": 0}})


def test_load_settings_json(tmp_path):
    p = tmp_path / "cfg.json"
    p.write_text(json.dumps({"window": {"capacity": 6}, "selection": {"initial": ["A"]}}))
    s = load_settings(p)
    assert s.window.capacity == 6
    assert s.selection.initial == ["A"]


def test_load_settings_rejects_non_mapping(tmp_path):
    p = tmp_path / "cfg.json"
    p.write_text("[1, 2]")
    with pytest.raises(TypeError):
        load_settings(p)


try:
    import yaml  # type: ignore
except Exception:  # pragma: no cover
    yaml = None


@pytest.mark.skipif(yaml is None, reason="PyYAML not installed")
def test_load_settings_yaml(tmp_path):
    p = tmp_path / "cfg.yaml"
    p.write_text("window:\n  capacity: 9\nmetrics:\n  rank_size: 3\n")
    s = load_settings(p)
    assert s.window.capacity == 9
    assert s.metrics.rank_size == 3
