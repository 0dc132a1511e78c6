import pytest

from footflow import Settings, Snapshot, TrafficDashboard, WindowMode
from footflow.utils.timeparse import InvalidLabelFormat
from footflow.core import ReconcileAction

from test_window_manager import make_snapshot


def feed(n, last=None):
    hours = list(range(6, 6 + n))
    lobby = [float(10 + i) for i in range(n)]
    if last is not None:
        lobby[-1] = last
    return make_snapshot(
        hours,
        {
            "Lobby": (lobby, [90.0] * n),
            "Gate": ([float(5 + i) for i in range(n)], [30.0] * n),
            "Cafe": ([2.0] * n, [0.0] * n),
            "Exit": ([7.0] * n, [60.0] * n),
        },
    )


def test_dashboard_flow():
    dash = TrafficDashboard(capacity=5)
    assert dash.on_snapshot(feed(8)).action is ReconcileAction.INITIALIZE
    view = dash.view()
    assert view.selection == {"Lobby", "Gate", "Cafe", "Exit"}
    assert view.window.mode is WindowMode.LIVE_TAIL
    assert len(view.window) == 5
    assert view.forecast_visible
    assert len(view.metrics.ranking.best) == 5
    assert len(view.metrics.ranking.worst) == 5

    assert dash.on_snapshot(feed(9)).action is ReconcileAction.SHIFT
    assert dash.on_snapshot(feed(9, last=50.0)).action is ReconcileAction.PATCH
    view = dash.view()
    lobby = next(s for s in view.metrics.stats if s.name == "Lobby")
    assert lobby.current_traffic == 50.0
    assert view.metrics.summary.top_location == "Lobby"

    dash.select_range(7, 9)
    view = dash.view()
    assert view.window.labels == ("7 AM", "8 AM", "9 AM")
    assert not view.forecast_visible

    dash.reset_to_live_tail()
    assert dash.view().window.labels[-1] == "2 PM"


def test_selection_drives_path_scores():
    dash = TrafficDashboard()
    dash.on_snapshot(feed(3))
    dash.toggle_selection("Cafe")
    dash.toggle_selection("Exit")
    view = dash.view()
    pairs = {(p.source, p.target) for p in view.metrics.ranking.best}
    assert pairs == {("Lobby", "Gate"), ("Gate", "Lobby")}
    # location stats are still reported for every location
    assert len(view.metrics.stats) == 4

    dash.toggle_selection("Gate")
    assert dash.toggle_selection("Lobby") is False
    assert dash.view().selection == {"Lobby"}
    assert dash.view().metrics.ranking.best == ()


def test_initial_selection_from_settings():
    settings = Settings.model_validate({"selection": {"initial": ["Gate", "Nowhere"]}})
    dash = TrafficDashboard(settings)
    dash.on_snapshot(feed(3))
    assert dash.view().selection == {"Gate"}


def test_view_is_recomputed_each_call():
    dash = TrafficDashboard()
    dash.on_snapshot(feed(3))
    first = dash.view()
    dash.on_snapshot(feed(4))
    second = dash.view()
    assert first.window is not second.window
    assert len(first.window) == 3
    assert len(second.window) == 4


def test_toggle_forecast_and_options():
    dash = TrafficDashboard()
    dash.on_snapshot(feed(2))
    assert dash.toggle_forecast() is False
    view = dash.view()
    assert not view.forecast_visible
    assert view.range_options == ((6, "6 AM"), (7, "7 AM"))


def test_range_before_feed_fails():
    dash = TrafficDashboard()
    with pytest.raises(RuntimeError):
        dash.select_range(1, 2)


def test_empty_first_snapshot_then_feed_seeds_selection():
    dash = TrafficDashboard()
    assert dash.on_snapshot(Snapshot()).action is ReconcileAction.INITIALIZE
    assert len(dash.selection) == 0

    assert dash.on_snapshot(feed(4)).action is ReconcileAction.INITIALIZE
    view = dash.view()
    assert view.selection == {"Lobby", "Gate", "Cafe", "Exit"}
    assert len(view.metrics.ranking.best) == 5


def test_bad_label_leaves_view_usable():
    dash = TrafficDashboard()
    dash.on_snapshot(feed(4))
    good = feed(5)
    with pytest.raises(InvalidLabelFormat):
        dash.on_snapshot(Snapshot(good.labels[:-1] + ("25 PM",), good.series))
    view = dash.view()
    assert view.window.labels[-1] == "9 AM"
    assert view.range_options[-1] == (9, "9 AM")
    assert dash.on_snapshot(good).action is ReconcileAction.SHIFT
