import pytest

from footflow.config import Settings
from footflow.core.metrics import (
    NO_LOCATION,
    compute_metrics,
    dwell_summary,
    location_stats,
    path_scores,
    point_ratios,
    rank_paths,
    round_half_up,
    summary_metrics,
    window_stats,
)
from footflow.types import LocationSeries, Window


def latest_window(points):
    """Window with one point per location: ``{name: (traffic, dwell)}``."""

    return Window(
        labels=("9 AM",),
        series=tuple(LocationSeries(n, None, [t], [d]) for n, (t, d) in points.items()),
    )


def test_round_half_up():
    assert round_half_up(0.125, 2) == 0.13
    assert round_half_up(2.5, 0) == 3.0
    assert round_half_up(55.55, 1) == 55.5  # 55.55 is stored just below the tie
    assert round_half_up(1 / 3, 2) == 0.33


def test_point_ratios():
    assert point_ratios([10, 5, 1], [5, 0, 8]) == [2.0, 0.0, 0.13]
    assert point_ratios([], []) == []
    with pytest.raises(ValueError):
        point_ratios([1, 2], [1])


def test_location_stats_averages_rounded_ratios():
    series = LocationSeries("A", "#111", [4, 4, 9], [1000, 1000, 1000])
    stats = location_stats(series)
    assert stats.ratios == (0.0, 0.0, 0.01)
    assert stats.current_ratio == 0.01
    # mean of rounded values (0.0033) rather than of raw ratios (0.0057)
    assert stats.average_ratio == 0.0
    assert stats.current_traffic == 9.0
    assert stats.current_dwell == 1000.0


def test_location_stats_empty_series():
    stats = location_stats(LocationSeries("A"))
    assert stats.ratios == ()
    assert stats.current_ratio == 0.0
    assert stats.average_ratio == 0.0
    assert stats.current_traffic == 0.0


def test_window_stats_uses_settings_decimals():
    window = Window(labels=("9 AM",), series=(LocationSeries("A", None, [1], [3]),))
    settings = Settings.model_validate({"metrics": {"ratio_decimals": 3}})
    assert window_stats(window, settings=settings)[0].current_ratio == 0.333
    assert window_stats(window)[0].current_ratio == 0.33


def test_path_scores():
    window = latest_window({"A": (10, 5), "B": (4, 2), "C": (8, 0)})
    scores = path_scores(window)
    assert len(scores) == 6
    by_pair = {(p.source, p.target): p.score for p in scores}
    assert by_pair[("A", "B")] == pytest.approx(2.0)  # min(10, 4) / 2
    assert by_pair[("B", "A")] == pytest.approx(0.8)  # min(4, 10) / 5
    assert by_pair[("A", "C")] == 0.0  # zero target dwell
    assert [(p.source, p.target) for p in scores] == [
        ("A", "B"), ("A", "C"), ("B", "A"), ("B", "C"), ("C", "A"), ("C", "B"),
    ]
    assert scores[0].label == "A → B"


def test_path_scores_restricted_to_selection():
    window = latest_window({"A": (10, 5), "B": (4, 2), "C": (8, 4)})
    scores = path_scores(window, {"A", "C"})
    assert [(p.source, p.target) for p in scores] == [("A", "C"), ("C", "A")]
    assert path_scores(window, set()) == []


def test_ranking_disjoint_for_four_locations():
    window = latest_window({"A": (10, 5), "B": (4, 2), "C": (8, 4), "D": (6, 3)})
    scores = path_scores(window)
    assert len(scores) == 12
    ranking = rank_paths(scores)
    best = {(p.source, p.target) for p in ranking.best}
    worst = {(p.source, p.target) for p in ranking.worst}
    assert len(best) == 5 and len(worst) == 5
    assert best.isdisjoint(worst)
    assert len(best | worst) == 10

    ordered = sorted(scores, key=lambda p: p.score, reverse=True)
    middle = {(p.source, p.target) for p in ordered[5:7]}
    assert middle.isdisjoint(best | worst)
    assert [p.score for p in ranking.best] == sorted((p.score for p in ranking.best), reverse=True)
    assert ranking.worst[0].score == min(p.score for p in scores)


def test_ranking_ties_keep_generation_order():
    window = latest_window({"A": (1, 1), "B": (1, 1), "C": (1, 1)})
    scores = path_scores(window)
    ranking = rank_paths(scores)
    assert list(ranking.best) == scores[:5]
    assert list(ranking.worst) == list(reversed(scores[-5:]))
    assert rank_paths(scores, 0).best == ()


@pytest.mark.parametrize(
    "dwell, expected",
    [(0, 0.0), (89.6, 49.8), (90, 50.0), (180, 100.0), (400, 100.0)],
)
def test_efficiency_clamp(dwell, expected):
    summary = summary_metrics(latest_window({"A": (12, dwell)}))
    assert summary.efficiency == expected


def test_summary_metrics():
    window = latest_window({"A": (10, 100), "B": (30, 60), "C": (30, 20)})
    summary = summary_metrics(window)
    assert summary.total_traffic == 70.0
    assert summary.average_dwell == pytest.approx(60.0)
    assert summary.top_location == "B"
    assert summary.efficiency == pytest.approx(33.3)

    no_traffic = summary_metrics(latest_window({"A": (0, 120)}))
    assert no_traffic.efficiency == 0.0

    empty = summary_metrics(Window())
    assert empty.total_traffic == 0.0
    assert empty.average_dwell == 0.0
    assert empty.top_location == NO_LOCATION
    assert empty.efficiency == 0.0

    custom = summary_metrics(latest_window({"A": (5, 60)}), dwell_target=120.0)
    assert custom.efficiency == 50.0


def test_dwell_summary():
    window = Window(
        labels=("9 AM", "10 AM", "11 AM"),
        series=(
            LocationSeries("A", "#a", [1, 2, 3], [10, 20, 40]),
            LocationSeries("B", "#b", [], []),
        ),
    )
    a, b = dwell_summary(window)
    assert (a.mean, a.maximum, a.minimum, a.count) == (23.3, 40.0, 10.0, 3)
    assert (b.mean, b.count) == (0.0, 0)


def test_compute_metrics_bundle():
    window = latest_window({"A": (10, 5), "B": (4, 2), "C": (8, 4), "D": (6, 3)})
    metrics = compute_metrics(window, {"A", "B"})
    assert [s.name for s in metrics.stats] == ["A", "B", "C", "D"]
    assert len(metrics.ranking.best) == 2
    assert metrics.summary.total_traffic == 28.0

    degraded = compute_metrics(window, set())
    assert degraded.ranking.best == () and degraded.ranking.worst == ()
