"""Tests for running statistics."""

import pytest
from rotable_engine.engine.statistics import PerClassStats, RunningStats
from rotable_engine.models.kit import PerClassAmount


def test_running_stats_population_variance():
    stats = RunningStats()
    for value in [2, 4, 4, 4, 5, 5, 7, 9]:
        stats.add(value)

    assert stats.count == 8
    assert stats.mean == pytest.approx(5.0)
    assert stats.variance == pytest.approx(4.0)
    assert stats.stddev == pytest.approx(2.0)
    assert stats.min == 2
    assert stats.max == 9


def test_running_stats_variance_zero_below_two_samples():
    stats = RunningStats()
    assert stats.variance == 0.0
    assert stats.mean == 0.0

    stats.add(42)
    assert stats.variance == 0.0
    assert stats.mean == 42


def test_per_class_stats_tracks_each_class():
    stats = PerClassStats()
    stats.add(PerClassAmount(first=1, economy=100))
    stats.add(PerClassAmount(first=3, economy=300))

    assert stats.count == 2
    assert stats.mean("FIRST") == pytest.approx(2.0)
    assert stats.mean("ECONOMY") == pytest.approx(200.0)
    assert stats.variance("ECONOMY") == pytest.approx(10000.0)
    assert stats.snapshot()["BUSINESS"]["count"] == 2
