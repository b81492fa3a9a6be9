"""Tests for the adaptive feedback controller."""

import json

import pytest
from rotable_engine.config import EngineSettings
from rotable_engine.engine.adaptive import AdaptiveEngine, StrategyMode
from rotable_engine.logger import JSONLogger
from rotable_engine.models.characteristics import EconomyLoadFactorConfig
from rotable_engine.models.kit import KIT_CLASSES, KitClass
from rotable_engine.models.penalty import PenaltyEvent, PenaltyType

OVERFLOW_CODE = "INVENTORY_EXCEEDS_CAPACITY"
UNFULFILLED_CODE = "FLIGHT_UNFULFILLED"


def overflow(airport="ZRH", amount=777.0, kit_class="Economy"):
    return {
        "code": OVERFLOW_CODE,
        "penalty": amount,
        "reason": f"Airport {airport} inventory exceeds capacity for {kit_class} kits",
    }


def unfulfilled(amount, kit_class="Economy", airport=None):
    where = f"Airport {airport}" if airport else "Flight 7"
    return {
        "code": UNFULFILLED_CODE,
        "penalty": amount,
        "reason": f"{where}: unfulfilled {kit_class} passengers",
    }


@pytest.fixture
def settings():
    return EngineSettings(_env_file=None)


@pytest.fixture
def engine(settings):
    return AdaptiveEngine(settings=settings)


def test_overflow_raises_risk_then_decays(engine):
    engine.record_penalties([overflow()], day=1, hour=3)

    assert engine.get_airport_risk_score("ZRH") == pytest.approx(0.594)
    assert engine.get_airport_performance("ZRH").overflow_count == 1


def test_unfulfilled_at_airport_lowers_risk(engine):
    engine.record_penalties([unfulfilled(1000.0, airport="LHR")], day=1, hour=3)

    assert engine.get_airport_risk_score("LHR") == pytest.approx(0.4752)
    assert engine.get_airport_performance("LHR").unfulfilled_count == 1


def test_unknown_airport_has_default_risk(engine):
    assert engine.get_airport_risk_score("NOWHERE") == 0.5
    assert engine.get_airport_performance("NOWHERE") is None


def test_hot_airport_needs_more_than_three_recent_overflows(engine):
    engine.record_penalties([overflow("ZRH")] * 4, day=5, hour=10)
    engine.record_penalties([overflow("MUC")] * 3, day=5, hour=10)

    assert engine.is_hot_airport("ZRH", current_day=6)
    assert not engine.is_hot_airport("MUC", current_day=6)
    # last overflow more than two days ago
    assert not engine.is_hot_airport("ZRH", current_day=8)
    assert not engine.is_hot_airport("NOWHERE", current_day=6)


def test_risky_destination_gets_smaller_buffer(engine):
    engine.record_penalties([overflow("ZRH")] * 20, day=2, hour=1)

    assert engine.get_airport_risk_score("ZRH") > 0.7
    reduced = engine.get_buffer_percent("ZRH", "ECONOMY", 0.75)
    assert 0.5 <= reduced < 0.75
    assert engine.get_buffer_percent("CDG", "ECONOMY", 0.75) == pytest.approx(0.75)


def test_buffer_is_clamped(engine):
    assert engine.get_buffer_percent("CDG", "FIRST", 0.2) == 0.5
    assert engine.get_buffer_percent("CDG", "FIRST", 1.2) == 0.95


def test_class_penalty_stats_accumulate(engine):
    engine.record_penalties(
        [unfulfilled(100.0), unfulfilled(50.0, kit_class="Business"), overflow(amount=777.0)],
        day=1,
        hour=2,
    )

    stats = engine.get_class_penalty_stats()
    assert stats[KitClass.ECONOMY].unfulfilled_count == 1
    assert stats[KitClass.ECONOMY].overflow_cost == pytest.approx(777.0)
    assert stats[KitClass.BUSINESS].unfulfilled_cost == pytest.approx(50.0)
    assert engine.get_economy_unfulfilled_cost() == pytest.approx(100.0)
    assert engine.get_total_overflow_cost() == pytest.approx(777.0)


def test_structured_events_skip_reason_parsing(engine):
    event = PenaltyEvent(
        code="OVER_CAP",
        amount=5.0,
        day=1,
        hour=2,
        penalty_type=PenaltyType.INVENTORY_EXCEEDS_CAPACITY,
        airport_code="LHR",
        kit_class=KitClass.FIRST,
        reason="free text that names no airport",
    )
    engine.record_penalties([event], day=1, hour=2)

    assert engine.get_class_penalty_stats()[KitClass.FIRST].overflow_count == 1
    assert engine.get_airport_performance("LHR").overflow_count == 1


def test_unparseable_penalty_is_kept_without_attribution(engine):
    engine.record_penalties([{"code": UNFULFILLED_CODE, "penalty": 10.0, "reason": "???"}], day=1, hour=2)

    assert len(engine.get_penalty_history()) == 1
    assert all(stats.unfulfilled_count == 0 for stats in engine.get_class_penalty_stats().values())
    assert engine.get_summary()["recent_penalty_avg"] == pytest.approx(10.0)


def test_history_keeps_last_72_hours(engine):
    engine.record_penalties([overflow()], day=0, hour=0)
    engine.record_penalties([overflow()], day=2, hour=23)
    assert len(engine.get_penalty_history()) == 2

    engine.record_penalties([], day=3, hour=1)
    history = engine.get_penalty_history()
    assert len(history) == 1
    assert (history[0].day, history[0].hour) == (2, 23)


def test_daily_snapshot_taken_at_midnight(engine):
    engine.record_penalties([overflow(amount=100.0)], day=0, hour=5)
    engine.record_penalties([], day=1, hour=0)

    snapshots = engine.get_daily_snapshots()
    assert len(snapshots) == 1
    assert snapshots[0].day == 0
    assert snapshots[0].total_overflow == pytest.approx(100.0)


def test_no_adjustment_during_warmup(engine):
    engine.record_penalties([unfulfilled(1e9)], day=1, hour=5)

    assert engine.suggest_load_factor_adjustment(2) == 0.0
    assert engine.suggest_load_factor_adjustment(3) == pytest.approx(0.02)


def test_high_unfulfilled_raises_load_factor(engine):
    engine.record_penalties([unfulfilled(3_000_000.0)], day=2, hour=5)

    assert engine.suggest_load_factor_adjustment(3) == pytest.approx(0.02)
    assert engine.suggest_load_factor_adjustment(4) == pytest.approx(0.04)
    assert engine.get_load_factor_adjustment("ECONOMY") == pytest.approx(0.04)


def test_adjustment_evaluated_once_per_day(engine):
    assert engine.suggest_load_factor_adjustment(3) == 0.0

    engine.record_penalties([unfulfilled(1e9)], day=3, hour=5)
    assert engine.suggest_load_factor_adjustment(3) == 0.0
    assert engine.suggest_load_factor_adjustment(3) == 0.0
    assert engine.suggest_load_factor_adjustment(4) == pytest.approx(0.02)


def test_heavy_overflow_lowers_load_factor(engine):
    engine.record_penalties([unfulfilled(1e9), overflow(amount=1e6)], day=2, hour=5)

    assert engine.suggest_load_factor_adjustment(3) == pytest.approx(-0.02)


@pytest.mark.parametrize("source, limit", [("unfulfilled_cost", 0.10), ("overflow_cost", -0.10)])
def test_cumulative_adjustment_is_capped(engine, source, limit):
    """Explicit cost totals drive the control step; the sum stays within 0.10."""
    values = [engine.suggest_load_factor_adjustment(day, **{source: 1e9}) for day in range(3, 30)]

    assert all(abs(value) <= 0.10 + 1e-9 for value in values)
    assert values[-1] == pytest.approx(limit)


def test_effective_load_factor_uses_policy_bounds(engine, sample_characteristics):
    policy = EconomyLoadFactorConfig(
        baseline=0.85, warning_threshold=0.6, danger_threshold=0.8, min_factor=0.5, max_factor=0.9
    )
    for day in range(3, 10):
        engine.suggest_load_factor_adjustment(day, unfulfilled_cost=1e9)

    assert engine.get_effective_economy_load_factor(policy) == pytest.approx(0.9)

    calibrated = AdaptiveEngine(sample_characteristics, settings=engine.settings)
    assert calibrated.get_effective_economy_load_factor() == pytest.approx(0.79)


def test_effective_load_factor_requires_a_policy(engine):
    with pytest.raises(ValueError):
        engine.get_effective_economy_load_factor()


def feed_rising_penalties(engine):
    for hour in range(12):
        engine.record_penalties([{"code": "OTHER", "penalty": 100.0, "reason": ""}], day=0, hour=hour)
    for hour in range(12, 24):
        engine.record_penalties([{"code": "OTHER", "penalty": 1000.0, "reason": ""}], day=0, hour=hour)


def test_mode_switching_disabled_by_default(engine):
    feed_rising_penalties(engine)

    assert engine.get_strategy_mode() is StrategyMode.BALANCED
    assert engine.get_buffer_multiplier() == 1.0
    assert engine.get_summary()["mode_switching_enabled"] is False


def test_mode_switching_reacts_to_rising_penalties(settings):
    engine = AdaptiveEngine(mode_switching_enabled=True, settings=settings)
    feed_rising_penalties(engine)

    assert engine.get_strategy_mode() is StrategyMode.CONSERVATIVE
    assert engine.get_buffer_multiplier() == pytest.approx(1.02)
    assert engine.get_buffer_percent("CDG", "FIRST", 0.8) == pytest.approx(0.816)


def test_neutral_priorities_and_purchase_multiplier(engine):
    assert engine.get_prioritized_classes() == list(KIT_CLASSES)
    assert all(engine.get_purchase_multiplier(kit_class) == 1.0 for kit_class in KIT_CLASSES)


def test_journal_records_snapshots_and_adjustments(settings, tmp_path):
    journal_path = tmp_path / "journal.jsonl"
    with JSONLogger(str(journal_path)) as journal:
        engine = AdaptiveEngine(settings=settings, journal=journal)
        engine.record_penalties([unfulfilled(1e9)], day=2, hour=5)
        engine.record_penalties([], day=3, hour=0)
        engine.suggest_load_factor_adjustment(3)

    entries = [json.loads(line) for line in journal_path.read_text().splitlines()]
    assert [entry["kind"] for entry in entries] == ["daily_snapshot", "load_factor_adjustment"]
    assert entries[0]["day"] == 2
    assert entries[1]["payload"]["updated"] == pytest.approx(0.02)
