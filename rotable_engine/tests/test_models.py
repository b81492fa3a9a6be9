"""Tests for the engine's data models."""

import pytest
from pydantic import ValidationError

from rotable_engine.models.flight import ReferenceHour
from rotable_engine.models.kit import KIT_CLASSES, KitClass, PerClassAmount
from rotable_engine.models.penalty import (
    PenaltyEvent,
    PenaltyType,
    classify_penalty,
    parse_penalty_reason,
)


def test_per_class_amount_accepts_camel_case_premium_economy():
    """The external feed spells premium economy as premiumEconomy."""
    amount = PerClassAmount.model_validate(
        {"first": 1, "business": 2, "premiumEconomy": 3, "economy": 4}
    )

    assert amount.premium_economy == 3
    assert amount.get(KitClass.PREMIUM_ECONOMY) == 3
    assert amount.total() == 10


def test_per_class_amount_rejects_negative_quantities():
    with pytest.raises(ValidationError):
        PerClassAmount(economy=-1)


def test_per_class_amount_with_value_returns_copy():
    original = PerClassAmount(economy=10)
    updated = original.with_value("ECONOMY", 20)

    assert original.economy == 10
    assert updated.economy == 20


def test_per_class_amount_iterates_fixed_class_order():
    amount = PerClassAmount.from_mapping({"ECONOMY": 4, "FIRST": 1})

    assert [kit_class for kit_class, _ in amount.items()] == list(KIT_CLASSES)
    assert amount.to_class_dict() == {"FIRST": 1, "BUSINESS": 0, "PREMIUM_ECONOMY": 0, "ECONOMY": 4}


def test_reference_hour_advance_wraps_and_carries_day():
    start = ReferenceHour(day=2, hour=22)

    assert start.advance(3) == ReferenceHour(day=3, hour=1)
    assert start.advance(26) == ReferenceHour(day=4, hour=0)
    assert start.advance(2) == ReferenceHour(day=3, hour=0)
    assert start.advance(0) == start


def test_reference_hour_ordering_and_weekday():
    assert ReferenceHour(day=1, hour=23) < ReferenceHour(day=2, hour=0)
    assert ReferenceHour(day=2, hour=5) >= ReferenceHour(day=2, hour=5)
    assert ReferenceHour(day=9, hour=0).weekday == 2


def test_flight_plan_requires_seven_day_mask(make_plan):
    with pytest.raises(ValidationError):
        make_plan("HUB1", "S0", weekdays=[True] * 6)


def test_flight_plan_active_days_repeat_weekly(make_plan):
    plan = make_plan("HUB1", "S0", weekdays=[True, False, False, False, False, False, False])

    assert plan.is_active_on(0)
    assert not plan.is_active_on(1)
    assert plan.is_active_on(7)


def test_overnight_arrival_lands_the_day_after_departure(make_plan):
    monday_only = [True, False, False, False, False, False, False]
    plan = make_plan(
        "HUB1", "S0", departure_hour=22, arrival_hour=1, arrival_next_day=True, weekdays=monday_only
    )

    assert not plan.arrives_on(0)
    assert plan.arrives_on(1)
    assert plan.arrives_on(8)
    assert not plan.arrives_on(2)


@pytest.mark.parametrize(
    "reason, airport, kit_class",
    [
        ("Airport ZRH inventory exceeds capacity for Economy kits", "ZRH", KitClass.ECONOMY),
        ("Airport LHR: Premium Economy stock negative", "LHR", KitClass.PREMIUM_ECONOMY),
        ("Airport CDG premiumEconomy overflow", "CDG", KitClass.PREMIUM_ECONOMY),
        ("Premium-Economy kits short", None, KitClass.PREMIUM_ECONOMY),
        ("Flight 42 unfulfilled first class passengers", None, KitClass.FIRST),
        ("Something unexpected happened", None, None),
    ],
)
def test_parse_penalty_reason(reason, airport, kit_class):
    assert parse_penalty_reason(reason) == (airport, kit_class)


def test_classify_penalty_codes():
    assert classify_penalty("INVENTORY_EXCEEDS_CAPACITY") is PenaltyType.INVENTORY_EXCEEDS_CAPACITY
    assert classify_penalty("NEGATIVE_INVENTORY") is PenaltyType.NEGATIVE_INVENTORY
    assert classify_penalty("FLIGHT_UNFULFILLED_ECONOMY") is PenaltyType.FLIGHT_UNFULFILLED
    assert classify_penalty("END_OF_GAME_REMAINING_STOCK") is PenaltyType.OTHER


def test_penalty_event_from_raw_uses_code_hint_when_reason_has_no_class():
    """PREMIUM_ECONOMY codes must not be attributed to economy."""
    event = PenaltyEvent.from_raw(
        {"code": "FLIGHT_UNFULFILLED_PREMIUM_ECONOMY", "penalty": 12.5, "reason": "n/a"},
        day=3,
        hour=4,
    )

    assert event.kit_class is KitClass.PREMIUM_ECONOMY
    assert event.penalty_type is PenaltyType.FLIGHT_UNFULFILLED
    assert event.amount == 12.5
    assert event.airport_code is None
    assert (event.day, event.hour) == (3, 4)
