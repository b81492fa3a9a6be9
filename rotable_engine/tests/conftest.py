"""Shared fixtures for engine tests."""

import pytest
from rotable_engine.engine.calibrator import calibrate
from rotable_engine.models.aircraft import Aircraft
from rotable_engine.models.airport import Airport
from rotable_engine.models.flight import FlightPlan
from rotable_engine.models.kit import PerClassAmount

ALL_WEEK = [True] * 7
SPOKE_CAPACITY = PerClassAmount(first=100, business=300, premium_economy=150, economy=2000)


@pytest.fixture
def make_airport():
    """Factory for airports with economy costs set and a spoke-sized default capacity."""

    def _make(code, is_hub=False, capacity=None, loading_economy=0.5, processing_economy=4.0):
        return Airport(
            code=code,
            name=code,
            is_hub=is_hub,
            capacity=capacity if capacity is not None else SPOKE_CAPACITY,
            loading_cost=PerClassAmount(first=1.0, business=0.75, premium_economy=0.5, economy=loading_economy),
            processing_cost=PerClassAmount(
                first=8.0, business=6.0, premium_economy=6.0, economy=processing_economy
            ),
        )

    return _make


@pytest.fixture
def make_plan():
    """Factory for flight plans; active every day unless a mask is given."""

    def _make(
        origin,
        destination,
        departure_hour=6,
        arrival_hour=9,
        distance_km=2000.0,
        weekdays=None,
        arrival_next_day=False,
    ):
        return FlightPlan(
            origin=origin,
            destination=destination,
            departure_hour=departure_hour,
            arrival_hour=arrival_hour,
            distance_km=distance_km,
            weekdays=weekdays if weekdays is not None else ALL_WEEK,
            arrival_next_day=arrival_next_day,
        )

    return _make


@pytest.fixture
def hub_capacity():
    return PerClassAmount(first=1000, business=3000, premium_economy=1500, economy=20000)


@pytest.fixture
def sample_airports(make_airport, hub_capacity):
    """One hub and six spokes, each spoke a tenth of the hub."""
    airports = {"HUB1": make_airport("HUB1", is_hub=True, capacity=hub_capacity)}
    for index in range(6):
        code = f"S{index}"
        airports[code] = make_airport(code)
    return airports


@pytest.fixture
def sample_aircraft():
    return {
        "A320": Aircraft(
            type_code="A320",
            seats=PerClassAmount(first=10, business=30, premium_economy=20, economy=180),
            cost_per_kg_per_km=0.0005,
        )
    }


@pytest.fixture
def sample_flight_plans(make_plan):
    """60 daily routes alternating 1500 km and 2500 km (mean 2000 km)."""
    plans = []
    for index in range(60):
        spoke = f"S{index % 6}"
        distance = 1500.0 if index % 2 == 0 else 2500.0
        if index % 4 < 2:
            plans.append(make_plan("HUB1", spoke, departure_hour=index % 24, distance_km=distance))
        else:
            plans.append(make_plan(spoke, "HUB1", departure_hour=index % 24, distance_km=distance))
    return plans


@pytest.fixture
def sample_characteristics(sample_airports, sample_aircraft, sample_flight_plans):
    """Calibration output for the sample network."""
    return calibrate(sample_airports, sample_aircraft, sample_flight_plans)
