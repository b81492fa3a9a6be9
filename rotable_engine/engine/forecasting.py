"""
Demand forecasting.

Predicts per-class kit demand at an airport over a future horizon by
combining exact passenger counts from flights the simulation has already
revealed with extrapolated counts from the recurring flight plan.

The per-flight estimate used for extrapolation adapts as real flights are
observed: a bounded window of recent counts drives the live estimate, while
unbounded running statistics support recalibration decisions.
"""

import logging
import math
from collections import deque
from typing import Deque, Dict, Iterable, List, Mapping, Optional

from ..config import DEFAULT_DEMAND_ESTIMATES, FALLBACK_FLIGHT_DISTANCE, EngineSettings
from ..models.characteristics import DatasetCharacteristics
from ..models.flight import FlightEvent, FlightPlan, ReferenceHour
from ..models.kit import KIT_CLASSES, ClassKey, KitClass, PerClassAmount
from .statistics import PerClassStats

logger = logging.getLogger(__name__)


class DemandForecaster:
    """Forecasts kit demand from known flights and the static flight plan."""

    def __init__(
        self,
        flight_plans: Iterable[FlightPlan],
        characteristics: Optional[DatasetCharacteristics] = None,
        settings: Optional[EngineSettings] = None,
    ):
        self.flight_plans: List[FlightPlan] = list(flight_plans or [])
        self.characteristics = characteristics
        self.settings = settings or EngineSettings()

        window = self.settings.OBSERVATION_WINDOW
        self._observed: Dict[KitClass, Deque[float]] = {
            kit_class: deque(maxlen=window) for kit_class in KIT_CLASSES
        }
        self._cached_averages: Optional[Dict[KitClass, float]] = None
        self._demand_stats = PerClassStats()

    def set_characteristics(self, characteristics: DatasetCharacteristics) -> None:
        """Attach calibration output after construction."""
        self.characteristics = characteristics

    # ==================== OBSERVATION ====================

    def record_observed_demand(self, passengers: PerClassAmount) -> None:
        """
        Record the passenger counts of a flight that became known.

        Positive counts enter the bounded per-class window (oldest dropped);
        every observation, zeros included, enters the running statistics.
        """
        for kit_class, count in passengers.items():
            if count > 0:
                self._observed[kit_class].append(count)
        self._cached_averages = None

        self._demand_stats.add(passengers)

    def record_flight_event(self, event: FlightEvent) -> None:
        self.record_observed_demand(event.passengers)

    def get_observed_mean(self, kit_class: ClassKey) -> float:
        return self._demand_stats.mean(kit_class)

    def get_observed_variance(self, kit_class: ClassKey) -> float:
        """Population variance over all observations; 0 below two."""
        return self._demand_stats.variance(kit_class)

    def get_demand_stats(self) -> PerClassStats:
        return self._demand_stats

    @property
    def observation_count(self) -> int:
        return self._demand_stats.count

    # ==================== RECALIBRATION ====================

    def _initial_estimates(self) -> PerClassAmount:
        if self.characteristics is not None:
            return self.characteristics.demand_estimates
        return PerClassAmount.from_mapping(DEFAULT_DEMAND_ESTIMATES)

    def should_recalibrate(self) -> bool:
        """True once enough flights were seen and some class drifted > 25%."""
        if self._demand_stats.count < self.settings.MIN_RECALIBRATION_OBSERVATIONS:
            return False

        tolerance = self.settings.RECALIBRATION_TOLERANCE
        for kit_class, estimated in self._initial_estimates().items():
            if estimated == 0:
                continue
            ratio = self.get_observed_mean(kit_class) / estimated
            if ratio < 1 - tolerance or ratio > 1 + tolerance:
                logger.info(
                    f"Observed {kit_class.value} demand deviates from estimate "
                    f"(ratio {ratio:.2f}), recalibration suggested"
                )
                return True

        return False

    def get_updated_demand_estimates(self) -> PerClassAmount:
        """
        Blend observed means with the initial estimates.

        Below the minimum sample size the initial estimates come back unchanged.
        Otherwise: ceil(w * observed_mean * buffer + (1 - w) * initial).
        """
        initial = self._initial_estimates()
        if self._demand_stats.count < self.settings.MIN_BLEND_OBSERVATIONS:
            return initial

        weight = self.settings.OBSERVED_BLEND_WEIGHT
        buffer = self.settings.DEMAND_SAFETY_BUFFER
        updated = {}
        for kit_class, estimate in initial.items():
            observed = self.get_observed_mean(kit_class) * buffer
            # round off float noise before ceil
            updated[kit_class] = math.ceil(round(observed * weight + estimate * (1 - weight), 9))

        return PerClassAmount.from_mapping(updated)

    # ==================== PER-FLIGHT ESTIMATE ====================

    def _typical_demand_estimate(self, kit_class: KitClass) -> float:
        if self.characteristics is not None:
            return self.characteristics.demand_estimates.get(kit_class)
        return DEFAULT_DEMAND_ESTIMATES[kit_class.value]

    def get_dynamic_demand_estimate(self, kit_class: ClassKey) -> float:
        """Window average with safety buffer, or the typical estimate early on."""
        kit_class = KitClass(kit_class)
        if len(self._observed[kit_class]) < self.settings.MIN_WINDOW_OBSERVATIONS:
            return self._typical_demand_estimate(kit_class)

        if self._cached_averages is None:
            self._cached_averages = {
                cls: (sum(values) / len(values) if values else 0.0)
                for cls, values in self._observed.items()
            }
        return math.ceil(round(self._cached_averages[kit_class] * self.settings.DEMAND_SAFETY_BUFFER, 9))

    # ==================== FORECASTS ====================

    def calculate_demand_for_airport(
        self,
        airport_code: str,
        current_day: int,
        current_hour: int,
        within_hours: int,
        kit_class: ClassKey,
        known_flights: Mapping[str, FlightEvent],
    ) -> float:
        """Expected outbound demand: flights departing airport_code in the horizon."""
        kit_class = KitClass(kit_class)
        now = ReferenceHour(day=current_day, hour=current_hour)
        target = now.advance(within_hours)
        demand = 0.0

        for flight in known_flights.values():
            if flight.origin == airport_code and now <= flight.departure <= target:
                demand += flight.passengers.get(kit_class)

        for step in range(within_hours):
            check = now.advance(step)
            for plan in self.flight_plans:
                if (
                    plan.origin == airport_code
                    and plan.departure_hour == check.hour
                    and plan.is_active_on(check.day)
                ):
                    demand += self.get_dynamic_demand_estimate(kit_class)

        return demand

    def calculate_inbound_demand_for_airport(
        self,
        airport_code: str,
        current_day: int,
        current_hour: int,
        within_hours: int,
        kit_class: ClassKey,
        known_flights: Mapping[str, FlightEvent],
    ) -> float:
        """
        Expected inbound demand: flights arriving at airport_code in the horizon.

        Arriving passengers are what consume kits stocked at a spoke, so this
        matches on destination and arrival time rather than origin/departure.
        Plan weekday masks are keyed on the departure day, so an overnight
        arrival counts on the day after an active departure.
        """
        kit_class = KitClass(kit_class)
        now = ReferenceHour(day=current_day, hour=current_hour)
        target = now.advance(within_hours)
        demand = 0.0

        for flight in known_flights.values():
            if flight.destination == airport_code and now <= flight.arrival <= target:
                demand += flight.passengers.get(kit_class)

        for step in range(within_hours):
            check = now.advance(step)
            for plan in self.flight_plans:
                if (
                    plan.destination == airport_code
                    and plan.arrival_hour == check.hour
                    and plan.arrives_on(check.day)
                ):
                    demand += self.get_dynamic_demand_estimate(kit_class)

        return demand

    def calculate_total_demand(
        self,
        airport_code: str,
        current_day: int,
        current_hour: int,
        within_hours: int,
        known_flights: Mapping[str, FlightEvent],
    ) -> PerClassAmount:
        """Outbound demand for all four classes."""
        return PerClassAmount.from_mapping({
            kit_class: self.calculate_demand_for_airport(
                airport_code, current_day, current_hour, within_hours, kit_class, known_flights
            )
            for kit_class in KIT_CLASSES
        })

    def calculate_total_inbound_demand(
        self,
        airport_code: str,
        current_day: int,
        current_hour: int,
        within_hours: int,
        known_flights: Mapping[str, FlightEvent],
    ) -> PerClassAmount:
        """Inbound demand for all four classes."""
        return PerClassAmount.from_mapping({
            kit_class: self.calculate_inbound_demand_for_airport(
                airport_code, current_day, current_hour, within_hours, kit_class, known_flights
            )
            for kit_class in KIT_CLASSES
        })

    def calculate_scheduled_demand(
        self,
        airport_code: str,
        current_day: int,
        current_hour: int,
        within_hours: int,
    ) -> PerClassAmount:
        """Outbound demand from the flight plan alone (before flights are revealed)."""
        now = ReferenceHour(day=current_day, hour=current_hour)
        demand = {kit_class: 0.0 for kit_class in KIT_CLASSES}

        for step in range(within_hours):
            check = now.advance(step)
            for plan in self.flight_plans:
                if (
                    plan.origin == airport_code
                    and plan.departure_hour == check.hour
                    and plan.is_active_on(check.day)
                ):
                    for kit_class in KIT_CLASSES:
                        demand[kit_class] += self.get_dynamic_demand_estimate(kit_class)

        return PerClassAmount.from_mapping(demand)

    # ==================== FLIGHT PLAN LOOKUPS ====================

    def get_flight_distance(self, origin: str, destination: str) -> float:
        """Distance of the first plan on this route, 0 if the route is unknown."""
        for plan in self.flight_plans:
            if plan.origin == origin and plan.destination == destination:
                return plan.distance_km
        return 0.0

    def get_flight_plans(self) -> List[FlightPlan]:
        return self.flight_plans

    def get_average_flight_distance(self) -> float:
        distances = [plan.distance_km for plan in self.flight_plans if plan.distance_km > 0]
        if not distances:
            return FALLBACK_FLIGHT_DISTANCE
        return sum(distances) / len(distances)
