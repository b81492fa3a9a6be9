"""
Dataset calibration.

Derives dataset-specific operating parameters from static reference data so
the engine runs on unseen networks without hand-tuned constants:

1. Network topology (hub/spoke structure and capacity ratios)
2. Route economics (unfulfilled-kit penalty vs transport cost)
3. Economy load-factor policy, demand estimates, destination buffers and
   purchase thresholds derived from 1 and 2
4. A confidence score with human-readable warnings

Only a missing (or ambiguous) hub is fatal. Everything else falls back to
fixed constants and lowers the confidence instead.
"""

import logging
import math
import statistics
from typing import Dict, Iterable, List, Mapping, Union

from ..config import (
    DEFAULT_DEMAND_ESTIMATES,
    ECONOMY_PENALTY_PER_KM,
    FALLBACK_ECONOMICS,
    FALLBACK_FUEL_RATE,
    FALLBACK_HUB_LOADING_COST,
    FALLBACK_SPOKE_PROCESSING_COST,
    KIT_DEFINITIONS,
    MIN_FLIGHT_PLAN_SAMPLE,
    PASSENGER_LOAD_FACTOR,
    PURCHASE_SAFETY_MULTIPLIER,
    SANITY_BOUNDS,
)
from ..exceptions import ConfigurationError
from ..models.aircraft import Aircraft
from ..models.airport import Airport
from ..models.characteristics import (
    DatasetCharacteristics,
    DestinationBuffers,
    EconomyLoadFactorConfig,
    NetworkTopology,
    RouteEconomics,
)
from ..models.flight import DAYS_PER_WEEK, FlightPlan
from ..models.kit import KIT_CLASSES, PerClassAmount
from ..utils import as_list, clamp

logger = logging.getLogger(__name__)

# Capacity ratio at which the capacity factor of the load factor saturates
CAPACITY_RATIO_SATURATION = 15.0
# Capacity ratio around which destination buffers are centred
BUFFER_REFERENCE_RATIO = 20.0
# Days of spoke storage below which the conservative occupancy preset is used
SHORT_BUFFER_DAYS = 1.5

NETWORK_SIZE_BOUNDS = (5, 100)
CONFIDENCE_FLOOR = 0.3


def economic_optimal_load_factor(penalty_cost_ratio: float) -> float:
    """
    Fraction of demand worth loading given the penalty/cost ratio R.

    R >= 1: the penalty exceeds the transport cost, always load (1.0).
    R < 1: interpolate linearly from 0.5 (R = 0) to 1.0 (R = 1).
    """
    if penalty_cost_ratio >= 1.0:
        return 1.0
    return 0.5 + 0.5 * max(0.0, penalty_cost_ratio)


class NetworkCalibrator:
    """Pure analysis of airports, aircraft and flight plans."""

    def __init__(
        self,
        airports: Union[Mapping[str, Airport], Iterable[Airport]],
        aircraft: Union[Mapping[str, Aircraft], Iterable[Aircraft], None],
        flight_plans: Iterable[FlightPlan],
    ):
        self.airports: List[Airport] = as_list(airports)
        self.aircraft: List[Aircraft] = as_list(aircraft)
        self.flight_plans: List[FlightPlan] = list(flight_plans or [])

    def calibrate(self) -> DatasetCharacteristics:
        """Analyze the reference data and return its characteristics."""
        hub = self._find_hub()
        spokes = [airport for airport in self.airports if not airport.is_hub]

        topology = self._analyze_topology(hub, spokes)
        economics = self._analyze_economics(hub, spokes)
        economy_load_factor = self._calculate_economy_load_factor(economics, topology)
        demand_estimates = self._estimate_demand()
        destination_buffers = self._calculate_destination_buffers(topology)
        purchase_thresholds = self._calculate_purchase_thresholds(topology, demand_estimates)

        warnings = self._collect_warnings(topology, economics)
        confidence = self._calculate_confidence(topology, economics)

        characteristics = DatasetCharacteristics(
            topology=topology,
            economics=economics,
            economy_load_factor=economy_load_factor,
            demand_estimates=demand_estimates,
            destination_buffers=destination_buffers,
            purchase_threshold_percents=purchase_thresholds,
            confidence=confidence,
            warnings=warnings,
        )

        logger.info(
            f"Calibrated network: hub={topology.hub_code}, spokes={topology.spoke_count}, "
            f"flights/day={topology.total_flights_per_day:.1f}, "
            f"R={economics.penalty_cost_ratio:.3f}, "
            f"economy LF={economy_load_factor.baseline:.2f}, confidence={confidence:.2f}"
        )
        for warning in warnings:
            logger.warning(f"Calibration: {warning}")

        return characteristics

    # ==================== TOPOLOGY ====================

    def _find_hub(self) -> Airport:
        hubs = [airport for airport in self.airports if airport.is_hub]
        if not hubs:
            raise ConfigurationError("No hub airport found in airports data")
        if len(hubs) > 1:
            codes = ", ".join(hub.code for hub in hubs)
            raise ConfigurationError(f"Expected exactly one hub airport, found {len(hubs)}: {codes}")
        return hubs[0]

    def _analyze_topology(self, hub: Airport, spokes: List[Airport]) -> NetworkTopology:
        avg_capacity: Dict[str, float] = {}
        min_capacity: Dict[str, float] = {}
        ratio: Dict[str, float] = {}

        for kit_class in KIT_CLASSES:
            capacities = [spoke.capacity.get(kit_class) for spoke in spokes]
            avg = sum(capacities) / len(capacities) if capacities else 0.0
            avg_capacity[kit_class.field_name] = avg
            min_capacity[kit_class.field_name] = min(capacities) if capacities else 0.0
            ratio[kit_class.field_name] = hub.capacity.get(kit_class) / avg if avg > 0 else 1.0

        # Average flights per day across the weekly mask
        flights_per_weekday = [0] * DAYS_PER_WEEK
        for plan in self.flight_plans:
            for weekday, active in enumerate(plan.weekdays):
                if active:
                    flights_per_weekday[weekday] += 1
        avg_flights_per_day = sum(flights_per_weekday) / DAYS_PER_WEEK

        return NetworkTopology(
            hub_code=hub.code,
            spoke_count=len(spokes),
            total_flights_per_day=avg_flights_per_day,
            # /2: every spoke is served by an out-and-back pair
            avg_flights_per_spoke=avg_flights_per_day / max(1, len(spokes)) / 2,
            hub_capacity=hub.capacity,
            avg_spoke_capacity=PerClassAmount(**avg_capacity),
            min_spoke_capacity=PerClassAmount(**min_capacity),
            capacity_ratio=PerClassAmount(**ratio),
        )

    # ==================== ECONOMICS ====================

    def _analyze_economics(self, hub: Airport, spokes: List[Airport]) -> RouteEconomics:
        distances = [plan.distance_km for plan in self.flight_plans if plan.distance_km > 0]

        if not distances:
            return RouteEconomics(**FALLBACK_ECONOMICS)

        avg_distance = sum(distances) / len(distances)
        avg_penalty = ECONOMY_PENALTY_PER_KM * avg_distance
        avg_transport_cost = self._average_transport_cost(hub, spokes, avg_distance)

        return RouteEconomics(
            avg_distance=avg_distance,
            min_distance=min(distances),
            max_distance=max(distances),
            distance_std_dev=statistics.pstdev(distances),
            avg_penalty_per_economy_kit=avg_penalty,
            avg_transport_cost=avg_transport_cost,
            penalty_cost_ratio=avg_penalty / max(avg_transport_cost, 1e-9),
        )

    def _average_transport_cost(self, hub: Airport, spokes: List[Airport], avg_distance: float) -> float:
        """Hub loading + fuel for one economy kit + destination processing."""
        loading_cost = hub.loading_cost.economy or FALLBACK_HUB_LOADING_COST

        if self.aircraft:
            fuel_rate = sum(a.cost_per_kg_per_km for a in self.aircraft) / len(self.aircraft)
        else:
            fuel_rate = FALLBACK_FUEL_RATE
        fuel_cost = avg_distance * fuel_rate * KIT_DEFINITIONS["ECONOMY"]["weight"]

        if spokes:
            processing_cost = sum(
                spoke.processing_cost.economy or FALLBACK_SPOKE_PROCESSING_COST for spoke in spokes
            ) / len(spokes)
        else:
            processing_cost = FALLBACK_SPOKE_PROCESSING_COST

        return loading_cost + fuel_cost + processing_cost

    # ==================== DERIVED PARAMETERS ====================

    def _calculate_economy_load_factor(
        self, economics: RouteEconomics, topology: NetworkTopology
    ) -> EconomyLoadFactorConfig:
        economic_optimal = economic_optimal_load_factor(economics.penalty_cost_ratio)

        # Relatively large hub: spokes absorb less, capacity factor grows
        capacity_factor = min(1.0, topology.capacity_ratio.economy / CAPACITY_RATIO_SATURATION)

        low, high = SANITY_BOUNDS["economy_load_factor"]
        baseline = 0.55 + (economic_optimal - 0.5) * 0.35 + capacity_factor * 0.10
        baseline = round(clamp(baseline, low, high), 2)

        # Days of spoke storage against an assumed 200 economy passengers per flight
        daily_demand_per_spoke = (
            topology.total_flights_per_day / max(1, topology.spoke_count)
        ) * DEFAULT_DEMAND_ESTIMATES["ECONOMY"]
        days_buffer = topology.avg_spoke_capacity.economy / max(1.0, daily_demand_per_spoke)

        short_buffer = days_buffer < SHORT_BUFFER_DAYS

        return EconomyLoadFactorConfig(
            baseline=baseline,
            warning_threshold=0.50 if short_buffer else 0.60,
            danger_threshold=0.70 if short_buffer else 0.80,
            min_factor=low,
            max_factor=min(baseline + 0.10, high),
        )

    def _estimate_demand(self) -> PerClassAmount:
        """Average seats per aircraft type at an 80% passenger load factor."""
        if not self.aircraft:
            return PerClassAmount.from_mapping(DEFAULT_DEMAND_ESTIMATES)

        estimates = {}
        for kit_class in KIT_CLASSES:
            avg_seats = sum(a.seats.get(kit_class) for a in self.aircraft) / len(self.aircraft)
            low, high = SANITY_BOUNDS["demand_estimate"][kit_class.value]
            estimates[kit_class] = clamp(math.ceil(avg_seats * PASSENGER_LOAD_FACTOR), low, high)

        return PerClassAmount.from_mapping(estimates)

    def _calculate_destination_buffers(self, topology: NetworkTopology) -> DestinationBuffers:
        """
        Share of spoke capacity a load may fill before overflow protection kicks in.

        A hub that dwarfs its spokes (high ratio) means spokes need more
        protection, so buffers shrink as the ratio grows.
        """
        bounds = SANITY_BOUNDS["destination_buffer"]
        ratio = topology.capacity_ratio

        economy = clamp(0.65 + (BUFFER_REFERENCE_RATIO - ratio.economy) * 0.01, *bounds["economy"])
        premium_economy = clamp(
            0.75 + (BUFFER_REFERENCE_RATIO - ratio.premium_economy) * 0.005, *bounds["premium_economy"]
        )
        first_business = clamp(
            0.80 + (BUFFER_REFERENCE_RATIO - ratio.first) * 0.005, *bounds["first_business"]
        )

        return DestinationBuffers(
            hub=bounds["hub"][0],
            economy=economy,
            premium_economy=premium_economy,
            first_business=first_business,
        )

    def _calculate_purchase_thresholds(
        self, topology: NetworkTopology, demand_estimates: PerClassAmount
    ) -> PerClassAmount:
        low, high = SANITY_BOUNDS["purchase_threshold"]
        thresholds = {}

        for kit_class in KIT_CLASSES:
            demand_per_hour = (topology.total_flights_per_day / 24) * demand_estimates.get(kit_class)
            lead_time = KIT_DEFINITIONS[kit_class.value]["lead_time"]
            needed = demand_per_hour * lead_time * PURCHASE_SAFETY_MULTIPLIER

            hub_capacity = topology.hub_capacity.get(kit_class)
            raw = needed / hub_capacity if hub_capacity > 0 else high
            thresholds[kit_class] = clamp(raw, low, high)

        return PerClassAmount.from_mapping(thresholds)

    # ==================== DATA QUALITY ====================

    def _collect_warnings(self, topology: NetworkTopology, economics: RouteEconomics) -> List[str]:
        warnings = []
        min_spokes, max_spokes = NETWORK_SIZE_BOUNDS

        if topology.spoke_count < min_spokes:
            warnings.append(f"Small network detected: only {topology.spoke_count} spokes")
        if topology.spoke_count > max_spokes:
            warnings.append(f"Large network detected: {topology.spoke_count} spokes")
        if economics.distance_std_dev > economics.avg_distance * 0.6:
            warnings.append("High distance variance - may need route-specific adjustments")
        if not self.aircraft:
            warnings.append("No aircraft data - using default demand estimates")
        if len(self.flight_plans) < MIN_FLIGHT_PLAN_SAMPLE:
            warnings.append(
                f"Small flight plan sample: {len(self.flight_plans)} routes "
                f"(< {MIN_FLIGHT_PLAN_SAMPLE})"
            )

        return warnings

    def _calculate_confidence(self, topology: NetworkTopology, economics: RouteEconomics) -> float:
        confidence = 1.0
        min_spokes, max_spokes = NETWORK_SIZE_BOUNDS

        if topology.spoke_count < min_spokes or topology.spoke_count > max_spokes:
            confidence -= 0.1
        if economics.distance_std_dev > economics.avg_distance * 0.5:
            confidence -= 0.1
        if not self.aircraft:
            confidence -= 0.2
        if len(self.flight_plans) < MIN_FLIGHT_PLAN_SAMPLE:
            confidence -= 0.2

        return max(CONFIDENCE_FLOOR, round(confidence, 2))


def calibrate(
    airports: Union[Mapping[str, Airport], Iterable[Airport]],
    aircraft: Union[Mapping[str, Aircraft], Iterable[Aircraft], None],
    flight_plans: Iterable[FlightPlan],
) -> DatasetCharacteristics:
    """Convenience wrapper: NetworkCalibrator(...).calibrate()."""
    return NetworkCalibrator(airports, aircraft, flight_plans).calibrate()
