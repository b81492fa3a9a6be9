"""Per-run composition of calibrator output, forecaster and adaptive engine."""

import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from ..config import AIRCRAFT_TYPES_CSV, AIRPORTS_CSV, FLIGHT_PLAN_CSV, EngineSettings
from ..data_loader import load_aircraft, load_airports, load_flight_plans
from ..engine.adaptive import AdaptiveEngine, PenaltyInput
from ..engine.calibrator import NetworkCalibrator
from ..engine.forecasting import DemandForecaster
from ..engine.operating_config import (
    LoadingConfig,
    PurchaseConfig,
    calculate_dynamic_loading_config,
    purchase_config_from_characteristics,
)
from ..logger import JSONLogger
from ..utils import as_list
from ..models.aircraft import Aircraft
from ..models.airport import Airport
from ..models.characteristics import DatasetCharacteristics
from ..models.flight import FlightEvent, FlightPlan
from ..models.kit import ClassKey, PerClassAmount

logger = logging.getLogger(__name__)


class EngineSession:
    """
    Owns the engine state of one simulation run.

    The driver loop holds the session and calls it once per simulated hour;
    calls must not overlap.
    """

    def __init__(
        self,
        airports: Union[Mapping[str, Airport], Iterable[Airport]],
        flight_plans: Iterable[FlightPlan],
        characteristics: DatasetCharacteristics,
        settings: Optional[EngineSettings] = None,
        mode_switching_enabled: bool = False,
        journal: Optional[JSONLogger] = None,
    ):
        self.settings = settings or EngineSettings()
        self.airports = {airport.code: airport for airport in as_list(airports)}
        self.flight_plans = list(flight_plans)
        self.characteristics = characteristics
        self.mode_switching_enabled = mode_switching_enabled
        self.journal = journal
        self.known_flights: Dict[str, FlightEvent] = {}

        self.forecaster = self._new_forecaster()
        self.adaptive = self._new_adaptive_engine()

    @classmethod
    def from_reference_data(
        cls,
        airports: Union[Mapping[str, Airport], Iterable[Airport]],
        aircraft: Union[Mapping[str, Aircraft], Iterable[Aircraft]],
        flight_plans: Iterable[FlightPlan],
        settings: Optional[EngineSettings] = None,
        **kwargs,
    ) -> "EngineSession":
        """Calibrate once against the reference data and build a session."""
        airports = as_list(airports)
        flight_plans = list(flight_plans)
        characteristics = NetworkCalibrator(airports, aircraft, flight_plans).calibrate()
        return cls(airports, flight_plans, characteristics, settings=settings, **kwargs)

    @classmethod
    def from_csv(
        cls,
        airports_csv: str = AIRPORTS_CSV,
        aircraft_csv: str = AIRCRAFT_TYPES_CSV,
        flight_plan_csv: str = FLIGHT_PLAN_CSV,
        settings: Optional[EngineSettings] = None,
        **kwargs,
    ) -> "EngineSession":
        return cls.from_reference_data(
            load_airports(airports_csv),
            load_aircraft(aircraft_csv),
            load_flight_plans(flight_plan_csv),
            settings=settings,
            **kwargs,
        )

    def _new_forecaster(self) -> DemandForecaster:
        return DemandForecaster(self.flight_plans, self.characteristics, settings=self.settings)

    def _new_adaptive_engine(self) -> AdaptiveEngine:
        return AdaptiveEngine(
            characteristics=self.characteristics,
            mode_switching_enabled=self.mode_switching_enabled,
            settings=self.settings,
            journal=self.journal,
        )

    def reset(self) -> None:
        """Fresh forecaster and adaptive engine; calibration output is reused."""
        self.known_flights = {}
        self.forecaster = self._new_forecaster()
        self.adaptive = self._new_adaptive_engine()
        logger.info("Engine session reset")

    # ==================== LIVE FEED ====================

    def ingest_flight_event(self, event: FlightEvent) -> None:
        """
        A flight became known or was updated: remember its latest state.

        Passenger counts are learned from only once per flight id, so status
        updates of the same flight do not count as new observations.
        """
        is_new = event.flight_id not in self.known_flights
        self.known_flights[event.flight_id] = event
        if is_new:
            self.forecaster.record_flight_event(event)

    def ingest_penalties(self, penalties: Iterable[PenaltyInput], day: int, hour: int) -> None:
        penalties = list(penalties)
        self.adaptive.record_penalties(penalties, day, hour)
        if penalties:
            logger.debug(f"Day {day} hour {hour}: recorded {len(penalties)} penalties")

    # ==================== DECISION INPUTS ====================

    def forecast_outbound(self, airport_code: str, day: int, hour: int, within_hours: int) -> PerClassAmount:
        return self.forecaster.calculate_total_demand(
            airport_code, day, hour, within_hours, self.known_flights
        )

    def forecast_inbound(self, airport_code: str, day: int, hour: int, within_hours: int) -> PerClassAmount:
        return self.forecaster.calculate_total_inbound_demand(
            airport_code, day, hour, within_hours, self.known_flights
        )

    def buffer_percent(self, airport_code: str, kit_class: ClassKey) -> float:
        """Calibrated destination buffer, adjusted for the airport's risk."""
        airport = self.airports.get(airport_code)
        is_hub = airport.is_hub if airport is not None else False
        base = self.characteristics.destination_buffers.for_class(kit_class, is_hub=is_hub)
        return self.adaptive.get_buffer_percent(airport_code, kit_class, base)

    def economy_load_factor(self, current_day: Optional[int] = None) -> float:
        """Effective economy load factor; runs the daily control step when a day is given."""
        if current_day is not None:
            self.adaptive.suggest_load_factor_adjustment(current_day)
        return self.adaptive.get_effective_economy_load_factor()

    def purchase_config(self) -> PurchaseConfig:
        return purchase_config_from_characteristics(self.characteristics)

    def loading_config(self) -> LoadingConfig:
        return calculate_dynamic_loading_config(self.characteristics.topology.hub_capacity)

    def summary(self) -> Dict[str, Any]:
        return {
            "calibration": {
                "hub": self.characteristics.topology.hub_code,
                "spokes": self.characteristics.topology.spoke_count,
                "confidence": self.characteristics.confidence,
                "warnings": list(self.characteristics.warnings),
            },
            "observations": self.forecaster.observation_count,
            "demand_stats": self.forecaster.get_demand_stats().snapshot(),
            "should_recalibrate": self.forecaster.should_recalibrate(),
            "economy_load_factor": self.adaptive.get_effective_economy_load_factor(),
            "adaptive": self.adaptive.get_summary(),
        }
