"""Calibration output models."""

from typing import List
from pydantic import BaseModel, ConfigDict, Field

from .kit import ClassKey, KitClass, PerClassAmount


class NetworkTopology(BaseModel):
    """Network structure derived from airports and the flight plan."""

    model_config = ConfigDict(frozen=True)

    hub_code: str
    spoke_count: int
    total_flights_per_day: float
    avg_flights_per_spoke: float
    hub_capacity: PerClassAmount
    avg_spoke_capacity: PerClassAmount
    min_spoke_capacity: PerClassAmount
    capacity_ratio: PerClassAmount  # hub / avg spoke


class RouteEconomics(BaseModel):
    """Distance statistics and the penalty-vs-cost balance of a route."""

    model_config = ConfigDict(frozen=True)

    avg_distance: float
    min_distance: float
    max_distance: float
    distance_std_dev: float
    avg_penalty_per_economy_kit: float
    avg_transport_cost: float
    penalty_cost_ratio: float


class EconomyLoadFactorConfig(BaseModel):
    """Economy load-factor policy: baseline, occupancy thresholds and bounds."""

    model_config = ConfigDict(frozen=True)

    baseline: float
    warning_threshold: float
    danger_threshold: float
    min_factor: float
    max_factor: float


class DestinationBuffers(BaseModel):
    """Fraction of destination capacity a load may fill, per class family."""

    model_config = ConfigDict(frozen=True)

    hub: float
    economy: float
    premium_economy: float
    first_business: float

    def for_class(self, kit_class: ClassKey, is_hub: bool = False) -> float:
        if is_hub:
            return self.hub
        kit_class = KitClass(kit_class)
        if kit_class is KitClass.ECONOMY:
            return self.economy
        if kit_class is KitClass.PREMIUM_ECONOMY:
            return self.premium_economy
        return self.first_business


class DatasetCharacteristics(BaseModel):
    """Everything the calibrator learned about a dataset."""

    model_config = ConfigDict(frozen=True)

    topology: NetworkTopology
    economics: RouteEconomics
    economy_load_factor: EconomyLoadFactorConfig
    demand_estimates: PerClassAmount
    destination_buffers: DestinationBuffers
    purchase_threshold_percents: PerClassAmount
    confidence: float = Field(ge=0.0, le=1.0)
    warnings: List[str] = Field(default_factory=list)
