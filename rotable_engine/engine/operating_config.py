"""Purchasing and loading configuration derived from hub capacity."""

import copy
import math
from dataclasses import dataclass, field
from typing import Dict

from ..models.characteristics import DatasetCharacteristics
from ..models.kit import KIT_CLASSES, PerClassAmount

# Server-side per-request limits, independent of the dataset
API_LIMITS: Dict[str, int] = {
    "FIRST": 42000,
    "BUSINESS": 42000,
    "PREMIUM_ECONOMY": 3000,
    "ECONOMY": 42000,
}


@dataclass
class PurchaseConfig:
    """When and how much the purchasing logic may buy, per class."""

    # Stock below threshold triggers a purchase
    thresholds: Dict[str, int]
    # Stock below emergency threshold triggers an immediate purchase
    emergency_thresholds: Dict[str, int]
    max_per_order: Dict[str, int]
    max_total_purchase: Dict[str, int]
    api_limits: Dict[str, int] = field(default_factory=lambda: dict(API_LIMITS))

    purchase_interval: int = 6  # hours between regular purchase checks
    demand_buffer: float = 1.0
    forecast_hours: int = 48


@dataclass
class LoadingConfig:
    """Flight-loading safety margins."""

    # Share of capacity kept back at each airport to avoid negative inventory
    hub_safety_buffer: float
    spoke_safety_buffer: float
    destination_forecast_hours: int = 24
    enable_extra_loading_to_spokes: bool = True
    enable_return_to_hub: bool = True


DEFAULT_PURCHASE_CONFIG = PurchaseConfig(
    thresholds={"FIRST": 1800, "BUSINESS": 6000, "PREMIUM_ECONOMY": 4000, "ECONOMY": 70000},
    emergency_thresholds={"FIRST": 400, "BUSINESS": 2000, "PREMIUM_ECONOMY": 400, "ECONOMY": 10000},
    max_per_order={"FIRST": 1000, "BUSINESS": 3000, "PREMIUM_ECONOMY": 1000, "ECONOMY": 15000},
    max_total_purchase={"FIRST": 50000, "BUSINESS": 100000, "PREMIUM_ECONOMY": 30000, "ECONOMY": 200000},
)

# Absolute kit counts, used when hub capacity is unknown
DEFAULT_LOADING_CONFIG = LoadingConfig(hub_safety_buffer=100, spoke_safety_buffer=20)


# Fractions of hub capacity: (threshold, emergency, max per order)
_CAPACITY_SHARES = {
    "FIRST": (0.10, 0.02, 0.05),
    "BUSINESS": (0.33, 0.03, 0.15),
    "PREMIUM_ECONOMY": (0.40, 0.02, 0.10),
    "ECONOMY": (0.70, 0.05, 0.15),
}
# Floors: (emergency, max per order)
_MINIMUMS = {
    "FIRST": (50, 100),
    "BUSINESS": (200, 500),
    "PREMIUM_ECONOMY": (50, 100),
    "ECONOMY": (1000, 2000),
}
MAX_TOTAL_CAPACITY_MULTIPLE = 3


def calculate_dynamic_purchase_config(hub_capacity: PerClassAmount) -> PurchaseConfig:
    """Purchase config as shares of hub capacity, so it scales across datasets."""
    if hub_capacity.total() == 0:
        return copy.deepcopy(DEFAULT_PURCHASE_CONFIG)

    thresholds, emergency, max_per_order, max_total = {}, {}, {}, {}

    for kit_class in KIT_CLASSES:
        key = kit_class.value
        capacity = hub_capacity.get(kit_class)
        threshold_share, emergency_share, order_share = _CAPACITY_SHARES[key]
        emergency_floor, order_floor = _MINIMUMS[key]

        thresholds[key] = math.floor(capacity * threshold_share)
        emergency[key] = max(emergency_floor, math.floor(capacity * emergency_share))
        max_per_order[key] = max(order_floor, math.floor(capacity * order_share))
        max_total[key] = int(capacity * MAX_TOTAL_CAPACITY_MULTIPLE)

    return PurchaseConfig(
        thresholds=thresholds,
        emergency_thresholds=emergency,
        max_per_order=max_per_order,
        max_total_purchase=max_total,
    )


def calculate_dynamic_loading_config(hub_capacity: PerClassAmount) -> LoadingConfig:
    """Loading safety buffers as shares of each airport's capacity."""
    if hub_capacity.total() == 0:
        return copy.deepcopy(DEFAULT_LOADING_CONFIG)
    return LoadingConfig(hub_safety_buffer=0.01, spoke_safety_buffer=0.03)


def purchase_config_from_characteristics(characteristics: DatasetCharacteristics) -> PurchaseConfig:
    """Dynamic purchase config with thresholds from the calibrated percentages."""
    hub_capacity = characteristics.topology.hub_capacity
    config = calculate_dynamic_purchase_config(hub_capacity)
    if hub_capacity.total() == 0:
        return config

    config.thresholds = {
        kit_class.value: math.floor(
            hub_capacity.get(kit_class) * characteristics.purchase_threshold_percents.get(kit_class)
        )
        for kit_class in KIT_CLASSES
    }
    return config
