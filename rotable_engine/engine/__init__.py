"""Calibration, forecasting and adaptive feedback."""

from .adaptive import AdaptiveEngine, AirportPerformance, ClassPenaltyStats, StrategyMode
from .calibrator import NetworkCalibrator, calibrate, economic_optimal_load_factor
from .forecasting import DemandForecaster
from .operating_config import (
    DEFAULT_LOADING_CONFIG,
    DEFAULT_PURCHASE_CONFIG,
    LoadingConfig,
    PurchaseConfig,
    calculate_dynamic_loading_config,
    calculate_dynamic_purchase_config,
    purchase_config_from_characteristics,
)
from .statistics import PerClassStats, RunningStats

__all__ = [
    "AdaptiveEngine",
    "AirportPerformance",
    "ClassPenaltyStats",
    "StrategyMode",
    "NetworkCalibrator",
    "calibrate",
    "economic_optimal_load_factor",
    "DemandForecaster",
    "DEFAULT_LOADING_CONFIG",
    "DEFAULT_PURCHASE_CONFIG",
    "LoadingConfig",
    "PurchaseConfig",
    "calculate_dynamic_loading_config",
    "calculate_dynamic_purchase_config",
    "purchase_config_from_characteristics",
    "PerClassStats",
    "RunningStats",
]
