"""Domain constants and environment-backed engine settings."""

from typing import Dict
from pydantic_settings import BaseSettings, SettingsConfigDict


# Unfulfilled-passenger penalty factor, per km - must match the evaluation platform
UNFULFILLED_KIT_FACTOR_PER_DISTANCE = 0.003


# Kit definitions
# Per class: kit cost, weight (kg) and replacement lead time (hours)
KIT_DEFINITIONS: Dict[str, Dict[str, float]] = {
    "FIRST": {
        "cost": 200.0,
        "weight": 5.0,
        "lead_time": 48,
    },
    "BUSINESS": {
        "cost": 150.0,
        "weight": 3.0,
        "lead_time": 36,
    },
    "PREMIUM_ECONOMY": {
        "cost": 100.0,
        "weight": 2.5,
        "lead_time": 24,
    },
    "ECONOMY": {
        "cost": 50.0,
        "weight": 1.5,
        "lead_time": 12,
    },
}


# Unfulfilled economy penalty per km = factor * kit cost (0.003 * 50)
ECONOMY_PENALTY_PER_KM = UNFULFILLED_KIT_FACTOR_PER_DISTANCE * KIT_DEFINITIONS["ECONOMY"]["cost"]


# Per-flight demand used whenever nothing better is known
DEFAULT_DEMAND_ESTIMATES: Dict[str, int] = {
    "FIRST": 10,
    "BUSINESS": 50,
    "PREMIUM_ECONOMY": 25,
    "ECONOMY": 200,
}


# Sanity bounds for calibrated parameters
SANITY_BOUNDS = {
    "economy_load_factor": (0.50, 0.90),
    "purchase_threshold": (0.05, 0.90),
    "demand_estimate": {
        "FIRST": (2, 100),
        "BUSINESS": (5, 200),
        "PREMIUM_ECONOMY": (3, 150),
        "ECONOMY": (30, 600),
    },
    "destination_buffer": {
        "hub": (0.95, 0.95),
        "economy": (0.65, 0.80),
        "premium_economy": (0.75, 0.85),
        "first_business": (0.80, 0.90),
    },
}


# Calibration defaults for empty or sparse reference data
FALLBACK_ECONOMICS = {
    "avg_distance": 3000.0,
    "min_distance": 500.0,
    "max_distance": 6000.0,
    "distance_std_dev": 1500.0,
    "avg_penalty_per_economy_kit": 4.5,
    "avg_transport_cost": 4.0,
    "penalty_cost_ratio": 1.125,
}
FALLBACK_HUB_LOADING_COST = 2.0
FALLBACK_FUEL_RATE = 0.001
FALLBACK_SPOKE_PROCESSING_COST = 4.0
FALLBACK_FLIGHT_DISTANCE = 2800.0

PASSENGER_LOAD_FACTOR = 0.80
PURCHASE_SAFETY_MULTIPLIER = 1.5
MIN_FLIGHT_PLAN_SAMPLE = 50


# File path constants (relative to the working directory)
CSV_BASE_PATH = "data"
AIRPORTS_CSV = f"{CSV_BASE_PATH}/airports_with_stocks.csv"
AIRCRAFT_TYPES_CSV = f"{CSV_BASE_PATH}/aircraft_types.csv"
FLIGHT_PLAN_CSV = f"{CSV_BASE_PATH}/flight_plan.csv"
CSV_DELIMITER = ";"


class EngineSettings(BaseSettings):
    """Engine configuration with environment variable support."""

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "engine.log"
    JOURNAL_FILE: str = "adaptation.jsonl"

    # Forecasting
    OBSERVATION_WINDOW: int = 100
    MIN_WINDOW_OBSERVATIONS: int = 5
    DEMAND_SAFETY_BUFFER: float = 1.3
    MIN_BLEND_OBSERVATIONS: int = 20
    MIN_RECALIBRATION_OBSERVATIONS: int = 50
    RECALIBRATION_TOLERANCE: float = 0.25
    OBSERVED_BLEND_WEIGHT: float = 0.7

    # Adaptive feedback
    HISTORY_WINDOW_HOURS: int = 72
    WARMUP_DAYS: int = 3
    UNFULFILLED_RATE_THRESHOLD: float = 500000.0  # per day, "high"
    OVERFLOW_RATE_THRESHOLD: float = 10000.0  # per day, "low"
    MAX_DAILY_ADJUSTMENT: float = 0.02
    MAX_TOTAL_ADJUSTMENT: float = 0.10

    model_config = SettingsConfigDict(
        env_prefix="ROTABLE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
