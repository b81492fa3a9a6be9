"""Rotable kit decision engine: calibration, demand forecasting and adaptive feedback."""

from .config import EngineSettings
from .exceptions import ConfigurationError
from .engine import AdaptiveEngine, DemandForecaster, NetworkCalibrator, calibrate
from .services import EngineSession

__all__ = [
    "EngineSettings",
    "ConfigurationError",
    "AdaptiveEngine",
    "DemandForecaster",
    "NetworkCalibrator",
    "calibrate",
    "EngineSession",
]

__version__ = "0.1.0"
