"""Engine models package."""

from .kit import KIT_CLASSES, KitClass, PerClassAmount
from .airport import Airport
from .aircraft import Aircraft
from .flight import FlightEvent, FlightPlan, ReferenceHour
from .penalty import PenaltyEvent, PenaltyType, classify_penalty, parse_penalty_reason
from .characteristics import (
    DatasetCharacteristics,
    DestinationBuffers,
    EconomyLoadFactorConfig,
    NetworkTopology,
    RouteEconomics,
)

__all__ = [
    "KIT_CLASSES",
    "KitClass",
    "PerClassAmount",
    "Airport",
    "Aircraft",
    "FlightEvent",
    "FlightPlan",
    "ReferenceHour",
    "PenaltyEvent",
    "PenaltyType",
    "classify_penalty",
    "parse_penalty_reason",
    "DatasetCharacteristics",
    "DestinationBuffers",
    "EconomyLoadFactorConfig",
    "NetworkTopology",
    "RouteEconomics",
]
