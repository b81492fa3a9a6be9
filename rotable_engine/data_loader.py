"""Reference data loading from the semicolon-separated CSV exports."""

import logging
import os
from typing import Any, Dict, List, Mapping, Optional, Sequence

import pandas as pd

from .config import CSV_BASE_PATH, CSV_DELIMITER
from .models.aircraft import Aircraft
from .models.airport import Airport
from .models.flight import FlightPlan
from .models.kit import KIT_CLASSES, PerClassAmount

logger = logging.getLogger(__name__)

WEEKDAY_COLUMNS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

# Column stems per kit class: short ("capacity_ec"), long ("economy_loading_cost")
_SHORT_STEM = {"FIRST": "fc", "BUSINESS": "bc", "PREMIUM_ECONOMY": "pe", "ECONOMY": "ec"}
_SEAT_COLUMNS = {
    "FIRST": "first_class_seats",
    "BUSINESS": "business_seats",
    "PREMIUM_ECONOMY": "premium_economy_seats",
    "ECONOMY": "economy_seats",
}

Row = Mapping[str, Any]


def _locate(csv_path: str) -> str:
    """The path as given if it exists, else the same name under data/."""
    if not os.path.exists(csv_path):
        candidate = os.path.join(CSV_BASE_PATH, csv_path)
        if os.path.exists(candidate):
            return candidate
    return csv_path


def _read_table(csv_path: str, label: str, required: Sequence[str]) -> Optional[pd.DataFrame]:
    """
    Read one reference table.

    Returns None (with a warning) when the file does not exist; raises
    ValueError when a required column is absent.
    """
    path = _locate(csv_path)
    try:
        df = pd.read_csv(path, sep=CSV_DELIMITER)
    except FileNotFoundError:
        logger.warning(f"No {label} file at {csv_path}, nothing loaded")
        return None

    missing = [column for column in required if column not in df.columns]
    if missing:
        raise ValueError(f"{label} CSV is missing required column(s): {', '.join(missing)}")

    logger.info(f"Read {len(df)} {label} rows from {path}")
    return df


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "y")
    if value is None or pd.isna(value):
        return False
    return bool(value)


def _number(row: Row, column: str, default: float = 0.0) -> float:
    value = row.get(column)
    if value is None or pd.isna(value):
        return default
    return float(value)


def _per_class(row: Row, column_for) -> PerClassAmount:
    """Collect one numeric column per kit class; column_for maps class value -> column."""
    return PerClassAmount.from_mapping(
        {kit_class: _number(row, column_for(kit_class.value)) for kit_class in KIT_CLASSES}
    )


def load_airports(csv_path: str) -> Dict[str, Airport]:
    """
    Parse airports_with_stocks.csv into Airport records keyed by code.

    The hub is the row whose is_hub column is truthy or, when the file has no
    such column, the row whose code starts with "HUB".
    """
    df = _read_table(csv_path, "airports", ["code"])
    if df is None:
        return {}

    has_hub_column = "is_hub" in df.columns
    airports: Dict[str, Airport] = {}
    try:
        for row in df.to_dict("records"):
            code = str(row["code"])
            name = row.get("name")
            airports[code] = Airport(
                code=code,
                name=code if name is None or pd.isna(name) else str(name),
                is_hub=_flag(row["is_hub"]) if has_hub_column else code.upper().startswith("HUB"),
                capacity=_per_class(row, lambda c: f"capacity_{_SHORT_STEM[c]}"),
                loading_cost=_per_class(row, lambda c: f"{c.lower()}_loading_cost"),
                processing_cost=_per_class(row, lambda c: f"{c.lower()}_processing_cost"),
                processing_time=_per_class(row, lambda c: f"{c.lower()}_processing_time"),
                initial_stock=_per_class(row, lambda c: f"initial_{_SHORT_STEM[c]}_stock"),
            )
    except Exception as e:
        logger.error(f"Invalid airport row in {csv_path}: {e}")
        raise

    return airports


def load_aircraft(csv_path: str) -> Dict[str, Aircraft]:
    """Parse aircraft_types.csv into Aircraft records keyed by type code."""
    df = _read_table(csv_path, "aircraft types", ["type_code"])
    if df is None:
        return {}

    aircraft: Dict[str, Aircraft] = {}
    try:
        for row in df.to_dict("records"):
            type_code = str(row["type_code"])
            aircraft[type_code] = Aircraft(
                type_code=type_code,
                seats=_per_class(row, lambda c: _SEAT_COLUMNS[c]),
                kit_capacity=_per_class(row, lambda c: f"{c.lower()}_kits_capacity"),
                cost_per_kg_per_km=_number(row, "cost_per_kg_per_km"),
            )
            logger.debug(f"Aircraft {type_code}: seats {aircraft[type_code].seats.to_class_dict()}")
    except Exception as e:
        logger.error(f"Invalid aircraft row in {csv_path}: {e}")
        raise

    return aircraft


def load_flight_plans(csv_path: str) -> List[FlightPlan]:
    """Parse flight_plan.csv into recurring FlightPlan templates, in file order."""
    df = _read_table(csv_path, "flight plan", ["depart_code", "arrival_code"])
    if df is None:
        return []

    try:
        return [
            FlightPlan(
                origin=str(row["depart_code"]),
                destination=str(row["arrival_code"]),
                departure_hour=int(_number(row, "scheduled_hour")),
                arrival_hour=int(_number(row, "scheduled_arrival_hour")),
                arrival_next_day=_flag(row.get("arrival_next_day")),
                distance_km=_number(row, "distance_km"),
                weekdays=[_flag(row.get(day)) for day in WEEKDAY_COLUMNS],
            )
            for row in df.to_dict("records")
        ]
    except Exception as e:
        logger.error(f"Invalid flight plan row in {csv_path}: {e}")
        raise
