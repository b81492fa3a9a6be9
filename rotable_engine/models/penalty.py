"""Penalty event model and the free-text reason parser."""

import re
from enum import Enum
from typing import Any, Mapping, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field

from .flight import HOURS_PER_DAY, ReferenceHour
from .kit import KitClass


class PenaltyType(str, Enum):
    """Penalty families the adaptive engine reacts to."""

    INVENTORY_EXCEEDS_CAPACITY = "INVENTORY_EXCEEDS_CAPACITY"
    FLIGHT_UNFULFILLED = "FLIGHT_UNFULFILLED"
    NEGATIVE_INVENTORY = "NEGATIVE_INVENTORY"
    OTHER = "OTHER"


_AIRPORT_PATTERN = re.compile(r"Airport (\w+)")
_CLASS_PATTERN = re.compile(r"(First|Business|Premium[ _-]?Economy|Economy)", re.IGNORECASE)
_REASON_CLASS_NAMES = {
    "FIRST": KitClass.FIRST,
    "BUSINESS": KitClass.BUSINESS,
    "PREMIUMECONOMY": KitClass.PREMIUM_ECONOMY,
    "ECONOMY": KitClass.ECONOMY,
}

# Checked in order: PREMIUM must win over ECONOMY for PREMIUM_ECONOMY codes
_CODE_CLASS_HINTS = (
    ("PREMIUM", KitClass.PREMIUM_ECONOMY),
    ("FIRST", KitClass.FIRST),
    ("BUSINESS", KitClass.BUSINESS),
    ("ECONOMY", KitClass.ECONOMY),
)


def classify_penalty(code: str) -> PenaltyType:
    """Map a platform penalty code onto a PenaltyType."""
    code = code.upper()
    if "NEGATIVE_INVENTORY" in code:
        return PenaltyType.NEGATIVE_INVENTORY
    if "CAPACITY" in code or "OVERFLOW" in code:
        return PenaltyType.INVENTORY_EXCEEDS_CAPACITY
    if "UNFULFILLED" in code:
        return PenaltyType.FLIGHT_UNFULFILLED
    return PenaltyType.OTHER


def parse_penalty_reason(reason: str) -> Tuple[Optional[str], Optional[KitClass]]:
    """
    Extract airport code and kit class from a penalty's free-text reason.

    Either element is None when the text does not mention it.

    Examples:
        >>> parse_penalty_reason("Airport ZRH exceeds capacity for Economy kits")
        ('ZRH', <KitClass.ECONOMY: 'ECONOMY'>)
    """
    airport_match = _AIRPORT_PATTERN.search(reason or "")
    class_match = _CLASS_PATTERN.search(reason or "")

    kit_class = None
    if class_match:
        # "Premium Economy", "premiumEconomy", "Premium-Economy" all fold to PREMIUMECONOMY
        name = re.sub(r"[^A-Z]", "", class_match.group(1).upper())
        kit_class = _REASON_CLASS_NAMES[name]

    return (airport_match.group(1) if airport_match else None), kit_class


def _class_from_code(code: str) -> Optional[KitClass]:
    code = code.upper()
    for hint, kit_class in _CODE_CLASS_HINTS:
        if hint in code:
            return kit_class
    return None


class PenaltyEvent(BaseModel):
    """Structured penalty payload: explicit airport and kit class fields."""

    model_config = ConfigDict(frozen=True)

    code: str
    amount: float
    day: int = Field(ge=0)
    hour: int = Field(ge=0, lt=HOURS_PER_DAY)
    penalty_type: PenaltyType
    airport_code: Optional[str] = None
    kit_class: Optional[KitClass] = None
    reason: str = ""

    @property
    def occurred_at(self) -> ReferenceHour:
        return ReferenceHour(day=self.day, hour=self.hour)

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any], day: int, hour: int) -> "PenaltyEvent":
        """
        Build from a platform penalty dict ({code, penalty, reason}).

        Airport and class are recovered from the reason text; when the reason
        names no class, the code is used as a hint.
        """
        code = str(raw.get("code", "UNKNOWN"))
        reason = str(raw.get("reason", "") or "")
        airport_code, kit_class = parse_penalty_reason(reason)
        if kit_class is None:
            kit_class = _class_from_code(code)

        return cls(
            code=code,
            amount=float(raw.get("penalty", raw.get("amount", 0.0)) or 0.0),
            day=day,
            hour=hour,
            penalty_type=classify_penalty(code),
            airport_code=airport_code,
            kit_class=kit_class,
            reason=reason,
        )
