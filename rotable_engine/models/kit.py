"""Kit class and per-class amount models."""

from enum import Enum
from typing import Dict, List, Mapping, Tuple, Union
from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class KitClass(str, Enum):
    """The four passenger-service tiers a kit can belong to."""

    FIRST = "FIRST"
    BUSINESS = "BUSINESS"
    PREMIUM_ECONOMY = "PREMIUM_ECONOMY"
    ECONOMY = "ECONOMY"

    @property
    def field_name(self) -> str:
        """Attribute name on PerClassAmount."""
        return self.value.lower()


KIT_CLASSES: Tuple[KitClass, ...] = (
    KitClass.FIRST,
    KitClass.BUSINESS,
    KitClass.PREMIUM_ECONOMY,
    KitClass.ECONOMY,
)

ClassKey = Union[KitClass, str]


class PerClassAmount(BaseModel):
    """Non-negative quantity per kit class (demand, stock, capacity, cost...)."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        json_schema_extra={
            "example": {"first": 10, "business": 50, "premium_economy": 25, "economy": 200}
        },
    )

    first: float = Field(default=0.0, ge=0)
    business: float = Field(default=0.0, ge=0)
    premium_economy: float = Field(
        default=0.0,
        ge=0,
        validation_alias=AliasChoices("premium_economy", "premiumEconomy"),
    )
    economy: float = Field(default=0.0, ge=0)

    @classmethod
    def from_mapping(cls, values: Mapping[ClassKey, float]) -> "PerClassAmount":
        """Build from a dict keyed by kit class ("FIRST", KitClass.ECONOMY, ...)."""
        data = {}
        for key, value in values.items():
            data[KitClass(key).field_name] = value
        return cls(**data)

    def get(self, kit_class: ClassKey) -> float:
        return getattr(self, KitClass(kit_class).field_name)

    def with_value(self, kit_class: ClassKey, value: float) -> "PerClassAmount":
        """Return a copy with one class replaced."""
        return self.model_copy(update={KitClass(kit_class).field_name: value})

    def items(self) -> List[Tuple[KitClass, float]]:
        return [(kit_class, self.get(kit_class)) for kit_class in KIT_CLASSES]

    def total(self) -> float:
        return sum(value for _, value in self.items())

    def to_class_dict(self) -> Dict[str, float]:
        """Dict keyed by kit class value, e.g. {"FIRST": 10.0, ...}."""
        return {kit_class.value: value for kit_class, value in self.items()}
