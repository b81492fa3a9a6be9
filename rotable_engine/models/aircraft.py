"""Aircraft model."""

from pydantic import BaseModel, ConfigDict, Field

from .kit import PerClassAmount


class Aircraft(BaseModel):
    """Represents an aircraft type with seats and fuel cost."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "type_code": "A320",
                "seats": {"first": 0, "business": 20, "premium_economy": 30, "economy": 120},
                "kit_capacity": {"first": 0, "business": 20, "premium_economy": 30, "economy": 120},
                "cost_per_kg_per_km": 0.0005,
            }
        },
    )

    type_code: str
    seats: PerClassAmount
    kit_capacity: PerClassAmount = Field(default_factory=PerClassAmount)
    cost_per_kg_per_km: float = Field(ge=0)
