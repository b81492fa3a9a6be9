"""Airport model."""

from pydantic import BaseModel, ConfigDict, Field

from .kit import PerClassAmount


class Airport(BaseModel):
    """Represents an airport with its capacity and per-class costs."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "code": "HUB1",
                "name": "Central Hub",
                "is_hub": True,
                "capacity": {"first": 1000, "business": 3000, "premium_economy": 1500, "economy": 20000},
                "loading_cost": {"first": 1.0, "business": 0.75, "premium_economy": 0.5, "economy": 0.5},
                "processing_cost": {"first": 8.0, "business": 6.0, "premium_economy": 6.0, "economy": 4.0},
            }
        },
    )

    code: str
    name: str = ""
    is_hub: bool = False
    capacity: PerClassAmount = Field(default_factory=PerClassAmount)
    loading_cost: PerClassAmount = Field(default_factory=PerClassAmount)
    processing_cost: PerClassAmount = Field(default_factory=PerClassAmount)
    processing_time: PerClassAmount = Field(default_factory=PerClassAmount)  # hours
    initial_stock: PerClassAmount = Field(default_factory=PerClassAmount)
