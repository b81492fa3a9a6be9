"""Flight plan and flight event models."""

from typing import List
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .kit import PerClassAmount

HOURS_PER_DAY = 24
DAYS_PER_WEEK = 7


class ReferenceHour(BaseModel):
    """A point on the simulation clock: day since start plus hour of day."""

    model_config = ConfigDict(frozen=True)

    day: int = Field(ge=0)
    hour: int = Field(ge=0, lt=HOURS_PER_DAY)

    def to_hours(self) -> int:
        """Hours elapsed since day 0, hour 0."""
        return self.day * HOURS_PER_DAY + self.hour

    # Ordering is by absolute hour; equality comes from the model fields
    def __lt__(self, other: "ReferenceHour") -> bool:
        return self.to_hours() < other.to_hours()

    def __le__(self, other: "ReferenceHour") -> bool:
        return self.to_hours() <= other.to_hours()

    def __gt__(self, other: "ReferenceHour") -> bool:
        return self.to_hours() > other.to_hours()

    def __ge__(self, other: "ReferenceHour") -> bool:
        return self.to_hours() >= other.to_hours()

    def advance(self, hours: int) -> "ReferenceHour":
        """Move forward, wrapping the hour modulo 24 and carrying days."""
        total = self.hour + hours
        return ReferenceHour(day=self.day + total // HOURS_PER_DAY, hour=total % HOURS_PER_DAY)

    @property
    def weekday(self) -> int:
        return self.day % DAYS_PER_WEEK


class FlightPlan(BaseModel):
    """A recurring scheduled route, the template concrete flights come from."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "origin": "HUB1",
                "destination": "ZRH",
                "departure_hour": 6,
                "arrival_hour": 9,
                "arrival_next_day": False,
                "distance_km": 1200.0,
                "weekdays": [True, True, True, True, True, False, False],
            }
        },
    )

    origin: str
    destination: str
    departure_hour: int = Field(ge=0, lt=HOURS_PER_DAY)
    arrival_hour: int = Field(ge=0, lt=HOURS_PER_DAY)
    arrival_next_day: bool = False
    distance_km: float = Field(default=0.0, ge=0)
    weekdays: List[bool]  # Mon..Sun

    @field_validator("weekdays")
    @classmethod
    def _seven_days(cls, value: List[bool]) -> List[bool]:
        if len(value) != DAYS_PER_WEEK:
            raise ValueError(f"weekday mask must have {DAYS_PER_WEEK} entries, got {len(value)}")
        return value

    def is_active_on(self, day: int) -> bool:
        return self.weekdays[day % DAYS_PER_WEEK]

    def arrives_on(self, day: int) -> bool:
        """Whether an arrival lands on day; overnight flights departed the day before."""
        departure_day = day - 1 if self.arrival_next_day else day
        return departure_day >= 0 and self.is_active_on(departure_day)


class FlightEvent(BaseModel):
    """A concrete flight revealed by the simulation, with actual passengers."""

    model_config = ConfigDict(frozen=True)

    flight_id: str
    origin: str
    destination: str
    departure: ReferenceHour
    arrival: ReferenceHour
    passengers: PerClassAmount = Field(default_factory=PerClassAmount)
