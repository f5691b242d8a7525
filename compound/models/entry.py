"""Entry data model."""

from datetime import date, datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, field_validator

# Fixed set of habit flags a deposit can tick
HEALTH_HABITS = (
    "sleptEarly",
    "wokeEarly",
    "reading",
    "sideProject",
    "exercised",
    "meditation",
)

ENERGY_MAX = 5

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class Entry(BaseModel):
    """Represents one day's deposit.

    The ``id`` is the calendar date in ``YYYY-MM-DD`` form and is the only
    key used for lookup and merging.
    """

    id: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$", description="Entry date (YYYY-MM-DD)")
    timestamp: Optional[datetime] = Field(
        default=None, description="Creation/modification instant (UTC)"
    )
    text: str = Field(default="", description="Free-form deposit text")
    health: dict[str, bool] = Field(default_factory=dict, description="Habit flags")
    energy: int = Field(default=0, ge=0, le=ENERGY_MAX, description="Energy level, 0 = unset")
    tomorrow: str = Field(default="", description="Intention for the next day")
    analysis: Optional[str] = Field(default=None, description="AI-generated analysis")

    model_config = {"frozen": True}

    @field_validator("id")
    @classmethod
    def _check_real_date(cls, value: str) -> str:
        date.fromisoformat(value)
        return value

    @field_validator("health")
    @classmethod
    def _check_habits(cls, value: dict[str, bool]) -> dict[str, bool]:
        unknown = set(value) - set(HEALTH_HABITS)
        if unknown:
            raise ValueError(f"Unknown health habits: {sorted(unknown)}")
        return value

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def day(self) -> date:
        """The entry's calendar date."""
        return date.fromisoformat(self.id)

    @property
    def effective_timestamp(self) -> datetime:
        """Timestamp used for conflict resolution; epoch when unset."""
        return self.timestamp or EPOCH
