"""RemoteRow data model."""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from compound.models.entry import Entry


class RemoteRow(BaseModel):
    """Cloud-side projection of an Entry, tagged with its writing device."""

    id: str = Field(..., description="Entry date (YYYY-MM-DD), primary key")
    text: str = Field(default="", description="Free-form deposit text")
    health: dict[str, bool] = Field(default_factory=dict, description="Habit flags")
    energy: int = Field(default=0, description="Energy level")
    tomorrow: str = Field(default="", description="Intention for the next day")
    analysis: Optional[str] = Field(default=None, description="AI-generated analysis")
    device_id: Optional[str] = Field(default=None, description="Writing device")
    updated_at: Optional[datetime] = Field(default=None, description="Write instant")

    model_config = {"frozen": True}

    @field_validator("text", "tomorrow", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("health", mode="before")
    @classmethod
    def _none_to_dict(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("energy", mode="before")
    @classmethod
    def _none_to_zero(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("updated_at")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @classmethod
    def from_entry(cls, entry: Entry, device_id: str) -> "RemoteRow":
        """Build the row to upsert for a local entry.

        ``updated_at`` carries the entry's own timestamp so the mirror never
        looks newer than the device that wrote it.
        """
        return cls(
            id=entry.id,
            text=entry.text or "",
            health=entry.health or {},
            energy=entry.energy or 0,
            tomorrow=entry.tomorrow or "",
            analysis=entry.analysis,
            device_id=device_id,
            updated_at=entry.timestamp,
        )

    def to_entry(self) -> Entry:
        """Convert back to a local entry, timestamped with ``updated_at``."""
        return Entry(
            id=self.id,
            timestamp=self.updated_at,
            text=self.text,
            health=self.health,
            energy=self.energy,
            tomorrow=self.tomorrow,
            analysis=self.analysis,
        )

    def to_record(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict for the backend.

        An unset ``updated_at`` is left out so the backend default applies.
        """
        record = self.model_dump(mode="json")
        if record["updated_at"] is None:
            del record["updated_at"]
        return record
