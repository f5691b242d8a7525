"""Stats data model."""

from typing import Optional

from pydantic import BaseModel, Field


class Stats(BaseModel):
    """Streak and count statistics derived from the entry set."""

    total_deposits: int = Field(default=0, ge=0, description="Number of entries")
    current_streak: int = Field(default=0, ge=0, description="Streak ending today or yesterday")
    longest_streak: int = Field(default=0, ge=0, description="Longest run of consecutive days")
    start_date: Optional[str] = Field(default=None, description="Earliest entry id")

    model_config = {"frozen": True}
