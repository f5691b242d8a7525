"""Valuation data models."""

from datetime import date as date_type

from pydantic import BaseModel, Field


class GrowthPoint(BaseModel):
    """A single date -> value point on a growth or projection curve."""

    date: date_type = Field(..., description="Point date")
    value: float = Field(..., ge=0, description="Compound value on that date")

    model_config = {"frozen": True}

    @property
    def label(self) -> str:
        """Short month/day label, e.g. ``1/5``."""
        return f"{self.date.month}/{self.date.day}"


class Valuation(BaseModel):
    """Compound valuation of the entry set as of one evaluation date."""

    compound_value: float = Field(default=0.0, ge=0, description="Sum of grown deposits")
    multiplier: float = Field(default=1.0, description="Compound value per deposit")
    growth_curve: list[GrowthPoint] = Field(default_factory=list, description="History to today")
    projection: list[GrowthPoint] = Field(default_factory=list, description="Next 30 days")

    model_config = {"frozen": True}
