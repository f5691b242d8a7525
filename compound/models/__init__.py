"""Data models for Compound."""

from compound.models.entry import ENERGY_MAX, EPOCH, HEALTH_HABITS, Entry
from compound.models.remote_row import RemoteRow
from compound.models.stats import Stats
from compound.models.valuation import GrowthPoint, Valuation

__all__ = [
    "ENERGY_MAX",
    "EPOCH",
    "HEALTH_HABITS",
    "Entry",
    "GrowthPoint",
    "RemoteRow",
    "Stats",
    "Valuation",
]
