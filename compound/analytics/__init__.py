"""Derived statistics and valuation for Compound."""

from compound.analytics.stats import (
    calculate_current_streak,
    calculate_longest_streak,
    calculate_stats,
    calculate_streaks_by_date,
)
from compound.analytics.valuation import (
    BASE_RATE,
    MAX_STREAK_BONUS,
    PROJECTION_DAYS,
    STREAK_BONUS,
    calculate_compound_value,
    compute_valuation,
    generate_growth_curve,
    generate_projection,
)

__all__ = [
    "BASE_RATE",
    "MAX_STREAK_BONUS",
    "PROJECTION_DAYS",
    "STREAK_BONUS",
    "calculate_compound_value",
    "calculate_current_streak",
    "calculate_longest_streak",
    "calculate_stats",
    "calculate_streaks_by_date",
    "compute_valuation",
    "generate_growth_curve",
    "generate_projection",
]
