"""Compound valuation of the entry set.

Each entry is a unit deposit that grows daily:

    value = (1 + daily_rate) ** days_since_deposit
    daily_rate = BASE_RATE + min(streak_at_deposit * STREAK_BONUS, MAX_STREAK_BONUS)

The historical growth curve uses BASE_RATE only, so its last point is not
expected to match ``compound_value``. The projection assumes one more
deposit every day for the next PROJECTION_DAYS days.
"""

import math
from datetime import date, timedelta
from typing import Iterable, Optional

from compound.analytics.stats import calculate_streaks_by_date, entry_dates
from compound.models import Entry, GrowthPoint, Valuation

BASE_RATE = 0.003  # 0.3% per day
STREAK_BONUS = 0.0005  # 0.05% per streak day
MAX_STREAK_BONUS = 0.01  # 1% cap
PROJECTION_DAYS = 30


def round_half_up(value: float, digits: int) -> float:
    """Round with halves going up, e.g. 2.25 -> 2.3 at one digit."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def daily_rate(streak: int) -> float:
    """Get the daily growth rate for a deposit made at the given streak."""
    return BASE_RATE + min(streak * STREAK_BONUS, MAX_STREAK_BONUS)


def calculate_compound_value(entries: Iterable[Entry], as_of: date) -> float:
    """Sum the grown value of every deposit, unrounded.

    Args:
        entries: All entries.
        as_of: Evaluation date.

    Returns:
        Total compound value.
    """
    dates = entry_dates(entries)
    streaks = calculate_streaks_by_date(dates)

    total = 0.0
    for day in dates:
        days_since = max(0, (as_of - day).days)
        total += (1 + daily_rate(streaks[day])) ** days_since
    return total


def generate_growth_curve(entries: Iterable[Entry], as_of: date) -> list[GrowthPoint]:
    """Generate one point per day from the first deposit to ``as_of``.

    Args:
        entries: All entries.
        as_of: Last day of the curve.

    Returns:
        Points in date order, empty if there are no deposits.
    """
    dates = entry_dates(entries)
    if not dates:
        return []

    points = []
    day_count = (as_of - dates[0]).days + 1
    for offset in range(day_count):
        snapshot = dates[0] + timedelta(days=offset)
        value = 0.0
        for day in dates:
            if day > snapshot:
                break
            value += (1 + BASE_RATE) ** (snapshot - day).days
        points.append(GrowthPoint(date=snapshot, value=round_half_up(value, 1)))
    return points


def generate_projection(
    entries: Iterable[Entry],
    as_of: date,
    days: int = PROJECTION_DAYS,
) -> list[GrowthPoint]:
    """Project the value forward assuming a deposit every day.

    Existing deposits are treated as one unbroken daily run ending at
    ``as_of``; on the i-th future day there are ``i`` extra deposits.

    Args:
        entries: All entries.
        as_of: Day the projection starts after.
        days: Number of future days.

    Returns:
        Points in date order, empty if there are no deposits.
    """
    current_deposits = len(entry_dates(entries))
    if current_deposits == 0:
        return []

    points = []
    for i in range(1, days + 1):
        deposits = current_deposits + i
        value = sum((1 + BASE_RATE) ** (deposits - j - 1) for j in range(deposits))
        points.append(
            GrowthPoint(date=as_of + timedelta(days=i), value=round_half_up(value, 1))
        )
    return points


def compute_valuation(entries: Iterable[Entry], today: Optional[date] = None) -> Valuation:
    """Compute the full valuation of the entry set.

    Args:
        entries: All entries.
        today: Evaluation date, defaults to the current local date.

    Returns:
        Valuation, zero-valued with empty curves for no entries.
    """
    entries = list(entries)
    today = today or date.today()
    deposits = len(entry_dates(entries))
    if deposits == 0:
        return Valuation()

    compound_value = round_half_up(calculate_compound_value(entries, today), 1)
    return Valuation(
        compound_value=compound_value,
        multiplier=round_half_up(compound_value / deposits, 2),
        growth_curve=generate_growth_curve(entries, today),
        projection=generate_projection(entries, today),
    )
