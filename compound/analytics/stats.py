"""Streak and count statistics over the entry set.

All functions are pure: they take the entries (or their dates) and the
current local date, and never touch storage.
"""

from datetime import date, timedelta
from typing import Iterable

from compound.models import Entry, Stats

ONE_DAY = timedelta(days=1)


def entry_dates(entries: Iterable[Entry]) -> list[date]:
    """Get the distinct entry dates in ascending order."""
    return sorted({entry.day for entry in entries})


def _count_back(dates: set[date], end: date) -> int:
    """Count consecutive days with entries, walking back from ``end``."""
    count = 0
    day = end
    while day in dates:
        count += 1
        day -= ONE_DAY
    return count


def calculate_current_streak(dates: Iterable[date], today: date) -> int:
    """Calculate the streak ending today, or yesterday if today is empty.

    Args:
        dates: Entry dates.
        today: Current local date.

    Returns:
        Streak length, 0 if neither today nor yesterday has an entry.
    """
    date_set = set(dates)
    if today in date_set:
        return _count_back(date_set, today)
    return _count_back(date_set, today - ONE_DAY)


def calculate_longest_streak(dates: Iterable[date]) -> int:
    """Calculate the longest run of consecutive calendar dates.

    Args:
        dates: Entry dates.

    Returns:
        Longest run length, 0 for no dates.
    """
    ordered = sorted(set(dates))
    if not ordered:
        return 0

    longest = 1
    run = 1
    for prev, curr in zip(ordered, ordered[1:]):
        if curr - prev == ONE_DAY:
            run += 1
        else:
            run = 1
        longest = max(longest, run)
    return longest


def calculate_streaks_by_date(dates: Iterable[date]) -> dict[date, int]:
    """Calculate the streak length as of each entry date.

    The streak at a date is the number of consecutive days with entries
    ending at that date, i.e. the current-streak walk anchored there.

    Args:
        dates: Entry dates.

    Returns:
        Mapping of each date to its streak length.
    """
    streaks: dict[date, int] = {}
    prev = None
    run = 0
    for day in sorted(set(dates)):
        run = run + 1 if prev is not None and day - prev == ONE_DAY else 1
        streaks[day] = run
        prev = day
    return streaks


def calculate_stats(entries: Iterable[Entry], today: date) -> Stats:
    """Derive stats from the full entry set.

    Args:
        entries: All entries.
        today: Current local date.

    Returns:
        Stats, zero-valued for an empty entry set.
    """
    dates = entry_dates(entries)
    if not dates:
        return Stats()

    return Stats(
        total_deposits=len(dates),
        current_streak=calculate_current_streak(dates, today),
        longest_streak=calculate_longest_streak(dates),
        start_date=dates[0].isoformat(),
    )
