"""
Day Classification for the Planning Horizon

Decides the calendar date of each horizon day, whether it falls on a weekend,
and whether a device's frequency class lets it run that day.

The ``frequently`` and ``rarely`` cadences depend only on the day number,
never on the date, so identical inputs always give identical eligibility.
"""

from datetime import date, timedelta
from typing import List, Optional, Tuple, Union

from energy_planner.optimization.device_models import Frequency

# Days 1-3 of every ten for "frequently", day 1 of every ten for "rarely"
FREQUENT_CYCLE = 10
FREQUENT_DAYS_PER_CYCLE = 3
RARE_DAY_OFFSET = 1


def is_weekend(day: date) -> bool:
    """Check whether a date is a Saturday or Sunday."""
    return day.weekday() >= 5


def day_date(start_date: date, day_number: int) -> date:
    """Get the calendar date of a horizon day (day 1 = the day after start)."""
    return start_date + timedelta(days=day_number)


def classify_day(start_date: date, day_number: int) -> Tuple[date, bool]:
    """Get ``(date, is_weekend)`` for a horizon day."""
    current = day_date(start_date, day_number)
    return current, is_weekend(current)


def should_run_on_day(
    frequency: Union[Frequency, str],
    is_weekend_day: bool,
    day_number: int,
) -> bool:
    """Check whether a frequency class permits running on a day.

    Args:
        frequency: Device frequency class
        is_weekend_day: Whether the day is a Saturday or Sunday
        day_number: 1-based day index within the horizon

    Returns:
        True if the device may run that day
    """
    if not isinstance(frequency, Frequency):
        frequency = Frequency(frequency)

    if frequency is Frequency.DAILY:
        return True
    if frequency is Frequency.WEEKENDS:
        return is_weekend_day
    if frequency is Frequency.FREQUENTLY:
        return day_number % FREQUENT_CYCLE < FREQUENT_DAYS_PER_CYCLE
    if frequency is Frequency.RARELY:
        return day_number % FREQUENT_CYCLE == RARE_DAY_OFFSET
    return False


def eligible_days(
    frequency: Union[Frequency, str],
    start_date: Optional[date] = None,
    horizon_days: int = 30,
) -> List[int]:
    """List the day numbers on which a frequency class may run.

    Args:
        frequency: Device frequency class
        start_date: Plan start date (defaults to today)
        horizon_days: Number of days in the horizon

    Returns:
        Ascending list of eligible day numbers
    """
    start = start_date or date.today()
    days = []
    for day_number in range(1, horizon_days + 1):
        _, weekend = classify_day(start, day_number)
        if should_run_on_day(frequency, weekend, day_number):
            days.append(day_number)
    return days
