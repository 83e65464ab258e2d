"""
Business-day calendar with rule-based US federal holidays.

Working days are Monday-Friday excluding observed federal holidays.
Fixed-date holidays falling on a Saturday are observed the preceding
Friday and those falling on a Sunday the following Monday.
"""

from datetime import date, datetime, timedelta
from typing import Dict, FrozenSet, Union

HolidaySet = FrozenSet[date]

DateLike = Union[date, datetime]

ONE_DAY = timedelta(days=1)

MONDAY = 0
THURSDAY = 3
SATURDAY = 5
SUNDAY = 6


def to_day(value: DateLike) -> date:
    """Normalize a date or datetime to day granularity."""
    if isinstance(value, datetime):
        return value.date()
    return value


def observe_fixed_holiday(holiday: date) -> date:
    """Shift a weekend holiday to its observed weekday."""
    if holiday.weekday() == SATURDAY:
        return holiday - ONE_DAY
    if holiday.weekday() == SUNDAY:
        return holiday + ONE_DAY
    return holiday


def nth_weekday(year: int, month: int, weekday: int, occurrence: int) -> date:
    """
    Get the nth occurrence of a weekday in a month.

    Args:
        year: Calendar year
        month: Month (1-12)
        weekday: Weekday (Monday=0 ... Sunday=6)
        occurrence: 1 for the first occurrence, 2 for the second, ...

    Returns:
        Date of the requested occurrence
    """
    first = date(year, month, 1)
    offset = (weekday - first.weekday()) % 7
    return first + timedelta(days=offset + (occurrence - 1) * 7)


def last_weekday(year: int, month: int, weekday: int) -> date:
    """Get the last occurrence of a weekday in a month."""
    if month == 12:
        last = date(year, 12, 31)
    else:
        last = date(year, month + 1, 1) - ONE_DAY
    offset = (last.weekday() - weekday) % 7
    return last - timedelta(days=offset)


def build_federal_holidays(year: int) -> HolidaySet:
    """
    Build the set of observed US federal holidays for a year.

    Includes the observed New Year's Day of the adjacent years, since
    a Saturday January 1st is observed on December 31st of the prior year.

    Args:
        year: Calendar year

    Returns:
        Frozen set of holiday dates
    """
    holidays = [
        observe_fixed_holiday(date(year - 1, 1, 1)),
        observe_fixed_holiday(date(year, 1, 1)),        # New Year's Day
        observe_fixed_holiday(date(year + 1, 1, 1)),
        nth_weekday(year, 1, MONDAY, 3),                # MLK Day
        nth_weekday(year, 2, MONDAY, 3),                # Presidents' Day
        last_weekday(year, 5, MONDAY),                  # Memorial Day
        observe_fixed_holiday(date(year, 6, 19)),       # Juneteenth
        observe_fixed_holiday(date(year, 7, 4)),        # Independence Day
        nth_weekday(year, 9, MONDAY, 1),                # Labor Day
        nth_weekday(year, 10, MONDAY, 2),               # Columbus Day
        observe_fixed_holiday(date(year, 11, 11)),      # Veterans Day
        nth_weekday(year, 11, THURSDAY, 4),             # Thanksgiving
        observe_fixed_holiday(date(year, 12, 25)),      # Christmas
    ]
    return frozenset(holidays)


def is_working_day(day: DateLike, holidays: HolidaySet) -> bool:
    """True unless the day is a Saturday, Sunday, or holiday."""
    day = to_day(day)
    if day.weekday() >= SATURDAY:
        return False
    return day not in holidays


def count_working_days(start: DateLike, end: DateLike, holidays: HolidaySet) -> int:
    """
    Count working days strictly after start, through end inclusive.

    Args:
        start: Exclusive lower bound
        end: Inclusive upper bound
        holidays: Holidays to exclude

    Returns:
        Number of working days (0 if end <= start)
    """
    start = to_day(start)
    end = to_day(end)
    if end <= start:
        return 0

    count = 0
    cursor = start + ONE_DAY
    while cursor <= end:
        if is_working_day(cursor, holidays):
            count += 1
        cursor += ONE_DAY
    return count


def week_start(day: DateLike) -> date:
    """Monday of the week containing day."""
    day = to_day(day)
    return day - timedelta(days=day.weekday())


class WorkCalendar:
    """
    Multi-year working-day calendar.

    Holiday sets are built on demand per year and cached, so a forecast
    spanning several years observes every year's holidays.
    """

    def __init__(self):
        self._holidays: Dict[int, HolidaySet] = {}

    def holidays_for(self, year: int) -> HolidaySet:
        if year not in self._holidays:
            self._holidays[year] = build_federal_holidays(year)
        return self._holidays[year]

    def is_working_day(self, day: DateLike) -> bool:
        day = to_day(day)
        return is_working_day(day, self.holidays_for(day.year))

    def count_working_days(self, start: DateLike, end: DateLike) -> int:
        """Working days strictly after start through end, across year boundaries."""
        start = to_day(start)
        end = to_day(end)
        if end <= start:
            return 0
        holidays = frozenset().union(
            *(self.holidays_for(year) for year in range(start.year, end.year + 1))
        )
        return count_working_days(start, end, holidays)

    def next_working_day(self, day: DateLike) -> date:
        """First working day strictly after day."""
        cursor = to_day(day) + ONE_DAY
        while not self.is_working_day(cursor):
            cursor += ONE_DAY
        return cursor

    def __str__(self) -> str:
        years = sorted(self._holidays)
        return f"WorkCalendar (holidays cached for {years})"
