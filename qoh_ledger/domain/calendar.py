from __future__ import annotations

from collections.abc import Iterable
from datetime import date, timedelta
from typing import Protocol, TypeVar

from .errors import InvalidDateRangeError

WEEK_LENGTH_DAYS = 7


class DateRange(Protocol):
    start_date: date
    end_date: date


W = TypeVar("W", bound=DateRange)


def week_end(start: date) -> date:
    return start + timedelta(days=WEEK_LENGTH_DAYS - 1)


def contains(week: DateRange, day: date) -> bool:
    return week.start_date <= day <= week.end_date


def find_week_for_date(weeks: Iterable[W], day: date) -> W:
    for week in weeks:
        if contains(week, day):
            return week
    raise InvalidDateRangeError(f"{day.isoformat()} is outside every week of the game", date=day.isoformat())


def ensure_no_overlap(weeks: Iterable[DateRange], start: date, end: date) -> None:
    for week in weeks:
        if start <= week.end_date and week.start_date <= end:
            raise InvalidDateRangeError(
                f"week {start.isoformat()}..{end.isoformat()} overlaps "
                f"{week.start_date.isoformat()}..{week.end_date.isoformat()}",
                start_date=start.isoformat(),
                end_date=end.isoformat(),
            )
