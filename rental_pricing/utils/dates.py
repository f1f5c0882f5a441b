"""
Calendar utilities

Every component does its day arithmetic through these helpers. Dates are
plain calendar days: a datetime is reduced to its own year/month/day and is
never shifted to another timezone first.
"""

from collections.abc import MutableMapping
from datetime import date, datetime, timedelta
from typing import Dict, Iterator, List, TypeVar, Union

from ..errors import InvalidInput, InvalidRange, RangeTooLarge

DateLike = Union[date, datetime, str]
T = TypeVar("T")

WEEKDAY_NAMES = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


def _parse_date_string(value: str) -> date:
    """
    YYYY-MM-DD, or an ISO timestamp whose calendar day is taken as-is.
    Anything else after the date is rejected.
    """
    text = value.strip()
    if len(text) == 10:
        return date.fromisoformat(text)
    if len(text) > 10 and text[10] in "T ":
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
        return date(parsed.year, parsed.month, parsed.day)
    raise ValueError(value)


def parse_date(value: DateLike) -> date:
    """Normalize a date, datetime or YYYY-MM-DD string to a calendar date."""
    if isinstance(value, datetime):
        return date(value.year, value.month, value.day)
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return _parse_date_string(value)
        except ValueError:
            raise InvalidInput(f"Invalid date '{value}', expected YYYY-MM-DD")
    raise InvalidInput(f"Invalid date value: {value!r}")


def format_date_local(value: DateLike) -> str:
    """YYYY-MM-DD from the value's own calendar components."""
    d = parse_date(value)
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def weekday_name(value: DateLike) -> str:
    """Weekday key used to index weekly base pricing (monday..sunday)."""
    return WEEKDAY_NAMES[parse_date(value).weekday()]


def add_days(value: DateLike, days: int) -> date:
    return parse_date(value) + timedelta(days=days)


def days_between(start: DateLike, end: DateLike) -> int:
    """Whole days from start to end (negative if end is before start)."""
    return (parse_date(end) - parse_date(start)).days


def check_span(start: DateLike, end: DateLike, max_days: int, label: str = "Date range") -> None:
    """
    The one ceiling rule for every range: end may be at most max_days
    after start (so max_days + 1 calendar dates, inclusive).
    """
    if days_between(start, end) > max_days:
        raise RangeTooLarge(
            f"{label} cannot exceed {max_days} days",
            details={"max_days": max_days},
        )


def enumerate_dates(start: DateLike, end: DateLike) -> List[date]:
    """All calendar dates from start to end, both inclusive."""
    start_d = parse_date(start)
    end_d = parse_date(end)
    if start_d > end_d:
        raise InvalidRange(
            "Start date must not be after end date",
            details={"start_date": format_date_local(start_d), "end_date": format_date_local(end_d)},
        )
    return [start_d + timedelta(days=i) for i in range((end_d - start_d).days + 1)]


class LocalDateMap(MutableMapping):
    """
    Mapping keyed by calendar day.

    Keys may be given as date, datetime or YYYY-MM-DD string; they are all
    normalized through format_date_local, so a stored date and a formatted
    lookup key always meet on the same day.
    """

    def __init__(self, items=None):
        self._data: Dict[str, T] = {}
        if items:
            for key, value in items:
                self[key] = value

    @staticmethod
    def _key(key: DateLike) -> str:
        return format_date_local(key)

    def __getitem__(self, key: DateLike):
        return self._data[self._key(key)]

    def __setitem__(self, key: DateLike, value) -> None:
        self._data[self._key(key)] = value

    def __delitem__(self, key: DateLike) -> None:
        del self._data[self._key(key)]

    def __contains__(self, key) -> bool:
        try:
            return self._key(key) in self._data
        except InvalidInput:
            return False

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"LocalDateMap({self._data!r})"
