"""Semi-monthly billing period helpers.

Billing periods split every month in two halves: the 1st to the 15th and the
16th to the last day of the month. Periods are plain values computed on demand;
invoices only persist the resolved ``start``/``end`` dates.
"""

from __future__ import annotations

import re
from calendar import monthrange
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Union
from zoneinfo import ZoneInfo

APP_TIMEZONE = ZoneInfo("America/New_York")
FIRST_HALF_LAST_DAY = 15

Clock = Callable[[], datetime]
DateLike = Union[date, datetime]


class InvalidPeriodKeyError(ValueError):
    """Raised when a period key is not a valid ``YYYY-MM-DD`` date."""

    def __init__(self, period_key: object) -> None:
        super().__init__("Invalid period key format, expected YYYY-MM-DD")
        self.period_key = period_key


@dataclass(frozen=True)
class BillingPeriod:
    """Half-month accounting window with inclusive bounds."""

    start: date
    end: date
    label: str
    key: str

    def contains(self, value: DateLike) -> bool:
        return self.start <= to_local_date(value) <= self.end


def system_clock() -> datetime:
    """Return the current wall-clock time in the business timezone."""

    return datetime.now(APP_TIMEZONE)


def to_local_date(value: DateLike) -> date:
    """Return the calendar date of ``value`` in the business timezone.

    Aware datetimes are converted first; naive datetimes are assumed to already
    be local. Time-of-day is discarded.
    """

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(APP_TIMEZONE)
        return value.date()
    return value


def _format_label(start: date, end: date) -> str:
    return f"{start.strftime('%b')} {start.day}-{end.day}, {start.year}"


def period_for_date(value: DateLike) -> BillingPeriod:
    """Return the billing period that contains ``value``."""

    day = to_local_date(value)
    if day.day <= FIRST_HALF_LAST_DAY:
        start = day.replace(day=1)
        end = day.replace(day=FIRST_HALF_LAST_DAY)
    else:
        _, last_day = monthrange(day.year, day.month)
        start = day.replace(day=FIRST_HALF_LAST_DAY + 1)
        end = day.replace(day=last_day)
    return BillingPeriod(
        start=start,
        end=end,
        label=_format_label(start, end),
        key=start.isoformat(),
    )


def resolve_now(now: DateLike | Clock | None) -> DateLike:
    if now is None:
        return system_clock()
    if callable(now):
        return now()
    return now


def current_period(now: DateLike | Clock | None = None) -> BillingPeriod:
    """Return the period containing ``now`` (defaults to the system clock)."""

    return period_for_date(resolve_now(now))


def next_period(now: DateLike | Clock | None = None) -> BillingPeriod:
    """Return the period that immediately follows the current one."""

    current = current_period(now)
    return period_for_date(current.end + timedelta(days=1))


def count_overlapping_periods(range_start: DateLike, range_end: DateLike) -> int:
    """Count the half-month periods touched by an inclusive date range.

    A period is counted when it starts on or after ``range_start``, ends on or
    before ``range_end``, or encloses the whole range. Used to pro-rate the
    retainer across invoices whose window does not match a single period.
    """

    start = to_local_date(range_start)
    end = to_local_date(range_end)
    count = 0
    cursor = start
    while cursor <= end:
        period = period_for_date(cursor)
        starts_inside = period.start >= start
        ends_inside = period.end <= end
        encloses_range = period.start <= start and end <= period.end
        if starts_inside or ends_inside or encloses_range:
            count += 1
        cursor = period.end + timedelta(days=1)
    return count


def resolve_period_bounds(period_key: str) -> tuple[date, date]:
    """Return ``(start, end)`` of the period identified by ``period_key``."""

    if not isinstance(period_key, str):
        raise InvalidPeriodKeyError(period_key)
    if not BillingPeriodService.VALID_PERIOD_PATTERN.fullmatch(period_key):
        raise InvalidPeriodKeyError(period_key)
    try:
        parsed = date.fromisoformat(period_key)
    except ValueError as exc:
        raise InvalidPeriodKeyError(period_key) from exc

    period = period_for_date(parsed)
    return period.start, period.end


class BillingPeriodService:
    """Static facade used by routers and the invoicing service."""

    VALID_PERIOD_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

    period_for_date = staticmethod(period_for_date)
    current_period = staticmethod(current_period)
    next_period = staticmethod(next_period)
    count_overlapping_periods = staticmethod(count_overlapping_periods)
    resolve_period_bounds = staticmethod(resolve_period_bounds)

    @staticmethod
    def parse_range(start: DateLike, end: DateLike) -> tuple[date, date]:
        """Normalize a date range, rejecting inverted bounds."""

        start_day = to_local_date(start)
        end_day = to_local_date(end)
        if start_day > end_day:
            raise ValueError("start cannot be after end")
        return start_day, end_day


def get_clock() -> Clock:
    """FastAPI dependency returning the clock used by period-aware endpoints."""

    return system_clock
