from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from backend.app.services.billing_periods import (
    APP_TIMEZONE,
    BillingPeriodService,
    InvalidPeriodKeyError,
    count_overlapping_periods,
    current_period,
    next_period,
    period_for_date,
    resolve_period_bounds,
)


def test_period_for_first_half_of_month():
    period = period_for_date(date(2026, 1, 1))

    assert period.start == date(2026, 1, 1)
    assert period.end == date(2026, 1, 15)
    assert period.key == "2026-01-01"
    assert period.label == "Jan 1-15, 2026"


def test_period_for_second_half_of_month():
    period = period_for_date(date(2026, 1, 16))

    assert period.start == date(2026, 1, 16)
    assert period.end == date(2026, 1, 31)
    assert period.key == "2026-01-16"
    assert period.label == "Jan 16-31, 2026"


@pytest.mark.parametrize(
    ("value", "expected_end"),
    [
        (date(2028, 2, 20), date(2028, 2, 29)),
        (date(2027, 2, 20), date(2027, 2, 28)),
        (date(2026, 4, 30), date(2026, 4, 30)),
    ],
)
def test_second_half_ends_on_last_calendar_day(value, expected_end):
    assert period_for_date(value).end == expected_end


def test_same_half_month_yields_equal_periods():
    assert period_for_date(date(2026, 3, 2)) == period_for_date(date(2026, 3, 15))
    assert period_for_date(date(2026, 3, 16)) == period_for_date(date(2026, 3, 31))
    assert period_for_date(date(2026, 3, 15)) != period_for_date(date(2026, 3, 16))


def test_periods_partition_a_thousand_days():
    first_day = date(2025, 11, 7)
    seen = {}
    for offset in range(1000):
        day = first_day + timedelta(days=offset)
        period = period_for_date(day)
        assert period.start <= day <= period.end
        assert period.start.day in {1, 16}
        seen[period.key] = (period.start, period.end)

    bounds = sorted(seen.values())
    for (_, previous_end), (next_start, _) in zip(bounds, bounds[1:]):
        assert next_start == previous_end + timedelta(days=1)


def test_time_of_day_is_ignored_for_local_datetimes():
    morning = period_for_date(datetime(2026, 1, 15, 0, 1, tzinfo=APP_TIMEZONE))
    night = period_for_date(datetime(2026, 1, 15, 23, 59, tzinfo=APP_TIMEZONE))

    assert morning == night == period_for_date(date(2026, 1, 15))


def test_aware_datetimes_are_converted_to_business_timezone():
    # 03:00 UTC on the 16th is still the evening of the 15th in New York.
    instant = datetime(2026, 1, 16, 3, 0, tzinfo=timezone.utc)

    assert period_for_date(instant).key == "2026-01-01"


@pytest.mark.parametrize(
    "now",
    [
        datetime(2026, 1, 20, 9, 0, tzinfo=APP_TIMEZONE),
        datetime(2026, 2, 15, 23, 0, tzinfo=APP_TIMEZONE),
        datetime(2026, 12, 31, 12, 0, tzinfo=APP_TIMEZONE),
        date(2028, 2, 29),
    ],
)
def test_next_period_starts_the_day_after_current_ends(now):
    current = current_period(now)
    upcoming = next_period(now)

    assert upcoming.start == current.end + timedelta(days=1)


def test_current_period_accepts_a_clock():
    def clock():
        return datetime(2026, 1, 20, 10, 0, tzinfo=APP_TIMEZONE)

    assert current_period(clock).key == "2026-01-16"
    assert next_period(clock).key == "2026-02-01"


def test_current_period_defaults_to_system_clock():
    today = datetime.now(APP_TIMEZONE).date()

    assert current_period().contains(today)


def test_count_overlapping_periods_examples():
    assert count_overlapping_periods(date(2026, 1, 1), date(2026, 2, 15)) == 3
    assert count_overlapping_periods(date(2026, 1, 10), date(2026, 1, 10)) == 1
    assert count_overlapping_periods(date(2026, 1, 1), date(2026, 1, 15)) == 1
    assert count_overlapping_periods(date(2026, 1, 10), date(2026, 1, 20)) == 2


def test_count_overlapping_periods_inverted_range_is_zero():
    assert count_overlapping_periods(date(2026, 2, 1), date(2026, 1, 1)) == 0


def test_resolve_period_bounds_from_key():
    assert resolve_period_bounds("2026-01-16") == (date(2026, 1, 16), date(2026, 1, 31))
    assert resolve_period_bounds("2026-01-07") == (date(2026, 1, 1), date(2026, 1, 15))


@pytest.mark.parametrize(
    "key",
    ["2026-1-16", "2026-02-30", "20260116", "", "abcd-ef-gh", " 2026-01-16 ", "2026-01-16\n", None],
)
def test_resolve_period_bounds_rejects_malformed_keys(key):
    with pytest.raises(InvalidPeriodKeyError) as excinfo:
        resolve_period_bounds(key)

    assert str(excinfo.value) == "Invalid period key format, expected YYYY-MM-DD"
    assert isinstance(excinfo.value, ValueError)


def test_service_parse_range_rejects_inverted_bounds():
    assert BillingPeriodService.parse_range(date(2026, 1, 1), date(2026, 1, 1)) == (
        date(2026, 1, 1),
        date(2026, 1, 1),
    )
    with pytest.raises(ValueError):
        BillingPeriodService.parse_range(date(2026, 1, 2), date(2026, 1, 1))
