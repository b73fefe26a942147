"""Unit tests for the fixed-offset business day."""

from datetime import datetime, timedelta, timezone

import pytest

from ftpbridge.core.civil_time import (
    BUSINESS_TIMEZONE,
    civil_day_bounds,
    filter_modified_today,
    fixed_offset,
    format_civil,
    parse_timestamp,
)
from ftpbridge.schemas.files import FileEntry

UTC = timezone.utc


def entry(name, modified):
    return FileEntry(name=name, size=1, is_directory=False, date_modified=modified)


def utc(*args):
    return datetime(*args, tzinfo=UTC)


@pytest.mark.unit
def test_bounds_cover_business_day():
    start, end = civil_day_bounds(utc(2024, 6, 14, 1, 0))

    assert start == utc(2024, 6, 13, 3, 0)
    assert end == utc(2024, 6, 14, 2, 59, 59, 999000)
    assert start.utcoffset() == timedelta(hours=-3)


@pytest.mark.unit
def test_offset_boundary_example():
    """02:59:59.999Z belongs to the 13th in UTC-3, 03:00:00.000Z to the 14th."""
    now = utc(2024, 6, 14, 1, 0)
    last_of_13th = entry("a.csv", "2024-06-14T02:59:59.999Z")
    first_of_14th = entry("b.csv", "2024-06-14T03:00:00.000Z")

    assert filter_modified_today([last_of_13th, first_of_14th], now=now) == [
        last_of_13th
    ]

    later = utc(2024, 6, 14, 12, 0)
    assert filter_modified_today([last_of_13th, first_of_14th], now=later) == [
        first_of_14th
    ]


@pytest.mark.unit
def test_filter_includes_both_edges_and_drops_neighbours():
    now = utc(2024, 6, 13, 15, 0)
    start, end = civil_day_bounds(now)
    entries = [
        entry("before.csv", start - timedelta(milliseconds=1)),
        entry("start.csv", start),
        entry("middle.csv", utc(2024, 6, 13, 15, 0)),
        entry("end.csv", end),
        entry("after.csv", end + timedelta(milliseconds=1)),
    ]

    names = [e.name for e in filter_modified_today(entries, now=now)]

    assert names == ["start.csv", "middle.csv", "end.csv"]


@pytest.mark.unit
def test_year_rollover_when_utc_is_already_next_year():
    # 02:30 UTC on Jan 1st is still Dec 31st in UTC-3
    now = utc(2025, 1, 1, 2, 30)
    start, end = civil_day_bounds(now)

    assert start == utc(2024, 12, 31, 3, 0)
    assert end == utc(2025, 1, 1, 2, 59, 59, 999000)

    new_years_eve = entry("eve.csv", "2025-01-01T02:59:59Z")
    new_year = entry("new.csv", "2025-01-01T03:00:00Z")
    assert filter_modified_today([new_years_eve, new_year], now=now) == [
        new_years_eve
    ]


@pytest.mark.unit
def test_month_rollover():
    start, end = civil_day_bounds(utc(2024, 3, 1, 1, 0))

    assert start.astimezone(BUSINESS_TIMEZONE).date() == datetime(2024, 2, 29).date()
    assert end == utc(2024, 3, 1, 2, 59, 59, 999000)


@pytest.mark.unit
def test_naive_now_is_treated_as_utc():
    naive = datetime(2024, 6, 14, 1, 0)

    assert civil_day_bounds(naive) == civil_day_bounds(utc(2024, 6, 14, 1, 0))


@pytest.mark.unit
def test_unparseable_dates_are_excluded():
    now = utc(2024, 6, 13, 15, 0)
    entries = [
        entry("missing.csv", None),
        entry("ok.csv", utc(2024, 6, 13, 12, 0)),
    ]

    assert [e.name for e in filter_modified_today(entries, now=now)] == ["ok.csv"]


@pytest.mark.unit
def test_other_offsets():
    tz = fixed_offset(5.5)
    start, end = civil_day_bounds(utc(2024, 6, 13, 20, 0), tz)

    assert start == utc(2024, 6, 13, 18, 30)
    assert end.astimezone(tz).time().isoformat() == "23:59:59.999000"


@pytest.mark.unit
@pytest.mark.parametrize(
    "value,expected",
    [
        ("2024-06-14T03:00:00.000Z", utc(2024, 6, 14, 3, 0)),
        ("2024-06-14T00:00:00-03:00", utc(2024, 6, 14, 3, 0)),
        ("2024-06-14T03:00:00", utc(2024, 6, 14, 3, 0)),
        (datetime(2024, 6, 14, 3, 0), utc(2024, 6, 14, 3, 0)),
        ("Data não disponível", None),
        ("", None),
        (None, None),
        (12345, None),
    ],
)
def test_parse_timestamp(value, expected):
    assert parse_timestamp(value) == expected


@pytest.mark.unit
def test_format_civil():
    assert format_civil("2024-06-14T02:59:59.999Z") == "13/06/2024 23:59:59"
    assert format_civil(None) == ""
