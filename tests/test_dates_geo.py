"""Tests for date parsing and distance helpers."""

from datetime import date, datetime, timedelta, timezone

import pytest

from conftest import make_location
from triprouter.dates import format_api_date, parse_departure
from triprouter.domain.models import Coordinates
from triprouter.geo import distance_between, distance_km


class TestParseDeparture:
    def test_iso_date_is_midnight_utc(self):
        assert parse_departure("2025-06-01") == datetime(2025, 6, 1, tzinfo=timezone.utc)

    def test_iso_datetime_with_offset_is_converted(self):
        parsed = parse_departure("2025-06-01T10:30:00+02:00")
        assert parsed == datetime(2025, 6, 1, 8, 30, tzinfo=timezone.utc)
        assert parsed.utcoffset() == timedelta(0)

    def test_zulu_suffix(self):
        assert parse_departure("2025-06-01T08:00:00Z").hour == 8

    def test_date_objects(self):
        assert parse_departure(date(2025, 6, 1)).tzinfo is not None
        naive = datetime(2025, 6, 1, 9)
        assert parse_departure(naive) == naive.replace(tzinfo=timezone.utc)

    def test_natural_language(self):
        parsed = parse_departure("1 June 2025")
        assert (parsed.year, parsed.month, parsed.day) == (2025, 6, 1)
        assert parsed.tzinfo is not None

    @pytest.mark.parametrize("value", ["", "   ", "???", "not a date at all"])
    def test_unparseable(self, value):
        assert parse_departure(value) is None


def test_format_api_date():
    assert format_api_date(datetime(2025, 6, 1, 23, 59, tzinfo=timezone.utc)) == "2025-06-01"


class TestDistance:
    def test_new_york_to_los_angeles(self):
        nyc = Coordinates(lat=40.7128, lng=-74.0060)
        la = Coordinates(lat=34.0522, lng=-118.2437)
        assert distance_km(nyc, la) == pytest.approx(3936, abs=5)

    def test_symmetric_and_zero_on_self(self):
        a = Coordinates(lat=42.36, lng=-71.06)
        b = Coordinates(lat=41.88, lng=-87.63)
        assert distance_km(a, b) == pytest.approx(distance_km(b, a))
        assert distance_km(a, a) == 0

    def test_missing_coordinates(self, nyc, nowhere):
        assert distance_between(nyc, nowhere) is None
        assert distance_between(nowhere, nyc) is None

    def test_between_locations(self, jfk, lga):
        assert 10 < distance_between(jfk, lga) < 20
        assert distance_between(jfk, make_location("x", "X", lat=40.6413, lng=-73.7781)) == 0
