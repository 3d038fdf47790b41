"""Tests for the CSV location dataset and the Nominatim search adapter."""

import asyncio
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from geopy.exc import GeocoderUnavailable

from triprouter.adapters.locations import CSVLocationRepository, NominatimLocationProvider
from triprouter.adapters.locations.nominatim_provider import kind_from_osm
from triprouter.config import GeocodingConfig, LocationConfig
from triprouter.domain.errors import ConfigurationError, ProviderFailure
from triprouter.domain.models import LocationKind

HEADER = "id,name,kind,lat,lng,skyscanner,skyscanner_entity\n"


def write_dataset(tmp_path, rows):
    path = tmp_path / "locations.csv"
    path.write_text(HEADER + "".join(rows), encoding="utf-8")
    return CSVLocationRepository(LocationConfig(dataset_path=path))


class TestCSVLocationRepository:
    def test_bundled_dataset_loads(self):
        repo = CSVLocationRepository(LocationConfig())
        nyc = repo.get_location("nyc")

        assert nyc is not None
        assert nyc.kind is LocationKind.CITY
        assert nyc.provider_code("skyscanner") == "NYC"
        assert {hub.id for hub in repo.list_hubs()} >= {"jfk", "lga", "lax"}

    def test_row_parsing(self, tmp_path):
        repo = write_dataset(tmp_path, [
            ",Nameless,city,,,,\n",
            'jfk,"JFK Airport, New York",airport,40.6413,-73.7781,JFK,95673298\n',
            "pen,Penn Station,train_station,,,,\n",
        ])
        jfk = repo.get_location("JFK")
        pen = repo.get_location("pen")

        assert jfk.coordinates.lat == 40.6413
        assert dict(jfk.provider_codes) == {"skyscanner": "JFK", "skyscanner_entity": "95673298"}
        assert pen.coordinates is None
        assert dict(pen.provider_codes) == {}

    def test_unknown_kind_is_configuration_error(self, tmp_path):
        repo = write_dataset(tmp_path, ["x,Somewhere,spaceport,0,0,,\n"])
        with pytest.raises(ConfigurationError) as excinfo:
            repo.list_locations()
        assert "spaceport" in excinfo.value.message

    def test_missing_file_is_configuration_error(self, tmp_path):
        repo = CSVLocationRepository(LocationConfig(dataset_path=tmp_path / "nope.csv"))
        with pytest.raises(ConfigurationError):
            repo.list_locations()

    def test_search_by_name_or_id(self):
        repo = CSVLocationRepository(LocationConfig())

        by_name = asyncio.run(repo.search("new york"))
        by_id = asyncio.run(repo.search("LAX"))

        assert "nyc" in {loc.id for loc in by_name}
        assert "jfk" in {loc.id for loc in by_name}
        assert [loc.id for loc in by_id] == ["lax"]
        assert asyncio.run(repo.search("   ")) == []


def fake_result(name, lat, lng, **raw):
    raw.setdefault("osm_type", "node")
    raw.setdefault("osm_id", 42)
    raw.setdefault("name", name)
    return SimpleNamespace(address=name, latitude=lat, longitude=lng, raw=raw)


class TestNominatimLocationProvider:
    @pytest.fixture
    def provider_with_mock(self):
        geocode = MagicMock()
        provider = NominatimLocationProvider(GeocodingConfig(enabled=True))
        with patch.object(NominatimLocationProvider, "_get_geocoder", return_value=geocode):
            yield provider, geocode

    @pytest.mark.parametrize(
        "raw,kind",
        [
            ({"class": "aeroway", "type": "aerodrome"}, LocationKind.AIRPORT),
            ({"class": "railway", "type": "station"}, LocationKind.TRAIN_STATION),
            ({"class": "amenity", "type": "bus_station"}, LocationKind.BUS_STATION),
            ({"class": "place", "type": "city"}, LocationKind.CITY),
        ],
    )
    def test_kind_from_osm(self, raw, kind):
        assert kind_from_osm(raw) is kind

    def test_search_maps_results(self, provider_with_mock):
        provider, geocode = provider_with_mock
        geocode.return_value = [
            fake_result(
                "John F. Kennedy International Airport", 40.64, -73.78,
                **{"class": "aeroway", "type": "aerodrome", "osm_type": "way", "osm_id": 7,
                   "address": {"city": "New York"}},
            ),
            fake_result(
                "Boston", 42.36, -71.06,
                **{"class": "place", "type": "city", "address": {"country_code": "us"}},
            ),
        ]

        airport, city = asyncio.run(provider.search("new york"))

        assert airport.id == "osm-w7"
        assert airport.kind is LocationKind.AIRPORT
        assert airport.name == "John F. Kennedy International Airport, New York"
        assert airport.provider_code("nominatim") == "way/7"
        assert city.name == "Boston, US"
        assert geocode.call_args.kwargs["exactly_one"] is False

    def test_no_results(self, provider_with_mock):
        provider, geocode = provider_with_mock
        geocode.return_value = None
        assert asyncio.run(provider.search("zzzz")) == []

    def test_service_error_becomes_provider_failure(self, provider_with_mock):
        provider, geocode = provider_with_mock
        geocode.side_effect = GeocoderUnavailable("down")
        with pytest.raises(ProviderFailure) as excinfo:
            asyncio.run(provider.search("paris"))
        assert excinfo.value.provider == "nominatim"
