"""Tests for the location resolver."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from conftest import make_location
from triprouter.adapters.locations import CSVLocationRepository
from triprouter.config import LocationConfig
from triprouter.domain.errors import ProviderFailure
from triprouter.domain.models import LocationKind
from triprouter.services import LocationResolver


@pytest.fixture
def repository():
    return CSVLocationRepository(LocationConfig())


@pytest.fixture
def resolver(repository, memory_caches):
    return LocationResolver(repository=repository, caches=memory_caches, config=LocationConfig())


class TestSearch:
    def test_short_query_returns_nothing(self, resolver, memory_caches):
        assert asyncio.run(resolver.search(" n ")) == []
        assert memory_caches.cache("location").size() == 0

    def test_dataset_fallback_when_no_live_provider(self, resolver):
        ids = [loc.id for loc in asyncio.run(resolver.search("Chicago"))]
        assert ids == ["chi", "ord", "chi-union"]

    def test_live_results_are_cached_per_normalized_query(self, repository, memory_caches):
        live = AsyncMock()
        live.search.return_value = [make_location("osm-n1", "Paris, FR", lat=48.85, lng=2.35)]
        resolver = LocationResolver(repository, memory_caches, search_provider=live,
                                    config=LocationConfig())

        first = asyncio.run(resolver.search("Paris"))
        second = asyncio.run(resolver.search("  paris "))

        assert [loc.id for loc in first] == ["osm-n1"]
        assert first == second
        live.search.assert_awaited_once_with("paris")

    def test_live_failure_falls_back_to_dataset(self, repository, memory_caches):
        live = AsyncMock()
        live.search.side_effect = ProviderFailure("down", provider="nominatim")
        resolver = LocationResolver(repository, memory_caches, search_provider=live,
                                    config=LocationConfig())

        ids = [loc.id for loc in asyncio.run(resolver.search("boston"))]
        assert "bos" in ids

    def test_empty_live_answer_falls_back_to_dataset(self, repository, memory_caches):
        live = AsyncMock()
        live.search.return_value = []
        resolver = LocationResolver(repository, memory_caches, search_provider=live,
                                    config=LocationConfig())

        assert [loc.id for loc in asyncio.run(resolver.search("ithaca"))] == ["ith"]


class TestResolveById:
    def test_dataset_ids_are_indexed(self, resolver):
        assert asyncio.run(resolver.resolve_by_id("jfk")).name == "JFK Airport, New York"
        assert asyncio.run(resolver.resolve_by_id("JFK")).id == "jfk"

    def test_id_wins_over_shared_provider_code(self, resolver):
        # "la" and "lax" share the LAX sky code
        assert asyncio.run(resolver.resolve_by_id("LAX")).id == "lax"

    def test_provider_code_lookup(self, resolver):
        assert asyncio.run(resolver.resolve_by_id("27537542")).id == "nyc"

    def test_unknown_id(self, resolver):
        assert asyncio.run(resolver.resolve_by_id("atlantis")) is None

    def test_searched_locations_become_resolvable(self, repository, memory_caches):
        paris = make_location("osm-n1", "Paris, FR", lat=48.85, lng=2.35)
        live = AsyncMock()
        live.search.return_value = [paris]
        resolver = LocationResolver(repository, memory_caches, search_provider=live,
                                    config=LocationConfig())

        asyncio.run(resolver.search("paris"))
        live.search.reset_mock()

        assert asyncio.run(resolver.resolve_by_id("osm-n1")) == paris
        live.search.assert_not_awaited()


class TestNearbyHubs:
    def test_city_maps_to_named_hubs_capped_at_three(self, resolver):
        hubs = asyncio.run(resolver.find_nearby_transport_hubs("New York"))
        assert [hub.id for hub in hubs] == ["jfk", "lga", "penn"]
        assert all(hub.kind.is_hub for hub in hubs)

    def test_hub_maps_to_itself(self, resolver):
        hubs = asyncio.run(resolver.find_nearby_transport_hubs("JFK Airport"))
        assert [hub.id for hub in hubs] == ["jfk"]

    def test_unknown_place(self, resolver):
        assert asyncio.run(resolver.find_nearby_transport_hubs("Atlantis")) == []

    def test_hubs_are_cached_by_location_id(self, resolver, memory_caches):
        asyncio.run(resolver.find_nearby_transport_hubs("New York"))
        keys = memory_caches.cache("location").keys()
        assert "location:nyc|type:nearby_hubs" in keys

    def test_city_without_hubs(self, resolver):
        ithaca = asyncio.run(resolver.resolve_by_id("ith"))
        assert ithaca.kind is LocationKind.CITY
        assert asyncio.run(resolver.hubs_near(ithaca)) == []
