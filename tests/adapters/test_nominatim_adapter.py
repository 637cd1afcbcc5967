"""Tests for the Nominatim geocoder adapter."""

from unittest.mock import MagicMock, patch

import pytest
from geopy.exc import GeocoderRateLimited, GeocoderServiceError
from geopy.location import Location as GeoLocation

from ridebook.adapters.cache import TTLCache
from ridebook.adapters.geocoding.nominatim_adapter import (
    NominatimGeocoderAdapter,
    categorize,
    to_search_result,
)
from ridebook.config import GeocodingConfig
from ridebook.domain.errors import GeocodingError
from ridebook.domain.models import SearchCategory

HEATHROW_PLACE = GeoLocation(
    "Heathrow Airport, Hounslow, London, TW6, United Kingdom",
    (51.47, -0.4543),
    {"place_id": 1001, "class": "aeroway", "type": "aerodrome"},
)
EUSTON_PLACE = GeoLocation(
    "Euston, Euston Road, London, NW1 2RT, United Kingdom",
    (51.5282, -0.1337),
    {"place_id": 1002, "class": "railway", "type": "station"},
)


@pytest.fixture
def config():
    return GeocodingConfig(rate_limit_delay=0, max_retries=0, error_wait_seconds=0)


@pytest.fixture
def nominatim():
    with patch("ridebook.adapters.geocoding.nominatim_adapter.Nominatim") as cls:
        instance = MagicMock()
        cls.return_value = instance
        yield instance


@pytest.fixture
def adapter(config):
    return NominatimGeocoderAdapter(config, TTLCache(name="test", ttl_seconds=60))


class TestConversion:
    def test_categorize(self):
        assert categorize({"class": "aeroway", "type": "aerodrome"}) is SearchCategory.AIRPORT
        assert categorize({"class": "railway", "type": "station"}) is SearchCategory.TRAIN_STATION
        assert categorize({"class": "place", "type": "house"}) is SearchCategory.ADDRESS
        assert categorize({}) is SearchCategory.ADDRESS

    def test_labels_split_on_first_comma(self):
        result = to_search_result(EUSTON_PLACE)
        assert result.id == "1002"
        assert result.label == "Euston"
        assert result.secondary_label == "Euston Road, London, NW1 2RT, United Kingdom"
        assert result.coordinates.latitude == 51.5282


class TestSearch:
    @pytest.mark.asyncio
    async def test_returns_categorized_results(self, adapter, nominatim, config):
        nominatim.geocode.return_value = [HEATHROW_PLACE, EUSTON_PLACE]

        results = await adapter.search("London")

        assert [r.category for r in results] == [
            SearchCategory.AIRPORT,
            SearchCategory.TRAIN_STATION,
        ]
        kwargs = nominatim.geocode.call_args.kwargs
        assert kwargs["exactly_one"] is False
        assert kwargs["country_codes"] == config.country_codes

    @pytest.mark.asyncio
    async def test_cache_hit_skips_service(self, adapter, nominatim):
        nominatim.geocode.return_value = [HEATHROW_PLACE]

        await adapter.search("Heathrow")
        results = await adapter.search("  heathrow ")

        assert nominatim.geocode.call_count == 1
        assert results[0].label == "Heathrow Airport"

    @pytest.mark.asyncio
    async def test_no_results(self, adapter, nominatim):
        nominatim.geocode.return_value = None
        assert await adapter.search("Nowhere at all") == ()

    @pytest.mark.asyncio
    async def test_blank_query_skips_service(self, adapter, nominatim):
        assert await adapter.search("   ") == ()
        nominatim.geocode.assert_not_called()

    @pytest.mark.asyncio
    async def test_rate_limited(self, adapter, nominatim):
        nominatim.geocode.side_effect = GeocoderRateLimited("slow down")

        with pytest.raises(GeocodingError) as exc_info:
            await adapter.search("Heathrow")

        assert exc_info.value.is_rate_limited
        assert exc_info.value.query == "Heathrow"

    @pytest.mark.asyncio
    async def test_service_error(self, adapter, nominatim):
        nominatim.geocode.side_effect = GeocoderServiceError("502")

        with pytest.raises(GeocodingError) as exc_info:
            await adapter.search("Heathrow")

        assert exc_info.value.message == "Address search failed"
        assert not exc_info.value.is_rate_limited


class TestReverse:
    @pytest.mark.asyncio
    async def test_reverse_address(self, adapter, nominatim):
        nominatim.reverse.return_value = HEATHROW_PLACE
        address = await adapter.reverse(51.47, -0.4543)
        assert address.startswith("Heathrow Airport")

    @pytest.mark.asyncio
    async def test_reverse_failure_is_none(self, adapter, nominatim):
        nominatim.reverse.side_effect = GeocoderServiceError("down")
        assert await adapter.reverse(51.47, -0.4543) is None
