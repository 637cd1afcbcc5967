"""Tests for the debounced address search engine."""

import asyncio
from unittest.mock import AsyncMock

import pytest
from conftest import GATWICK, HEATHROW, KINGS_CROSS, DeferredGeocoder, FixedGeolocation

from ridebook.config import AddressSearchConfig
from ridebook.domain.errors import GeocodingError, GeolocationError
from ridebook.domain.models import Coordinates, SearchCategory, SearchResult
from ridebook.services.address_search import (
    CURRENT_LOCATION,
    POPULAR_PLACES,
    AddressSearchEngine,
    RecentSelections,
)


def result(label: str, lat: float = 51.5, lon: float = -0.12) -> SearchResult:
    return SearchResult(
        id=label.lower().replace(" ", "-"),
        label=label,
        coordinates=Coordinates(lat, lon),
        category=SearchCategory.ADDRESS,
    )


async def until(predicate, timeout: float = 1.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached")
        await asyncio.sleep(0.005)


@pytest.fixture
def geocoder():
    return DeferredGeocoder()


@pytest.fixture
def geolocation():
    return FixedGeolocation()


@pytest.fixture
def selected():
    return []


@pytest.fixture
def engine(geocoder, geolocation, selected):
    return AddressSearchEngine(
        geocoder=geocoder,
        geolocation=geolocation,
        target=selected.append,
        config=AddressSearchConfig(debounce_seconds=0.01, include_current_location=False),
    )


class TestDebounce:
    @pytest.mark.asyncio
    async def test_short_query_never_hits_network(self, engine, geocoder):
        engine.set_query("Lo")
        await asyncio.sleep(0.05)
        await engine.drain()

        assert geocoder.calls == []
        assert engine.suggestions == ()
        assert not engine.is_searching

    @pytest.mark.asyncio
    async def test_typing_issues_exactly_one_lookup(self, engine, geocoder):
        for text in ("Lon", "Lond", "Londo", "London"):
            engine.set_query(text)

        await until(lambda: geocoder.calls)
        await asyncio.sleep(0.03)

        assert geocoder.calls == [("London",)]
        geocoder.resolve(0, [result("London")])
        await engine.drain()
        assert [s.label for s in engine.suggestions] == ["London"]
        assert not engine.is_searching

    @pytest.mark.asyncio
    async def test_clear_cancels_pending_timer(self, engine, geocoder):
        engine.set_query("London")
        engine.clear_results()
        await asyncio.sleep(0.05)
        assert geocoder.calls == []

    @pytest.mark.asyncio
    async def test_results_are_limited(self, geocoder, geolocation, selected):
        engine = AddressSearchEngine(
            geocoder=geocoder,
            geolocation=geolocation,
            target=selected.append,
            config=AddressSearchConfig(
                debounce_seconds=0.01, max_results=2, include_current_location=False
            ),
        )
        engine.set_query("Station")
        await until(lambda: geocoder.calls)
        geocoder.resolve(0, [result("A"), result("B"), result("C")])
        await engine.drain()
        assert [s.label for s in engine.suggestions] == ["A", "B"]


class TestLatestQueryWins:
    @pytest.mark.asyncio
    async def test_older_response_is_discarded(self, engine, geocoder):
        engine.set_query("London")
        await until(lambda: len(geocoder.calls) == 1)
        engine.set_query("London Bridge")
        await until(lambda: len(geocoder.calls) == 2)

        geocoder.resolve(1, [result("London Bridge")])
        await until(lambda: engine.suggestions)
        geocoder.resolve(0, [result("London"), result("London Eye")])
        await engine.drain()

        assert [s.label for s in engine.suggestions] == ["London Bridge"]

    @pytest.mark.asyncio
    async def test_edit_below_minimum_discards_in_flight(self, engine, geocoder):
        engine.set_query("London")
        await until(lambda: geocoder.calls)
        engine.set_query("Lo")

        geocoder.resolve(0, [result("London")])
        await engine.drain()

        assert engine.suggestions == ()


class TestFailures:
    @pytest.mark.asyncio
    async def test_geocoder_failure_offers_popular_places(self, engine, geocoder):
        engine.set_query("Heathrow")
        await until(lambda: geocoder.calls)
        geocoder.fail(0, GeocodingError("Address search failed", query="Heathrow"))
        await engine.drain()

        assert engine.error == "Address search failed"
        assert engine.suggestions == POPULAR_PLACES
        headers = [
            s.label
            for s in engine.suggestions
            if s.category is SearchCategory.CATEGORY_HEADER
        ]
        assert headers == ["Airports", "Train Stations", "Popular Places"]

    @pytest.mark.asyncio
    async def test_unexpected_failure_also_falls_back(self, engine, geocoder):
        engine.set_query("Heathrow")
        await until(lambda: geocoder.calls)
        geocoder.fail(0, RuntimeError("socket closed"))
        await engine.drain()
        assert engine.error == "Address search failed"
        assert not engine.is_searching


class TestSelection:
    @pytest.mark.asyncio
    async def test_select_writes_target_and_clears(self, engine, selected):
        location = await engine.select(result("Paddington Station"))

        assert selected == [location]
        assert location.address == "Paddington Station"
        assert engine.query == "Paddington Station"
        assert engine.suggestions == ()

    @pytest.mark.asyncio
    async def test_header_is_not_selectable(self, engine, selected):
        assert await engine.select(POPULAR_PLACES[0]) is None
        assert selected == []

    @pytest.mark.asyncio
    async def test_recent_selection_is_offered_again(self, engine, geocoder):
        await engine.select(result("Paddington Station"))

        engine.set_query("Padd")
        await until(lambda: geocoder.calls)
        geocoder.resolve(0, [result("Paddington Station"), result("Paddington Basin")])
        await engine.drain()

        assert [(s.label, s.category) for s in engine.suggestions] == [
            ("Paddington Station", SearchCategory.RECENT),
            ("Paddington Basin", SearchCategory.ADDRESS),
        ]

    @pytest.mark.asyncio
    async def test_selection_during_lookup_stops_searching(self, engine, geocoder, selected):
        engine.set_query("London")
        await until(lambda: engine.is_searching)

        await engine.select(result("Heathrow Airport"))
        assert not engine.is_searching

        geocoder.resolve(0, [result("London")])
        await engine.drain()

        assert not engine.is_searching
        assert engine.suggestions == ()
        assert [loc.address for loc in selected] == ["Heathrow Airport"]

    @pytest.mark.asyncio
    async def test_clear_results_keeps_confirmed_field(self, engine, selected):
        await engine.select(result("Euston Station"))
        engine.clear_results()
        assert engine.query == ""
        assert len(selected) == 1


class TestCurrentLocation:
    @pytest.fixture
    def engine(self, geocoder, geolocation, selected):
        return AddressSearchEngine(
            geocoder=geocoder,
            geolocation=geolocation,
            target=selected.append,
            config=AddressSearchConfig(debounce_seconds=0.01),
        )

    @pytest.mark.asyncio
    async def test_current_location_row_leads_results(self, engine, geocoder):
        engine.set_query("Soho")
        await until(lambda: geocoder.calls)
        geocoder.resolve(0, [result("Soho Square")])
        await engine.drain()
        assert engine.suggestions[0] == CURRENT_LOCATION

    @pytest.mark.asyncio
    async def test_selecting_current_location_uses_geolocation(
        self, engine, geolocation, selected
    ):
        location = await engine.select(CURRENT_LOCATION)

        assert geolocation.calls == 1
        assert location.address == "10 Downing Street, London"
        assert location.latitude == geolocation.position.latitude
        assert selected == [location]

    @pytest.mark.asyncio
    async def test_missing_reverse_address_falls_back_to_coordinates(
        self, engine, geocoder
    ):
        geocoder.address = None
        location = await engine.use_current_location()
        assert location.address == "51.50340, -0.12760"

    @pytest.mark.asyncio
    async def test_unexpected_reverse_failure_falls_back_to_coordinates(
        self, engine, geocoder, selected
    ):
        geocoder.reverse = AsyncMock(side_effect=RuntimeError("connection reset"))

        location = await engine.use_current_location()

        assert location.address == "51.50340, -0.12760"
        assert not engine.is_searching
        assert selected == [location]

    @pytest.mark.asyncio
    async def test_geolocation_failure_degrades_to_manual_entry(
        self, geocoder, selected
    ):
        engine = AddressSearchEngine(
            geocoder=geocoder,
            geolocation=FixedGeolocation(
                error=GeolocationError("Location permission denied", reason="permission-denied")
            ),
            target=selected.append,
            config=AddressSearchConfig(debounce_seconds=0.01),
        )

        assert await engine.use_current_location() is None
        assert engine.error == "Location permission denied"
        assert not engine.is_searching
        assert selected == []

    def test_show_defaults(self, engine):
        engine.show_defaults()
        assert engine.suggestions == (CURRENT_LOCATION, *POPULAR_PLACES)


class TestRecentSelections:
    def test_newest_first_and_bounded(self):
        recent = RecentSelections(max_size=2)
        for location in (HEATHROW, GATWICK, KINGS_CROSS):
            recent.add(location)

        assert len(recent) == 2
        assert [r.label for r in recent.matching("a")] == [
            "King's Cross Station",
            "Gatwick Airport",
        ]
