"""Address search service.

Feeds one location field (pickup, dropoff or a stop) with suggestions:

- Queries shorter than the configured minimum clear the suggestions and
  never reach the geocoder.
- Longer queries restart a debounce timer on every keystroke; one lookup
  is issued when it elapses.
- Every keystroke advances an epoch. A lookup result is applied only if
  its epoch is still the latest, so suggestions never belong to a query
  the user has since edited.
- When the geocoder fails, ``error`` is set and a fixed list of popular
  places (airports, train stations, districts) is offered instead.

Selecting a suggestion writes the Location into the bound field through
the ``target`` callable. The synthetic current-location suggestion goes
through the geolocation port and a best-effort reverse geocode.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, Optional, Sequence, Set

from ..config import AddressSearchConfig, get_config
from ..domain.errors import GeocodingError, GeolocationError, StaleResponseDiscard
from ..domain.models import (
    Coordinates,
    Location,
    SearchCategory,
    SearchResult,
)
from ..ports.geocoding import GeocoderPort
from ..ports.geolocation import GeolocationPort
from ..stores.tokens import TokenGuard

LocationSink = Callable[[Optional[Location]], None]

SEARCH_FAILED = "Address search failed"
CURRENT_LOCATION_ID = "current-location"
CURRENT_LOCATION = SearchResult(
    id=CURRENT_LOCATION_ID,
    label="Use current location",
    coordinates=None,
    category=SearchCategory.CURRENT_LOCATION,
)


def _header(key: str, label: str) -> SearchResult:
    return SearchResult(
        id=f"header-{key}",
        label=label,
        coordinates=None,
        category=SearchCategory.CATEGORY_HEADER,
    )


def _place(
    place_id: str,
    label: str,
    secondary: str,
    latitude: float,
    longitude: float,
    category: SearchCategory,
) -> SearchResult:
    return SearchResult(
        id=place_id,
        label=label,
        coordinates=Coordinates(latitude, longitude),
        category=category,
        secondary_label=secondary,
    )


POPULAR_PLACES: tuple[SearchResult, ...] = (
    _header("airports", "Airports"),
    _place("heathrow-airport", "Heathrow Airport", "Hounslow TW6", 51.4700, -0.4543, SearchCategory.AIRPORT),
    _place("gatwick-airport", "Gatwick Airport", "Crawley RH6", 51.1537, -0.1821, SearchCategory.AIRPORT),
    _place("stansted-airport", "Stansted Airport", "Stansted CM24", 51.8860, 0.2389, SearchCategory.AIRPORT),
    _place("luton-airport", "Luton Airport", "Luton LU2", 51.8747, -0.3683, SearchCategory.AIRPORT),
    _header("stations", "Train Stations"),
    _place("kings-cross", "King's Cross Station", "London N1C", 51.5302, -0.1229, SearchCategory.TRAIN_STATION),
    _place("paddington", "Paddington Station", "London W2", 51.5154, -0.1755, SearchCategory.TRAIN_STATION),
    _place("euston", "Euston Station", "London NW1", 51.5282, -0.1337, SearchCategory.TRAIN_STATION),
    _place("victoria", "Victoria Station", "London SW1V", 51.4952, -0.1441, SearchCategory.TRAIN_STATION),
    _header("popular", "Popular Places"),
    _place("london-city", "City of London", "Financial District, London", 51.5156, -0.0919, SearchCategory.POPULAR),
    _place("canary-wharf", "Canary Wharf", "Business District, London E14", 51.5054, -0.0235, SearchCategory.POPULAR),
    _place("westminster", "Westminster", "Government District, London SW1A", 51.4994, -0.1269, SearchCategory.POPULAR),
)


class RecentSelections:
    """Most recently confirmed locations, newest first, shared by all fields."""

    def __init__(self, max_size: int = 5):
        self._items: Deque[Location] = deque(maxlen=max_size)

    def add(self, location: Location) -> None:
        for existing in list(self._items):
            if existing.address == location.address:
                self._items.remove(existing)
        self._items.appendleft(location)

    def matching(self, query: str) -> list[SearchResult]:
        needle = query.strip().lower()
        return [
            SearchResult(
                id=f"recent-{location.id or location.address}",
                label=location.address,
                coordinates=location.coordinates,
                category=SearchCategory.RECENT,
            )
            for location in self._items
            if needle and needle in location.address.lower()
        ]

    def __len__(self) -> int:
        return len(self._items)


@dataclass
class AddressSearchEngine:
    """Debounced, latest-wins address search bound to one location field.

    Attributes:
        geocoder: Suggestion provider
        geolocation: Device position provider
        target: Receives the confirmed Location of the bound field
        config: Debounce, minimum length and result limits
        recent: Recently confirmed locations
        on_change: Called after every state change
    """

    geocoder: GeocoderPort
    geolocation: GeolocationPort
    target: LocationSink
    config: AddressSearchConfig = field(default_factory=lambda: get_config().search)
    recent: RecentSelections = field(default_factory=RecentSelections)
    on_change: Optional[Callable[[], None]] = None

    query: str = field(default="", init=False)
    suggestions: tuple[SearchResult, ...] = field(default=(), init=False)
    is_searching: bool = field(default=False, init=False)
    error: Optional[str] = field(default=None, init=False)

    _epoch: TokenGuard = field(
        default_factory=lambda: TokenGuard("address search"), init=False, repr=False
    )
    _timer: Optional[asyncio.Task] = field(default=None, init=False, repr=False)
    _inflight: Set[asyncio.Task] = field(default_factory=set, init=False, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change()

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    # Typing

    def set_query(self, text: str) -> None:
        """Record a keystroke and (re)start the debounce timer.

        Must be called from within a running event loop.
        """
        token = self._epoch.issue()
        self.query = text
        self.error = None
        self._cancel_timer()

        if len(text.strip()) < self.config.min_query_length:
            self.suggestions = ()
            self.is_searching = False
            self._notify()
            return

        self._timer = asyncio.get_running_loop().create_task(
            self._debounce(token, text.strip())
        )
        self._notify()

    async def _debounce(self, token: int, query: str) -> None:
        await asyncio.sleep(self.config.debounce_seconds)
        self._timer = None
        # The lookup is not cancelled by later keystrokes, only ignored.
        task = asyncio.get_running_loop().create_task(self._lookup(token, query))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _lookup(self, token: int, query: str) -> None:
        self.is_searching = True
        self._notify()
        self._logger.debug("Address lookup issued", extra={"query": query, "epoch": token})

        try:
            results = await self.geocoder.search(query)
        except GeocodingError as e:
            self._logger.warning(
                "Address lookup failed",
                extra={"query": query, "rate_limited": e.is_rate_limited},
            )
            self._fall_back(token, e.message)
            return
        except Exception:
            self._logger.exception("Address lookup unexpected error")
            self._fall_back(token, SEARCH_FAILED)
            return

        try:
            self._epoch.check(token)
        except StaleResponseDiscard as discard:
            self._logger.debug(
                discard.message,
                extra={"query": query, "token": discard.token, "latest": discard.latest},
            )
            return

        self.suggestions = self._compose(query, results)
        self.is_searching = False
        self._notify()

    def _fall_back(self, token: int, message: str) -> None:
        if not self._epoch.is_latest(token):
            return
        self.error = message
        self.suggestions = self._with_current_location(POPULAR_PLACES)
        self.is_searching = False
        self._notify()

    def _with_current_location(
        self, rows: Sequence[SearchResult]
    ) -> tuple[SearchResult, ...]:
        if not self.config.include_current_location:
            return tuple(rows)
        return (CURRENT_LOCATION, *rows)

    def _compose(
        self, query: str, results: Sequence[SearchResult]
    ) -> tuple[SearchResult, ...]:
        recent = self.recent.matching(query)
        seen = {r.label for r in recent}
        found = [r for r in results if r.label not in seen][: self.config.max_results]
        return self._with_current_location([*recent, *found])

    def show_defaults(self) -> None:
        """Offer the current location and popular places for an empty field."""
        self._epoch.issue()
        self._cancel_timer()
        self.suggestions = self._with_current_location(POPULAR_PLACES)
        self.is_searching = False
        self._notify()

    # Selection

    async def select(self, result: SearchResult) -> Optional[Location]:
        """Confirm a suggestion into the bound field.

        Returns:
            The written Location, or None for header rows or when the
            current position could not be resolved.
        """
        if not result.is_selectable:
            return None
        if result.category is SearchCategory.CURRENT_LOCATION:
            return await self.use_current_location()

        location = result.to_location()
        if location is None:
            return None
        self._confirm(location)
        return location

    async def use_current_location(self) -> Optional[Location]:
        """Resolve the device position and write it into the bound field.

        Geolocation failures set ``error`` and leave the field unchanged.
        """
        token = self._epoch.issue()
        self._cancel_timer()
        self.is_searching = True
        self.error = None
        self._notify()

        try:
            position = await self.geolocation.current_position()
        except GeolocationError as e:
            if self._epoch.is_latest(token):
                self._logger.warning(
                    "Current location unavailable", extra={"reason": e.reason}
                )
                self.error = e.message
                self.is_searching = False
                self._notify()
            return None

        try:
            address = await self.geocoder.reverse(position.latitude, position.longitude)
        except GeocodingError as e:
            self._logger.info(
                "Reverse geocode failed, using coordinates", extra={"error": e.message}
            )
            address = None
        except Exception:
            self._logger.exception("Reverse geocode unexpected error, using coordinates")
            address = None

        if not self._epoch.is_latest(token):
            self._logger.debug("Discarding superseded current location")
            return None

        location = Location(
            latitude=position.latitude,
            longitude=position.longitude,
            address=address or f"{position.latitude:.5f}, {position.longitude:.5f}",
            id=CURRENT_LOCATION_ID,
        )
        self._confirm(location, remember=False)
        return location

    def _confirm(self, location: Location, remember: bool = True) -> None:
        self._epoch.invalidate()
        self._cancel_timer()
        if remember:
            self.recent.add(location)
        self.query = location.address
        self.suggestions = ()
        self.error = None
        self.is_searching = False
        self.target(location)
        self._notify()

    # Housekeeping

    def clear_results(self) -> None:
        """Drop suggestions and the query buffer; the bound field is kept."""
        self._epoch.invalidate()
        self._cancel_timer()
        self.query = ""
        self.suggestions = ()
        self.is_searching = False
        self.error = None
        self._notify()

    async def drain(self) -> None:
        """Wait for the pending timer and every lookup in flight."""
        while True:
            pending = [
                t
                for t in (self._timer, *self._inflight)
                if t is not None and not t.done()
            ]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    def close(self) -> None:
        self._epoch.invalidate()
        self._cancel_timer()
