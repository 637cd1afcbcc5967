"""Booking orchestrator - the wizard facade.

Composes the trip, navigation, request and validation stores and the
per-field address search engines into the operations a booking UI calls.
Each operation completes its store mutations before subscribers are told
about it, so no observer sees a half-applied change such as a partially
reset wizard.

Async operations notify twice: once when the request goes pending and
once when it settles.
"""

from __future__ import annotations

import copy
import dataclasses
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Literal, Optional, Tuple, Union

from ..config import AppConfig, get_config
from ..domain.models import (
    FareQuote,
    Location,
    PersonalDetails,
    RequestState,
    TripParameters,
    UIFlags,
    ValidationState,
    VehicleOption,
    WizardStep,
)
from ..ports.booking import BookingSubmissionPort
from ..ports.geocoding import GeocoderPort
from ..ports.geolocation import GeolocationPort
from ..ports.pricing import FarePricingPort
from ..stores.navigation import WizardNavigator
from ..stores.requests import RequestLifecycleStore
from ..stores.trip import DateInput, TimeInput, TripParametersStore
from ..stores.validation import ValidationStore
from .address_search import AddressSearchEngine, RecentSelections
from .persistence import BookingStatePersistence

LocationField = Literal["pickup", "dropoff", "stop"]
Listener = Callable[[], None]


@dataclass
class StopSlot:
    """Position of the stop a search engine edits.

    ``index`` follows the stop as earlier stops are removed. A slot whose
    stop was removed is detached and ignores further selections.
    """

    index: Optional[int]
    attached: bool = True


@dataclass
class BookingOrchestrator:
    """Single entry point of the booking wizard.

    Attributes:
        pricing: Fare estimation collaborator
        booking: Booking submission collaborator
        geocoder: Address suggestion collaborator
        geolocation: Device position collaborator
        config: Application configuration
        persistence: Optional session persistence
    """

    pricing: FarePricingPort
    booking: BookingSubmissionPort
    geocoder: GeocoderPort
    geolocation: GeolocationPort
    config: AppConfig = field(default_factory=get_config)
    persistence: Optional[BookingStatePersistence] = None

    _trip: TripParametersStore = field(init=False, repr=False)
    _validation: ValidationStore = field(init=False, repr=False)
    _navigator: WizardNavigator = field(init=False, repr=False)
    _requests: RequestLifecycleStore = field(init=False, repr=False)
    _recent: RecentSelections = field(init=False, repr=False)
    _engines: Dict[Tuple[str, Optional[int]], AddressSearchEngine] = field(
        default_factory=dict, init=False, repr=False
    )
    _stop_slots: Dict[int, StopSlot] = field(default_factory=dict, init=False, repr=False)
    _listeners: List[Listener] = field(default_factory=list, init=False, repr=False)
    _batch_depth: int = field(default=0, init=False, repr=False)
    _batch_dirty: bool = field(default=False, init=False, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        self._trip = TripParametersStore(limits=self.config.trip)
        self._validation = ValidationStore()
        self._navigator = WizardNavigator(trip=self._trip, validation=self._validation)
        self._requests = RequestLifecycleStore(
            trip=self._trip,
            pricing=self.pricing,
            booking=self.booking,
            on_pending=self._notify,
        )
        self._recent = RecentSelections(max_size=self.config.search.max_recent)

    # Change notification

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener.

        Returns:
            A callable that unregisters the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @contextmanager
    def _batch(self) -> Iterator[None]:
        """Hold notifications until the outermost batch exits, then emit one."""
        self._batch_depth += 1
        try:
            yield
        finally:
            self._batch_depth -= 1
        if self._batch_depth == 0 and self._batch_dirty:
            self._batch_dirty = False
            self._emit()

    def _notify(self) -> None:
        if self._batch_depth:
            self._batch_dirty = True
            return
        self._emit()

    def _emit(self) -> None:
        for listener in list(self._listeners):
            listener()

    def _commit(self) -> None:
        """Persist the resumable state and notify."""
        if self.persistence is not None:
            self.persistence.save(self._trip, self._requests)
        self._notify()

    # Read-only views

    @property
    def trip(self) -> TripParameters:
        return self._trip.snapshot()

    @property
    def ui(self) -> UIFlags:
        return copy.deepcopy(self._navigator.flags)

    @property
    def requests(self) -> RequestState:
        return dataclasses.replace(self._requests.state)

    @property
    def validation(self) -> ValidationState:
        return ValidationState(errors=dict(self._validation.errors))

    @property
    def current_step(self) -> WizardStep:
        return self._navigator.current_step

    @property
    def trip_version(self) -> int:
        return self._trip.version

    @property
    def is_quote_stale(self) -> bool:
        return self._requests.is_quote_stale()

    def is_current_step_valid(self) -> bool:
        return self._navigator.is_current_step_valid()

    # Trip parameters

    def set_pickup_location(self, location: Optional[Location]) -> None:
        self._trip.set_pickup_location(location)
        self._commit()

    def set_dropoff_location(self, location: Optional[Location]) -> None:
        self._trip.set_dropoff_location(location)
        self._commit()

    def add_stop(self, location: Location) -> None:
        self._trip.add_stop(location)
        self._commit()

    def remove_stop(self, index: int) -> None:
        removed = 0 <= index < len(self._trip.stops)
        self._trip.remove_stop(index)
        if removed:
            self._shift_stop_engines(index)
        self._commit()

    def update_stop(self, index: int, location: Location) -> None:
        self._trip.update_stop(index, location)
        self._commit()

    def set_date(self, value: DateInput) -> None:
        self._trip.set_date(value)
        self._commit()

    def set_time(self, value: TimeInput) -> None:
        self._trip.set_time(value)
        self._commit()

    def set_passengers(self, count: int) -> None:
        self._trip.set_passengers(count)
        self._commit()

    def set_checked_luggage(self, count: int) -> None:
        self._trip.set_checked_luggage(count)
        self._commit()

    def set_hand_luggage(self, count: int) -> None:
        self._trip.set_hand_luggage(count)
        self._commit()

    def select_vehicle(self, vehicle: Union[str, VehicleOption, None]) -> bool:
        """Select a vehicle offered by the current quote, or clear with None.

        Returns:
            False if the vehicle is not part of the current quote; the
            previous selection is kept in that case.
        """
        if vehicle is None:
            self._trip.set_selected_vehicle(None)
            self._commit()
            return True

        vehicle_id = vehicle if isinstance(vehicle, str) else vehicle.id
        quote = self._requests.fare_quote
        option = quote.find_vehicle(vehicle_id) if quote is not None else None
        if option is None:
            self._logger.warning(
                "Rejected vehicle not in current quote",
                extra={"vehicle": vehicle_id, "has_quote": quote is not None},
            )
            return False

        self._trip.set_selected_vehicle(option)
        self._commit()
        return True

    def _reconcile_selection(self, quote: FareQuote) -> None:
        """Keep the selected vehicle a member of the newly applied quote."""
        selected = self._trip.params.selected_vehicle
        if selected is None:
            return
        self._trip.set_selected_vehicle(quote.find_vehicle(selected.id))
        if self._trip.params.selected_vehicle is None:
            self._logger.info(
                "Selected vehicle no longer offered", extra={"vehicle": selected.id}
            )

    # Validation

    def validate_field(self, field_name: str, value: Any) -> bool:
        valid = self._validation.validate_field(field_name, value)
        self._notify()
        return valid

    def validate_details(self, details: PersonalDetails) -> bool:
        valid = self._validation.validate_form(details.as_form_values())
        self._notify()
        return valid

    # Navigation

    async def go_to_next_step(self) -> bool:
        """Advance one step if the current step is complete.

        Entering the Vehicle step requests a fare estimate.

        Returns:
            True if the step changed.
        """
        if not self._navigator.advance():
            self._notify()
            return False
        self._notify()
        if self._navigator.current_step is WizardStep.VEHICLE:
            await self.get_fare_estimate()
        return True

    async def go_to_step(self, step: WizardStep) -> bool:
        """Jump to an earlier step, or advance to the next one."""
        current = self._navigator.current_step
        if step < current:
            changed = self._navigator.go_back(step)
            self._notify()
            return changed
        if step is self._navigator.next_step():
            return await self.go_to_next_step()
        return False

    async def go_to_location_step(self) -> bool:
        return await self.go_to_step(WizardStep.LOCATION)

    async def go_to_luggage_step(self) -> bool:
        return await self.go_to_step(WizardStep.LUGGAGE)

    async def go_to_vehicle_step(self) -> bool:
        return await self.go_to_step(WizardStep.VEHICLE)

    async def go_to_details_step(self) -> bool:
        return await self.go_to_step(WizardStep.DETAILS)

    def dismiss_success(self) -> None:
        self._navigator.dismiss_success()
        self._notify()

    # Remote operations

    async def get_fare_estimate(self) -> Optional[FareQuote]:
        """Request a fare quote for the current trip parameters.

        Returns:
            The applied quote, or None if it failed or was superseded.
        """
        quote = await self._requests.estimate_fare()
        if quote is None:
            self._notify()
            return None
        self._reconcile_selection(quote)
        self._commit()
        return quote

    async def create_booking(
        self, personal_details: PersonalDetails, agree_to_terms: bool
    ) -> Optional[str]:
        """Validate the personal details and submit the booking.

        Does nothing unless the terms were agreed to. On success the wizard
        returns to the Location step with the confirmation shown, and the
        trip, quote, validation errors and saved session are cleared.

        Returns:
            The booking id, or None if nothing was submitted or it failed.
        """
        if not agree_to_terms:
            self._logger.info("Booking not submitted, terms not accepted")
            return None
        if self._requests.state.is_creating_booking:
            self._logger.info("Booking submission already pending, ignoring")
            return None

        if not self._validation.validate_form(personal_details.as_form_values()):
            self._logger.info(
                "Booking blocked by invalid details",
                extra={"fields": sorted(self._validation.errors)},
            )
            self._notify()
            return None

        booking_id = await self._requests.submit_booking(personal_details)
        if booking_id is None:
            self._notify()
            return None

        with self._batch():
            self._navigator.complete(booking_id)
            self._trip.reset()
            self._requests.clear_quote()
            self._validation.reset()
            self._clear_searches()
            if self.persistence is not None:
                self.persistence.clear()
            self._notify()
        return booking_id

    def clear_fetch_error(self) -> None:
        self._requests.clear_fetch_error()
        self._notify()

    def clear_booking_error(self) -> None:
        self._requests.clear_booking_error()
        self._notify()

    def reset_booking_state(self) -> None:
        """Reset trip, navigation, requests and validation in one step."""
        with self._batch():
            self._trip.reset()
            self._navigator.reset()
            self._requests.reset()
            self._validation.reset()
            self._clear_searches()
            if self.persistence is not None:
                self.persistence.clear()
            self._notify()
        self._logger.info("Booking state reset")

    # Address search

    def address_search(
        self, field_name: LocationField, index: Optional[int] = None
    ) -> AddressSearchEngine:
        """Search engine bound to pickup, dropoff, or a stop.

        For stops, ``index`` selects the stop to replace; without it a
        selection is appended as a new stop. An indexed engine keeps
        following its stop when earlier stops are removed.
        """
        key = (field_name, index if field_name == "stop" else None)
        engine = self._engines.get(key)
        if engine is None:
            engine = AddressSearchEngine(
                geocoder=self.geocoder,
                geolocation=self.geolocation,
                target=self._location_sink(field_name, index),
                config=self.config.search,
                recent=self._recent,
                on_change=self._notify,
            )
            self._engines[key] = engine
        return engine

    def _location_sink(
        self, field_name: LocationField, index: Optional[int]
    ) -> Callable[[Optional[Location]], None]:
        if field_name == "pickup":
            return self.set_pickup_location
        if field_name == "dropoff":
            return self.set_dropoff_location
        if field_name != "stop":
            raise ValueError(f"Unknown location field: {field_name!r}")

        slot = StopSlot(index)
        if index is not None:
            self._stop_slots[index] = slot

        def write_stop(location: Optional[Location]) -> None:
            if not slot.attached:
                self._logger.info("Ignoring selection for a removed stop")
                return
            if location is None:
                if slot.index is not None:
                    self.remove_stop(slot.index)
            elif slot.index is None:
                self.add_stop(location)
            else:
                self.update_stop(slot.index, location)

        return write_stop

    def _shift_stop_engines(self, removed: int) -> None:
        """Re-key stop engines after the stop at ``removed`` went away."""
        shifted: Dict[int, StopSlot] = {}
        for position in sorted(self._stop_slots):
            slot = self._stop_slots[position]
            if position < removed:
                shifted[position] = slot
                continue
            engine = self._engines.pop(("stop", position))
            if position == removed:
                slot.attached = False
                engine.close()
                continue
            slot.index = position - 1
            shifted[position - 1] = slot
            self._engines[("stop", position - 1)] = engine
        self._stop_slots = shifted

    def _clear_searches(self) -> None:
        for position, slot in self._stop_slots.items():
            slot.attached = False
            self._engines.pop(("stop", position)).close()
        self._stop_slots.clear()
        for engine in self._engines.values():
            engine.clear_results()

    # Session

    def restore_session(self) -> bool:
        """Reload saved trip parameters and quote, if any."""
        if self.persistence is None:
            return False
        restored = self.persistence.restore(self._trip, self._requests)
        if restored:
            self._notify()
        return restored

    def close(self) -> None:
        for engine in self._engines.values():
            engine.close()
