"""Request lifecycle store for fare estimation and booking submission.

Fare estimation is latest-wins: each issuance is stamped by a TokenGuard
and a response only touches state if no newer estimation was issued in the
meantime. The payload is a deep copy taken at issuance, so later edits to
the trip cannot leak into a request already sent. A failed estimation
keeps the last good quote.

Submission is single-flight: a second call while one is pending does
nothing. It is never retried automatically.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from ..domain.errors import BookingWizardError, StaleResponseDiscard
from ..domain.models import FareQuote, PersonalDetails, RequestState
from ..ports.booking import BookingSubmissionPort
from ..ports.pricing import FarePricingPort
from .tokens import TokenGuard
from .trip import TripParametersStore

DEFAULT_FARE_ERROR = "Failed to calculate fare"
DEFAULT_BOOKING_ERROR = "Failed to create booking"
MISSING_ROUTE = "Please specify pickup and dropoff locations"
MISSING_SCHEDULE = "Please specify pickup date and time"
MISSING_BOOKING_INFO = "Missing required booking information"


@dataclass
class RequestLifecycleStore:
    """Tracks fare and submission operations and the last good quote.

    Attributes:
        trip: Trip parameters the payloads are copied from
        pricing: Fare estimation collaborator
        booking: Booking submission collaborator
        on_pending: Called once an operation has gone pending
    """

    trip: TripParametersStore
    pricing: FarePricingPort
    booking: BookingSubmissionPort
    on_pending: Optional[Callable[[], None]] = None

    _state: RequestState = field(default_factory=RequestState, repr=False)
    _fare_tokens: TokenGuard = field(
        default_factory=lambda: TokenGuard("fare"), repr=False
    )
    _booking_tokens: TokenGuard = field(
        default_factory=lambda: TokenGuard("booking"), repr=False
    )
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def _pending(self) -> None:
        if self.on_pending is not None:
            self.on_pending()

    @property
    def state(self) -> RequestState:
        return self._state

    @property
    def fare_quote(self) -> Optional[FareQuote]:
        return self._state.fare_quote

    def is_quote_stale(self, version: Optional[int] = None) -> bool:
        """True if the trip changed since the current quote was requested.

        Compares against the given trip version, or the current one.
        """
        quote = self._state.fare_quote
        if quote is None:
            return False
        current = self.trip.version if version is None else version
        return quote.version != current

    # Fare estimation

    async def estimate_fare(self) -> Optional[FareQuote]:
        """Issue a fare estimation for the current trip parameters.

        Returns:
            The applied quote, or None if the request failed or was
            superseded by a newer one.
        """
        token = self._fare_tokens.issue()
        version = self.trip.version
        snapshot = self.trip.snapshot()

        self._state.is_fetching_fare = True
        self._state.fetch_error = None
        self._pending()

        if not snapshot.has_route:
            self._reject_fare(token, MISSING_ROUTE)
            return None
        if not snapshot.has_schedule:
            self._reject_fare(token, MISSING_SCHEDULE)
            return None

        self._logger.info(
            "Fare estimation issued",
            extra={"token": token, "version": version, "stops": len(snapshot.stops)},
        )

        try:
            quote = await self.pricing.estimate(snapshot)
        except BookingWizardError as e:
            self._reject_fare(token, e.message or DEFAULT_FARE_ERROR)
            return None
        except Exception as e:
            self._logger.exception("Fare estimation unexpected error")
            self._reject_fare(token, str(e) or DEFAULT_FARE_ERROR)
            return None

        try:
            self._fare_tokens.check(token)
        except StaleResponseDiscard as discard:
            self._logger.debug(
                discard.message,
                extra={"token": discard.token, "latest": discard.latest},
            )
            return None

        quote = dataclasses.replace(quote, version=version)
        self._state.fare_quote = quote
        self._state.fetch_error = None
        self._state.is_fetching_fare = False
        self._logger.info(
            "Fare estimation applied",
            extra={"token": token, "options": len(quote.vehicle_options)},
        )
        return quote

    def _reject_fare(self, token: int, message: str) -> None:
        try:
            self._fare_tokens.check(token)
        except StaleResponseDiscard as discard:
            self._logger.debug(
                discard.message,
                extra={"token": discard.token, "latest": discard.latest},
            )
            return
        self._logger.warning(
            "Fare estimation failed", extra={"token": token, "error": message}
        )
        self._state.fetch_error = message
        self._state.is_fetching_fare = False

    # Submission

    async def submit_booking(self, details: PersonalDetails) -> Optional[str]:
        """Submit the current trip with the passenger's details.

        Returns:
            The booking id on success, None if rejected or already pending.
        """
        if self._state.is_creating_booking:
            self._logger.info("Booking submission already pending, ignoring")
            return None

        token = self._booking_tokens.issue()
        snapshot = self.trip.snapshot()
        self._state.is_creating_booking = True
        self._state.booking_error = None
        self._pending()

        if not (
            snapshot.has_route
            and snapshot.has_schedule
            and snapshot.selected_vehicle is not None
        ):
            self._reject_booking(token, MISSING_BOOKING_INFO)
            return None

        self._logger.info(
            "Booking submission issued",
            extra={"vehicle": snapshot.selected_vehicle.id},
        )

        try:
            booking_id = await self.booking.submit(snapshot, details)
        except BookingWizardError as e:
            self._reject_booking(token, e.message or DEFAULT_BOOKING_ERROR)
            return None
        except Exception as e:
            self._logger.exception("Booking submission unexpected error")
            self._reject_booking(token, str(e) or DEFAULT_BOOKING_ERROR)
            return None

        if not self._booking_tokens.is_latest(token):
            self._logger.info(
                "Booking response arrived after reset", extra={"booking_id": booking_id}
            )
            return None

        self._state.is_creating_booking = False
        self._state.last_booking_id = booking_id
        self._logger.info("Booking created", extra={"booking_id": booking_id})
        return booking_id

    def _reject_booking(self, token: int, message: str) -> None:
        if not self._booking_tokens.is_latest(token):
            return
        self._logger.warning("Booking submission failed", extra={"error": message})
        self._state.booking_error = message
        self._state.is_creating_booking = False

    # Housekeeping

    def clear_fetch_error(self) -> None:
        self._state.fetch_error = None

    def clear_booking_error(self) -> None:
        self._state.booking_error = None

    def clear_quote(self) -> None:
        self._state.fare_quote = None

    def restore_quote(self, quote: FareQuote) -> None:
        self._state.fare_quote = quote

    def reset(self) -> None:
        """Back to idle; responses still in flight are discarded on arrival."""
        self._fare_tokens.invalidate()
        self._booking_tokens.invalidate()
        self._state = RequestState()
