"""Typed domain errors for the booking wizard.

Adapters raise these errors; the stores turn them into per-operation
messages (``fetch_error``, ``booking_error``, search ``error``). Field
validation failures are not raised at all; ValidationStore records them
per field. No error in this package is fatal: every path leaves the wizard
in a state the user can retry or correct from.

All errors inherit from BookingWizardError and can optionally wrap a root
cause exception for debugging.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Optional


@dataclass
class BookingWizardError(Exception):
    """Base error for the booking wizard domain.

    Attributes:
        message: Human-readable error description
        cause: Optional underlying exception that caused this error
    """

    message: str
    cause: Optional[Exception] = field(default=None, repr=False)

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def __post_init__(self) -> None:
        super().__init__(self.message)


@dataclass
class NetworkError(BookingWizardError):
    """A backend call failed (transport, timeout or error response).

    Attributes:
        status_code: HTTP status if a response was received
        code: Backend error code, if provided
        details: Backend error details, if provided
    """

    status_code: Optional[int] = None
    code: Optional[str] = None
    details: Optional[str] = None


@dataclass
class FareEstimationError(NetworkError):
    """Fare estimation request failed. The last good quote is kept."""


@dataclass
class BookingSubmissionError(NetworkError):
    """Booking submission failed. The form is left untouched for a retry."""


GeolocationFailure = Literal["permission-denied", "unavailable", "timeout"]


@dataclass
class GeolocationError(BookingWizardError):
    """Device position could not be resolved.

    Degrades to manual address entry.

    Attributes:
        reason: Why the position is unavailable
    """

    reason: GeolocationFailure = "unavailable"


@dataclass
class GeocodingError(BookingWizardError):
    """Address lookup failed.

    Attributes:
        query: The query that failed
        is_rate_limited: Whether the failure was due to rate limiting
    """

    query: str = ""
    is_rate_limited: bool = False


@dataclass
class StaleResponseDiscard(BookingWizardError):
    """A response arrived after a newer request of the same kind was issued.

    Internal ordering guard: logged, never surfaced to the user.

    Attributes:
        token: Token stamped on the discarded response
        latest: Latest token issued at the time it arrived
    """

    token: int = 0
    latest: int = 0


@dataclass
class ConfigurationError(BookingWizardError):
    """Invalid or missing configuration.

    Attributes:
        setting_name: Name of the problematic setting
    """

    setting_name: str = ""
