"""Ports layer - Abstract interfaces (Protocols) for the booking wizard.

Ports define the contracts between the wizard core and its remote
collaborators: pricing, booking submission, geocoding, device geolocation
and session storage. Stores and services depend only on these protocols,
which keeps them testable with plain fakes.
"""

from .booking import BookingSubmissionPort
from .cache import CachePort
from .geocoding import GeocoderPort
from .geolocation import GeolocationPort
from .pricing import FarePricingPort
from .storage import StateStoragePort

__all__ = [
    # Backend
    "FarePricingPort",
    "BookingSubmissionPort",
    # Location
    "GeocoderPort",
    "GeolocationPort",
    # Infrastructure
    "StateStoragePort",
    "CachePort",
]
