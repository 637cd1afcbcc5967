"""HTTP adapters for the pricing and booking backend.

Available implementations:
- HttpFarePricingAdapter: FarePricingPort
- HttpBookingAdapter: BookingSubmissionPort
"""

from .api_client import BackendClient
from .booking_api import HttpBookingAdapter, build_booking_request
from .fare_api import HttpFarePricingAdapter, build_fare_request

__all__ = [
    "BackendClient",
    "HttpFarePricingAdapter",
    "HttpBookingAdapter",
    "build_fare_request",
    "build_booking_request",
]
