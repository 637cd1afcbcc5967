"""Domain layer - Core booking models and errors.

This module contains the domain models and typed errors used
throughout the application. No external dependencies.
"""

from .errors import (
    BookingSubmissionError,
    BookingWizardError,
    ConfigurationError,
    FareEstimationError,
    GeocodingError,
    GeolocationError,
    NetworkError,
    StaleResponseDiscard,
)
from .models import (
    BookingSuccess,
    Coordinates,
    DevicePosition,
    FareQuote,
    FlightInformation,
    JourneyMetrics,
    Location,
    PersonalDetails,
    PriceBreakdown,
    RequestState,
    SearchCategory,
    SearchResult,
    TrainInformation,
    TripParameters,
    UIFlags,
    ValidationState,
    VehicleCapacity,
    VehicleOption,
    VehiclePrice,
    VehicleType,
    WizardStep,
)

__all__ = [
    # Models
    "Coordinates",
    "Location",
    "TripParameters",
    "VehicleCapacity",
    "VehiclePrice",
    "PriceBreakdown",
    "VehicleOption",
    "VehicleType",
    "JourneyMetrics",
    "FareQuote",
    "WizardStep",
    "UIFlags",
    "BookingSuccess",
    "RequestState",
    "ValidationState",
    "SearchCategory",
    "SearchResult",
    "DevicePosition",
    "PersonalDetails",
    "FlightInformation",
    "TrainInformation",
    # Errors
    "BookingWizardError",
    "NetworkError",
    "FareEstimationError",
    "BookingSubmissionError",
    "GeolocationError",
    "GeocodingError",
    "StaleResponseDiscard",
    "ConfigurationError",
]
