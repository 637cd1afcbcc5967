"""Domain models for the booking wizard.

Values (locations, vehicle options, quotes, search results) are frozen
dataclasses with slots. The state containers owned by the stores
(TripParameters, UIFlags, RequestState, ValidationState) are mutable
dataclasses that only their store writes to.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class WizardStep(Enum):
    """Stages of the booking flow, in forward order."""

    LOCATION = "location"
    LUGGAGE = "luggage"
    VEHICLE = "vehicle"
    DETAILS = "details"

    @property
    def index(self) -> int:
        return _STEP_ORDER.index(self)

    def __lt__(self, other: WizardStep) -> bool:
        return self.index < other.index


_STEP_ORDER = list(WizardStep)


class SearchCategory(Enum):
    """Kind of an address suggestion."""

    CURRENT_LOCATION = "current-location"
    RECENT = "recent"
    POPULAR = "popular"
    ADDRESS = "address"
    CATEGORY_HEADER = "category-header"
    AIRPORT = "airport"
    TRAIN_STATION = "train-station"


class VehicleType(Enum):
    """Vehicle classes offered by the pricing backend."""

    STANDARD = "standard"
    EXECUTIVE = "executive"
    MPV = "mpv"
    ESTATE = "estate"
    VIP = "vip"


@dataclass(frozen=True, slots=True)
class Coordinates:
    """GPS coordinates."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        """Validate coordinate ranges."""
        if not -90 <= self.latitude <= 90:
            raise ValueError(
                f"Latitude must be between -90 and 90, got {self.latitude}"
            )
        if not -180 <= self.longitude <= 180:
            raise ValueError(
                f"Longitude must be between -180 and 180, got {self.longitude}"
            )


@dataclass(frozen=True, slots=True)
class Location:
    """A confirmed place on the trip (pickup, dropoff or stop).

    Attributes:
        latitude: Latitude in degrees
        longitude: Longitude in degrees
        address: Human-readable address
        id: Optional identifier from the search provider
    """

    latitude: float
    longitude: float
    address: str = ""
    id: Optional[str] = None

    def __post_init__(self) -> None:
        Coordinates(self.latitude, self.longitude)

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(self.latitude, self.longitude)


@dataclass(frozen=True, slots=True)
class VehicleCapacity:
    passengers: int
    luggage: int


@dataclass(frozen=True, slots=True)
class PriceBreakdown:
    """Itemized price as returned by the pricing backend."""

    base_fare: float = 0.0
    distance_charge: float = 0.0
    additional_stop_fee: float = 0.0
    time_multiplier: float = 1.0
    special_location_fees: float = 0.0
    waiting_charge: float = 0.0


@dataclass(frozen=True, slots=True)
class VehiclePrice:
    amount: float
    currency: str = "GBP"
    breakdown: Optional[PriceBreakdown] = None


@dataclass(frozen=True, slots=True)
class VehicleOption:
    """A priced vehicle class offered for a trip.

    Attributes:
        id: Vehicle option identifier
        name: Display name
        capacity: Passenger and luggage capacity
        price: Quoted price
        description: Short marketing description
        eta: Minutes until a vehicle can arrive, if known
        features: Feature labels
        image_url: Picture of the vehicle class
        vehicle_type: Vehicle class, if the backend sent one
    """

    id: str
    name: str
    capacity: VehicleCapacity
    price: VehiclePrice
    description: str = ""
    eta: Optional[int] = None
    features: tuple[str, ...] = field(default_factory=tuple)
    image_url: Optional[str] = None
    vehicle_type: Optional[VehicleType] = None


@dataclass(frozen=True, slots=True)
class JourneyMetrics:
    distance_miles: float
    duration_minutes: float


@dataclass(frozen=True, slots=True)
class FareQuote:
    """Priced vehicle options for one trip-parameter snapshot.

    Attributes:
        vehicle_options: Vehicles offered for the trip
        journey: Distance and duration of the route
        notifications: Messages from the backend (surcharges, notices)
        version: TripParameters version the quote was requested for
    """

    vehicle_options: tuple[VehicleOption, ...]
    journey: JourneyMetrics
    notifications: tuple[str, ...] = field(default_factory=tuple)
    version: int = 0

    def find_vehicle(self, vehicle_id: str) -> Optional[VehicleOption]:
        """Return the option with the given id, if offered."""
        for option in self.vehicle_options:
            if option.id == vehicle_id:
                return option
        return None


@dataclass
class TripParameters:
    """Factual parameters of the trip being booked.

    Only TripParametersStore mutates an instance; everyone else works on
    snapshots.
    """

    pickup: Optional[Location] = None
    dropoff: Optional[Location] = None
    stops: list[Location] = field(default_factory=list)
    date: Optional[dt.date] = None
    time: Optional[dt.time] = None
    passengers: int = 1
    checked_luggage: int = 0
    hand_luggage: int = 0
    selected_vehicle: Optional[VehicleOption] = None

    @property
    def has_route(self) -> bool:
        """Check if both pickup and dropoff are set."""
        return self.pickup is not None and self.dropoff is not None

    @property
    def has_schedule(self) -> bool:
        """Check if both date and time are set."""
        return self.date is not None and self.time is not None


@dataclass
class BookingSuccess:
    show: bool = False
    booking_id: str = ""


@dataclass
class UIFlags:
    """Visibility flags owned by the wizard navigator."""

    show_vehicle_options: bool = False
    show_details_form: bool = False
    booking_success: BookingSuccess = field(default_factory=BookingSuccess)


@dataclass
class RequestState:
    """Lifecycle of fare and submission operations.

    The two in-flight flags are independent of each other.
    """

    is_fetching_fare: bool = False
    is_creating_booking: bool = False
    fetch_error: Optional[str] = None
    booking_error: Optional[str] = None
    fare_quote: Optional[FareQuote] = None
    last_booking_id: Optional[str] = None


@dataclass
class ValidationState:
    """Field errors; keys are present only for failing fields."""

    errors: dict[str, str] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclass(frozen=True, slots=True)
class SearchResult:
    """One address suggestion.

    Attributes:
        id: Provider identifier
        label: Main text shown to the user
        coordinates: Position, if known (absent for headers and the
            current-location placeholder)
        category: Kind of suggestion
        secondary_label: Extra context (city, terminal, ...)
    """

    id: str
    label: str
    coordinates: Optional[Coordinates]
    category: SearchCategory
    secondary_label: str = ""

    @property
    def is_selectable(self) -> bool:
        return self.category is not SearchCategory.CATEGORY_HEADER

    def to_location(self) -> Optional[Location]:
        """Convert to a trip Location when coordinates are known."""
        if self.coordinates is None:
            return None
        return Location(
            latitude=self.coordinates.latitude,
            longitude=self.coordinates.longitude,
            address=self.label,
            id=self.id,
        )


@dataclass(frozen=True, slots=True)
class DevicePosition:
    latitude: float
    longitude: float
    accuracy: Optional[float] = None


@dataclass(frozen=True, slots=True)
class FlightInformation:
    airline: str = ""
    flight_number: str = ""
    scheduled_departure: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.airline and self.flight_number and self.scheduled_departure)


@dataclass(frozen=True, slots=True)
class TrainInformation:
    train_operator: str = ""
    train_number: str = ""
    scheduled_departure: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(
            self.train_operator and self.train_number and self.scheduled_departure
        )


@dataclass(frozen=True, slots=True)
class PersonalDetails:
    """Contact details collected on the Details step."""

    full_name: str
    email: str
    phone: str
    special_requests: str = ""
    flight: Optional[FlightInformation] = None
    train: Optional[TrainInformation] = None

    def as_form_values(self) -> dict[str, str]:
        """Field values keyed by validation field name."""
        return {
            "full_name": self.full_name,
            "email": self.email,
            "phone": self.phone,
            "special_requests": self.special_requests,
        }
