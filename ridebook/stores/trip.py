"""Trip parameters store.

Holds the factual parameters of the trip being booked and exposes one
setter per field. Setters normalize instead of rejecting: numeric values
are clamped to the configured ranges, out-of-range stop indices are
ignored, unparseable date/time strings leave the field empty.

Every call to a fare-relevant setter bumps ``version``. The request
lifecycle store compares that counter with the version a quote was issued
for to tell whether the quote is stale.
"""

from __future__ import annotations

import copy
import datetime as dt
import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence, Union

from ..config import TripLimitsConfig, get_config
from ..domain.models import Location, TripParameters, VehicleOption

DateInput = Union[dt.date, str, None]
TimeInput = Union[dt.time, str, None]


def clamp(value: int, low: int, high: int) -> int:
    """Clamp value into [low, high]."""
    return max(low, min(int(value), high))


def parse_date(value: DateInput) -> Optional[dt.date]:
    """Normalize a date or ISO date string; None if unparseable."""
    if value is None:
        return None
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    try:
        return dt.date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def parse_time(value: TimeInput) -> Optional[dt.time]:
    """Normalize a time or "HH:MM" string.

    Hours are clamped to 0..23 and minutes to 0..59, so "25:75" becomes
    23:59. Returns None if the string has no numeric hour/minute parts.
    """
    if value is None or isinstance(value, dt.time):
        return value
    parts = value.strip().split(":")
    if len(parts) < 2:
        return None
    try:
        hours, minutes = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    return dt.time(clamp(hours, 0, 23), clamp(minutes, 0, 59))


@dataclass
class TripParametersStore:
    """Owner of the trip parameters.

    Attributes:
        limits: Clamping ranges for passengers and luggage
    """

    limits: TripLimitsConfig = field(default_factory=lambda: get_config().trip)

    _params: TripParameters = field(init=False, repr=False)
    _version: int = field(default=0, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        self._params = self._initial()

    def _initial(self) -> TripParameters:
        return TripParameters(
            passengers=self.limits.min_passengers,
            checked_luggage=self.limits.min_luggage,
            hand_luggage=self.limits.min_luggage,
        )

    def _changed(self) -> None:
        self._version += 1

    # Read access

    @property
    def params(self) -> TripParameters:
        """Live parameters. Read only; use snapshot() for anything sent away."""
        return self._params

    @property
    def version(self) -> int:
        return self._version

    @property
    def stops(self) -> Sequence[Location]:
        return tuple(self._params.stops)

    def snapshot(self) -> TripParameters:
        """Deep copy of the current parameters."""
        return copy.deepcopy(self._params)

    # Locations

    def set_pickup_location(self, location: Optional[Location]) -> None:
        self._params.pickup = location
        self._changed()

    def set_dropoff_location(self, location: Optional[Location]) -> None:
        self._params.dropoff = location
        self._changed()

    def add_stop(self, location: Location) -> None:
        self._params.stops.append(location)
        self._changed()

    def remove_stop(self, index: int) -> None:
        """Remove the stop at index; later stops shift down by one.

        Out-of-range indices are ignored.
        """
        if not 0 <= index < len(self._params.stops):
            self._logger.debug(
                "Ignoring removal of missing stop",
                extra={"index": index, "stops": len(self._params.stops)},
            )
            return
        del self._params.stops[index]
        self._changed()

    def update_stop(self, index: int, location: Location) -> None:
        """Replace the stop at index, or append it if index is out of range."""
        if 0 <= index < len(self._params.stops):
            self._params.stops[index] = location
        else:
            self._params.stops.append(location)
        self._changed()

    # Schedule

    def set_date(self, value: DateInput) -> None:
        parsed = parse_date(value)
        if value is not None and parsed is None:
            self._logger.warning("Unparseable pickup date", extra={"value": value})
        self._params.date = parsed
        self._changed()

    def set_time(self, value: TimeInput) -> None:
        parsed = parse_time(value)
        if value is not None and parsed is None:
            self._logger.warning("Unparseable pickup time", extra={"value": value})
        self._params.time = parsed
        self._changed()

    # Party

    def set_passengers(self, count: int) -> None:
        self._params.passengers = clamp(
            count, self.limits.min_passengers, self.limits.max_passengers
        )
        self._changed()

    def set_checked_luggage(self, count: int) -> None:
        self._params.checked_luggage = clamp(
            count, self.limits.min_luggage, self.limits.max_luggage
        )
        self._changed()

    def set_hand_luggage(self, count: int) -> None:
        self._params.hand_luggage = clamp(
            count, self.limits.min_luggage, self.limits.max_luggage
        )
        self._changed()

    # Vehicle

    def set_selected_vehicle(self, vehicle: Optional[VehicleOption]) -> None:
        """Record the chosen vehicle. Not fare-relevant, version unchanged."""
        self._params.selected_vehicle = vehicle

    # Lifecycle

    def reset(self) -> None:
        """Back to the documented initial values."""
        self._params = self._initial()
        self._changed()

    def restore(self, params: TripParameters, version: int) -> None:
        """Load rehydrated parameters, re-applying the clamping ranges."""
        restored = copy.deepcopy(params)
        restored.passengers = clamp(
            restored.passengers,
            self.limits.min_passengers,
            self.limits.max_passengers,
        )
        restored.checked_luggage = clamp(
            restored.checked_luggage, self.limits.min_luggage, self.limits.max_luggage
        )
        restored.hand_luggage = clamp(
            restored.hand_luggage, self.limits.min_luggage, self.limits.max_luggage
        )
        self._params = restored
        self._version = max(version, self._version)
