"""Session persistence for the booking wizard.

Saves the trip parameters (with their version) and the last fare quote so
an interrupted booking can be resumed. Transient request fields (in-flight
flags, errors) and validation state are never written.

Serialization goes through pydantic, which validates the domain
dataclasses on the way back in. A blob that no longer validates is
dropped instead of breaking the session.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PayloadError

from ..config import PersistenceConfig, get_config
from ..domain.models import FareQuote, TripParameters
from ..ports.storage import StateStoragePort
from ..stores.requests import RequestLifecycleStore
from ..stores.trip import TripParametersStore


class PersistedTrip(BaseModel):
    version: int
    trip: TripParameters


_QUOTE = TypeAdapter(FareQuote)


@dataclass
class BookingStatePersistence:
    """Saves and restores the resumable part of the wizard state.

    Attributes:
        storage: Where blobs are kept
        config: Storage keys
    """

    storage: StateStoragePort
    config: PersistenceConfig = field(default_factory=lambda: get_config().persistence)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def save(self, trip: TripParametersStore, requests: RequestLifecycleStore) -> None:
        blob = PersistedTrip(version=trip.version, trip=trip.snapshot())
        self.storage.save(self.config.trip_key, blob.model_dump_json())

        quote = requests.fare_quote
        if quote is None:
            self.storage.remove(self.config.fare_key)
        else:
            self.storage.save(self.config.fare_key, _QUOTE.dump_json(quote).decode())

    def restore(
        self, trip: TripParametersStore, requests: RequestLifecycleStore
    ) -> bool:
        """Load saved state into the stores.

        Returns:
            True if trip parameters were restored.
        """
        saved = self._load_trip()
        if saved is None:
            return False
        trip.restore(saved.trip, saved.version)

        quote = self._load_quote()
        if quote is not None:
            requests.restore_quote(quote)

        self._logger.info(
            "Booking state restored",
            extra={"version": saved.version, "has_quote": quote is not None},
        )
        return True

    def _load_trip(self) -> Optional[PersistedTrip]:
        raw = self.storage.load(self.config.trip_key)
        if raw is None:
            return None
        try:
            return PersistedTrip.model_validate_json(raw)
        except PayloadError as e:
            self._logger.warning(
                "Discarding unreadable saved trip", extra={"errors": e.error_count()}
            )
            self.storage.remove(self.config.trip_key)
            return None

    def _load_quote(self) -> Optional[FareQuote]:
        raw = self.storage.load(self.config.fare_key)
        if raw is None:
            return None
        try:
            return _QUOTE.validate_json(raw)
        except PayloadError as e:
            self._logger.warning(
                "Discarding unreadable saved quote", extra={"errors": e.error_count()}
            )
            self.storage.remove(self.config.fare_key)
            return None

    def clear(self) -> None:
        self.storage.remove(self.config.trip_key)
        self.storage.remove(self.config.fare_key)
