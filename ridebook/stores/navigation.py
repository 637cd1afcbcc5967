"""Wizard step state machine.

States are the WizardStep values, starting at LOCATION. Forward moves are
one step at a time and gated on the active step's guard; backward moves to
any earlier step are always allowed and clear the flags owned by the steps
being left. A successful submission cycles back to LOCATION.

| From     | To       | Guard                     | Side effect                |
|----------|----------|---------------------------|----------------------------|
| LOCATION | LUGGAGE  | pickup and dropoff set    | none                       |
| LUGGAGE  | VEHICLE  | passengers >= 1           | show_vehicle_options       |
| VEHICLE  | DETAILS  | vehicle selected          | show_details_form          |
| DETAILS  | LOCATION | submission succeeded      | booking_success, flags off |
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from ..domain.models import BookingSuccess, UIFlags, WizardStep
from .trip import TripParametersStore
from .validation import ValidationStore


@dataclass
class WizardNavigator:
    """Step state machine and per-step readiness gate.

    Attributes:
        trip: Source of the Location, Luggage and Vehicle guards
        validation: Source of the Details guard
    """

    trip: TripParametersStore
    validation: ValidationStore

    _step: WizardStep = field(default=WizardStep.LOCATION, repr=False)
    _flags: UIFlags = field(default_factory=UIFlags, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    @property
    def current_step(self) -> WizardStep:
        return self._step

    @property
    def flags(self) -> UIFlags:
        return self._flags

    def is_current_step_valid(self) -> bool:
        """Check the active step's guard only.

        This is the single source of truth for enabling "next".
        """
        params = self.trip.params
        if self._step is WizardStep.LOCATION:
            return params.has_route
        if self._step is WizardStep.LUGGAGE:
            return params.passengers >= 1
        if self._step is WizardStep.VEHICLE:
            return params.selected_vehicle is not None
        return self.validation.is_valid

    def next_step(self) -> Optional[WizardStep]:
        """Step after the current one, or None on DETAILS."""
        index = self._step.index + 1
        steps = list(WizardStep)
        return steps[index] if index < len(steps) else None

    def advance(self) -> bool:
        """Move one step forward if the current step's guard holds.

        DETAILS has no forward transition; leaving it happens through
        complete() after a successful submission.

        Returns:
            True if the step changed.
        """
        target = self.next_step()
        if target is None:
            return False

        if not self.is_current_step_valid():
            self._logger.info(
                "Forward transition blocked",
                extra={"step": self._step.value, "target": target.value},
            )
            return False

        self._enter(target)
        return True

    def _enter(self, target: WizardStep) -> None:
        self._logger.debug(
            "Step transition", extra={"from": self._step.value, "to": target.value}
        )
        self._step = target
        if target is WizardStep.VEHICLE:
            self._flags.show_vehicle_options = True
        elif target is WizardStep.DETAILS:
            self._flags.show_details_form = True

    def go_back(self, target: WizardStep) -> bool:
        """Return to an earlier step.

        Returns:
            True if the step changed. Moving forward or to the same step
            through here is refused.
        """
        if not target < self._step:
            return False

        self._logger.debug(
            "Step transition", extra={"from": self._step.value, "to": target.value}
        )
        if target < WizardStep.DETAILS:
            self._flags.show_details_form = False
        if target < WizardStep.VEHICLE:
            self._flags.show_vehicle_options = False
        self._step = target
        return True

    def complete(self, booking_id: str) -> None:
        """Finish the wizard after a successful submission."""
        self._step = WizardStep.LOCATION
        self._flags = UIFlags(
            booking_success=BookingSuccess(show=True, booking_id=booking_id)
        )

    def dismiss_success(self) -> None:
        """Close the booking confirmation."""
        self._flags.booking_success = BookingSuccess()

    def reset(self) -> None:
        self._step = WizardStep.LOCATION
        self._flags = UIFlags()
