"""State domains of the booking wizard.

Each store owns one slice of state and mutates it synchronously:
- TripParametersStore: locations, schedule, party, chosen vehicle
- WizardNavigator: active step and visibility flags
- RequestLifecycleStore: fare and submission operations, last good quote
- ValidationStore: field errors and aggregate validity
"""

from .navigation import WizardNavigator
from .requests import RequestLifecycleStore
from .tokens import TokenGuard
from .trip import TripParametersStore
from .validation import ValidationStore

__all__ = [
    "TripParametersStore",
    "WizardNavigator",
    "RequestLifecycleStore",
    "ValidationStore",
    "TokenGuard",
]
