"""Services layer - Orchestration of the booking wizard.

Services compose the stores and ports into user-facing operations:
- BookingOrchestrator: the wizard facade
- AddressSearchEngine: debounced suggestions for one location field
- BookingStatePersistence: save and resume an unfinished booking
"""

from .address_search import AddressSearchEngine, RecentSelections
from .orchestrator import BookingOrchestrator
from .persistence import BookingStatePersistence

__all__ = [
    "BookingOrchestrator",
    "AddressSearchEngine",
    "RecentSelections",
    "BookingStatePersistence",
]
