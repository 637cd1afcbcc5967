"""Top-level package for the ridebook booking wizard.

This package holds the booking-wizard orchestration and fare-estimation
pipeline: trip parameters, wizard navigation, request lifecycle and field
validation, plus the address-search subsystem feeding location fields.

Presentation, authentication and server-side pricing live elsewhere and are
reached through the ports in ``ridebook.ports``.
"""

__version__ = "0.1.0"
