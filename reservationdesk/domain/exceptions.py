"""
Domain-specific exception hierarchy for the reservation desk application.
"""


class ReservationDeskError(Exception):
    """Base class for all application-level errors."""


class StoreError(ReservationDeskError):
    """Raised when the reservation store rejects or fails an operation."""


class NotFoundError(StoreError):
    """Raised when a record with the requested id does not exist."""


class BookingConflictError(StoreError):
    """Raised when a write would double-book a table."""


class ReservationValidationError(ReservationDeskError):
    """Raised when a reservation request fails validation before it is written."""


class BriefingError(ReservationDeskError):
    """Raised when the staff briefing generator fails."""
