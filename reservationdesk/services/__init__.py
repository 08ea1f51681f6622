"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .booking_service import (
    BookingService,
    BriefingGeneratorProtocol,
    DailySummary,
    FinancialSummary,
    ReservationStoreProtocol,
)

__all__ = [
    "BookingService",
    "BriefingGeneratorProtocol",
    "DailySummary",
    "FinancialSummary",
    "ReservationStoreProtocol",
]
