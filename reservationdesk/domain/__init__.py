"""
Domain layer - Pure business logic without external dependencies.
"""

from .models import (
    Floor,
    OpeningHours,
    Reservation,
    ReservationStatus,
    RestaurantSettings,
    Section,
    SpecialOpeningHour,
    Table,
    TimeRange,
    TimeSlot,
)
from .slot_calculator import SlotCalculator, compute_available_slots

__all__ = [
    "Floor",
    "OpeningHours",
    "Reservation",
    "ReservationStatus",
    "RestaurantSettings",
    "Section",
    "SpecialOpeningHour",
    "Table",
    "TimeRange",
    "TimeSlot",
    "SlotCalculator",
    "compute_available_slots",
]
