"""
Domain models for restaurant settings, layout, reservations and time slots.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from pendulum import DateTime

from .time_utils import format_time


class ReservationStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"
    PAID = "PAID"


# Statuses that no longer hold a table.
INACTIVE_STATUSES = frozenset({ReservationStatus.CANCELLED, ReservationStatus.NO_SHOW})


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable time range with start and end datetime.

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def overlaps(self, other: "TimeRange") -> bool:
        """
        Check if this range overlaps with another.

        Ranges are half-open, so one ending exactly when the other
        starts does not overlap.
        """
        return self.start < other.end and self.end > other.start

    def __str__(self) -> str:
        return f"{self.start.format('YYYY-MM-DD HH:mm')} - {self.end.format('HH:mm')}"


@dataclass(frozen=True)
class OpeningHours:
    """Opening and closing time for one day, both "HH:MM"."""
    open: Optional[str] = None
    close: Optional[str] = None


@dataclass
class RestaurantSettings:
    """
    Restaurant-wide settings.

    ``opening_hours`` maps lowercase English weekday names ("monday") to the
    default hours for that day. A day without an entry is closed.
    """
    turnover_minutes: int
    opening_hours: Dict[str, Optional[OpeningHours]] = field(default_factory=dict)
    timezone: str = "UTC"
    overall_capacity: Optional[int] = None
    no_show_grace_minutes: Optional[int] = None

    def __post_init__(self):
        if self.turnover_minutes <= 0:
            raise ValueError(f"turnover_minutes must be greater than zero, got {self.turnover_minutes}")


@dataclass(frozen=True)
class SpecialOpeningHour:
    """Override of the weekly hours for one calendar date ("YYYY-MM-DD")."""
    date: str
    is_open: bool
    open_time: Optional[str] = None
    close_time: Optional[str] = None


@dataclass(frozen=True)
class Floor:
    id: str
    name: str


@dataclass(frozen=True)
class Section:
    id: str
    name: str
    floor_id: str


@dataclass(frozen=True)
class Table:
    """
    A bookable table. Tables that are not ready (cleaning, maintenance)
    are never offered.
    """
    id: str
    name: str
    capacity: int
    section_id: str
    is_ready: bool = True


@dataclass(frozen=True)
class Reservation:
    id: str
    customer_name: str
    contact: str
    date: str  # "YYYY-MM-DD"
    time: str  # "HH:MM"
    covers: int
    table_id: Optional[str]
    section_id: str
    status: ReservationStatus = ReservationStatus.CONFIRMED
    notes: str = ""
    created_at: str = ""  # ISO timestamp
    check_amount: Optional[float] = None

    @property
    def is_active(self) -> bool:
        """Whether the reservation still occupies its table."""
        return self.status not in INACTIVE_STATUSES


@dataclass
class TimeSlot:
    """
    A bookable start time and the tables free for it.
    """
    time: str  # "HH:MM"
    available_tables: List[Table]

    def format_display(self) -> str:
        """
        Format the slot for display.
        Format: 7:00 PM (3 tables)
        """
        count = len(self.available_tables)
        noun = "table" if count == 1 else "tables"
        return f"{format_time(self.time)} ({count} {noun})"
