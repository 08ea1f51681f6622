"""
Core business logic for calculating available reservation slots.

This is the heart of the application - pure domain logic without any
external dependencies (no API calls, no database, no I/O).
"""

import logging
from datetime import date as _date
from typing import List, Optional, Sequence

from pendulum import DateTime

from .models import OpeningHours, Reservation, RestaurantSettings, SpecialOpeningHour, Table, TimeRange, TimeSlot
from .time_utils import anchor_of, at_time, date_string, day_of_week, hhmm

logger = logging.getLogger(__name__)

SLOT_INTERVAL_MINUTES = 15


def resolve_opening_hours(
    day: _date,
    settings: RestaurantSettings,
    special_hours: Sequence[SpecialOpeningHour],
) -> Optional[OpeningHours]:
    """
    Effective opening hours for a calendar day, or None when closed.

    A special-hours row for the exact date wins over the weekday default,
    whether it opens or closes the restaurant.
    """
    key = date_string(day)
    for special in special_hours:
        if special.date == key:
            if not special.is_open or not special.open_time or not special.close_time:
                return None
            return OpeningHours(open=special.open_time, close=special.close_time)

    hours = settings.opening_hours.get(day_of_week(day))
    if not hours or not hours.open or not hours.close:
        return None
    return hours


def eligible_tables(tables: Sequence[Table], party_size: int) -> List[Table]:
    """Tables that are ready and seat at least ``party_size``, in input order."""
    return [t for t in tables if t.capacity >= party_size and t.is_ready]


def _window(begin: DateTime, turnover_minutes: int) -> TimeRange:
    return TimeRange(start=begin, end=begin.add(minutes=turnover_minutes))


def occupancy_window(anchor: DateTime, start: str, turnover_minutes: int) -> TimeRange:
    """The [start, start + turnover) window of a booking on the anchor's day."""
    return _window(at_time(anchor, start), turnover_minutes)


def windows_overlap(start_a: DateTime, start_b: DateTime, turnover_minutes: int) -> bool:
    """Whether two bookings of equal turnover starting at the given times collide."""
    return _window(start_a, turnover_minutes).overlaps(_window(start_b, turnover_minutes))


def is_table_free(
    table: Table,
    slot_start: DateTime,
    reservations: Sequence[Reservation],
    anchor: DateTime,
    turnover_minutes: int,
) -> bool:
    """True if no reservation on ``table`` collides with a booking at ``slot_start``."""
    candidate = _window(slot_start, turnover_minutes)
    for reservation in reservations:
        if reservation.table_id != table.id:
            continue
        if candidate.overlaps(occupancy_window(anchor, reservation.time, turnover_minutes)):
            return False
    return True


class SlotCalculator:
    """
    Calculates bookable time slots for a party on one calendar day.

    Algorithm:
    1. Resolve opening hours (date override first, then weekday default)
    2. Keep tables that are ready and large enough for the party
    3. Walk the opening hours in 15-minute steps; the closing time itself
       is never a start time
    4. For each step, keep the eligible tables with no overlapping booking
    5. Emit the steps that have at least one free table, in order
    """

    def __init__(
        self,
        settings: RestaurantSettings,
        special_hours: Sequence[SpecialOpeningHour] = (),
    ):
        self.settings = settings
        self.special_hours = list(special_hours)

    def find_available_slots(
        self,
        day: _date,
        party_size: int,
        reservations: Sequence[Reservation],
        tables: Sequence[Table],
    ) -> List[TimeSlot]:
        """
        Find all bookable slots for the given day.

        Args:
            day: Calendar day; any time-of-day component is ignored
            party_size: Number of guests
            reservations: Existing bookings, already filtered to ``day``
            tables: Full table inventory

        Returns:
            List of TimeSlot objects in chronological order. Empty when
            closed, when no table fits, or when fully booked.
        """
        hours = resolve_opening_hours(day, self.settings, self.special_hours)
        if hours is None:
            logger.debug("Closed on %s", date_string(day))
            return []

        candidates = eligible_tables(tables, party_size)
        if not candidates:
            return []

        anchor = anchor_of(day)
        opening = at_time(anchor, hours.open)
        closing = at_time(anchor, hours.close)
        turnover = self.settings.turnover_minutes

        slots: List[TimeSlot] = []
        current = opening

        while current < closing:
            free = [
                table for table in candidates
                if is_table_free(table, current, reservations, anchor, turnover)
            ]
            if free:
                slots.append(TimeSlot(time=hhmm(current), available_tables=free))

            current = current.add(minutes=SLOT_INTERVAL_MINUTES)

        logger.debug(
            "%d slot(s) for party of %d on %s", len(slots), party_size, date_string(day)
        )
        return slots


def compute_available_slots(
    day: _date,
    party_size: int,
    settings: RestaurantSettings,
    reservations: Sequence[Reservation],
    tables: Sequence[Table],
    special_hours: Sequence[SpecialOpeningHour],
) -> List[TimeSlot]:
    """Stateless entry point; see ``SlotCalculator.find_available_slots``."""
    calculator = SlotCalculator(settings=settings, special_hours=special_hours)
    return calculator.find_available_slots(day, party_size, reservations, tables)
