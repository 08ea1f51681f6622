"""
Application services for taking and reporting on reservations.

The service loads a snapshot of settings, layout and bookings from a store
adapter and delegates the availability calculation to the domain-level
``SlotCalculator``. Store and briefing generator are reached through simple
protocols so tests can substitute them.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import date as _date
from typing import Any, List, Optional, Protocol, Sequence, Tuple

from ..domain.exceptions import BriefingError, ReservationValidationError
from ..domain.models import (
    Reservation,
    ReservationStatus,
    RestaurantSettings,
    SpecialOpeningHour,
    Table,
    TimeSlot,
)
from ..domain.slot_calculator import SlotCalculator
from ..domain.time_utils import date_string, parse_hhmm

logger = logging.getLogger(__name__)

BRIEFING_NOT_CONFIGURED = "Briefing generator is not configured. Briefing cannot be generated."

TIME_PATTERN = re.compile(r"([01]\d|2[0-3]):[0-5]\d")


class ReservationStoreProtocol(Protocol):
    """Protocol describing the store behaviour needed by the service."""

    def get_settings(self) -> RestaurantSettings:
        ...

    def get_special_opening_hours(self) -> List[SpecialOpeningHour]:
        ...

    def get_tables(self) -> List[Table]:
        ...

    def get_reservations(self, date: Optional[str] = None, status: Optional[str] = None) -> List[Reservation]:
        ...

    def get_reservation(self, reservation_id: str) -> Reservation:
        ...

    def create_reservation(self, **fields: Any) -> Reservation:
        ...

    def update_reservation(self, reservation_id: str, **changes: Any) -> Reservation:
        ...

    def get_financial_report(self, start_date: str, end_date: str) -> List[Reservation]:
        ...


class BriefingGeneratorProtocol(Protocol):
    """Turns a day's reservations into a staff briefing text."""

    def generate(self, reservations: Sequence[Reservation]) -> str:
        ...


@dataclass
class DailySummary:
    """Dashboard figures for one day."""
    date: str
    total_reservations: int
    confirmed_reservations: int
    confirmed_covers: int
    average_covers: float
    cancellations: int
    covers_by_hour: List[Tuple[str, int]] = field(default_factory=list)


@dataclass
class FinancialSummary:
    start_date: str
    end_date: str
    total_revenue: float
    total_covers: int
    reservation_count: int
    average_spend_per_cover: float
    reservations: List[Reservation] = field(default_factory=list)


class BookingService:
    """
    Orchestrates store reads, slot calculation and validated writes.
    """

    def __init__(
        self,
        store: ReservationStoreProtocol,
        briefing_generator: Optional[BriefingGeneratorProtocol] = None,
    ) -> None:
        self._store = store
        self._briefing_generator = briefing_generator

    # --- Availability ---

    def find_slots(
        self,
        day: _date,
        party_size: int,
        *,
        exclude_reservation_id: Optional[str] = None,
    ) -> List[TimeSlot]:
        """
        Load a fresh snapshot for ``day`` and compute bookable slots.

        Cancelled and no-show bookings do not block tables. When editing,
        pass the reservation's id so its own booking does not block it.
        """
        if party_size <= 0:
            raise ReservationValidationError(f"Party size must be at least 1, got {party_size}.")

        reservations = [
            r for r in self._store.get_reservations(date=date_string(day))
            if r.is_active and r.id != exclude_reservation_id
        ]
        logger.debug("Computing slots for %s against %d booking(s)", date_string(day), len(reservations))

        calculator = SlotCalculator(
            settings=self._store.get_settings(),
            special_hours=self._store.get_special_opening_hours(),
        )
        return calculator.find_available_slots(
            day, party_size, reservations, self._store.get_tables()
        )

    # --- Writes ---

    def create_reservation(
        self,
        *,
        customer_name: str,
        contact: str,
        day: _date,
        time: str,
        covers: int,
        table_id: str,
        status: ReservationStatus = ReservationStatus.CONFIRMED,
        notes: str = "",
    ) -> Reservation:
        """
        Validate and store a new reservation.

        Raises:
            ReservationValidationError: If the request is incomplete or the
                party does not fit the table
            BookingConflictError: If the store finds the table taken
        """
        table = self._validate(customer_name, contact, time, covers, table_id)
        return self._store.create_reservation(
            customer_name=customer_name.strip(),
            contact=contact.strip(),
            date=date_string(day),
            time=time,
            covers=covers,
            table_id=table.id,
            section_id=table.section_id,
            status=status,
            notes=notes,
        )

    def update_reservation(
        self,
        reservation_id: str,
        *,
        customer_name: str,
        contact: str,
        day: _date,
        time: str,
        covers: int,
        table_id: str,
        status: ReservationStatus,
        notes: str = "",
    ) -> Reservation:
        table = self._validate(customer_name, contact, time, covers, table_id)
        return self._store.update_reservation(
            reservation_id,
            customer_name=customer_name.strip(),
            contact=contact.strip(),
            date=date_string(day),
            time=time,
            covers=covers,
            table_id=table.id,
            section_id=table.section_id,
            status=status,
            notes=notes,
        )

    def cancel_reservation(self, reservation_id: str) -> Reservation:
        return self._store.update_reservation(reservation_id, status=ReservationStatus.CANCELLED)

    def mark_paid(self, reservation_id: str, check_amount: float) -> Reservation:
        if check_amount < 0:
            raise ReservationValidationError("Check amount cannot be negative.")
        return self._store.update_reservation(
            reservation_id, status=ReservationStatus.PAID, check_amount=check_amount
        )

    def _validate(self, customer_name: str, contact: str, time: str, covers: int, table_id: str) -> Table:
        errors: List[str] = []
        if not customer_name or not customer_name.strip():
            errors.append("Customer name is required.")
        if not contact or not contact.strip():
            errors.append("Contact information is required.")
        if not TIME_PATTERN.fullmatch(time or ""):
            errors.append(f"Time must be HH:MM, got '{time}'.")
        if errors:
            raise ReservationValidationError(" ".join(errors))

        if not table_id:
            raise ReservationValidationError("A table must be selected.")

        table = next((t for t in self._store.get_tables() if t.id == table_id), None)
        if table is None:
            raise ReservationValidationError(f"Could not find table {table_id}.")

        if covers <= 0 or covers > table.capacity:
            raise ReservationValidationError(
                f"Party size ({covers}) exceeds this table's capacity of {table.capacity}."
                if covers > 0
                else "Party size must be at least 1."
            )
        return table

    # --- Reporting ---

    def daily_summary(self, day: _date) -> DailySummary:
        """Figures shown on the dashboard for ``day``."""
        reservations = self._store.get_reservations(date=date_string(day))
        confirmed = [r for r in reservations if r.status == ReservationStatus.CONFIRMED]
        confirmed_covers = sum(r.covers for r in confirmed)

        by_hour: dict = {}
        for reservation in reservations:
            hour, _ = parse_hhmm(reservation.time)
            by_hour[hour] = by_hour.get(hour, 0) + reservation.covers

        return DailySummary(
            date=date_string(day),
            total_reservations=len(reservations),
            confirmed_reservations=len(confirmed),
            confirmed_covers=confirmed_covers,
            average_covers=round(confirmed_covers / len(confirmed), 1) if confirmed else 0.0,
            cancellations=sum(1 for r in reservations if r.status == ReservationStatus.CANCELLED),
            covers_by_hour=[(f"{hour}:00", covers) for hour, covers in sorted(by_hour.items())],
        )

    def financial_summary(self, start: _date, end: _date) -> FinancialSummary:
        report = self._store.get_financial_report(date_string(start), date_string(end))
        revenue = sum(r.check_amount or 0.0 for r in report)
        covers = sum(r.covers for r in report)
        return FinancialSummary(
            start_date=date_string(start),
            end_date=date_string(end),
            total_revenue=revenue,
            total_covers=covers,
            reservation_count=len(report),
            average_spend_per_cover=revenue / covers if covers else 0.0,
            reservations=report,
        )

    def generate_briefing(self, day: _date) -> str:
        """
        Staff briefing for ``day`` from the configured generator.

        Raises:
            BriefingError: If the generator fails
        """
        if self._briefing_generator is None:
            return BRIEFING_NOT_CONFIGURED

        reservations = self._store.get_reservations(date=date_string(day))
        try:
            return self._briefing_generator.generate(reservations)
        except Exception as exc:
            logger.error("Briefing generation failed: %s", exc)
            raise BriefingError(f"Failed to generate briefing: {exc}") from exc
