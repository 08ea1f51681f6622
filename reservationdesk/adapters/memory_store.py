"""
In-memory reservation store, optionally seeded from a JSON data file.
"""

import copy
import json
import logging
import uuid
from dataclasses import asdict, replace
from datetime import date as _date
from pathlib import Path
from typing import Any, Dict, List, Optional

import pendulum

from ..domain.exceptions import BookingConflictError, NotFoundError, StoreError
from ..domain.models import (
    Floor,
    OpeningHours,
    Reservation,
    ReservationStatus,
    RestaurantSettings,
    Section,
    SpecialOpeningHour,
    Table,
)
from ..domain.slot_calculator import windows_overlap
from ..domain.time_utils import anchor_of, at_time, date_string

logger = logging.getLogger(__name__)

SAMPLE_DATA_FILE = Path(__file__).parent / "sample_data.json"


class InMemoryReservationStore:
    """
    Reservation store that keeps every record in instance attributes.

    Each store owns its data; nothing is shared between instances. Reads
    return copies, so callers cannot change stored state without going
    through an update method.

    The store is the write-time authority against double booking: creating
    or moving a reservation onto a table that already has an overlapping
    active booking that day raises ``BookingConflictError``.
    """

    def __init__(
        self,
        settings: RestaurantSettings,
        *,
        special_opening_hours: Optional[List[SpecialOpeningHour]] = None,
        floors: Optional[List[Floor]] = None,
        sections: Optional[List[Section]] = None,
        tables: Optional[List[Table]] = None,
        reservations: Optional[List[Reservation]] = None,
    ):
        self._settings = copy.deepcopy(settings)
        self._special_hours: Dict[str, SpecialOpeningHour] = {
            hour.date: hour for hour in special_opening_hours or []
        }
        self._floors: Dict[str, Floor] = {f.id: f for f in floors or []}
        self._sections: Dict[str, Section] = {s.id: s for s in sections or []}
        self._tables: Dict[str, Table] = {t.id: t for t in tables or []}
        self._reservations: Dict[str, Reservation] = {r.id: r for r in reservations or []}

    # --- Loading ---

    @classmethod
    def from_json(cls, data_file: Path, today: Optional[_date] = None) -> "InMemoryReservationStore":
        """
        Build a store from a JSON data file.

        Reservations without a ``date`` are placed on ``today`` (defaults to
        the current date), which keeps demo data useful on any day.

        Raises:
            FileNotFoundError: If the data file doesn't exist
            StoreError: If the file content is not valid store data
        """
        if not data_file.exists():
            raise FileNotFoundError(f"Data file not found: {data_file}")

        try:
            with open(data_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            raise StoreError(f"Invalid JSON in {data_file}: {exc}") from exc

        if not isinstance(data, dict) or "settings" not in data:
            raise StoreError(f"{data_file} must contain a mapping with a 'settings' entry.")

        default_date = date_string(today or pendulum.today().date())

        try:
            store = cls(
                settings=_settings_from_dict(data["settings"]),
                special_opening_hours=[SpecialOpeningHour(**h) for h in data.get("special_opening_hours", [])],
                floors=[Floor(**f) for f in data.get("floors", [])],
                sections=[Section(**s) for s in data.get("sections", [])],
                tables=[Table(**t) for t in data.get("tables", [])],
                reservations=[
                    _reservation_from_dict(r, default_date) for r in data.get("reservations", [])
                ],
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise StoreError(f"Invalid store data in {data_file}: {exc}") from exc

        logger.info(
            "Loaded %d table(s) and %d reservation(s) from %s",
            len(store._tables), len(store._reservations), data_file,
        )
        return store

    def save_json(self, data_file: Path) -> None:
        """Write the current state to ``data_file`` in the format ``from_json`` reads."""
        data = {
            "settings": asdict(self._settings),
            "special_opening_hours": [asdict(h) for h in self.get_special_opening_hours()],
            "floors": [asdict(f) for f in self._floors.values()],
            "sections": [asdict(s) for s in self._sections.values()],
            "tables": [asdict(t) for t in self._tables.values()],
            "reservations": [
                {**asdict(r), "status": r.status.value} for r in self._reservations.values()
            ],
        }
        with open(data_file, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        logger.info("Saved store to %s", data_file)

    # --- Settings ---

    def get_settings(self) -> RestaurantSettings:
        return copy.deepcopy(self._settings)

    def update_settings(self, **changes: Any) -> RestaurantSettings:
        self._settings = replace(self._settings, **changes)
        logger.info("Updated settings: %s", ", ".join(sorted(changes)))
        return self.get_settings()

    # --- Special opening hours ---

    def get_special_opening_hours(self) -> List[SpecialOpeningHour]:
        return sorted(self._special_hours.values(), key=lambda h: h.date)

    def get_special_opening_hour(self, day: str) -> Optional[SpecialOpeningHour]:
        return self._special_hours.get(day)

    def upsert_special_opening_hour(self, hour: SpecialOpeningHour) -> SpecialOpeningHour:
        """Insert or replace the override for ``hour.date``; at most one per date."""
        self._special_hours[hour.date] = hour
        logger.info("Saved special opening hours for %s (open=%s)", hour.date, hour.is_open)
        return hour

    def delete_special_opening_hour(self, day: str) -> str:
        if day not in self._special_hours:
            raise NotFoundError(f"No special opening hours for {day}")
        del self._special_hours[day]
        logger.info("Deleted special opening hours for %s", day)
        return day

    # --- Layout ---

    def get_floors(self) -> List[Floor]:
        return list(self._floors.values())

    def create_floor(self, name: str) -> Floor:
        floor = Floor(id=_new_id("floor"), name=name)
        self._floors[floor.id] = floor
        logger.info("Created floor %s", floor.id)
        return floor

    def update_floor(self, floor_id: str, **changes: Any) -> Floor:
        floor = replace(self._get(self._floors, floor_id, "Floor"), **changes)
        self._floors[floor_id] = floor
        return floor

    def delete_floor(self, floor_id: str) -> str:
        self._get(self._floors, floor_id, "Floor")
        del self._floors[floor_id]
        logger.info("Deleted floor %s", floor_id)
        return floor_id

    def get_sections(self) -> List[Section]:
        return list(self._sections.values())

    def create_section(self, name: str, floor_id: str) -> Section:
        self._get(self._floors, floor_id, "Floor")
        section = Section(id=_new_id("sec"), name=name, floor_id=floor_id)
        self._sections[section.id] = section
        logger.info("Created section %s on floor %s", section.id, floor_id)
        return section

    def update_section(self, section_id: str, **changes: Any) -> Section:
        section = replace(self._get(self._sections, section_id, "Section"), **changes)
        self._sections[section_id] = section
        return section

    def delete_section(self, section_id: str) -> str:
        self._get(self._sections, section_id, "Section")
        del self._sections[section_id]
        logger.info("Deleted section %s", section_id)
        return section_id

    def get_tables(self) -> List[Table]:
        return list(self._tables.values())

    def get_table(self, table_id: str) -> Table:
        return self._get(self._tables, table_id, "Table")

    def create_table(self, name: str, capacity: int, section_id: str) -> Table:
        self._get(self._sections, section_id, "Section")
        # New tables start ready.
        table = Table(id=_new_id("t"), name=name, capacity=capacity, section_id=section_id, is_ready=True)
        self._tables[table.id] = table
        logger.info("Created table %s (capacity %d)", table.id, capacity)
        return table

    def update_table(self, table_id: str, **changes: Any) -> Table:
        table = replace(self.get_table(table_id), **changes)
        self._tables[table_id] = table
        return table

    def update_table_ready_status(self, table_id: str, is_ready: bool) -> Table:
        table = self.update_table(table_id, is_ready=is_ready)
        logger.info("Table %s ready=%s", table_id, is_ready)
        return table

    def delete_table(self, table_id: str) -> str:
        self.get_table(table_id)
        del self._tables[table_id]
        logger.info("Deleted table %s", table_id)
        return table_id

    # --- Reservations ---

    def get_reservations(self, date: Optional[str] = None, status: Optional[str] = None) -> List[Reservation]:
        """
        Reservations matching the filters, ordered by time.

        A status of "ALL" (any case) applies no status filter.
        """
        result = list(self._reservations.values())

        if date:
            result = [r for r in result if r.date == date]

        if status and status.upper() != "ALL":
            wanted = ReservationStatus(status.upper())
            result = [r for r in result if r.status == wanted]

        return sorted(result, key=lambda r: r.time)

    def get_reservation(self, reservation_id: str) -> Reservation:
        return self._get(self._reservations, reservation_id, "Reservation")

    def create_reservation(
        self,
        *,
        customer_name: str,
        contact: str,
        date: str,
        time: str,
        covers: int,
        table_id: Optional[str],
        section_id: str,
        status: ReservationStatus = ReservationStatus.CONFIRMED,
        notes: str = "",
    ) -> Reservation:
        reservation = Reservation(
            id=_new_id("res"),
            customer_name=customer_name,
            contact=contact,
            date=date,
            time=time,
            covers=covers,
            table_id=table_id,
            section_id=section_id,
            status=ReservationStatus(status),
            notes=notes,
            created_at=pendulum.now("UTC").to_iso8601_string(),
        )
        self._ensure_no_conflict(reservation)
        self._reservations[reservation.id] = reservation
        logger.info(
            "Created reservation %s: %s at %s %s, table %s",
            reservation.id, customer_name, date, time, table_id,
        )
        return reservation

    def update_reservation(self, reservation_id: str, **changes: Any) -> Reservation:
        if "status" in changes:
            changes["status"] = ReservationStatus(changes["status"])
        reservation = replace(self.get_reservation(reservation_id), **changes)
        self._ensure_no_conflict(reservation)
        self._reservations[reservation_id] = reservation
        logger.info("Updated reservation %s: %s", reservation_id, ", ".join(sorted(changes)))
        return reservation

    def delete_reservation(self, reservation_id: str) -> str:
        self.get_reservation(reservation_id)
        del self._reservations[reservation_id]
        logger.info("Deleted reservation %s", reservation_id)
        return reservation_id

    # --- Financials ---

    def get_financial_report(self, start_date: str, end_date: str) -> List[Reservation]:
        """PAID reservations with a check amount between the two dates, inclusive."""
        return [
            r for r in self._reservations.values()
            if r.status == ReservationStatus.PAID
            and start_date <= r.date <= end_date
            and r.check_amount is not None
        ]

    # --- Internals ---

    @staticmethod
    def _get(records: Dict[str, Any], record_id: str, kind: str) -> Any:
        try:
            return records[record_id]
        except KeyError:
            raise NotFoundError(f"{kind} not found: {record_id}") from None

    def _ensure_no_conflict(self, candidate: Reservation) -> None:
        """
        Reject ``candidate`` if its table already holds an overlapping
        active booking on the same date.
        """
        if not candidate.table_id or not candidate.is_active:
            return

        anchor = anchor_of(pendulum.from_format(candidate.date, "YYYY-MM-DD"))
        start = at_time(anchor, candidate.time)
        turnover = self._settings.turnover_minutes

        for existing in self._reservations.values():
            if (
                existing.id == candidate.id
                or existing.table_id != candidate.table_id
                or existing.date != candidate.date
                or not existing.is_active
            ):
                continue
            if windows_overlap(start, at_time(anchor, existing.time), turnover):
                logger.warning(
                    "Rejected booking on table %s at %s %s: overlaps %s",
                    candidate.table_id, candidate.date, candidate.time, existing.id,
                )
                raise BookingConflictError(
                    f"Table {candidate.table_id} is already booked at {existing.time} "
                    f"on {candidate.date} (reservation {existing.id})"
                )


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:8]}"


def _settings_from_dict(data: Dict[str, Any]) -> RestaurantSettings:
    hours = {
        day: OpeningHours(**value) if value else None
        for day, value in (data.get("opening_hours") or {}).items()
    }
    return RestaurantSettings(
        turnover_minutes=data["turnover_minutes"],
        opening_hours=hours,
        timezone=data.get("timezone", "UTC"),
        overall_capacity=data.get("overall_capacity"),
        no_show_grace_minutes=data.get("no_show_grace_minutes"),
    )


def _reservation_from_dict(data: Dict[str, Any], default_date: str) -> Reservation:
    fields = dict(data)
    fields.setdefault("date", default_date)
    fields["status"] = ReservationStatus(fields.get("status", ReservationStatus.CONFIRMED))
    return Reservation(**fields)
