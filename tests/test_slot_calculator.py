"""
Tests for slot calculator.
"""

import copy
from datetime import date

import pendulum

from reservationdesk.domain.models import (
    OpeningHours,
    Reservation,
    RestaurantSettings,
    SpecialOpeningHour,
    Table,
)
from reservationdesk.domain.slot_calculator import (
    SlotCalculator,
    compute_available_slots,
    eligible_tables,
    is_table_free,
    occupancy_window,
    resolve_opening_hours,
    windows_overlap,
)

MONDAY = date(2024, 11, 25)
TUESDAY = date(2024, 11, 26)


def _settings(turnover: int = 90, open_: str = "17:00", close: str = "19:00") -> RestaurantSettings:
    return RestaurantSettings(
        turnover_minutes=turnover,
        opening_hours={"monday": OpeningHours(open=open_, close=close)},
    )


def _table(table_id: str = "t1", capacity: int = 4, is_ready: bool = True) -> Table:
    return Table(id=table_id, name=table_id, capacity=capacity, section_id="sec1", is_ready=is_ready)


def _reservation(time: str, table_id: str = "t1", res_id: str = "r1") -> Reservation:
    return Reservation(
        id=res_id,
        customer_name="Guest",
        contact="555-0100",
        date="2024-11-25",
        time=time,
        covers=2,
        table_id=table_id,
        section_id="sec1",
    )


class TestResolveOpeningHours:
    """Tests for the date-override then weekday lookup."""

    def test_weekday_default(self):
        """Test that the weekday entry is used without an override."""
        hours = resolve_opening_hours(MONDAY, _settings(), [])

        assert hours == OpeningHours(open="17:00", close="19:00")

    def test_missing_weekday_is_closed(self):
        """Test that a weekday without an entry is closed."""
        assert resolve_opening_hours(TUESDAY, _settings(), []) is None

    def test_special_hours_replace_weekday(self):
        """Test that an open override replaces the weekday hours."""
        special = [SpecialOpeningHour(date="2024-11-25", is_open=True, open_time="12:00", close_time="14:00")]

        hours = resolve_opening_hours(MONDAY, _settings(), special)

        assert hours == OpeningHours(open="12:00", close="14:00")

    def test_special_hours_open_a_closed_weekday(self):
        """Test that an override can open a day with no weekday entry."""
        special = [SpecialOpeningHour(date="2024-11-26", is_open=True, open_time="12:00", close_time="14:00")]

        assert resolve_opening_hours(TUESDAY, _settings(), special) is not None

    def test_open_override_missing_time_is_closed(self):
        """Test that an open override without a close time counts as closed."""
        special = [SpecialOpeningHour(date="2024-11-25", is_open=True, open_time="12:00", close_time=None)]

        assert resolve_opening_hours(MONDAY, _settings(), special) is None

    def test_unknown_weekday_keys_never_match(self):
        """Test that capitalised weekday keys do not match."""
        settings = RestaurantSettings(
            turnover_minutes=90,
            opening_hours={"Monday": OpeningHours(open="17:00", close="19:00")},
        )

        assert resolve_opening_hours(MONDAY, settings, []) is None


class TestHelpers:
    """Tests for the overlap and table helpers."""

    def test_windows_overlap_touching_boundary(self):
        """Test that back-to-back bookings do not overlap."""
        a = pendulum.naive(2024, 11, 25, 18, 0)
        b = pendulum.naive(2024, 11, 25, 19, 0)

        assert not windows_overlap(a, b, 60)
        assert not windows_overlap(b, a, 60)

    def test_windows_overlap_partial(self):
        """Test overlap detection for straddling windows."""
        a = pendulum.naive(2024, 11, 25, 18, 0)
        b = pendulum.naive(2024, 11, 25, 17, 45)

        assert windows_overlap(a, b, 60)
        assert windows_overlap(b, a, 60)

    def test_occupancy_window_spans_turnover(self):
        """Test that a booking occupies its table for the turnover."""
        anchor = pendulum.naive(2024, 11, 25)

        window = occupancy_window(anchor, "18:00", 90)

        assert window.start == pendulum.naive(2024, 11, 25, 18, 0)
        assert window.end == pendulum.naive(2024, 11, 25, 19, 30)

    def test_eligible_tables_keeps_order(self):
        """Test capacity and readiness filtering preserves input order."""
        tables = [
            _table("big", capacity=6),
            _table("small", capacity=2),
            _table("broken", capacity=8, is_ready=False),
            _table("mid", capacity=4),
        ]

        result = eligible_tables(tables, 4)

        assert [t.id for t in result] == ["big", "mid"]

    def test_is_table_free_ignores_other_tables(self):
        """Test that bookings on other tables never block."""
        anchor = pendulum.naive(2024, 11, 25)
        slot = anchor.set(hour=18)

        assert is_table_free(_table("t1"), slot, [_reservation("18:00", table_id="t2")], anchor, 90)
        assert not is_table_free(_table("t2"), slot, [_reservation("18:00", table_id="t2")], anchor, 90)


class TestSlotCalculator:
    """Tests for SlotCalculator."""

    def test_scenario_empty_restaurant(self):
        """Test slots every 15 minutes up to, not including, closing."""
        table = _table()

        slots = compute_available_slots(MONDAY, 2, _settings(), [], [table], [])

        assert [s.time for s in slots] == [
            "17:00", "17:15", "17:30", "17:45",
            "18:00", "18:15", "18:30", "18:45",
        ]
        assert all(s.available_tables == [table] for s in slots)

    def test_scenario_single_table_booked(self):
        """Test that a 17:30 booking with 90 min turnover blocks every slot."""
        slots = compute_available_slots(
            MONDAY, 2, _settings(), [_reservation("17:30")], [_table()], []
        )

        assert slots == []

    def test_scenario_special_closure(self):
        """Test that a closed override wins over an open Monday."""
        special = [SpecialOpeningHour(date="2024-11-25", is_open=False)]

        slots = compute_available_slots(MONDAY, 2, _settings(), [], [_table()], special)

        assert slots == []

    def test_scenario_table_not_ready(self):
        """Test that a table that is not ready is never offered."""
        slots = compute_available_slots(
            MONDAY, 2, _settings(), [], [_table(is_ready=False)], []
        )

        assert slots == []

    def test_party_larger_than_every_table(self):
        """Test that tables are never combined to seat a party."""
        tables = [_table("t1", capacity=4), _table("t2", capacity=4)]

        assert compute_available_slots(MONDAY, 5, _settings(), [], tables, []) == []

    def test_closed_weekday(self):
        """Test that a day without hours yields no slots."""
        assert compute_available_slots(TUESDAY, 2, _settings(), [], [_table()], []) == []

    def test_close_before_open_yields_nothing(self):
        """Test that inverted hours produce no slots rather than an error."""
        settings = _settings(open_="19:00", close="17:00")

        assert compute_available_slots(MONDAY, 2, settings, [], [_table()], []) == []

    def test_overlap_boundaries(self):
        """Test the half-open overlap rule around an 18:00 booking."""
        settings = _settings(turnover=60, open_="17:00", close="22:00")

        slots = compute_available_slots(
            MONDAY, 2, settings, [_reservation("18:00")], [_table()], []
        )
        times = [s.time for s in slots]

        assert "17:00" in times  # ends exactly at 18:00
        assert "17:45" not in times
        assert "18:00" not in times
        assert "18:30" not in times
        assert "19:00" in times  # starts exactly at 19:00
        assert times[0] == "17:00"
        assert times[1] == "19:00"

    def test_partial_availability_lists_only_free_tables(self):
        """Test that a slot lists just the tables without a conflict."""
        tables = [_table("t1"), _table("t2")]
        settings = _settings(turnover=60, open_="18:00", close="19:00")

        slots = compute_available_slots(
            MONDAY, 2, settings, [_reservation("18:00", table_id="t1")], tables, []
        )

        assert [s.time for s in slots] == ["18:00", "18:15", "18:30", "18:45"]
        assert all([t.id for t in s.available_tables] == ["t2"] for s in slots)

    def test_last_slot_may_run_past_closing(self):
        """Test that a slot starting before close is offered whatever the turnover."""
        slots = compute_available_slots(MONDAY, 2, _settings(turnover=180), [], [_table()], [])

        assert slots[-1].time == "18:45"

    def test_unassigned_reservation_blocks_nothing(self):
        """Test that a booking without a table does not block any table."""
        reservation = _reservation("17:00", table_id=None)

        slots = compute_available_slots(MONDAY, 2, _settings(), [reservation], [_table()], [])

        assert len(slots) == 8

    def test_time_of_day_on_input_is_ignored(self):
        """Test that a datetime input behaves like its calendar date."""
        late_evening = pendulum.datetime(2024, 11, 25, 23, 30, tz="America/New_York")

        slots = compute_available_slots(late_evening, 2, _settings(), [], [_table()], [])

        assert len(slots) == 8

    def test_idempotent_and_inputs_untouched(self):
        """Test that repeated calls agree and inputs are not mutated."""
        settings = _settings()
        tables = [_table("t1"), _table("t2", capacity=2)]
        reservations = [_reservation("18:00")]
        before = copy.deepcopy((settings, tables, reservations))

        calculator = SlotCalculator(settings=settings)
        first = calculator.find_available_slots(MONDAY, 2, reservations, tables)
        second = calculator.find_available_slots(MONDAY, 2, reservations, tables)

        assert first == second
        assert first is not second
        assert (settings, tables, reservations) == before
