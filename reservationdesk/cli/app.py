"""
Main CLI application using Typer.
"""

import logging
from pathlib import Path
from typing import Annotated, Optional

import pendulum
import typer
from rich.console import Console
from rich.table import Table

from ..adapters.memory_store import InMemoryReservationStore
from ..config import AppConfig, load_config
from ..domain.exceptions import ReservationDeskError
from ..domain.models import OpeningHours, ReservationStatus, SpecialOpeningHour
from ..domain.time_utils import format_time
from ..services.booking_service import TIME_PATTERN, BookingService

app = typer.Typer(
    name="reservationdesk",
    help="Manage tables, opening hours and bookings for a restaurant",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def _bootstrap(config_file: Optional[Path]) -> tuple[AppConfig, InMemoryReservationStore, BookingService]:
    """Load config, configure logging and build the store and service."""
    config = load_config(config_file)
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    store = InMemoryReservationStore.from_json(config.get_data_file(), today=_today(config))
    return config, store, BookingService(store=store)


def _today(config: AppConfig):
    """Current calendar date in the configured timezone."""
    return pendulum.today(config.timezone).date()


def _parse_day(value: Optional[str], config: AppConfig):
    """Parse YYYY-MM-DD, or today in the configured timezone."""
    if not value:
        return _today(config)
    try:
        return pendulum.from_format(value, "YYYY-MM-DD").date()
    except ValueError as e:
        raise ValueError(f"Invalid date '{value}', expected YYYY-MM-DD") from e


def _check_time(value: str) -> str:
    if not TIME_PATTERN.fullmatch(value):
        raise ValueError(f"Invalid time '{value}', expected HH:MM")
    return value


def _persist(config: AppConfig, store: InMemoryReservationStore) -> None:
    """Write changes back to a user-supplied data file; the bundled sample stays untouched."""
    if config.data_file is not None:
        store.save_json(config.data_file)
    else:
        console.print("[dim]No data_file configured; change not saved.[/dim]")


def _fail(error: Exception) -> None:
    console.print(f"[bold red]Error:[/bold red] {error}")
    raise typer.Exit(1)


@app.command()
def slots(
    date: Annotated[Optional[str], typer.Argument(help="Date (YYYY-MM-DD). Defaults to today.")] = None,
    party: Annotated[Optional[int], typer.Option("--party", "-p", help="Party size")] = None,
    exclude: Annotated[
        Optional[str],
        typer.Option("--exclude", "-x", help="Reservation id being edited; its own booking does not block"),
    ] = None,
    config_file: ConfigOption = None,
):
    """
    Show bookable time slots and free tables.

    Examples:

        reservationdesk slots 2024-11-25 --party 4

        reservationdesk slots 2024-11-25 --party 4 --exclude res2
    """
    try:
        config, _, service = _bootstrap(config_file)
        day = _parse_day(date, config)
        party_size = party if party is not None else config.defaults.party_size

        found = service.find_slots(day, party_size, exclude_reservation_id=exclude)

        if not found:
            console.print(
                f"[yellow]⚠ No available slots on {day.isoformat()} for {party_size} guest(s).[/yellow]"
            )
            return

        table = Table(
            title=f"Available slots - {day.isoformat()} ({party_size} guests)",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Slot", style="bold yellow")
        table.add_column("Free tables")

        for slot in found:
            table.add_row(
                slot.format_display(),
                ", ".join(f"{t.name} ({t.capacity})" for t in slot.available_tables)
            )

        console.print()
        console.print(table)
        console.print()

    except (ReservationDeskError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def book(
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    time: Annotated[str, typer.Argument(help="Start time (HH:MM)")],
    table_id: Annotated[str, typer.Argument(help="Table id")],
    name: Annotated[str, typer.Option("--name", help="Customer name")],
    contact: Annotated[str, typer.Option("--contact", help="Phone or e-mail")],
    party: Annotated[Optional[int], typer.Option("--party", "-p", help="Party size")] = None,
    notes: Annotated[str, typer.Option("--notes", help="Special requests")] = "",
    config_file: ConfigOption = None,
):
    """
    Create a reservation after checking the slot is still free.
    """
    try:
        config, store, service = _bootstrap(config_file)
        day = _parse_day(date, config)
        party_size = party if party is not None else config.defaults.party_size

        reservation = service.create_reservation(
            customer_name=name,
            contact=contact,
            day=day,
            time=time,
            covers=party_size,
            table_id=table_id,
            notes=notes,
        )
        _persist(config, store)
        console.print(
            f"[green]✓ Reservation {reservation.id} created:[/green] "
            f"{reservation.customer_name}, {reservation.covers} guest(s) at "
            f"{format_time(reservation.time)} on {reservation.date}, table {reservation.table_id}"
        )

    except (ReservationDeskError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def reservations(
    date: Annotated[Optional[str], typer.Argument(help="Date (YYYY-MM-DD). Defaults to today.")] = None,
    status: Annotated[str, typer.Option("--status", "-s", help="Status filter or ALL")] = "ALL",
    config_file: ConfigOption = None,
):
    """
    List reservations for a day.
    """
    try:
        config, store, _ = _bootstrap(config_file)
        day = _parse_day(date, config)
        found = store.get_reservations(date=day.isoformat(), status=status)

        if not found:
            console.print(f"[yellow]No reservations on {day.isoformat()}.[/yellow]")
            return

        tables = {t.id: t.name for t in store.get_tables()}
        table = Table(title=f"Reservations - {day.isoformat()}", show_header=True, header_style="bold cyan")
        table.add_column("Time", style="bold yellow")
        table.add_column("Name")
        table.add_column("Guests", justify="right")
        table.add_column("Table")
        table.add_column("Status")
        table.add_column("Notes", style="dim")

        for r in found:
            table.add_row(
                format_time(r.time),
                r.customer_name,
                str(r.covers),
                tables.get(r.table_id, "N/A"),
                r.status.value,
                r.notes,
            )

        console.print()
        console.print(table)
        console.print()

    except (ReservationDeskError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def cancel(
    reservation_id: Annotated[str, typer.Argument(help="Reservation id")],
    config_file: ConfigOption = None,
):
    """
    Cancel a reservation.
    """
    try:
        config, store, service = _bootstrap(config_file)
        reservation = service.cancel_reservation(reservation_id)
        _persist(config, store)
        console.print(f"[green]✓ Reservation {reservation.id} cancelled.[/green]")

    except (ReservationDeskError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def edit(
    reservation_id: Annotated[str, typer.Argument(help="Reservation id")],
    date: Annotated[Optional[str], typer.Option("--date", help="New date (YYYY-MM-DD)")] = None,
    time: Annotated[Optional[str], typer.Option("--time", help="New start time (HH:MM)")] = None,
    table_id: Annotated[Optional[str], typer.Option("--table", help="New table id")] = None,
    party: Annotated[Optional[int], typer.Option("--party", "-p", help="Party size")] = None,
    name: Annotated[Optional[str], typer.Option("--name", help="Customer name")] = None,
    contact: Annotated[Optional[str], typer.Option("--contact", help="Phone or e-mail")] = None,
    notes: Annotated[Optional[str], typer.Option("--notes", help="Special requests")] = None,
    status: Annotated[Optional[str], typer.Option("--status", "-s", help="New status")] = None,
    config_file: ConfigOption = None,
):
    """
    Change a reservation. Options left out keep their current value.

    Use `slots --exclude RES_ID` first to see where the booking can move.
    """
    try:
        config, store, service = _bootstrap(config_file)
        current = store.get_reservation(reservation_id)

        reservation = service.update_reservation(
            reservation_id,
            customer_name=name if name is not None else current.customer_name,
            contact=contact if contact is not None else current.contact,
            day=_parse_day(date or current.date, config),
            time=time or current.time,
            covers=party if party is not None else current.covers,
            table_id=table_id or current.table_id or "",
            status=ReservationStatus(status.upper()) if status else current.status,
            notes=notes if notes is not None else current.notes,
        )
        _persist(config, store)
        console.print(
            f"[green]✓ Reservation {reservation.id} updated:[/green] "
            f"{reservation.customer_name}, {reservation.covers} guest(s) at "
            f"{format_time(reservation.time)} on {reservation.date}, table {reservation.table_id} "
            f"({reservation.status.value})"
        )

    except (ReservationDeskError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def pay(
    reservation_id: Annotated[str, typer.Argument(help="Reservation id")],
    amount: Annotated[float, typer.Argument(help="Check amount")],
    config_file: ConfigOption = None,
):
    """
    Mark a reservation as paid with its check amount.
    """
    try:
        config, store, service = _bootstrap(config_file)
        reservation = service.mark_paid(reservation_id, amount)
        _persist(config, store)
        console.print(f"[green]✓ Reservation {reservation.id} paid:[/green] ${reservation.check_amount:.2f}")

    except (ReservationDeskError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def summary(
    date: Annotated[Optional[str], typer.Argument(help="Date (YYYY-MM-DD). Defaults to today.")] = None,
    config_file: ConfigOption = None,
):
    """
    Show the dashboard figures for a day.
    """
    try:
        config, _, service = _bootstrap(config_file)
        day = _parse_day(date, config)
        stats = service.daily_summary(day)

        console.print(f"\n[bold cyan]📊 {config.restaurant_name} - {stats.date}[/bold cyan]")
        console.print(f"   Reservations: {stats.total_reservations}")
        console.print(f"   Confirmed covers: {stats.confirmed_covers}")
        console.print(f"   Avg. party size: {stats.average_covers}")
        console.print(f"   Cancellations: {stats.cancellations}")

        if stats.covers_by_hour:
            console.print("\n[bold]Covers by hour:[/bold]")
            for hour, covers in stats.covers_by_hour:
                console.print(f"  {hour:>5}  {'█' * covers} {covers}")
        console.print()

    except (ReservationDeskError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def financials(
    start: Annotated[str, typer.Argument(help="First date (YYYY-MM-DD)")],
    end: Annotated[str, typer.Argument(help="Last date (YYYY-MM-DD), inclusive")],
    config_file: ConfigOption = None,
):
    """
    Show revenue from paid reservations between two dates.
    """
    try:
        config, _, service = _bootstrap(config_file)
        report = service.financial_summary(_parse_day(start, config), _parse_day(end, config))

        console.print(f"\n[bold cyan]💰 {config.restaurant_name} - {report.start_date} to {report.end_date}[/bold cyan]")
        console.print(f"   Revenue: ${report.total_revenue:.2f}")
        console.print(f"   Paid reservations: {report.reservation_count}")
        console.print(f"   Covers: {report.total_covers}")
        console.print(f"   Avg. spend per cover: ${report.average_spend_per_cover:.2f}")

        if report.reservations:
            table = Table(show_header=True, header_style="bold cyan")
            table.add_column("Date")
            table.add_column("Name")
            table.add_column("Guests", justify="right")
            table.add_column("Check", justify="right", style="green")
            for r in sorted(report.reservations, key=lambda r: (r.date, r.time)):
                table.add_row(r.date, r.customer_name, str(r.covers), f"${r.check_amount:.2f}")
            console.print()
            console.print(table)
        console.print()

    except (ReservationDeskError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def briefing(
    date: Annotated[Optional[str], typer.Argument(help="Date (YYYY-MM-DD). Defaults to today.")] = None,
    config_file: ConfigOption = None,
):
    """
    Print the staff briefing for a day.
    """
    try:
        config, _, service = _bootstrap(config_file)
        text = service.generate_briefing(_parse_day(date, config))
        console.print(f"\n[bold cyan]📋 Briefing[/bold cyan]\n{text}\n")

    except (ReservationDeskError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def tables(config_file: ConfigOption = None):
    """
    List all tables with their section and readiness.
    """
    try:
        _, store, _ = _bootstrap(config_file)
        sections = {s.id: s.name for s in store.get_sections()}

        table = Table(title="Tables", show_header=True, header_style="bold cyan")
        table.add_column("Id", style="dim")
        table.add_column("Name", style="bold yellow")
        table.add_column("Seats", justify="right")
        table.add_column("Section")
        table.add_column("Ready")

        for t in store.get_tables():
            table.add_row(
                t.id,
                t.name,
                str(t.capacity),
                sections.get(t.section_id, "N/A"),
                "[green]yes[/green]" if t.is_ready else "[red]no[/red]",
            )

        console.print()
        console.print(table)
        console.print()

    except (ReservationDeskError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command("table-add")
def table_add(
    name: Annotated[str, typer.Argument(help="Table name shown to staff")],
    capacity: Annotated[int, typer.Argument(help="Number of seats")],
    section_id: Annotated[str, typer.Argument(help="Section id")],
    config_file: ConfigOption = None,
):
    """
    Add a table to a section. New tables start ready.
    """
    try:
        if capacity <= 0:
            raise ValueError(f"Capacity must be at least 1, got {capacity}")
        config, store, _ = _bootstrap(config_file)
        table = store.create_table(name=name, capacity=capacity, section_id=section_id)
        _persist(config, store)
        console.print(f"[green]✓ Table {table.name} added as {table.id}.[/green]")

    except (ReservationDeskError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command("table-remove")
def table_remove(
    table_id: Annotated[str, typer.Argument(help="Table id")],
    config_file: ConfigOption = None,
):
    """
    Remove a table.
    """
    try:
        config, store, _ = _bootstrap(config_file)
        store.delete_table(table_id)
        _persist(config, store)
        console.print(f"[green]✓ Table {table_id} removed.[/green]")

    except (ReservationDeskError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command("table-ready")
def table_ready(
    table_id: Annotated[str, typer.Argument(help="Table id")],
    ready: Annotated[bool, typer.Option("--ready/--not-ready", help="Whether the table can be offered")] = True,
    config_file: ConfigOption = None,
):
    """
    Mark a table ready or take it out of service.
    """
    try:
        config, store, _ = _bootstrap(config_file)
        table = store.update_table_ready_status(table_id, ready)
        _persist(config, store)
        state = "[green]ready[/green]" if table.is_ready else "[red]not ready[/red]"
        console.print(f"✓ Table {table.name} is now {state}.")

    except (ReservationDeskError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def closures(config_file: ConfigOption = None):
    """
    List date-specific opening hour overrides.
    """
    try:
        _, store, _ = _bootstrap(config_file)
        overrides = store.get_special_opening_hours()

        if not overrides:
            console.print("[yellow]No special opening hours configured.[/yellow]")
            return

        for hour in overrides:
            if hour.is_open and hour.open_time and hour.close_time:
                console.print(f"  {hour.date}  {hour.open_time} - {hour.close_time}")
            else:
                console.print(f"  {hour.date}  [red]closed[/red]")

    except (ReservationDeskError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command("closure-set")
def closure_set(
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    open_time: Annotated[Optional[str], typer.Option("--open", help="Opening time (HH:MM)")] = None,
    close_time: Annotated[Optional[str], typer.Option("--close", help="Closing time (HH:MM)")] = None,
    config_file: ConfigOption = None,
):
    """
    Override the hours for one date. Without --open/--close the day is closed.

    Examples:

        reservationdesk closure-set 2024-12-25

        reservationdesk closure-set 2024-12-24 --open 12:00 --close 16:00
    """
    try:
        if (open_time is None) != (close_time is None):
            raise ValueError("Give both --open and --close, or neither to close the day")
        config, store, _ = _bootstrap(config_file)
        day = _parse_day(date, config)

        if open_time is None:
            hour = SpecialOpeningHour(date=day.isoformat(), is_open=False)
        else:
            hour = SpecialOpeningHour(
                date=day.isoformat(),
                is_open=True,
                open_time=_check_time(open_time),
                close_time=_check_time(close_time),
            )
        store.upsert_special_opening_hour(hour)
        _persist(config, store)

        if hour.is_open:
            console.print(f"[green]✓ {hour.date} open {hour.open_time} - {hour.close_time}.[/green]")
        else:
            console.print(f"[green]✓ {hour.date} marked closed.[/green]")

    except (ReservationDeskError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command("closure-remove")
def closure_remove(
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
    config_file: ConfigOption = None,
):
    """
    Drop a date override so the weekday hours apply again.
    """
    try:
        config, store, _ = _bootstrap(config_file)
        removed = store.delete_special_opening_hour(_parse_day(date, config).isoformat())
        _persist(config, store)
        console.print(f"[green]✓ Special opening hours for {removed} removed.[/green]")

    except (ReservationDeskError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def hours(
    weekday: Annotated[str, typer.Argument(help="Weekday name, e.g. monday")],
    open_time: Annotated[Optional[str], typer.Option("--open", help="Opening time (HH:MM)")] = None,
    close_time: Annotated[Optional[str], typer.Option("--close", help="Closing time (HH:MM)")] = None,
    closed: Annotated[bool, typer.Option("--closed", help="Close this weekday")] = False,
    config_file: ConfigOption = None,
):
    """
    Set the default opening hours for a weekday.
    """
    try:
        day = weekday.lower()
        if day not in WEEKDAYS:
            raise ValueError(f"Unknown weekday '{weekday}', expected one of: {', '.join(WEEKDAYS)}")
        if not closed and (open_time is None or close_time is None):
            raise ValueError("Give --open and --close, or --closed")

        config, store, _ = _bootstrap(config_file)
        opening_hours = store.get_settings().opening_hours
        opening_hours[day] = None if closed else OpeningHours(
            open=_check_time(open_time), close=_check_time(close_time)
        )
        store.update_settings(opening_hours=opening_hours)
        _persist(config, store)

        if closed:
            console.print(f"[green]✓ {day.capitalize()} is now closed.[/green]")
        else:
            console.print(f"[green]✓ {day.capitalize()} open {open_time} - {close_time}.[/green]")

    except (ReservationDeskError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def turnover(
    minutes: Annotated[int, typer.Argument(help="Minutes a table stays occupied per booking")],
    config_file: ConfigOption = None,
):
    """
    Set how long each booking holds its table.
    """
    try:
        config, store, _ = _bootstrap(config_file)
        settings = store.update_settings(turnover_minutes=minutes)
        _persist(config, store)
        console.print(f"[green]✓ Turnover set to {settings.turnover_minutes} minutes.[/green]")

    except (ReservationDeskError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]reservationdesk[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
