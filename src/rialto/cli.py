"""Click CLI commands for Rialto."""

from __future__ import annotations

import asyncio
import logging
import sys
from datetime import date

import click
from rich.console import Console
from rich.table import Table

from rialto.availability import AvailabilityCalculator
from rialto.catalog import SlotCatalog
from rialto.config import RestaurantConfig, load_dotenv, resolve_config
from rialto.errors import RialtoError
from rialto.lifecycle import ReservationService
from rialto.store import SupabaseStore
from rialto.web import db

console = Console()


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _parse_day(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"expected YYYY-MM-DD, got {value!r}") from None


async def _open_store() -> SupabaseStore:
    _, service_client = await db.init_supabase()
    return SupabaseStore(service_client)


def _run(coro) -> None:
    """Run a coroutine, turning expected failures into a red message and exit 1."""
    try:
        asyncio.run(coro)
    except (RialtoError, RuntimeError) as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.option("-c", "--config", "config_path", type=click.Path(), help="Restaurant YAML config.")
@click.pass_context
def main(ctx: click.Context, verbose: bool, config_path: str | None) -> None:
    """Rialto: reservations and availability for Al Gobbo di Rialto."""
    _setup_logging(verbose)
    load_dotenv()
    try:
        ctx.obj = resolve_config(config_path)
    except RialtoError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)


@main.command()
@click.option("--port", default=8000, help="Port to serve on.")
@click.option("--host", default="127.0.0.1", help="Host to bind to.")
@click.pass_obj
def serve(config: RestaurantConfig, port: int, host: str) -> None:
    """Run the site API (reservations, availability, admin)."""
    import uvicorn

    from rialto.web.app import create_app

    app = create_app(config)
    console.print(f"[bold green]{config.name} API[/bold green] -> http://{host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level="info")


@main.command()
@click.option("--port", default=3001, help="Port to serve on.")
@click.option("--host", default="127.0.0.1", help="Host to bind to.")
@click.pass_obj
def relay(config: RestaurantConfig, port: int, host: str) -> None:
    """Run the email relay in front of Resend."""
    import uvicorn

    from rialto.relay.app import create_relay_app
    from rialto.relay.mailer import RelaySettings

    try:
        settings = RelaySettings.from_env(config)
    except RialtoError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    app = create_relay_app(settings)
    console.print(f"[bold green]Email relay[/bold green] -> http://{host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level="info")


@main.command()
@click.argument("day")
def availability(day: str) -> None:
    """Show slot availability for DAY (YYYY-MM-DD)."""
    target = _parse_day(day)

    async def _show() -> None:
        slots = await AvailabilityCalculator(await _open_store()).for_date(target)

        table = Table(title=f"Availability {target.isoformat()} ({target.strftime('%A')})")
        table.add_column("Time", style="bold")
        table.add_column("Service")
        table.add_column("Seats left", justify="right")
        table.add_column("Status")
        for s in slots:
            if s.is_closed_date:
                status = "[red]closed (date)[/red]"
            elif s.is_recurring_closed:
                status = "[red]closed (weekly)[/red]"
            elif not s.available:
                status = "[yellow]full[/yellow]"
            else:
                status = "[green]open[/green]"
            table.add_row(
                s.time.strftime("%H:%M"),
                "lunch" if s.is_lunch else "dinner",
                f"{s.remaining_capacity}/{s.max_capacity}",
                status,
            )
        console.print(table)

    _run(_show())


@main.command()
@click.argument("day")
def reservations(day: str) -> None:
    """List reservations for DAY (YYYY-MM-DD)."""
    target = _parse_day(day)

    async def _show() -> None:
        service = ReservationService(await _open_store())
        rows = await service.list_for_date(target)
        if not rows:
            console.print(f"No reservations on {target.isoformat()}.")
            return

        table = Table(title=f"Reservations {target.isoformat()}")
        for col in ("Time", "Guests", "Name", "Email", "Phone", "Status"):
            table.add_column(col)
        for r in rows:
            table.add_row(
                r.time.strftime("%H:%M"), str(r.guests), r.name, r.email, r.phone, r.status.value
            )
        console.print(table)

    _run(_show())


@main.command("seed-slots")
@click.pass_obj
def seed_slots(config: RestaurantConfig) -> None:
    """Insert the time slots listed in the config file."""
    if not config.time_slots:
        console.print("[yellow]No time_slots in config; nothing to seed.[/yellow]")
        return

    async def _seed() -> None:
        created = await SlotCatalog(await _open_store()).seed(config.time_slots)
        console.print(f"[green]Created {len(created)} time slots[/green] "
                      f"({len(config.time_slots) - len(created)} already present).")

    _run(_seed())


@main.command("create-admin")
@click.argument("email")
def create_admin(email: str) -> None:
    """Create a staff account in Supabase auth."""
    password = click.prompt("Password", hide_input=True, confirmation_prompt=True)

    async def _create() -> None:
        auth_client, _ = await db.init_supabase()
        try:
            resp = await auth_client.auth.sign_up({"email": email, "password": password})
        except Exception as e:
            console.print(f"[red]Error creating admin user: {e}[/red]")
            sys.exit(1)
        user_id = resp.user.id if resp.user else "unknown"
        console.print(f"[green]Admin user created:[/green] {email} (id={user_id})")

    _run(_create())
