"""CLI commands for wedding tenancy administration."""

import asyncio
import datetime as dt

import sentry_sdk
import typer
from alembic import command
from alembic.config import Config

from wedding_tenancy.config.logging import setup_logging
from wedding_tenancy.config.settings import settings
from wedding_tenancy.repositories import TenantRepositories
from wedding_tenancy.tenancy.errors import TenancyError
from wedding_tenancy.weddings.dtos import WeddingEventCreate

app = typer.Typer(help="CLI commands for wedding tenancy administration")


@app.callback()
def main():
    """Configure logging and error reporting before any command runs."""
    setup_logging()
    if settings.SENTRY_DSN:
        sentry_sdk.init(
            dsn=settings.SENTRY_DSN,
            environment=settings.ENVIRONMENT,
            traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
            send_default_pii=False,
        )


def _run(coro):
    """Run an async helper, turning tenancy errors into a clean exit."""
    try:
        return asyncio.run(coro)
    except (TenancyError, ValueError) as e:
        typer.secho(str(e), fg=typer.colors.RED)
        raise typer.Exit(1)


@app.command()
def migrate(
    revision: str = typer.Argument("head", help="Alembic revision to upgrade to"),
):
    """Apply database migrations."""
    command.upgrade(Config("alembic.ini"), revision)
    typer.secho(f"Database upgraded to {revision}", fg=typer.colors.GREEN)


@app.command()
def create_event(
    title: str = typer.Option(..., "--title", "-t", help="Event title"),
    bride_name: str = typer.Option(..., "--bride", help="Bride's name"),
    groom_name: str = typer.Option(..., "--groom", help="Groom's name"),
    start_date: dt.datetime = typer.Option(..., "--start", formats=["%Y-%m-%d"], help="First day"),
    end_date: dt.datetime = typer.Option(..., "--end", formats=["%Y-%m-%d"], help="Last day"),
    location: str = typer.Option(..., "--location", "-l", help="Venue or city"),
    created_by: int = typer.Option(..., "--user", "-u", help="Id of the creating user"),
):
    """Create a new wedding event (tenant)."""
    data = WeddingEventCreate(
        title=title,
        couple_names=f"{bride_name} & {groom_name}",
        bride_name=bride_name,
        groom_name=groom_name,
        start_date=start_date.date(),
        end_date=end_date.date(),
        location=location,
        created_by=created_by,
    )
    event = _run(TenantRepositories.for_session().events.create(data))

    typer.secho("Event created!", fg=typer.colors.GREEN)
    typer.secho(f"  Event ID: {event.id}", fg=typer.colors.CYAN)
    typer.secho(f"  {event.couple_names}, {event.start_date} to {event.end_date}", fg=typer.colors.BLUE)


@app.command()
def list_events(
    user: int = typer.Option(None, "--user", "-u", help="Only events created by this user"),
):
    """List wedding events, newest first."""
    events_repository = TenantRepositories.for_session().events
    if user is None:
        events = _run(events_repository.get_all())
    else:
        events = _run(events_repository.get_by_user(user))

    if not events:
        typer.secho("No events found", fg=typer.colors.YELLOW)
        return
    for event in events:
        typer.secho(f"  [{event.id}] {event.title} ({event.start_date}, {event.location})", fg=typer.colors.BLUE)


async def _collect_stats(event_id: int):
    repos = TenantRepositories.for_session()
    event = await repos.events.require_event(event_id)
    guests = await repos.guests.get_statistics(event.id)
    rooms = await repos.accommodations.get_stats(event.id)
    return event, guests, rooms


@app.command()
def stats(
    event_id: int = typer.Argument(..., help="Event id"),
):
    """Show guest and accommodation statistics for an event."""
    event, guests, rooms = _run(_collect_stats(event_id))

    typer.secho(f"{event.title}", fg=typer.colors.GREEN)
    typer.secho("Guests", fg=typer.colors.GREEN)
    typer.secho(f"  Total: {guests.total}", fg=typer.colors.BLUE)
    typer.secho(
        f"  Confirmed: {guests.confirmed}  Declined: {guests.declined}  Pending: {guests.pending}",
        fg=typer.colors.BLUE,
    )
    typer.secho(f"  With plus ones: {guests.with_plus_ones}", fg=typer.colors.BLUE)
    typer.secho(f"  With children: {guests.with_children}", fg=typer.colors.BLUE)
    typer.secho(f"  Needing accommodation: {guests.needing_accommodation}", fg=typer.colors.BLUE)
    typer.echo()
    typer.secho("Rooms", fg=typer.colors.GREEN)
    typer.secho(
        f"  {rooms.allocated_rooms}/{rooms.total_rooms} allocated across {rooms.accommodation_types} accommodations",
        fg=typer.colors.BLUE,
    )
    color = typer.colors.RED if rooms.available_rooms < 0 else typer.colors.CYAN
    typer.secho(f"  Available: {rooms.available_rooms}", fg=color)


async def _reconcile(event_id: int) -> int:
    repos = TenantRepositories.for_session()
    await repos.events.require_event(event_id)
    return await repos.accommodations.reconcile_allocated_rooms(event_id)


@app.command()
def reconcile_rooms(
    event_id: int = typer.Argument(..., help="Event id"),
):
    """Recount allocated rooms of every accommodation from the allocation rows."""
    fixed = _run(_reconcile(event_id))

    if fixed:
        typer.secho(f"Corrected {fixed} accommodation counters", fg=typer.colors.YELLOW)
    else:
        typer.secho("All counters already match", fg=typer.colors.GREEN)


@app.command()
def purge_event(
    event_id: int = typer.Argument(..., help="Event id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
):
    """Delete an event and every guest, ceremony, room and template it owns."""
    if not yes:
        typer.confirm(f"Delete event {event_id} and all of its data?", abort=True)
    deleted = _run(TenantRepositories.for_session().events.delete(event_id))

    if not deleted:
        typer.secho(f"Event not found: {event_id}", fg=typer.colors.RED)
        raise typer.Exit(1)
    typer.secho(f"Event {event_id} deleted", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
