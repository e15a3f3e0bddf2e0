"""
Flask CLI commands for inspecting and running care reminders.

Usage:
    flask care-tasks --user-id <uuid>                       # Overdue and due-today tasks
    flask care-tasks --user-id <uuid> --at 2025-06-01T09:00 # As of another instant (UTC)
    flask care-digest --user-id <uuid>                      # Reminder message for one user
    flask run-care-reminders                                # Run the daily job once
"""

from __future__ import annotations

from datetime import datetime

import click
from flask.cli import with_appcontext


def _clock_for(at: str | None):
    from greenmate.services.clock import FixedClock, system_clock

    if not at:
        return system_clock
    try:
        return FixedClock(datetime.fromisoformat(at.replace("Z", "+00:00")))
    except ValueError:
        raise click.BadParameter(f"Not an ISO-8601 timestamp: {at}", param_hint="--at")


def _load_plants(user_id: str):
    from greenmate.services import supabase_client
    from greenmate.utils.errors import PlantFetchError

    try:
        return supabase_client.fetch_all_plants(user_id, use_cache=False)
    except PlantFetchError as e:
        click.echo(f"Error: could not load plants ({e})")
        raise SystemExit(1)


@click.command("care-tasks")
@click.option("--user-id", required=True, help="User UUID whose plants to check.")
@click.option("--at", default=None, help="Evaluate as of this ISO-8601 instant instead of now.")
@with_appcontext
def care_tasks_command(user_id: str, at: str | None) -> None:
    """Print a user's overdue and due-today care tasks."""
    from greenmate.services.care_tasks import compute_tasks, partition_tasks

    clock = _clock_for(at)
    plants = _load_plants(user_id)
    due_today, overdue = partition_tasks(compute_tasks(plants, clock.now()))

    click.echo(f"{len(plants)} plant(s)")
    for heading, tasks in (("Overdue", overdue), ("Due today", due_today)):
        click.echo(f"\n{heading} ({len(tasks)}):")
        for task in tasks:
            click.echo(f"  {task.plant.name}: {task.action_type.display_name} - {task.due_description}")


@click.command("care-digest")
@click.option("--user-id", required=True, help="User UUID whose plants to check.")
@click.option("--at", default=None, help="Evaluate as of this ISO-8601 instant instead of now.")
@with_appcontext
def care_digest_command(user_id: str, at: str | None) -> None:
    """Print the care reminder digest for one user."""
    from greenmate.services.digest import DIGEST_TITLE, build_digest, format_digest_message

    clock = _clock_for(at)
    digest = build_digest(_load_plants(user_id), clock.now())
    message = format_digest_message(digest)

    if message is None:
        click.echo("Nothing due. No reminder would be sent.")
        return
    click.echo(f"{DIGEST_TITLE}: {message}")


@click.command("run-care-reminders")
@with_appcontext
def run_care_reminders_command() -> None:
    """Run the daily care reminder job once."""
    from greenmate.services.care_reminder_job import run_care_reminders

    stats = run_care_reminders()
    click.echo(
        f"Done. Checked: {stats['users_checked']}, Notified: {stats['notified']}, "
        f"Skipped: {stats['skipped']}, Errors: {stats['errors']}"
    )
