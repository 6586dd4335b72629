"""Flask CLI commands for HabitPulse."""

from __future__ import annotations

from datetime import timedelta

import click
from flask import current_app

DEMO_HABITS = (
    # name, icon, goal, unit, values for the last days (oldest first, None = not done)
    ("Drink water", "water", 8.0, "glasses", (6, 8, 9, None, 8, 10, 8)),
    ("Read", "reading", 20.0, "pages", (25, 20, 12, 30, 22, 20, 21)),
    ("Sleep", "sleep", 8.0, "hours", (7, 7.5, 8, 8.5, 6, 8, 9)),
)


def _user_option(func):
    return click.option(
        "--user",
        "user_id",
        default=None,
        help="Owner id (defaults to HABITPULSE_DEFAULT_USER)",
    )(func)


def init_app(app) -> None:
    """Register CLI commands on the Flask app."""

    from .extensions import get_service
    from .services.calendar import now

    def _resolve_user(user_id: str | None) -> str:
        return user_id or current_app.config["HABITPULSE_CONFIG"].DEFAULT_USER

    @app.cli.command("habitpulse-seed")
    @_user_option
    def habitpulse_seed(user_id: str | None) -> None:
        """Create demo habits with a week of entries."""

        owner = _resolve_user(user_id)
        service = get_service()
        today = now(service.tz).date()
        for name, icon, goal, unit, values in DEMO_HABITS:
            view = service.create_habit(user_id=owner, name=name, goal=goal, icon=icon, unit=unit)
            for offset, value in enumerate(reversed(values)):
                view = service.check_in(
                    view.id, today - timedelta(days=offset), value, user_id=owner
                )
            click.echo(f"Seeded {name!r}: streak {view.streak}")

    @app.cli.command("habitpulse-report")
    @_user_option
    def habitpulse_report(user_id: str | None) -> None:
        """Print the current week of every habit."""

        owner = _resolve_user(user_id)
        views = get_service().list_views(user_id=owner)
        if not views:
            click.echo("No habits yet.")
            return
        for view in views:
            cells = " ".join(
                f"{slot.day}:{'-' if slot.value is None else f'{slot.value:g}'}"
                for slot in view.slots
            )
            click.echo(f"{view.name} ({view.goal:g} {view.unit}) streak={view.streak} | {cells}")
