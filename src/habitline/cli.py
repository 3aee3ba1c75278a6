"""Command line entry points: schema setup, demo seed and reconciliation."""

from __future__ import annotations

import click

from .config import BaseConfig
from .infra.database import bootstrap_database
from .logging_config import setup_logging


def _bootstrap(ctx: click.Context):
    config: BaseConfig = ctx.obj["config"]
    _engine, session_factory = bootstrap_database(config)
    return config, session_factory


@click.group()
@click.pass_context
def main(ctx: click.Context) -> None:
    """Habitline maintenance commands."""

    config = BaseConfig()
    setup_logging(config)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


@main.command("init-db")
@click.pass_context
def init_db(ctx: click.Context) -> None:
    """Create the database schema."""

    config, _ = _bootstrap(ctx)
    click.echo(f"Database ready: {config.DATABASE_URL}")


@main.command("seed")
@click.option("--yes", is_flag=True, default=False, help="Skip the confirmation prompt")
@click.pass_context
def seed(ctx: click.Context, yes: bool) -> None:
    """Wipe all data and load the demo user, habits and moods."""

    from .services.seed import DEMO_EMAIL, DEMO_PASSWORD, run_demo_seed

    if not yes:
        click.confirm("This deletes every user, habit and mood entry. Continue?", abort=True)
    config, session_factory = _bootstrap(ctx)
    summary = run_demo_seed(session_factory, config=config)
    click.echo(
        f"Seeded {summary.users} user, {summary.habits} habits, "
        f"{summary.completions} completions, {summary.mood_entries} mood entries."
    )
    click.echo("Login with:")
    click.echo(f"  Email: {DEMO_EMAIL}")
    click.echo(f"  Password: {DEMO_PASSWORD}")


@main.command("reconcile")
@click.pass_context
def reconcile(ctx: click.Context) -> None:
    """Recompute every habit's streak aggregates from its full history."""

    from .services.habits import HabitService

    config, session_factory = _bootstrap(ctx)
    count = HabitService(session_factory, config=config).reconcile_all()
    click.echo(f"Reconciled {count} habits.")


if __name__ == "__main__":  # pragma: no cover
    main()
