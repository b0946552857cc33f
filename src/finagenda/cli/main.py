"""Main CLI entry point."""

import logging

import click
from finagenda.database.factories import create_sqlite_database

# Import and register all commands at module level
from finagenda.cli.commands import (
    card,
    debt,
    entry,
    subscription,
    summary,
    sync,
)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides FINAGENDA_DB_PATH environment variable)",
    envvar="FINAGENDA_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging level (overrides FINAGENDA_LOG_LEVEL environment variable)",
    envvar="FINAGENDA_LOG_LEVEL",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str):
    """Finagenda - Personal finance agenda.

    Plan income, expenses and appointments month by month, with credit card
    invoices, subscriptions and debt payments forecast a year ahead.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db


# Register all commands
entry.register_commands(cli)
card.register_commands(cli)
subscription.register_commands(cli)
debt.register_commands(cli)
summary.register_commands(cli)
sync.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
