"""Main CLI entry point."""

import logging

import click

from reelcost.database.factories import create_database

# Import and register all commands at module level
from reelcost.cli.commands import (
    project,
    budget,
    invoice,
    allocation,
    report,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides REELCOST_DB_PATH environment variable)",
    envvar="REELCOST_DB_PATH",
)
@click.option(
    "--user",
    help="Acting user ID (overrides REELCOST_USER environment variable)",
    envvar="REELCOST_USER",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, db_path: str | None, user: str | None, verbose: bool):
    """Reelcost - Production invoice and budget tracking.

    Ingest vendor invoices, allocate them to budget lines of the project's
    active budget and take them through approval.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["user"] = user

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None and "db" not in ctx.obj:
        db = create_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db


# Register all commands
project.register_commands(cli)
budget.register_commands(cli)
invoice.register_commands(cli)
allocation.register_commands(cli)
report.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
