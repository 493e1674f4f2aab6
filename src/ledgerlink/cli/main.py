"""Main CLI entry point."""

import click
from ledgerlink.database.factories import create_sqlite_database
from ledgerlink.logger import DEFAULT_LOG_LEVEL, configure_logging

# Import and register all commands at module level
from ledgerlink.cli.commands import (
    account,
    category,
    rate,
    statement,
    transaction,
    transfer,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides LEDGERLINK_DB_PATH environment variable)",
    envvar="LEDGERLINK_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=DEFAULT_LOG_LEVEL,
    envvar="LEDGERLINK_LOG_LEVEL",
    show_default=True,
    help="Minimum level of log messages written to stderr",
)
@click.option(
    "--json-logs",
    is_flag=True,
    envvar="LEDGERLINK_LOG_JSON",
    help="Write log messages as JSON lines",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str, json_logs: bool):
    """ledgerlink - statement reconciliation and transfer review.

    Reconcile imported bank statements against their transactions and
    review transfer candidates between your own accounts.
    """
    ctx.ensure_object(dict)

    # Initialize logging and database only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        configure_logging(level=log_level, json_logs=json_logs)
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
account.register_commands(cli)
category.register_commands(cli)
statement.register_commands(cli)
transaction.register_commands(cli)
transfer.register_commands(cli)
rate.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
