"""Main CLI entry point."""

import logging

import click
from microcompta.database.factories import create_sqlite_database

# Import and register all commands at module level
from microcompta.cli.commands import (
    account,
    dashboard,
    expense,
    income_tax,
    invoice,
    settings,
    tva,
    urssaf,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides MICROCOMPTA_DB_PATH environment variable)",
    envvar="MICROCOMPTA_DB_PATH",
)
@click.option(
    "--user",
    "user_id",
    default="default",
    show_default=True,
    envvar="MICROCOMPTA_USER",
    help="User whose ledger is read and written",
)
@click.option("--verbose", "-v", is_flag=True, help="Log calculation details to stderr")
@click.pass_context
def cli(ctx, db_path: str | None, user_id: str, verbose: bool):
    """Microcompta - bookkeeping for French micro-entrepreneurs.

    Track invoices and expenses, and estimate TVA, Urssaf contributions,
    income tax and the funds actually available on the business account.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.obj["user_id"] = user_id


# Register all commands
invoice.register_commands(cli)
expense.register_commands(cli)
tva.register_commands(cli)
urssaf.register_commands(cli)
income_tax.register_commands(cli)
settings.register_commands(cli)
account.register_commands(cli)
dashboard.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
