"""Main CLI entry point."""

import click

from finflow.database.factories import create_sqlite_database
from finflow.domain.entities import TenantContext
from finflow.logging_config import configure_logging

# Import and register all commands at module level
from finflow.cli.commands import (
    account,
    add,
    instance,
    recurring,
    cashflow,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides FINFLOW_DB_PATH environment variable)",
    envvar="FINFLOW_DB_PATH",
)
@click.option(
    "--tenant",
    default="default",
    show_default=True,
    help="Company the command operates on",
    envvar="FINFLOW_TENANT",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Log level for the structured log written to stderr",
    envvar="FINFLOW_LOG_LEVEL",
)
@click.pass_context
def cli(ctx, db_path: str | None, tenant: str, log_level: str):
    """Finflow - Payables, receivables and cash flow for small companies.

    Record bills and receivables, expand recurring series into installments,
    register payments and follow the realized cash flow per bank account.
    """
    ctx.ensure_object(dict)
    configure_logging(level=log_level)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.obj["tenant"] = TenantContext(tenant_id=tenant)
        ctx.call_on_close(db.disconnect)


# Register all commands
account.register_commands(cli)
add.register_commands(cli)
instance.register_commands(cli)
recurring.register_commands(cli)
cashflow.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
