"""Recurring series commands."""

import click

from finflow.cli.error_handling import handle_domain_error
from finflow.domain.entities import TransactionKind
from finflow.domain.recurrence import DEFAULT_LEAD_DAYS, RecurrenceService
from finflow.utils.date_parser import parse_date


@click.group()
def recurring_group():
    """Expand recurring series into installments."""
    pass


@recurring_group.command("preview")
@click.argument("template_id", type=int)
@click.option("--horizon", type=int, default=12, show_default=True, help="Number of installments to show")
@click.pass_context
def preview(ctx, template_id: int, horizon: int):
    """Show the next installments of a series without saving them."""
    result = RecurrenceService(ctx.obj["db"]).preview(ctx.obj["tenant"], template_id, horizon)
    if not result.ok:
        handle_domain_error(ctx, result.error)

    if not result.value:
        click.echo("No further installments.")
        return
    for item in result.value:
        click.echo(f"{item.sequence_number:4d}  {item.due_date}  {item.amount:>12,.2f}  {item.description}")


@recurring_group.command("materialize")
@click.argument("template_id", type=int)
@click.option("--horizon", type=int, default=12, show_default=True, help="Number of installments to create")
@click.pass_context
def materialize(ctx, template_id: int, horizon: int):
    """Save the next installments of a series; existing ones are skipped."""
    result = RecurrenceService(ctx.obj["db"]).materialize(ctx.obj["tenant"], template_id, horizon)
    if not result.ok:
        handle_domain_error(ctx, result.error)
    click.echo(f"Created {len(result.value)} installment(s)")


@recurring_group.command("run")
@click.option("--as-of", help="Reference day (defaults to today)")
@click.option(
    "--lead-days",
    type=int,
    default=DEFAULT_LEAD_DAYS,
    show_default=True,
    help="Create installments due up to this many days ahead",
)
@click.pass_context
def run(ctx, as_of: str | None, lead_days: int):
    """Create every installment due soon across all recurring series."""
    try:
        reference = parse_date(as_of or "today")
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    result = RecurrenceService(ctx.obj["db"]).generate_due(ctx.obj["tenant"], reference, lead_days)
    if not result.ok:
        handle_domain_error(ctx, result.error)
    click.echo(f"Payables created: {result.value[TransactionKind.PAYABLE]}")
    click.echo(f"Receivables created: {result.value[TransactionKind.RECEIVABLE]}")


def register_commands(cli):
    """Register recurring commands with main CLI."""
    cli.add_command(recurring_group, name="recurring")
