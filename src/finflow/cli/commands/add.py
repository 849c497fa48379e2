"""Add payable or receivable command."""

import click

from finflow.cli.account_resolution import resolve_account_or_exit
from finflow.cli.error_handling import handle_domain_error
from finflow.domain.entities import Frequency, PaymentMethod, TransactionKind
from finflow.domain.ledger import InstallmentLedger
from finflow.domain.recurrence import RecurrenceService
from finflow.utils.amount_parser import parse_amount
from finflow.utils.date_parser import parse_date


def _parse_date_or_exit(ctx, value: str, label: str):
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


@click.command("add")
@click.argument("kind", type=click.Choice([k.value for k in TransactionKind]))
@click.option("--description", required=True, help="What the bill or receivable is for")
@click.option("--amount", required=True, help="Amount (e.g., 123.45); the series total with --split-total")
@click.option(
    "--due-date",
    required=True,
    help="Due date (YYYY-MM-DD or relative like 'today', 'tomorrow')",
)
@click.option("--account", help="Bank account name or ID")
@click.option("--cost-center-id", type=int, help="Cost center ID")
@click.option("--category-id", type=int, help="Category ID")
@click.option("--subcategory-id", type=int, help="Subcategory ID")
@click.option(
    "--payment-method",
    type=click.Choice([m.value for m in PaymentMethod]),
    help="Payment method",
)
@click.option("--notes", help="Notes")
@click.option("--recurring", is_flag=True, help="Create a recurring series starting at the due date")
@click.option(
    "--frequency",
    type=click.Choice([f.value for f in Frequency]),
    default=Frequency.MONTHLY.value,
    show_default=True,
    help="Recurrence frequency",
)
@click.option("--interval", type=int, default=1, show_default=True, help="Periods between installments")
@click.option("--end-date", help="Last possible due date of the series")
@click.option("--count", type=int, help="Number of installments, the first one included")
@click.option("--split-total", is_flag=True, help="Split --amount across the installments")
@click.pass_context
def add_instance(
    ctx,
    kind: str,
    description: str,
    amount: str,
    due_date: str,
    account: str | None,
    cost_center_id: int | None,
    category_id: int | None,
    subcategory_id: int | None,
    payment_method: str | None,
    notes: str | None,
    recurring: bool,
    frequency: str,
    interval: int,
    end_date: str | None,
    count: int | None,
    split_total: bool,
):
    """Add a payable or receivable, optionally as a recurring series.

    Examples:
        finflow add payable --description "Rent" --amount 2500 --due-date 2024-01-10 --recurring
        finflow add receivable --description "Sale #12" --amount 900 --due-date 2024-01-15 \\
            --recurring --count 3 --split-total
    """
    db = ctx.obj["db"]
    tenant = ctx.obj["tenant"]

    bank_account_id = resolve_account_or_exit(ctx, account)
    due = _parse_date_or_exit(ctx, due_date, "due date")

    try:
        value = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    if not recurring and (end_date or count is not None or split_total):
        click.echo("Error: --end-date, --count and --split-total require --recurring", err=True)
        ctx.exit(1)

    links = dict(
        bank_account_id=bank_account_id,
        cost_center_id=cost_center_id,
        category_id=category_id,
        subcategory_id=subcategory_id,
        payment_method=PaymentMethod(payment_method) if payment_method else None,
        notes=notes,
    )

    if recurring:
        result = RecurrenceService(db).create_recurring(
            tenant,
            kind=TransactionKind(kind),
            description=description,
            amount=value,
            due_date=due,
            frequency=Frequency(frequency),
            interval=interval,
            end_date=_parse_date_or_exit(ctx, end_date, "end date") if end_date else None,
            occurrence_count=count,
            split_total=split_total,
            **links,
        )
    else:
        result = InstallmentLedger(db).create_instance(
            tenant,
            kind=TransactionKind(kind),
            description=description,
            amount=value,
            due_date=due,
            **links,
        )

    if not result.ok:
        handle_domain_error(ctx, result.error)

    created = db.get_instance(tenant.tenant_id, result.value)
    click.echo(f"Created {kind} {created.id}")
    click.echo(f"  Description: {created.description}")
    click.echo(f"  Amount: {created.amount:,.2f}")
    click.echo(f"  Due date: {created.due_date}")
    if recurring:
        click.echo(f"  Recurrence: every {interval} {frequency} period(s)")
        if created.recurrence_total_amount is not None:
            click.echo(f"  Series total: {created.recurrence_total_amount:,.2f}")


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_instance)
