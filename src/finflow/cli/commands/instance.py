"""Payable and receivable lifecycle commands."""

from datetime import date

import click

from finflow.cli.account_resolution import resolve_account_or_exit
from finflow.cli.date_filters import period_option, resolve_cli_date_range
from finflow.cli.error_handling import handle_domain_error
from finflow.domain.deletion import SeriesDeletionService
from finflow.domain.entities import DeletionScope, InstanceStatus, TransactionKind
from finflow.domain.ledger import InstallmentLedger, derive_display_status, totals_by_display_status
from finflow.utils.amount_parser import parse_amount
from finflow.utils.date_parser import parse_date


def _parse_as_of(ctx, as_of: str | None) -> date:
    if as_of is None:
        return date.today()
    try:
        return parse_date(as_of)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)


@click.command("list")
@click.option("--kind", type=click.Choice([k.value for k in TransactionKind]), help="Payables or receivables")
@click.option(
    "--status",
    type=click.Choice([s.value for s in InstanceStatus]),
    help="Status as displayed (overdue = pending and past due)",
)
@click.option("--start-date", help="Start of the due-date range")
@click.option("--end-date", help="End of the due-date range")
@period_option()
@click.option("--account", help="Bank account name or ID")
@click.option("--as-of", help="Reference day for overdue detection (defaults to today)")
@click.pass_context
def list_instances(
    ctx,
    kind: str | None,
    status: str | None,
    start_date: str | None,
    end_date: str | None,
    period: str | None,
    account: str | None,
    as_of: str | None,
):
    """List payables and receivables with optional filters."""
    ledger = InstallmentLedger(ctx.obj["db"])
    start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date, period=period)
    bank_account_id = resolve_account_or_exit(ctx, account)
    reference = _parse_as_of(ctx, as_of)

    instances = ledger.list_instances(
        ctx.obj["tenant"],
        kind=TransactionKind(kind) if kind else None,
        status=InstanceStatus(status) if status else None,
        start_date=start,
        end_date=end,
        bank_account_id=bank_account_id,
        as_of=reference,
    )

    if not instances:
        click.echo("No transactions found.")
        return

    click.echo(f"\nFound {len(instances)} transaction(s):")
    click.echo("-" * 100)
    click.echo(f"{'ID':>5s}  {'Kind':10s}  {'Due':10s}  {'Status':9s}  {'Amount':>12s}  Description")
    for inst in instances:
        shown = derive_display_status(inst, reference)
        click.echo(
            f"{inst.id:5d}  {inst.kind.value:10s}  {inst.due_date}  {shown.value:9s}  "
            f"{inst.amount:>12,.2f}  {inst.description}"
        )


@click.command("outstanding")
@click.option("--as-of", help="Reference day for overdue detection (defaults to today)")
@click.pass_context
def outstanding(ctx, as_of: str | None):
    """Show pending and overdue totals for payables and receivables."""
    reference = _parse_as_of(ctx, as_of)
    ledger = InstallmentLedger(ctx.obj["db"])
    totals = totals_by_display_status(ledger.list_instances(ctx.obj["tenant"]), reference)

    click.echo(f"\nOutstanding as of {reference}:")
    click.echo("-" * 50)
    for kind in TransactionKind:
        click.echo(
            f"{kind.value:10s}  pending: {totals[kind][InstanceStatus.PENDING]:>12,.2f}  "
            f"overdue: {totals[kind][InstanceStatus.OVERDUE]:>12,.2f}"
        )


@click.command("pay")
@click.argument("instance_id", type=int)
@click.option("--date", "payment_date", help="Payment date (defaults to today)")
@click.pass_context
def pay_instance(ctx, instance_id: int, payment_date: str | None):
    """Register the payment of a pending payable or receivable."""
    paid_on = _parse_as_of(ctx, payment_date)
    result = InstallmentLedger(ctx.obj["db"]).register_payment(ctx.obj["tenant"], instance_id, as_of=paid_on)
    if not result.ok:
        handle_domain_error(ctx, result.error)
    click.echo(f"Transaction {instance_id} paid on {result.value.payment_date}")


@click.command("cancel")
@click.argument("instance_id", type=int)
@click.pass_context
def cancel_instance(ctx, instance_id: int):
    """Cancel a pending payable or receivable."""
    result = InstallmentLedger(ctx.obj["db"]).cancel(ctx.obj["tenant"], instance_id)
    if not result.ok:
        handle_domain_error(ctx, result.error)
    click.echo(f"Transaction {instance_id} cancelled")


@click.command("edit")
@click.argument("instance_id", type=int)
@click.option("--amount", help="New amount")
@click.option("--due-date", help="New due date")
@click.option("--description", help="New description")
@click.option("--notes", help="New notes")
@click.pass_context
def edit_instance(
    ctx,
    instance_id: int,
    amount: str | None,
    due_date: str | None,
    description: str | None,
    notes: str | None,
):
    """Edit an unpaid payable or receivable.

    Updates only the fields that are provided. Paid transactions cannot be edited.
    """
    new_amount = None
    if amount is not None:
        try:
            new_amount = parse_amount(amount)
        except ValueError as e:
            click.echo(f"Error: Invalid amount format: {e}", err=True)
            ctx.exit(1)

    new_due = None
    if due_date is not None:
        try:
            new_due = parse_date(due_date)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)

    result = InstallmentLedger(ctx.obj["db"]).update_instance(
        ctx.obj["tenant"],
        instance_id,
        amount=new_amount,
        due_date=new_due,
        description=description,
        notes=notes,
    )
    if not result.ok:
        handle_domain_error(ctx, result.error)
    click.echo(f"Updated transaction {instance_id}")


@click.command("delete")
@click.argument("instance_id", type=int)
@click.option(
    "--scope",
    type=click.Choice([s.value for s in DeletionScope]),
    help="Required for members of a recurring series: this occurrence or the whole series",
)
@click.pass_context
def delete_instance(ctx, instance_id: int, scope: str | None):
    """Delete a payable or receivable.

    Paid transactions are never deleted. For a recurring series member with
    other unpaid installments, --scope must say what to delete.

    Examples:
        finflow delete 12
        finflow delete 12 --scope series
    """
    result = SeriesDeletionService(ctx.obj["db"]).delete(
        ctx.obj["tenant"], instance_id, DeletionScope(scope) if scope else None
    )
    if not result.ok:
        handle_domain_error(ctx, result.error)

    plan = result.value
    click.echo(f"Deleted {len(plan.delete_ids)} transaction(s): {', '.join(str(i) for i in sorted(plan.delete_ids))}")
    if plan.retained_paid_ids:
        click.echo(
            f"Kept {len(plan.retained_paid_ids)} paid transaction(s): "
            f"{', '.join(str(i) for i in sorted(plan.retained_paid_ids))}"
        )
    if plan.retired_template_id is not None:
        click.echo(f"Ended recurring series {plan.retired_template_id}")


def register_commands(cli):
    """Register lifecycle commands with main CLI."""
    cli.add_command(list_instances)
    cli.add_command(outstanding)
    cli.add_command(pay_instance)
    cli.add_command(cancel_instance)
    cli.add_command(edit_instance)
    cli.add_command(delete_instance)
