"""Bank account management commands."""

import click

from finflow.cli.account_resolution import resolve_account_or_exit
from finflow.cli.date_filters import period_option, resolve_cli_date_range
from finflow.cli.error_handling import handle_domain_error
from finflow.domain.account import BankAccountService
from finflow.domain.balance import BalanceSnapshotService
from finflow.utils.amount_parser import parse_amount
from finflow.utils.date_parser import get_date_range


@click.group()
def account_group():
    """Manage bank accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--bank", help="Bank name (defaults to account name if not provided)")
@click.option("--opening-balance", default="0", help="Opening balance (e.g., 1500.00)")
@click.pass_context
def create_account(ctx, name: str, bank: str | None, opening_balance: str):
    """Create a new bank account.

    Examples:
        finflow account create "Operating"
        finflow account create "Operating" --bank "Itau" --opening-balance 1500
    """
    service = BankAccountService(ctx.obj["db"])

    # If bank not provided, use account name as bank name
    bank_name = bank if bank is not None else name

    try:
        balance = parse_amount(opening_balance)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    try:
        account_id = service.create_account(
            ctx.obj["tenant"], name=name, bank_name=bank_name, opening_balance=balance
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created bank account '{name}' (ID: {account_id})")
    if bank is None:
        click.echo(f"Bank name set to '{bank_name}'")


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List all bank accounts."""
    service = BankAccountService(ctx.obj["db"])

    accounts = service.list_accounts(ctx.obj["tenant"])
    if not accounts:
        click.echo("No bank accounts found.")
        return

    click.echo("\nBank accounts:")
    click.echo("-" * 70)
    for acc in accounts:
        click.echo(
            f"ID: {acc.id:3d} | {acc.name:20s} | Bank: {acc.bank_name:15s} | "
            f"Opening: {acc.opening_balance:,.2f}"
        )


@account_group.command("summary")
@click.argument("account", metavar="ACCOUNT")
@click.option("--start-date", help="Start of the due-date range")
@click.option("--end-date", help="End of the due-date range")
@period_option()
@click.pass_context
def account_summary(ctx, account: str, start_date: str | None, end_date: str | None, period: str | None):
    """Show open and paid totals and the current balance of a bank account.

    ACCOUNT can be an account name or ID. Defaults to the current month.
    """
    account_id = resolve_account_or_exit(ctx, account)
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period=period,
        default_range=get_date_range("this-month"),
    )

    service = BalanceSnapshotService(ctx.obj["db"])
    result = service.account_summary(ctx.obj["tenant"], account_id, start, end)
    if not result.ok:
        handle_domain_error(ctx, result.error)

    summary = result.value
    click.echo(f"\nBank account {account_id}: {start or '...'} to {end or '...'}")
    click.echo("-" * 50)
    click.echo(f"Opening balance:   {summary.opening_balance:>14,.2f}")
    click.echo(f"Income (open):     {summary.income_open:>14,.2f}")
    click.echo(f"Income (paid):     {summary.income_paid:>14,.2f}")
    click.echo(f"Expenses (open):   {summary.expense_open:>14,.2f}")
    click.echo(f"Expenses (paid):   {summary.expense_paid:>14,.2f}")
    click.echo(f"Period total:      {summary.period_total:>14,.2f}")
    click.echo(f"Current balance:   {summary.current_balance:>14,.2f}")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
