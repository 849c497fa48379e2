"""Cash-flow report command."""

import click

from finflow.cli.account_resolution import resolve_account_or_exit
from finflow.cli.date_filters import period_option, resolve_cli_date_range
from finflow.cli.error_handling import handle_domain_error
from finflow.domain.cash_flow import CashFlowService
from finflow.utils.date_parser import get_date_range


@click.command("cashflow")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@period_option()
@click.option("--account", help="Restrict to one bank account (name or ID)")
@click.option(
    "--view",
    type=click.Choice(["entries", "daily", "monthly"]),
    default="entries",
    show_default=True,
    help="Realized ledger, daily balances or monthly projected/realized totals",
)
@click.option("--skip-empty", is_flag=True, help="Hide days without movement in the daily view")
@click.pass_context
def cashflow(
    ctx,
    start_date: str | None,
    end_date: str | None,
    period: str | None,
    account: str | None,
    view: str,
    skip_empty: bool,
):
    """Show the realized cash flow.

    Defaults to the current month.

    Examples:
        finflow cashflow --period last-month
        finflow cashflow --account Operating --view daily
        finflow cashflow --period last-12-months --view monthly
    """
    default_start, default_end = get_date_range("this-month")
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period=period,
        default_range=(default_start, default_end),
    )
    start = start or default_start
    end = end or default_end
    bank_account_id = resolve_account_or_exit(ctx, account)

    result = CashFlowService(ctx.obj["db"]).build_report(ctx.obj["tenant"], start, end, bank_account_id)
    if not result.ok:
        handle_domain_error(ctx, result.error)
    report = result.value

    click.echo(f"\nCash flow {report.start_date} to {report.end_date}")
    click.echo(f"Opening balance: {report.opening_balance:,.2f}")
    click.echo("-" * 90)

    if view == "entries":
        if not report.entries:
            click.echo("No realized transactions in this period.")
        for entry in report.entries:
            click.echo(
                f"{entry.date}  {entry.direction.value:7s}  {entry.amount:>12,.2f}  "
                f"{entry.running_balance:>14,.2f}  {entry.description}"
            )
    elif view == "daily":
        click.echo(f"{'Date':10s}  {'Income':>12s}  {'Expense':>12s}  {'Balance':>12s}  {'Accumulated':>14s}")
        for day in report.daily_balances:
            if skip_empty and not day.income and not day.expense:
                continue
            click.echo(
                f"{day.date}  {day.income:>12,.2f}  {day.expense:>12,.2f}  "
                f"{day.balance:>12,.2f}  {day.accumulated:>14,.2f}"
            )
    else:
        click.echo(
            f"{'Month':7s}  {'Proj. rev':>12s}  {'Proj. exp':>12s}  {'Proj. profit':>12s}  "
            f"{'Real. rev':>12s}  {'Real. exp':>12s}  {'Real. profit':>12s}"
        )
        for month in report.monthly_aggregates:
            click.echo(
                f"{month.month:%Y-%m}  {month.projected_revenue:>12,.2f}  {month.projected_expenses:>12,.2f}  "
                f"{month.projected_profit:>12,.2f}  {month.realized_revenue:>12,.2f}  "
                f"{month.realized_expenses:>12,.2f}  {month.realized_profit:>12,.2f}"
            )

    click.echo("-" * 90)
    click.echo(f"Closing balance: {report.closing_balance:,.2f}")


def register_commands(cli):
    """Register cashflow command with main CLI."""
    cli.add_command(cashflow)
