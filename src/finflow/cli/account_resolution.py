"""CLI helpers for bank account resolution."""

from __future__ import annotations

import click

from finflow.domain.account import BankAccountService
from finflow.utils.account_resolver import resolve_bank_account


def resolve_account_or_exit(ctx: click.Context, account: str | int | None) -> int | None:
    """Resolve a bank account name or ID, or exit with a CLI error.

    Returns None when no account was given.
    """
    if account is None:
        return None
    service = BankAccountService(ctx.obj["db"])
    try:
        return resolve_bank_account(service, ctx.obj["tenant"], account)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)
