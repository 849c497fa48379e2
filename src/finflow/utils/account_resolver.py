"""Utility for resolving bank account names to IDs."""

from finflow.domain.account import BankAccountService
from finflow.domain.entities import TenantContext
from finflow.domain.errors import NotFoundError


def resolve_bank_account(service: BankAccountService, tenant: TenantContext, account: str | int) -> int:
    """Resolve a bank account name or ID to its ID within the tenant.

    Args:
        service: BankAccountService instance
        tenant: Company the account must belong to
        account: Account name, or ID (int or string representation of int)

    Returns:
        Bank account ID

    Raises:
        NotFoundError: If no such account exists for the tenant
    """
    try:
        account_id = int(account)
    except (ValueError, TypeError):
        account_id = None

    if account_id is not None:
        if service.get_account(tenant, account_id) is None:
            raise NotFoundError(f"Bank account ID {account_id} not found")
        return account_id

    for acc in service.list_accounts(tenant):
        if acc.name == account:
            return acc.id

    raise NotFoundError(f"Bank account '{account}' not found")
