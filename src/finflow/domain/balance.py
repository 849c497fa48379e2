"""Opening balances and bank statement totals."""

from datetime import date
from decimal import Decimal
from typing import Optional

from finflow.database.base import Database
from finflow.domain.entities import (
    AccountSummary,
    InstanceStatus,
    OperationResult,
    TenantContext,
    TransactionKind,
)
from finflow.domain.errors import NotFoundError, bank_account_not_found

ZERO = Decimal("0.00")


class BalanceSnapshotService:
    """Read-only view of bank account balances."""

    def __init__(self, db: Database):
        """Initialize balance snapshot service.

        Args:
            db: Database instance
        """
        self.db = db

    def opening_balance(self, tenant: TenantContext, bank_account_id: Optional[int] = None) -> Decimal:
        """Balance a cash-flow view starts from.

        The account's stored balance when scoped to one account, zero for the
        company-wide view.

        Raises:
            NotFoundError: If the bank account does not exist for the tenant
        """
        if bank_account_id is None:
            return ZERO
        account = self.db.get_bank_account(tenant.tenant_id, bank_account_id)
        if account is None:
            raise NotFoundError(bank_account_not_found(bank_account_id))
        return account.opening_balance

    def account_summary(
        self,
        tenant: TenantContext,
        bank_account_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> OperationResult[AccountSummary]:
        """Statement totals for one account over instances due in the period.

        Open totals cover pending instances (overdue included); paid totals
        cover paid ones. Cancelled instances are ignored.
        """
        try:
            opening = self.opening_balance(tenant, bank_account_id)
        except NotFoundError as e:
            return OperationResult.failure(e)

        totals = {
            (kind, status): ZERO
            for kind in TransactionKind
            for status in (InstanceStatus.PENDING, InstanceStatus.PAID)
        }
        instances = self.db.list_instances(
            tenant.tenant_id,
            start_date=start_date,
            end_date=end_date,
            bank_account_id=bank_account_id,
        )
        for instance in instances:
            key = (instance.kind, instance.status)
            if key in totals:
                totals[key] += instance.amount

        return OperationResult.success(
            AccountSummary(
                bank_account_id=bank_account_id,
                income_open=totals[(TransactionKind.RECEIVABLE, InstanceStatus.PENDING)],
                income_paid=totals[(TransactionKind.RECEIVABLE, InstanceStatus.PAID)],
                expense_open=totals[(TransactionKind.PAYABLE, InstanceStatus.PENDING)],
                expense_paid=totals[(TransactionKind.PAYABLE, InstanceStatus.PAID)],
                opening_balance=opening,
            )
        )
