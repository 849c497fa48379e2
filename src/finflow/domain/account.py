"""Bank account domain service."""

from decimal import Decimal
from typing import Optional

from finflow.database.base import Database
from finflow.domain.entities import BankAccount, TenantContext
from finflow.domain.errors import ConflictError, ValidationError, duplicate_bank_account_name
from finflow.utils.amount_parser import to_money


class BankAccountService:
    """Service for managing bank accounts."""

    def __init__(self, db: Database):
        """Initialize bank account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(
        self,
        tenant: TenantContext,
        name: str,
        bank_name: str,
        opening_balance: Decimal = Decimal("0"),
    ) -> int:
        """Create a new bank account.

        Args:
            tenant: Company the account belongs to
            name: Account name, unique within the tenant
            bank_name: Bank name
            opening_balance: Stored balance used to seed account-scoped cash flow

        Returns:
            Bank account ID

        Raises:
            ValidationError: If the name is empty
            ConflictError: If account name already exists
        """
        if not name or not name.strip():
            raise ValidationError("Bank account name is required")
        for acc in self.db.list_bank_accounts(tenant.tenant_id):
            if acc.name == name:
                raise ConflictError(duplicate_bank_account_name(name))

        return self.db.create_bank_account(
            tenant.tenant_id, name=name, bank_name=bank_name, opening_balance=to_money(opening_balance)
        )

    def get_account(self, tenant: TenantContext, bank_account_id: int) -> Optional[BankAccount]:
        """Get bank account by ID, or None if not found."""
        return self.db.get_bank_account(tenant.tenant_id, bank_account_id)

    def list_accounts(self, tenant: TenantContext) -> list[BankAccount]:
        """List all bank accounts of the tenant."""
        return self.db.list_bank_accounts(tenant.tenant_id)
