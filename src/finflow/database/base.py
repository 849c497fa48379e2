"""Abstract database interface.

Every method takes the tenant ID explicitly; implementations must never
return or touch rows belonging to another tenant.
"""

from abc import ABC, abstractmethod
from typing import Optional, Any
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from finflow.domain.entities import (
    BankAccount,
    InstanceStatus,
    TransactionInstance,
    TransactionKind,
)


class Database(ABC):
    """Abstract database interface for finflow."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Bank account operations
    @abstractmethod
    def create_bank_account(
        self, tenant_id: str, name: str, bank_name: str, opening_balance: Decimal
    ) -> int:
        """Create a bank account. Returns bank account ID."""
        pass

    @abstractmethod
    def get_bank_account(self, tenant_id: str, bank_account_id: int) -> Optional[BankAccount]:
        """Get bank account by ID."""
        pass

    @abstractmethod
    def list_bank_accounts(self, tenant_id: str) -> list[BankAccount]:
        """List all bank accounts of a tenant."""
        pass

    # Transaction instance operations
    @abstractmethod
    def create_instance(self, tenant_id: str, **fields: Any) -> int:
        """Create a transaction instance. Returns instance ID."""
        pass

    @abstractmethod
    def insert_installment(
        self, tenant_id: str, parent_template_id: int, sequence_number: int, **fields: Any
    ) -> Optional[int]:
        """Insert one installment of a series.

        Returns the new ID, or None when the (template, sequence number)
        pair already exists, e.g. because a concurrent generator won.
        """
        pass

    @abstractmethod
    def get_instance(self, tenant_id: str, instance_id: int) -> Optional[TransactionInstance]:
        """Get transaction instance by ID."""
        pass

    @abstractmethod
    def list_instances(
        self,
        tenant_id: str,
        kind: Optional[TransactionKind] = None,
        status: Optional[InstanceStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        bank_account_id: Optional[int] = None,
    ) -> list[TransactionInstance]:
        """List instances in creation order.

        Args:
            start_date: Optional lower bound on due date
            end_date: Optional upper bound on due date
        """
        pass

    @abstractmethod
    def list_series(self, tenant_id: str, template_id: int) -> list[TransactionInstance]:
        """List the template and every instance derived from it, by sequence number."""
        pass

    @abstractmethod
    def list_recurring_roots(self, tenant_id: str) -> list[TransactionInstance]:
        """List every recurring template (series root) of a tenant."""
        pass

    @abstractmethod
    def mark_paid_if_pending(self, tenant_id: str, instance_id: int, payment_date: date) -> bool:
        """Set status=paid and payment_date only if the instance is pending.

        Returns True if exactly this call performed the transition.
        """
        pass

    @abstractmethod
    def cancel_if_pending(self, tenant_id: str, instance_id: int) -> bool:
        """Set status=cancelled only if the instance is pending."""
        pass

    @abstractmethod
    def update_instance_if_unpaid(self, tenant_id: str, instance_id: int, **fields: Any) -> bool:
        """Update editable fields only if the instance is not paid."""
        pass

    @abstractmethod
    def advance_generated_through(self, tenant_id: str, template_id: int, sequence_number: int) -> None:
        """Raise the template's materialized high-water mark, never lower it."""
        pass

    @abstractmethod
    def delete_unpaid_instances(
        self,
        tenant_id: str,
        instance_ids: frozenset[int],
        retire_template_id: Optional[int] = None,
    ) -> int:
        """Delete the given instances in one transaction, skipping paid rows.

        When retire_template_id is given, that series root is kept in the
        same transaction: its occurrence count is cut to the last remaining
        installment and it is cancelled if still pending.

        Rows that no longer exist are ignored. Returns the number deleted.
        """
        pass
