"""Installment ledger: lifecycle of persisted transaction instances."""

from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from typing import Optional

from finflow.database.base import Database
from finflow.domain.entities import (
    InstanceStatus,
    OperationResult,
    PaymentMethod,
    TenantContext,
    TransactionInstance,
    TransactionKind,
)
from finflow.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    already_in_status,
    bank_account_not_found,
    instance_not_found,
    paid_is_immutable,
)
from finflow.logging_config import get_logger
from finflow.utils.amount_parser import to_money

logger = get_logger("domain.ledger")


def derive_display_status(instance: TransactionInstance, as_of: date) -> InstanceStatus:
    """Return the status to show for an instance on ``as_of``.

    A pending instance past its due date reads as overdue; the stored
    status is never changed by this.
    """
    if instance.status is InstanceStatus.PENDING:
        if instance.due_date < as_of:
            return InstanceStatus.OVERDUE
        return InstanceStatus.PENDING
    if instance.status in (InstanceStatus.PAID, InstanceStatus.CANCELLED, InstanceStatus.OVERDUE):
        return instance.status
    raise ValidationError(f"Unknown status: {instance.status!r}")


def totals_by_display_status(
    instances: Iterable[TransactionInstance], as_of: date
) -> dict[TransactionKind, dict[InstanceStatus, Decimal]]:
    """Sum open amounts per kind, split into pending and overdue."""
    totals = {
        kind: {InstanceStatus.PENDING: Decimal("0.00"), InstanceStatus.OVERDUE: Decimal("0.00")}
        for kind in TransactionKind
    }
    for instance in instances:
        status = derive_display_status(instance, as_of)
        if status in (InstanceStatus.PENDING, InstanceStatus.OVERDUE):
            totals[instance.kind][status] += instance.amount
    return totals


def _conflict_for(instance: TransactionInstance) -> ConflictError:
    """Describe why a transition out of pending was refused."""
    return ConflictError(
        already_in_status(instance.id, instance.status.value), prior_status=instance.status.value
    )


class InstallmentLedger:
    """Service holding the canonical status of every instance."""

    def __init__(self, db: Database):
        """Initialize installment ledger.

        Args:
            db: Database instance
        """
        self.db = db

    def create_instance(
        self,
        tenant: TenantContext,
        kind: TransactionKind,
        description: str,
        amount: Decimal,
        due_date: Optional[date],
        bank_account_id: Optional[int] = None,
        cost_center_id: Optional[int] = None,
        category_id: Optional[int] = None,
        subcategory_id: Optional[int] = None,
        payment_method: Optional[PaymentMethod] = None,
        notes: Optional[str] = None,
    ) -> OperationResult[int]:
        """Create a non-recurring payable or receivable.

        Returns:
            Result carrying the new instance ID, or a ValidationError /
            NotFoundError
        """
        if not isinstance(kind, TransactionKind):
            return OperationResult.failure(ValidationError(f"Unknown transaction kind: {kind!r}"))
        if not description or not description.strip():
            return OperationResult.failure(ValidationError("Description is required"))
        if amount is None or amount <= 0:
            return OperationResult.failure(ValidationError("Amount must be greater than zero"))
        if due_date is None:
            return OperationResult.failure(ValidationError("Due date is required"))
        if bank_account_id is not None and self.db.get_bank_account(tenant.tenant_id, bank_account_id) is None:
            return OperationResult.failure(NotFoundError(bank_account_not_found(bank_account_id)))

        instance_id = self.db.create_instance(
            tenant.tenant_id,
            kind=kind,
            description=description.strip(),
            amount=to_money(amount),
            due_date=due_date,
            status=InstanceStatus.PENDING,
            bank_account_id=bank_account_id,
            cost_center_id=cost_center_id,
            category_id=category_id,
            subcategory_id=subcategory_id,
            payment_method=payment_method,
            notes=notes,
        )
        return OperationResult.success(instance_id)

    def get_instance(self, tenant: TenantContext, instance_id: int) -> Optional[TransactionInstance]:
        """Get an instance by ID, or None if it does not exist."""
        return self.db.get_instance(tenant.tenant_id, instance_id)

    def list_instances(
        self,
        tenant: TenantContext,
        kind: Optional[TransactionKind] = None,
        status: Optional[InstanceStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        bank_account_id: Optional[int] = None,
        as_of: Optional[date] = None,
    ) -> list[TransactionInstance]:
        """List instances, filtering on the display status when one is given.

        Args:
            status: Display status filter; OVERDUE selects pending instances
                whose due date is before as_of
            start_date: Optional lower bound on due date
            end_date: Optional upper bound on due date
            as_of: Reference day for the overdue view (defaults to today)
        """
        instances = self.db.list_instances(
            tenant.tenant_id,
            kind=kind,
            start_date=start_date,
            end_date=end_date,
            bank_account_id=bank_account_id,
        )
        if status is None:
            return instances
        as_of = as_of or date.today()
        return [inst for inst in instances if derive_display_status(inst, as_of) is status]

    def register_payment(
        self, tenant: TenantContext, instance_id: int, as_of: Optional[date] = None
    ) -> OperationResult[TransactionInstance]:
        """Mark a pending instance as paid on ``as_of``.

        The write is a single conditional update, so of two concurrent
        registrations exactly one succeeds.

        Returns:
            Result carrying the paid instance, or NotFoundError /
            ConflictError (with the prior status)
        """
        payment_date = as_of or date.today()
        if self.db.mark_paid_if_pending(tenant.tenant_id, instance_id, payment_date):
            logger.info(
                "payment_registered",
                extra={
                    "tenant_id": tenant.tenant_id,
                    "instance_id": instance_id,
                    "payment_date": payment_date,
                },
            )
            return OperationResult.success(self.db.get_instance(tenant.tenant_id, instance_id))

        current = self.db.get_instance(tenant.tenant_id, instance_id)
        if current is None:
            return OperationResult.failure(NotFoundError(instance_not_found(instance_id)))
        logger.warning(
            "payment_rejected",
            extra={"tenant_id": tenant.tenant_id, "instance_id": instance_id, "status": current.status},
        )
        return OperationResult.failure(_conflict_for(current))

    def cancel(self, tenant: TenantContext, instance_id: int) -> OperationResult[TransactionInstance]:
        """Cancel a pending instance. Paid instances cannot be cancelled."""
        if self.db.cancel_if_pending(tenant.tenant_id, instance_id):
            logger.info(
                "instance_cancelled",
                extra={"tenant_id": tenant.tenant_id, "instance_id": instance_id},
            )
            return OperationResult.success(self.db.get_instance(tenant.tenant_id, instance_id))

        current = self.db.get_instance(tenant.tenant_id, instance_id)
        if current is None:
            return OperationResult.failure(NotFoundError(instance_not_found(instance_id)))
        return OperationResult.failure(_conflict_for(current))

    def update_instance(
        self,
        tenant: TenantContext,
        instance_id: int,
        amount: Optional[Decimal] = None,
        due_date: Optional[date] = None,
        description: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> OperationResult[TransactionInstance]:
        """Edit an unpaid instance. Paid instances are immutable."""
        fields = {}
        if amount is not None:
            if amount <= 0:
                return OperationResult.failure(ValidationError("Amount must be greater than zero"))
            fields["amount"] = to_money(amount)
        if due_date is not None:
            fields["due_date"] = due_date
        if description is not None:
            if not description.strip():
                return OperationResult.failure(ValidationError("Description is required"))
            fields["description"] = description.strip()
        if notes is not None:
            fields["notes"] = notes
        if not fields:
            return OperationResult.failure(ValidationError("Nothing to update"))

        if self.db.update_instance_if_unpaid(tenant.tenant_id, instance_id, **fields):
            return OperationResult.success(self.db.get_instance(tenant.tenant_id, instance_id))

        current = self.db.get_instance(tenant.tenant_id, instance_id)
        if current is None:
            return OperationResult.failure(NotFoundError(instance_not_found(instance_id)))
        return OperationResult.failure(
            ConflictError(paid_is_immutable(instance_id), prior_status=current.status.value)
        )
