"""Mapper functions to convert SQLAlchemy rows into domain entities.

Status, kind and frequency columns are stored as plain strings; this layer
is the only place they are turned into enums, so an invalid value fails
loudly here instead of reaching the state machine.
"""

from decimal import Decimal

from finflow.domain import entities as domain
from finflow.database.models import (
    BankAccount as ORMBankAccount,
    Transaction as ORMTransaction,
)


def bank_account_to_domain(orm_account: ORMBankAccount) -> domain.BankAccount:
    """Convert SQLAlchemy BankAccount model to domain BankAccount entity."""
    return domain.BankAccount(
        id=orm_account.id,
        tenant_id=orm_account.tenant_id,
        name=orm_account.name,
        bank_name=orm_account.bank_name,
        opening_balance=Decimal(orm_account.opening_balance or 0),
        created_at=orm_account.created_at,
    )


def transaction_to_domain(orm_txn: ORMTransaction) -> domain.TransactionInstance:
    """Convert SQLAlchemy Transaction model to domain TransactionInstance entity."""
    return domain.TransactionInstance(
        id=orm_txn.id,
        tenant_id=orm_txn.tenant_id,
        kind=domain.TransactionKind(orm_txn.kind),
        description=orm_txn.description,
        amount=Decimal(orm_txn.amount),
        due_date=orm_txn.due_date,
        status=domain.InstanceStatus(orm_txn.status),
        sequence_number=orm_txn.sequence_number,
        payment_date=orm_txn.payment_date,
        parent_template_id=orm_txn.parent_template_id,
        recurrence_frequency=(
            domain.Frequency(orm_txn.recurrence_frequency)
            if orm_txn.recurrence_frequency
            else None
        ),
        recurrence_interval=orm_txn.recurrence_interval,
        recurrence_end_date=orm_txn.recurrence_end_date,
        recurrence_count=orm_txn.recurrence_count,
        recurrence_total_amount=(
            Decimal(orm_txn.recurrence_total_amount)
            if orm_txn.recurrence_total_amount is not None
            else None
        ),
        generated_through_sequence=orm_txn.generated_through_sequence,
        bank_account_id=orm_txn.bank_account_id,
        cost_center_id=orm_txn.cost_center_id,
        category_id=orm_txn.category_id,
        subcategory_id=orm_txn.subcategory_id,
        payment_method=(
            domain.PaymentMethod(orm_txn.payment_method) if orm_txn.payment_method else None
        ),
        notes=orm_txn.notes,
        created_at=orm_txn.created_at,
    )
