"""Domain model entities for finflow.

These are pure data classes representing business concepts, independent of
database schema. Storage rows are converted into these by the mapper layer,
so the engine logic never sees ORM objects.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Generic, Optional, TypeVar


class Frequency(str, Enum):
    """Recurrence unit of a recurring template."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class InstanceStatus(str, Enum):
    """Lifecycle status of a transaction instance.

    OVERDUE is never stored by finflow; it is only produced when deriving
    the display status of a pending instance.
    """

    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class TransactionKind(str, Enum):
    """Whether an instance is owed by the company or to the company."""

    PAYABLE = "payable"
    RECEIVABLE = "receivable"


class Direction(str, Enum):
    """Cash direction of a realized movement."""

    INCOME = "income"
    EXPENSE = "expense"


class DeletionScope(str, Enum):
    """Explicit scope for deleting a member of a recurring series."""

    SINGLE = "single"
    SERIES = "series"


class PaymentMethod(str, Enum):
    """How an instance was (or is expected to be) settled."""

    BOLETO = "boleto"
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    TRANSFER = "transfer"
    PIX = "pix"
    CHECK = "check"
    CASH = "cash"
    OTHER = "other"


def direction_for(kind: TransactionKind) -> Direction:
    """Map a transaction kind to its cash direction."""
    if kind is TransactionKind.RECEIVABLE:
        return Direction.INCOME
    return Direction.EXPENSE


@dataclass(frozen=True)
class TenantContext:
    """Company scope passed explicitly into every storage-touching call."""

    tenant_id: str


@dataclass(frozen=True)
class BankAccount:
    """Bank account domain entity."""

    id: int
    tenant_id: str
    name: str
    bank_name: str
    opening_balance: Decimal
    created_at: datetime


@dataclass(frozen=True)
class TransactionInstance:
    """One payable or receivable obligation."""

    id: int
    tenant_id: str
    kind: TransactionKind
    description: str
    amount: Decimal
    due_date: date
    status: InstanceStatus
    sequence_number: int = 1
    payment_date: Optional[date] = None
    parent_template_id: Optional[int] = None
    recurrence_frequency: Optional[Frequency] = None
    recurrence_interval: Optional[int] = None
    recurrence_end_date: Optional[date] = None
    recurrence_count: Optional[int] = None
    recurrence_total_amount: Optional[Decimal] = None
    generated_through_sequence: Optional[int] = None
    bank_account_id: Optional[int] = None
    cost_center_id: Optional[int] = None
    category_id: Optional[int] = None
    subcategory_id: Optional[int] = None
    payment_method: Optional[PaymentMethod] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def direction(self) -> Direction:
        return direction_for(self.kind)

    @property
    def is_recurring_root(self) -> bool:
        return self.parent_template_id is None and self.recurrence_frequency is not None

    @property
    def series_root_id(self) -> int:
        """ID of the template this instance belongs to (itself for roots)."""
        return self.parent_template_id if self.parent_template_id is not None else self.id


@dataclass(frozen=True)
class RecurringTemplate:
    """Recurring obligation definition, read from the root of a series.

    When total_amount is set the series splits that total across its
    installments; otherwise every installment carries amount. Sequence
    numbers up to generated_through_sequence were already materialized
    once and are never created again, even after being deleted.
    """

    id: Optional[int]
    tenant_id: str
    kind: TransactionKind
    description: str
    amount: Decimal
    frequency: Frequency
    interval: int
    start_date: date
    end_date: Optional[date] = None
    occurrence_count: Optional[int] = None
    total_amount: Optional[Decimal] = None
    bank_account_id: Optional[int] = None
    cost_center_id: Optional[int] = None
    category_id: Optional[int] = None
    subcategory_id: Optional[int] = None
    payment_method: Optional[PaymentMethod] = None
    generated_through_sequence: int = 1


@dataclass(frozen=True)
class InstallmentPreview:
    """A not-yet-persisted installment produced by the expander."""

    sequence_number: int
    due_date: date
    amount: Decimal
    description: str


@dataclass(frozen=True)
class DeletionPlan:
    """Concrete outcome of resolving a deletion request.

    retired_template_id names a series root kept for history: its
    recurrence ends and, if still pending, it is cancelled.
    """

    target_id: int
    scope: DeletionScope
    delete_ids: frozenset[int]
    retained_paid_ids: frozenset[int] = frozenset()
    retired_template_id: Optional[int] = None


@dataclass(frozen=True)
class CashFlowEntry:
    """One realized movement with the balance right after it."""

    id: int
    date: date
    direction: Direction
    amount: Decimal
    description: str
    category_id: Optional[int]
    running_balance: Decimal


@dataclass(frozen=True)
class DailyBalance:
    """Per-day rollup of realized movements."""

    date: date
    income: Decimal
    expense: Decimal
    balance: Decimal
    accumulated: Decimal


@dataclass(frozen=True)
class MonthlyAggregate:
    """Per-month rollup with separate projected and realized views."""

    month: date
    projected_revenue: Decimal
    projected_expenses: Decimal
    realized_revenue: Decimal
    realized_expenses: Decimal

    @property
    def projected_profit(self) -> Decimal:
        return self.projected_revenue - self.projected_expenses

    @property
    def realized_profit(self) -> Decimal:
        return self.realized_revenue - self.realized_expenses


@dataclass(frozen=True)
class CashFlowReport:
    """Output of the cash-flow aggregator."""

    start_date: date
    end_date: date
    bank_account_id: Optional[int]
    opening_balance: Decimal
    entries: tuple[CashFlowEntry, ...] = ()
    daily_balances: tuple[DailyBalance, ...] = ()
    monthly_aggregates: tuple[MonthlyAggregate, ...] = ()

    @property
    def closing_balance(self) -> Decimal:
        if self.entries:
            return self.entries[-1].running_balance
        return self.opening_balance


@dataclass(frozen=True)
class AccountSummary:
    """Bank statement totals for one account over a period."""

    bank_account_id: int
    income_open: Decimal
    income_paid: Decimal
    expense_open: Decimal
    expense_paid: Decimal
    opening_balance: Decimal

    @property
    def period_total(self) -> Decimal:
        return self.income_paid - self.expense_paid

    @property
    def current_balance(self) -> Decimal:
        return self.opening_balance + self.income_paid - self.expense_paid


T = TypeVar("T")


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Typed outcome of a service operation.

    Expected business failures travel in ``error``; only infrastructure
    failures are raised.
    """

    value: Optional[T] = None
    error: Optional[Exception] = field(default=None)

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "OperationResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: Exception) -> "OperationResult[T]":
        return cls(error=error)

    def unwrap(self) -> T:
        """Return the value, raising the carried error on failure."""
        if self.error is not None:
            raise self.error
        return self.value
