"""Cash-flow aggregation: realized ledger, daily balances and monthly views."""

from collections.abc import Sequence
from datetime import date
from decimal import Decimal
from typing import Optional

from finflow.database.base import Database
from finflow.domain.balance import BalanceSnapshotService
from finflow.domain.entities import (
    CashFlowEntry,
    CashFlowReport,
    DailyBalance,
    Direction,
    InstanceStatus,
    MonthlyAggregate,
    OperationResult,
    TenantContext,
    TransactionInstance,
)
from finflow.domain.errors import NotFoundError, ValidationError
from finflow.logging_config import get_logger
from finflow.utils.date_parser import iter_days, iter_months, month_start

logger = get_logger("domain.cash_flow")

ZERO = Decimal("0.00")


def _signed(instance: TransactionInstance) -> Decimal:
    if instance.direction is Direction.INCOME:
        return instance.amount
    return -instance.amount


def _in_scope(instance: TransactionInstance, bank_account_id: Optional[int]) -> bool:
    return bank_account_id is None or instance.bank_account_id == bank_account_id


def realized_entries(
    instances: Sequence[TransactionInstance],
    start_date: date,
    end_date: date,
    bank_account_id: Optional[int] = None,
    opening_balance: Decimal = ZERO,
) -> list[CashFlowEntry]:
    """Build the realized ledger with a running balance.

    Only paid instances with a payment date inside the range count. Entries
    are ordered by payment date; entries on the same day keep the order
    they had in ``instances`` (callers pass creation order).
    """
    realized = [
        inst
        for inst in instances
        if inst.status is InstanceStatus.PAID
        and inst.payment_date is not None
        and start_date <= inst.payment_date <= end_date
        and _in_scope(inst, bank_account_id)
    ]
    realized.sort(key=lambda inst: inst.payment_date)

    entries = []
    running = opening_balance
    for inst in realized:
        running += _signed(inst)
        entries.append(
            CashFlowEntry(
                id=inst.id,
                date=inst.payment_date,
                direction=inst.direction,
                amount=inst.amount,
                description=inst.description,
                category_id=inst.subcategory_id or inst.category_id,
                running_balance=running,
            )
        )
    return entries


def daily_balances(
    entries: Sequence[CashFlowEntry],
    start_date: date,
    end_date: date,
    opening_balance: Decimal = ZERO,
) -> list[DailyBalance]:
    """Roll entries up per day, including days without activity.

    ``accumulated`` starts from the opening balance, so on every day it
    equals the running balance of that day's last entry.
    """
    days = {day: [ZERO, ZERO] for day in iter_days(start_date, end_date)}
    for entry in entries:
        if entry.date not in days:
            continue
        if entry.direction is Direction.INCOME:
            days[entry.date][0] += entry.amount
        else:
            days[entry.date][1] += entry.amount

    balances = []
    accumulated = opening_balance
    for day, (income, expense) in days.items():
        balance = income - expense
        accumulated += balance
        balances.append(
            DailyBalance(date=day, income=income, expense=expense, balance=balance, accumulated=accumulated)
        )
    return balances


def monthly_aggregates(
    instances: Sequence[TransactionInstance],
    start_date: date,
    end_date: date,
    bank_account_id: Optional[int] = None,
) -> list[MonthlyAggregate]:
    """Per-month projected and realized totals.

    Projected: every non-cancelled instance due in the range, bucketed by
    due date. Realized: paid instances bucketed by payment date. The two
    views are summed separately and never mixed.
    """
    buckets = {month: [ZERO, ZERO, ZERO, ZERO] for month in iter_months(start_date, end_date)}

    for inst in instances:
        if not _in_scope(inst, bank_account_id):
            continue
        income = inst.direction is Direction.INCOME
        if inst.status is not InstanceStatus.CANCELLED and start_date <= inst.due_date <= end_date:
            bucket = buckets[month_start(inst.due_date)]
            bucket[0 if income else 1] += inst.amount
        if (
            inst.status is InstanceStatus.PAID
            and inst.payment_date is not None
            and start_date <= inst.payment_date <= end_date
        ):
            bucket = buckets[month_start(inst.payment_date)]
            bucket[2 if income else 3] += inst.amount

    return [
        MonthlyAggregate(
            month=month,
            projected_revenue=values[0],
            projected_expenses=values[1],
            realized_revenue=values[2],
            realized_expenses=values[3],
        )
        for month, values in buckets.items()
    ]


def aggregate(
    instances: Sequence[TransactionInstance],
    date_range: tuple[date, date],
    bank_account_id: Optional[int] = None,
    opening_balance: Decimal = ZERO,
) -> CashFlowReport:
    """Aggregate instances into the cash-flow report for a date range.

    Args:
        instances: Instances of one tenant, in creation order
        date_range: Inclusive (start, end) dates
        bank_account_id: Restrict the report to one bank account
        opening_balance: Balance the running and accumulated figures start from

    Raises:
        ValidationError: If the range is inverted
    """
    start_date, end_date = date_range
    if start_date > end_date:
        raise ValidationError(f"Start date {start_date} is after end date {end_date}")

    entries = realized_entries(instances, start_date, end_date, bank_account_id, opening_balance)
    return CashFlowReport(
        start_date=start_date,
        end_date=end_date,
        bank_account_id=bank_account_id,
        opening_balance=opening_balance,
        entries=tuple(entries),
        daily_balances=tuple(daily_balances(entries, start_date, end_date, opening_balance)),
        monthly_aggregates=tuple(monthly_aggregates(instances, start_date, end_date, bank_account_id)),
    )


class CashFlowService:
    """Service that loads a tenant's instances and aggregates them."""

    def __init__(self, db: Database):
        """Initialize cash flow service.

        Args:
            db: Database instance
        """
        self.db = db
        self.balances = BalanceSnapshotService(db)

    def build_report(
        self,
        tenant: TenantContext,
        start_date: date,
        end_date: date,
        bank_account_id: Optional[int] = None,
    ) -> OperationResult[CashFlowReport]:
        """Build the cash-flow report of a tenant, optionally for one account."""
        try:
            opening = self.balances.opening_balance(tenant, bank_account_id)
            instances = self.db.list_instances(tenant.tenant_id, bank_account_id=bank_account_id)
            report = aggregate(instances, (start_date, end_date), bank_account_id, opening)
        except (NotFoundError, ValidationError) as e:
            return OperationResult.failure(e)

        logger.debug(
            "cash_flow_built",
            extra={
                "tenant_id": tenant.tenant_id,
                "start_date": start_date,
                "end_date": end_date,
                "bank_account_id": bank_account_id,
                "entries": len(report.entries),
            },
        )
        return OperationResult.success(report)
