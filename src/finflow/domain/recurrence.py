"""Recurring template expansion and the service that materializes it."""

from collections.abc import Iterator
from datetime import date, timedelta
from decimal import Decimal, ROUND_DOWN
from itertools import islice, takewhile
from typing import Any, Optional

from dateutil.relativedelta import relativedelta

from finflow.database.base import Database
from finflow.domain.entities import (
    Frequency,
    InstallmentPreview,
    InstanceStatus,
    OperationResult,
    PaymentMethod,
    RecurringTemplate,
    TenantContext,
    TransactionInstance,
    TransactionKind,
)
from finflow.domain.errors import (
    ConflictError,
    DomainError,
    NotFoundError,
    ValidationError,
    already_in_status,
    bank_account_not_found,
    instance_not_found,
    template_not_found,
)
from finflow.logging_config import get_logger
from finflow.utils.amount_parser import CENT, to_money

logger = get_logger("domain.recurrence")

_MONTHS_PER_UNIT = {
    Frequency.MONTHLY: 1,
    Frequency.QUARTERLY: 3,
    Frequency.YEARLY: 12,
}

DEFAULT_LEAD_DAYS = 30


def step_date(start: date, frequency: Frequency, interval: int, steps: int) -> date:
    """Return the due date ``steps`` periods after ``start``.

    Dates are always computed from the start date rather than from the
    previous occurrence, so a Jan 31 start gives Feb 29 and then Mar 31.
    """
    units = interval * steps
    if frequency is Frequency.DAILY:
        return start + timedelta(days=units)
    if frequency is Frequency.WEEKLY:
        return start + timedelta(weeks=units)
    if frequency in _MONTHS_PER_UNIT:
        return start + relativedelta(months=units * _MONTHS_PER_UNIT[frequency])
    raise ValidationError(f"Unknown frequency: {frequency!r}")


def validate_template(template: RecurringTemplate) -> None:
    """Reject a malformed template before anything is written.

    Raises:
        ValidationError: If any field is out of range
    """
    if not isinstance(template.frequency, Frequency):
        raise ValidationError(f"Unknown frequency: {template.frequency!r}")
    if template.start_date is None:
        raise ValidationError("Recurring template needs a start due date")
    if template.interval is None or template.interval < 1:
        raise ValidationError(f"Recurrence interval must be a positive integer, got {template.interval}")
    if template.amount is None or template.amount <= 0:
        raise ValidationError("Amount must be greater than zero")
    if template.occurrence_count is not None and template.occurrence_count < 1:
        raise ValidationError("Occurrence count must be at least 1")
    if template.end_date is not None and template.end_date < template.start_date:
        raise ValidationError("Recurrence end date is before the start date")
    if template.total_amount is not None:
        if template.total_amount <= 0:
            raise ValidationError("Total amount must be greater than zero")
        if template.occurrence_count is None and template.end_date is None:
            raise ValidationError(
                "A total amount can only be split across a series with an end date or an occurrence count"
            )


def iter_due_dates(template: RecurringTemplate) -> Iterator[tuple[int, date]]:
    """Yield (sequence number, due date) pairs, starting with the template itself.

    Stops at the end date or the occurrence count, whichever comes first;
    an unbounded template yields forever.
    """
    steps = 0
    while True:
        sequence = steps + 1
        if template.occurrence_count is not None and sequence > template.occurrence_count:
            return
        due = step_date(template.start_date, template.frequency, template.interval, steps)
        if template.end_date is not None and due > template.end_date:
            return
        yield sequence, due
        steps += 1


def installment_count(template: RecurringTemplate) -> Optional[int]:
    """Number of installments in the series, or None when open-ended."""
    if template.occurrence_count is None and template.end_date is None:
        return None
    return sum(1 for _ in iter_due_dates(template))


def split_amount(total: Decimal, count: int) -> list[Decimal]:
    """Split ``total`` into ``count`` cent amounts that add up exactly.

    Every installment gets the total divided by count, rounded down to the
    cent; the last one absorbs the remainder.
    """
    if count < 1:
        raise ValidationError("Cannot split an amount across zero installments")
    total = to_money(total)
    base = (total / count).quantize(CENT, rounding=ROUND_DOWN)
    # Totals under one cent per installment are rejected, never split into zero amounts
    if base <= 0:
        raise ValidationError(f"Amount {total} is too small to split across {count} installments")
    return [base] * (count - 1) + [total - base * (count - 1)]


def installment_description(description: str, sequence: int, count: Optional[int]) -> str:
    """Human label for one installment of a series."""
    if count is None:
        return f"{description} - Occurrence {sequence}"
    return f"{description} - Installment {sequence}/{count}"


def _previews(template: RecurringTemplate) -> Iterator[InstallmentPreview]:
    count = installment_count(template)
    amounts = split_amount(template.total_amount, count) if template.total_amount is not None else None
    for sequence, due in iter_due_dates(template):
        amount = amounts[sequence - 1] if amounts is not None else to_money(template.amount)
        yield InstallmentPreview(
            sequence_number=sequence,
            due_date=due,
            amount=amount,
            description=installment_description(template.description, sequence, count),
        )


def build_schedule(template: RecurringTemplate) -> list[InstallmentPreview]:
    """Return every installment of a bounded series, template included.

    Raises:
        ValidationError: If the template is invalid or open-ended
    """
    validate_template(template)
    if template.occurrence_count is None and template.end_date is None:
        raise ValidationError("Cannot build the full schedule of an open-ended series")
    return list(_previews(template))


def expand(
    template: RecurringTemplate, horizon_periods: int, after_sequence: int = 1
) -> list[InstallmentPreview]:
    """Expand a template into its next installments.

    The template occupies sequence number 1; previews start after
    ``after_sequence`` and at most ``horizon_periods`` of them are returned.

    Raises:
        ValidationError: If the template or horizon is invalid
    """
    validate_template(template)
    if horizon_periods < 0:
        raise ValidationError("Horizon must not be negative")
    upcoming = (p for p in _previews(template) if p.sequence_number > after_sequence)
    return list(islice(upcoming, horizon_periods))


def expand_until(
    template: RecurringTemplate, until: date, after_sequence: int = 1
) -> list[InstallmentPreview]:
    """Expand a template into every installment due on or before ``until``."""
    validate_template(template)
    upcoming = (p for p in _previews(template) if p.sequence_number > after_sequence)
    return list(takewhile(lambda p: p.due_date <= until, upcoming))


def template_from_instance(instance: TransactionInstance) -> RecurringTemplate:
    """Read the recurring template carried by a series root.

    Raises:
        ValidationError: If the instance is not a series root
    """
    if not instance.is_recurring_root:
        raise ValidationError(template_not_found(instance.id))
    return RecurringTemplate(
        id=instance.id,
        tenant_id=instance.tenant_id,
        kind=instance.kind,
        description=instance.description,
        amount=instance.amount,
        frequency=instance.recurrence_frequency,
        interval=instance.recurrence_interval or 1,
        start_date=instance.due_date,
        end_date=instance.recurrence_end_date,
        occurrence_count=instance.recurrence_count,
        total_amount=instance.recurrence_total_amount,
        bank_account_id=instance.bank_account_id,
        cost_center_id=instance.cost_center_id,
        category_id=instance.category_id,
        subcategory_id=instance.subcategory_id,
        payment_method=instance.payment_method,
        generated_through_sequence=instance.generated_through_sequence or 1,
    )


class RecurrenceService:
    """Service for creating recurring templates and materializing installments."""

    def __init__(self, db: Database):
        """Initialize recurrence service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_recurring(
        self,
        tenant: TenantContext,
        kind: TransactionKind,
        description: str,
        amount: Decimal,
        due_date: date,
        frequency: Frequency,
        interval: int = 1,
        end_date: Optional[date] = None,
        occurrence_count: Optional[int] = None,
        split_total: bool = False,
        bank_account_id: Optional[int] = None,
        cost_center_id: Optional[int] = None,
        category_id: Optional[int] = None,
        subcategory_id: Optional[int] = None,
        payment_method: Optional[PaymentMethod] = None,
        notes: Optional[str] = None,
    ) -> OperationResult[int]:
        """Create the root instance of a recurring series.

        Args:
            amount: Per-period amount, or the series total when split_total is set
            due_date: Due date of the first installment (the template itself)
            split_total: Split amount across the installments instead of repeating it

        Returns:
            Result carrying the template ID
        """
        template = RecurringTemplate(
            id=None,
            tenant_id=tenant.tenant_id,
            kind=kind,
            description=description,
            amount=amount,
            frequency=frequency,
            interval=interval,
            start_date=due_date,
            end_date=end_date,
            occurrence_count=occurrence_count,
            total_amount=amount if split_total else None,
        )
        try:
            if not description or not description.strip():
                raise ValidationError("Description is required")
            if split_total:
                first_amount = build_schedule(template)[0].amount
            else:
                validate_template(template)
                first_amount = to_money(amount)
            if bank_account_id is not None and self.db.get_bank_account(tenant.tenant_id, bank_account_id) is None:
                raise NotFoundError(bank_account_not_found(bank_account_id))
        except DomainError as e:
            return OperationResult.failure(e)

        template_id = self.db.create_instance(
            tenant.tenant_id,
            kind=kind,
            description=description.strip(),
            amount=first_amount,
            due_date=due_date,
            status=InstanceStatus.PENDING,
            sequence_number=1,
            recurrence_frequency=frequency,
            recurrence_interval=interval,
            recurrence_end_date=end_date,
            recurrence_count=occurrence_count,
            recurrence_total_amount=to_money(amount) if split_total else None,
            bank_account_id=bank_account_id,
            cost_center_id=cost_center_id,
            category_id=category_id,
            subcategory_id=subcategory_id,
            payment_method=payment_method,
            notes=notes,
        )
        logger.info(
            "recurring_template_created",
            extra={
                "tenant_id": tenant.tenant_id,
                "template_id": template_id,
                "frequency": frequency,
                "interval": interval,
            },
        )
        return OperationResult.success(template_id)

    def _load_root(self, tenant: TenantContext, template_id: int) -> TransactionInstance:
        root = self.db.get_instance(tenant.tenant_id, template_id)
        if root is None:
            raise NotFoundError(instance_not_found(template_id))
        return root

    def get_template(self, tenant: TenantContext, template_id: int) -> OperationResult[RecurringTemplate]:
        """Load the template of a series by its root ID."""
        try:
            return OperationResult.success(template_from_instance(self._load_root(tenant, template_id)))
        except (NotFoundError, ValidationError) as e:
            return OperationResult.failure(e)

    def preview(
        self, tenant: TenantContext, template_id: int, horizon_periods: int
    ) -> OperationResult[list[InstallmentPreview]]:
        """Expand a stored template without persisting anything."""
        result = self.get_template(tenant, template_id)
        if not result.ok:
            return OperationResult.failure(result.error)
        try:
            return OperationResult.success(expand(result.value, horizon_periods))
        except ValidationError as e:
            return OperationResult.failure(e)

    def materialize(
        self, tenant: TenantContext, template_id: int, horizon_periods: int
    ) -> OperationResult[list[int]]:
        """Persist the next installments of a series.

        Installments that already exist, matched by sequence number or due
        date, are left untouched, so running this repeatedly (or next to an
        external generator) never duplicates rows or alters paid history.
        Installments that were materialized once and later deleted stay
        deleted.

        Returns:
            Result carrying the IDs of newly created instances, or a
            ConflictError when the template is cancelled
        """
        try:
            root = self._load_root(tenant, template_id)
            template = template_from_instance(root)
            if root.status is InstanceStatus.CANCELLED:
                raise ConflictError(
                    already_in_status(root.id, root.status.value), prior_status=root.status.value
                )
            previews = expand(template, horizon_periods)
        except DomainError as e:
            return OperationResult.failure(e)
        return OperationResult.success(self._persist(tenant, template, previews))

    def generate_due(
        self, tenant: TenantContext, as_of: date, lead_days: int = DEFAULT_LEAD_DAYS
    ) -> OperationResult[dict[TransactionKind, int]]:
        """Materialize every installment due within ``lead_days`` of ``as_of``.

        Cancelled templates and templates that fail validation are skipped.

        Returns:
            Result carrying the number of created instances per kind
        """
        if lead_days < 0:
            return OperationResult.failure(ValidationError("Lead days must not be negative"))

        until = as_of + timedelta(days=lead_days)
        created = {TransactionKind.PAYABLE: 0, TransactionKind.RECEIVABLE: 0}
        for root in self.db.list_recurring_roots(tenant.tenant_id):
            if root.status is InstanceStatus.CANCELLED:
                continue
            try:
                template = template_from_instance(root)
                previews = expand_until(template, until)
            except ValidationError as e:
                logger.warning(
                    "recurring_template_skipped",
                    extra={"tenant_id": tenant.tenant_id, "template_id": root.id, "reason": str(e)},
                )
                continue
            created[root.kind] += len(self._persist(tenant, template, previews))

        logger.info(
            "recurring_generation_completed",
            extra={
                "tenant_id": tenant.tenant_id,
                "as_of": as_of,
                "payables_created": created[TransactionKind.PAYABLE],
                "receivables_created": created[TransactionKind.RECEIVABLE],
            },
        )
        return OperationResult.success(created)

    def _persist(
        self,
        tenant: TenantContext,
        template: RecurringTemplate,
        previews: list[InstallmentPreview],
    ) -> list[int]:
        existing = self.db.list_series(tenant.tenant_id, template.id)
        taken_sequences = {inst.sequence_number for inst in existing}
        taken_dates = {inst.due_date for inst in existing}

        created_ids = []
        for preview in previews:
            if preview.sequence_number <= template.generated_through_sequence:
                continue
            if preview.sequence_number in taken_sequences or preview.due_date in taken_dates:
                continue
            new_id = self.db.insert_installment(
                tenant.tenant_id,
                parent_template_id=template.id,
                sequence_number=preview.sequence_number,
                **self._installment_fields(template, preview),
            )
            if new_id is not None:
                created_ids.append(new_id)

        if previews:
            last_sequence = max(p.sequence_number for p in previews)
            if last_sequence > template.generated_through_sequence:
                self.db.advance_generated_through(tenant.tenant_id, template.id, last_sequence)

        if created_ids:
            logger.info(
                "recurrence_materialized",
                extra={
                    "tenant_id": tenant.tenant_id,
                    "template_id": template.id,
                    "created_count": len(created_ids),
                },
            )
        return created_ids

    @staticmethod
    def _installment_fields(template: RecurringTemplate, preview: InstallmentPreview) -> dict[str, Any]:
        return {
            "kind": template.kind,
            "description": preview.description,
            "amount": preview.amount,
            "due_date": preview.due_date,
            "status": InstanceStatus.PENDING,
            "bank_account_id": template.bank_account_id,
            "cost_center_id": template.cost_center_id,
            "category_id": template.category_id,
            "subcategory_id": template.subcategory_id,
            "payment_method": template.payment_method,
        }
