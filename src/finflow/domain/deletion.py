"""Deletion scope resolution for members of recurring series.

Deletion never falls back to a default scope: when the target has unpaid
series dependents the caller must say whether to remove just this
occurrence or the whole series. Paid instances are financial history and
are never removed, and neither is a template they reference: a series
deletion keeps such a template, ends its recurrence and cancels it if unpaid.
"""

from collections.abc import Sequence
from typing import Optional

from finflow.database.base import Database
from finflow.domain.entities import (
    DeletionPlan,
    DeletionScope,
    InstanceStatus,
    OperationResult,
    TenantContext,
    TransactionInstance,
)
from finflow.domain.errors import (
    AmbiguousScopeError,
    ConflictError,
    DomainError,
    NotFoundError,
    ValidationError,
    deletion_scope_required,
    instance_not_found,
    paid_is_immutable,
    template_has_paid_installments,
)
from finflow.logging_config import get_logger

logger = get_logger("domain.deletion")


def _is_paid(instance: TransactionInstance) -> bool:
    return instance.status is InstanceStatus.PAID


def resolve_deletion(
    target: TransactionInstance,
    series_members: Sequence[TransactionInstance],
    scope: Optional[DeletionScope] = None,
) -> DeletionPlan:
    """Compute exactly which instance IDs a deletion request removes.

    Args:
        target: Instance the user asked to delete
        series_members: Every instance of the target's series (root and
            derived), or just the target when it is not recurring
        scope: Explicit scope; required when the target has unpaid dependents

    Raises:
        AmbiguousScopeError: If the target has unpaid dependents and no scope
        ConflictError: If a paid target, or a template that paid
            installments reference, would be deleted
        ValidationError: If the scope is unknown
    """
    if scope is not None and not isinstance(scope, DeletionScope):
        raise ValidationError(f"Unknown deletion scope: {scope!r}")

    others = [m for m in series_members if m.id != target.id]
    unpaid_dependents = frozenset(m.id for m in others if not _is_paid(m))
    root = next((m for m in series_members if m.is_recurring_root), None)
    root_has_paid_children = root is not None and any(
        m.parent_template_id == root.id and _is_paid(m) for m in series_members
    )

    if scope is DeletionScope.SERIES:
        return _series_plan(target, series_members, unpaid_dependents, root, root_has_paid_children)

    if unpaid_dependents and scope is None:
        raise AmbiguousScopeError(
            deletion_scope_required(target.id, len(unpaid_dependents)),
            dependent_ids=unpaid_dependents,
        )

    if _is_paid(target):
        raise ConflictError(paid_is_immutable(target.id), prior_status=target.status.value)
    if root is not None and target.id == root.id and root_has_paid_children:
        raise ConflictError(template_has_paid_installments(target.id), prior_status=target.status.value)
    return DeletionPlan(
        target_id=target.id,
        scope=DeletionScope.SINGLE,
        delete_ids=frozenset({target.id}),
    )


def _series_plan(
    target: TransactionInstance,
    series_members: Sequence[TransactionInstance],
    unpaid_dependents: frozenset[int],
    root: Optional[TransactionInstance],
    root_has_paid_children: bool,
) -> DeletionPlan:
    delete_ids = set(unpaid_dependents)
    if not _is_paid(target):
        delete_ids.add(target.id)

    # A root that paid history points at is kept and retired instead
    retired_id = None
    if root is not None and (_is_paid(root) or root_has_paid_children):
        delete_ids.discard(root.id)
        retired_id = root.id

    if not delete_ids and retired_id is None:
        raise ConflictError(paid_is_immutable(target.id), prior_status=target.status.value)

    return DeletionPlan(
        target_id=target.id,
        scope=DeletionScope.SERIES,
        delete_ids=frozenset(delete_ids),
        retained_paid_ids=frozenset(m.id for m in series_members if _is_paid(m)),
        retired_template_id=retired_id,
    )


class SeriesDeletionService:
    """Service that resolves and applies deletion requests."""

    def __init__(self, db: Database):
        """Initialize series deletion service.

        Args:
            db: Database instance
        """
        self.db = db

    def series_of(self, tenant: TenantContext, instance: TransactionInstance) -> list[TransactionInstance]:
        """Return every member of the instance's series (just the instance if standalone)."""
        if instance.parent_template_id is None and not instance.is_recurring_root:
            return [instance]
        members = self.db.list_series(tenant.tenant_id, instance.series_root_id)
        if all(m.id != instance.id for m in members):
            members.append(instance)
        return members

    def plan(
        self, tenant: TenantContext, instance_id: int, scope: Optional[DeletionScope] = None
    ) -> OperationResult[DeletionPlan]:
        """Resolve a deletion request without deleting anything."""
        target = self.db.get_instance(tenant.tenant_id, instance_id)
        if target is None:
            return OperationResult.failure(NotFoundError(instance_not_found(instance_id)))
        try:
            return OperationResult.success(
                resolve_deletion(target, self.series_of(tenant, target), scope)
            )
        except DomainError as e:
            return OperationResult.failure(e)

    def delete(
        self, tenant: TenantContext, instance_id: int, scope: Optional[DeletionScope] = None
    ) -> OperationResult[DeletionPlan]:
        """Resolve and apply a deletion request in one database transaction.

        The delete statement re-checks that each row is still unpaid;
        rows that disappeared in the meantime count as already deleted. A
        retired template is updated in the same transaction.
        """
        result = self.plan(tenant, instance_id, scope)
        if not result.ok:
            return result

        plan = result.value
        deleted = self.db.delete_unpaid_instances(
            tenant.tenant_id, plan.delete_ids, retire_template_id=plan.retired_template_id
        )
        logger.info(
            "series_deleted" if plan.scope is DeletionScope.SERIES else "instance_deleted",
            extra={
                "tenant_id": tenant.tenant_id,
                "target_id": plan.target_id,
                "requested": len(plan.delete_ids),
                "deleted": deleted,
                "retained_paid": len(plan.retained_paid_ids),
                "retired_template_id": plan.retired_template_id,
            },
        )
        return result
