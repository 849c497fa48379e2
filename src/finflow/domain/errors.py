"""Shared domain error messages and error types."""

from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Operation conflicts with the current state of an instance."""

    def __init__(self, message: str, prior_status: Optional[str] = None):
        super().__init__(message)
        self.prior_status = prior_status


class AmbiguousScopeError(DomainError):
    """Deletion target has series dependents and no scope was given."""

    def __init__(self, message: str, dependent_ids: frozenset[int] = frozenset()):
        super().__init__(message)
        self.dependent_ids = dependent_ids


def instance_not_found(instance_id: int) -> str:
    """Return message for missing transaction instance."""
    return f"Transaction {instance_id} not found"


def bank_account_not_found(bank_account_id: int) -> str:
    """Return message for missing bank account."""
    return f"Bank account {bank_account_id} not found"


def template_not_found(template_id: int) -> str:
    """Return message for an ID that is not the root of a recurring series."""
    return f"Transaction {template_id} is not a recurring template"


def already_in_status(instance_id: int, status: str) -> str:
    """Return message when a transition is refused because of the prior state."""
    return f"Transaction {instance_id} is already {status}"


def paid_is_immutable(instance_id: int) -> str:
    """Return message when editing or deleting a paid instance."""
    return f"Transaction {instance_id} is paid and can no longer be changed or deleted"


def template_has_paid_installments(template_id: int) -> str:
    """Return message when deleting a series root that paid installments still reference."""
    return (
        f"Transaction {template_id} is the template of paid installments and cannot be deleted alone. "
        "Cancel it, or delete with scope 'series' to end the series."
    )


def deletion_scope_required(instance_id: int, dependent_count: int) -> str:
    """Return message when a series deletion needs an explicit scope."""
    return (
        f"Transaction {instance_id} belongs to a recurring series with "
        f"{dependent_count} other unpaid instance{'s' if dependent_count != 1 else ''}. "
        "Choose a scope: 'single' or 'series'."
    )


def duplicate_bank_account_name(name: str) -> str:
    """Return message for duplicate bank account name within a tenant."""
    return f"Bank account with name '{name}' already exists"
