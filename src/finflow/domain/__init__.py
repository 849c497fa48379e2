"""Domain layer for finflow application.

Services live in their own modules (recurrence, ledger, deletion,
cash_flow, balance, account) and are imported from there.
"""

from finflow.domain.entities import (
    DeletionScope,
    Direction,
    Frequency,
    InstanceStatus,
    OperationResult,
    TenantContext,
    TransactionKind,
)
from finflow.domain.errors import (
    AmbiguousScopeError,
    ConflictError,
    DomainError,
    NotFoundError,
    ValidationError,
)

__all__ = [
    "DeletionScope",
    "Direction",
    "Frequency",
    "InstanceStatus",
    "OperationResult",
    "TenantContext",
    "TransactionKind",
    "AmbiguousScopeError",
    "ConflictError",
    "DomainError",
    "NotFoundError",
    "ValidationError",
]
