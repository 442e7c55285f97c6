"""Error taxonomy for plan execution.

Per-action errors are captured into the apply result; only
:class:`PlanKindMismatchError` escapes to the caller.
"""

from __future__ import annotations


class ReconciliationError(RuntimeError):
    """Base class for reconciliation failures."""


class ValidationError(ReconciliationError):
    """A manifest entry breaks its layer's naming or scope rules. No remote call was made."""


class OwnershipConflictError(ReconciliationError):
    """The target entity is not owned by the reconciler at execution time."""


class PlanKindMismatchError(ReconciliationError):
    """A plan was handed to an executor for a different resource kind."""
