"""Ownership-aware reconciliation of declared resources against a remote store."""

from __future__ import annotations

from .builder import build_plan
from .discovery import discover_candidates
from .drift import Drift, DriftKind, compute_drift
from .engine import ReconciliationEngine
from .errors import (
    OwnershipConflictError,
    PlanKindMismatchError,
    ReconciliationError,
    ValidationError,
)
from .executor import apply_plan
from .kinds import BlockAdapter, ResourceAdapter, TemplateAdapter, ToolAdapter
from .ownership import Classification, Ownership, classify
from .plan import (
    ActionResult,
    ActionType,
    ApplyResult,
    ApplySummary,
    FieldChange,
    PlanAction,
    PlanSummary,
    ReconcilePlan,
)

__all__ = [
    "ActionResult",
    "ActionType",
    "ApplyResult",
    "ApplySummary",
    "BlockAdapter",
    "Classification",
    "Drift",
    "DriftKind",
    "FieldChange",
    "Ownership",
    "OwnershipConflictError",
    "PlanAction",
    "PlanKindMismatchError",
    "PlanSummary",
    "ReconcilePlan",
    "ReconciliationEngine",
    "ReconciliationError",
    "ResourceAdapter",
    "TemplateAdapter",
    "ToolAdapter",
    "ValidationError",
    "apply_plan",
    "build_plan",
    "classify",
    "compute_drift",
    "discover_candidates",
]
