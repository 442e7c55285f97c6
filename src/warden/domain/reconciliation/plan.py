"""Plan and apply-result value objects.

A :class:`ReconcilePlan` is pure data: building one never talks to the
remote store, and executing one never re-plans. ``to_dict`` renders the
camelCase shape emitted by ``--json``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING
from uuid import uuid4

if TYPE_CHECKING:
    from collections.abc import Iterator

    from warden.domain.model import ManifestEntry, RemoteEntity, ResourceKind


class ActionType(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    ADOPT = "adopt"
    DELETE = "delete"
    SKIP = "skip"


@dataclass(frozen=True, slots=True, kw_only=True)
class FieldChange:
    field: str
    old_value: object = None
    new_value: object = None

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {"field": self.field}
        if self.old_value is not None:
            payload["oldValue"] = self.old_value
        if self.new_value is not None:
            payload["newValue"] = self.new_value
        return payload


@dataclass(frozen=True, slots=True, kw_only=True)
class PlanAction:
    type: ActionType
    name: str
    reason: str
    remote_id: str | None = None
    changes: tuple[FieldChange, ...] = ()
    # execution context; excluded from equality and serialization
    entry: ManifestEntry | None = field(default=None, compare=False, repr=False)
    remote: RemoteEntity | None = field(default=None, compare=False, repr=False)

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {"type": str(self.type), "name": self.name}
        if self.remote_id is not None:
            payload["remoteId"] = self.remote_id
        payload["reason"] = self.reason
        if self.changes:
            payload["changes"] = [change.to_dict() for change in self.changes]
        return payload


@dataclass(frozen=True, slots=True)
class PlanSummary:
    to_create: int
    to_update: int
    to_delete: int
    unchanged: int

    @property
    def total(self) -> int:
        return self.to_create + self.to_update + self.to_delete + self.unchanged

    def to_dict(self) -> dict[str, int]:
        return {
            "toCreate": self.to_create,
            "toUpdate": self.to_update,
            "toDelete": self.to_delete,
            "unchanged": self.unchanged,
            "total": self.total,
        }


@dataclass(slots=True, kw_only=True)
class ReconcilePlan:
    """Actions grouped by phase, plus warnings and identity."""

    kind: ResourceKind
    creates: list[PlanAction] = field(default_factory=list)
    updates: list[PlanAction] = field(default_factory=list)
    deletes: list[PlanAction] = field(default_factory=list)
    skipped: list[PlanAction] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    package_version: str | None = None
    plan_id: str = field(default_factory=lambda: f"plan-{uuid4().hex[:12]}")
    generated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def summary(self) -> PlanSummary:
        return PlanSummary(
            to_create=len(self.creates),
            to_update=len(self.updates),
            to_delete=len(self.deletes),
            unchanged=len(self.skipped),
        )

    @property
    def has_changes(self) -> bool:
        return bool(self.creates or self.updates or self.deletes)

    def actions(self) -> Iterator[PlanAction]:
        """Yield every action in execution order."""

        yield from self.creates
        yield from self.updates
        yield from self.deletes
        yield from self.skipped

    def to_dict(self) -> dict[str, object]:
        return {
            "planId": self.plan_id,
            "kind": str(self.kind),
            "generatedAt": self.generated_at.isoformat(),
            "creates": [action.to_dict() for action in self.creates],
            "updates": [action.to_dict() for action in self.updates],
            "deletes": [action.to_dict() for action in self.deletes],
            "skipped": [action.to_dict() for action in self.skipped],
            "warnings": list(self.warnings),
            "summary": self.summary.to_dict(),
            "hasChanges": self.has_changes,
        }


@dataclass(frozen=True, slots=True, kw_only=True)
class ActionResult:
    action: PlanAction
    success: bool
    error: str | None = None
    remote_id: str | None = None

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {"action": self.action.to_dict(), "success": self.success}
        if self.error is not None:
            payload["error"] = self.error
        if self.remote_id is not None:
            payload["remoteId"] = self.remote_id
        return payload


@dataclass(frozen=True, slots=True)
class ApplySummary:
    created: int = 0
    updated: int = 0
    deleted: int = 0
    failed: int = 0
    skipped: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "created": self.created,
            "updated": self.updated,
            "deleted": self.deleted,
            "failed": self.failed,
            "skipped": self.skipped,
        }


_SUCCESS_COUNTERS: dict[ActionType, str] = {
    ActionType.CREATE: "created",
    ActionType.UPDATE: "updated",
    ActionType.ADOPT: "updated",
    ActionType.DELETE: "deleted",
    ActionType.SKIP: "skipped",
}


@dataclass(slots=True, kw_only=True)
class ApplyResult:
    """Per-action outcomes of one apply run."""

    plan_id: str
    results: list[ActionResult] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    dry_run: bool = False

    @property
    def summary(self) -> ApplySummary:
        counts = dict.fromkeys(("created", "updated", "deleted", "failed", "skipped"), 0)
        for result in self.results:
            if result.success:
                counts[_SUCCESS_COUNTERS[result.action.type]] += 1
            else:
                counts["failed"] += 1
        return ApplySummary(**counts)

    @property
    def success(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, object]:
        return {
            "planId": self.plan_id,
            "dryRun": self.dry_run,
            "success": self.success,
            "summary": self.summary.to_dict(),
            "results": [result.to_dict() for result in self.results],
            "errors": list(self.errors),
        }
