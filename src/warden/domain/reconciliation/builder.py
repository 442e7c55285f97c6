"""Pure planning: desired entries x discovered entities -> :class:`ReconcilePlan`.

No I/O happens here. Given the same inputs, the same actions come out in
the same order; only ``plan_id`` and ``generated_at`` differ between runs.
"""

from __future__ import annotations

from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from warden.domain.model.metadata import MANAGED_BY, MANAGED_BY_KEY, is_managed

from .drift import Drift, compute_drift
from .errors import ReconciliationError
from .kinds.base import preview
from .ownership import Ownership, classify
from .plan import ActionType, FieldChange, PlanAction, ReconcilePlan

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from warden.domain.model import ManifestEntry, RemoteEntity

    from .kinds.base import ResourceAdapter

log = getLogger(__name__)

_OLDEST = datetime.min.replace(tzinfo=UTC)


def build_plan[E: ManifestEntry, R: RemoteEntity](
    desired: Iterable[E],
    candidates: Iterable[R],
    *,
    adapter: ResourceAdapter[E, R],
    allow_delete: bool = False,
    package_version: str | None = None,
) -> ReconcilePlan:
    """Classify every relevant entity and decide one action for each.

    Entries without a remote counterpart become creates. Managed entities
    are compared field by field; convention-matching unmanaged ones become
    adoptions; everything else that shares a desired name is skipped
    untouched. Managed entities absent from the manifest are deleted only
    when ``allow_delete`` is set. Candidates outside the adapter's scope, as
    narrowed to ``desired``, are ignored.
    """

    entries = list(desired)
    adapter = adapter.for_manifest(entries)
    plan = ReconcilePlan(kind=adapter.kind, package_version=package_version)
    desired_by_name = _index_desired(entries, adapter=adapter, warnings=plan.warnings)
    desired_names = frozenset(desired_by_name)
    remote = [entity for entity in candidates if adapter.in_scope(entity)]
    chosen = _choose_remote(remote, desired_names, adapter=adapter, warnings=plan.warnings)

    for name, entry in desired_by_name.items():
        entity = chosen.get(name)
        if entity is None:
            plan.creates.append(_create_action(entry, adapter=adapter))
            continue
        _plan_existing(
            plan,
            entry,
            entity,
            desired_names=desired_names,
            adapter=adapter,
            package_version=package_version,
        )

    for entity in remote:
        if adapter.name_of(entity) in desired_names:
            continue
        _plan_undeclared(
            plan,
            entity,
            desired_names=desired_names,
            adapter=adapter,
            allow_delete=allow_delete,
        )

    summary = plan.summary
    log.info(
        "Planned %s reconciliation %s: create=%d update=%d delete=%d unchanged=%d",
        adapter.kind,
        plan.plan_id,
        summary.to_create,
        summary.to_update,
        summary.to_delete,
        summary.unchanged,
    )
    return plan


def _plan_existing[E: ManifestEntry, R: RemoteEntity](  # noqa: PLR0913
    plan: ReconcilePlan,
    entry: E,
    entity: R,
    *,
    desired_names: frozenset[str],
    adapter: ResourceAdapter[E, R],
    package_version: str | None,
) -> None:
    name = adapter.name_of(entity)
    classification = classify(entity, desired_names, adapter=adapter)
    noun = adapter.noun

    match classification.ownership:
        case Ownership.UNMANAGED:
            plan.skipped.append(
                PlanAction(
                    type=ActionType.SKIP,
                    name=name,
                    remote_id=entity.id,
                    reason=(
                        f"{noun} exists but is not managed by {MANAGED_BY} "
                        f"({classification.reason}); skipping to avoid overwriting it"
                    ),
                    entry=entry,
                    remote=entity,
                )
            )
        case Ownership.ADOPTED:
            drifts = adapter.compare_fields(entry, entity)
            changes = (
                FieldChange(
                    field="metadata",
                    old_value="(none)",
                    new_value=f"{MANAGED_BY_KEY}: {MANAGED_BY}",
                ),
                *_changes(drifts),
            )
            reason = f"{noun} follows the naming convention but has no management metadata"
            if drifts:
                reason += f"; content differs in {_fields(drifts)}"
            plan.updates.append(
                PlanAction(
                    type=ActionType.ADOPT,
                    name=name,
                    remote_id=entity.id,
                    reason=reason,
                    changes=changes,
                    entry=entry,
                    remote=entity,
                )
            )
        case Ownership.MANAGED:
            drifts = compute_drift(entry, entity, adapter=adapter, package_version=package_version)
            if not drifts:
                plan.skipped.append(
                    PlanAction(
                        type=ActionType.SKIP,
                        name=name,
                        remote_id=entity.id,
                        reason=f"{noun} is in sync",
                        entry=entry,
                        remote=entity,
                    )
                )
                return
            plan.updates.append(
                PlanAction(
                    type=ActionType.UPDATE,
                    name=name,
                    remote_id=entity.id,
                    reason=f"{noun} has drifted: {_fields(drifts)}",
                    changes=_changes(drifts),
                    entry=entry,
                    remote=entity,
                )
            )
        case Ownership.ORPHANED:
            msg = f"declared {noun.lower()} '{name}' classified as orphaned"
            raise ReconciliationError(msg)


def _plan_undeclared[R: RemoteEntity](
    plan: ReconcilePlan,
    entity: R,
    *,
    desired_names: frozenset[str],
    adapter: ResourceAdapter[ManifestEntry, R],
    allow_delete: bool,
) -> None:
    classification = classify(entity, desired_names, adapter=adapter)
    name = adapter.name_of(entity)
    noun = adapter.noun

    match classification.ownership:
        case Ownership.ORPHANED if allow_delete:
            plan.deletes.append(
                PlanAction(
                    type=ActionType.DELETE,
                    name=name,
                    remote_id=entity.id,
                    reason=f"{noun} is managed by {MANAGED_BY} but no longer in the manifest",
                    remote=entity,
                )
            )
        case Ownership.ORPHANED:
            plan.skipped.append(
                PlanAction(
                    type=ActionType.SKIP,
                    name=name,
                    remote_id=entity.id,
                    reason=f"Orphaned {noun.lower()}; enable deletion to remove it",
                    remote=entity,
                )
            )
        case Ownership.UNMANAGED:
            # not ours and not declared: excluded from the plan entirely
            return
        case Ownership.MANAGED | Ownership.ADOPTED:
            msg = f"undeclared {noun.lower()} '{name}' classified as {classification.ownership}"
            raise ReconciliationError(msg)


def _create_action[E: ManifestEntry](
    entry: E,
    *,
    adapter: ResourceAdapter[E, object],
) -> PlanAction:
    return PlanAction(
        type=ActionType.CREATE,
        name=entry.name,
        reason=f"{adapter.noun} does not exist remotely",
        changes=adapter.describe_create(entry),
        entry=entry,
    )


def _index_desired[E: ManifestEntry](
    desired: Iterable[E],
    *,
    adapter: ResourceAdapter[E, object],
    warnings: list[str],
) -> dict[str, E]:
    """Index entries by name. On duplicates the later entry wins."""

    indexed: dict[str, E] = {}
    for entry in desired:
        if entry.name in indexed:
            warning = (
                f"Duplicate {adapter.noun.lower()} '{entry.name}' in manifest; "
                "the later entry wins"
            )
            log.warning(warning)
            warnings.append(warning)
        indexed[entry.name] = entry
    return indexed


def _choose_remote[R: RemoteEntity](
    remote: Sequence[R],
    desired_names: frozenset[str],
    *,
    adapter: ResourceAdapter[ManifestEntry, R],
    warnings: list[str],
) -> dict[str, R]:
    """Pick one entity per desired name.

    Among duplicates, a reconciler-owned entity is preferred, then the most
    recently updated one. The choice is surfaced as a warning.
    """

    groups: dict[str, list[R]] = {}
    for entity in remote:
        name = adapter.name_of(entity)
        if name in desired_names:
            groups.setdefault(name, []).append(entity)

    chosen: dict[str, R] = {}
    for name, group in groups.items():
        owned = [entity for entity in group if is_managed(entity.metadata)]
        pool = owned or group
        winner = max(pool, key=_recency)
        if len(group) > 1:
            warning = (
                f"{len(group)} remote {adapter.noun.lower()}s share the name '{name}'; "
                f"using {winner.id} ({'managed, ' if owned else ''}most recently updated)"
            )
            log.warning(warning)
            warnings.append(warning)
        chosen[name] = winner
    return chosen


def _recency(entity: RemoteEntity) -> tuple[datetime, datetime, str]:
    return (entity.updated_at or _OLDEST, entity.created_at or _OLDEST, entity.id)


def _changes(drifts: Iterable[Drift]) -> tuple[FieldChange, ...]:
    return tuple(
        FieldChange(
            field=drift.field,
            old_value=preview(drift.actual),
            new_value=preview(drift.desired),
        )
        for drift in drifts
    )


def _fields(drifts: Sequence[Drift]) -> str:
    return ", ".join(drift.field for drift in drifts)
