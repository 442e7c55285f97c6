"""Execute a :class:`ReconcilePlan` against a remote store.

Phases run in a fixed order: creates, then updates and adoptions, then
deletes. Actions inside a phase are independent and fan out under a shared
concurrency bound. A failing action is recorded and never aborts the rest.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, assert_never

from warden.config.reconcile import DEFAULT_CONCURRENCY
from warden.domain.model.metadata import (
    MANAGED_BY,
    adoption_metadata,
    has_foreign_owner,
    is_managed,
    refresh_metadata,
)

from .errors import OwnershipConflictError, PlanKindMismatchError
from .plan import ActionResult, ActionType, ApplyResult

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from warden.domain.model import ManifestEntry, RemoteEntity
    from warden.domain.ports import RemoteStore

    from .kinds.base import ResourceAdapter
    from .plan import PlanAction, ReconcilePlan

log = getLogger(__name__)

_VERBS: dict[ActionType, str] = {
    ActionType.CREATE: "Create",
    ActionType.UPDATE: "Update",
    ActionType.ADOPT: "Adopt",
    ActionType.DELETE: "Delete",
    ActionType.SKIP: "Skip",
}


def _utcnow() -> datetime:
    return datetime.now(UTC)


async def apply_plan[E: ManifestEntry, R: RemoteEntity](  # noqa: PLR0913
    plan: ReconcilePlan,
    store: RemoteStore[R],
    *,
    adapter: ResourceAdapter[E, R],
    dry_run: bool = False,
    concurrency: int = DEFAULT_CONCURRENCY,
    clock: Callable[[], datetime] = _utcnow,
) -> ApplyResult:
    """Run every action in ``plan`` and report per-action outcomes.

    With ``dry_run`` no store call is made and every action reports success.
    Raises :class:`PlanKindMismatchError` if ``plan`` was built for another kind.
    """

    if plan.kind != adapter.kind:
        msg = f"Plan {plan.plan_id} is for {plan.kind}, executor handles {adapter.kind}"
        raise PlanKindMismatchError(msg)
    if concurrency < 1:
        msg = f"concurrency must be at least 1, got {concurrency}"
        raise ValueError(msg)

    result = ApplyResult(plan_id=plan.plan_id, dry_run=dry_run)

    if dry_run:
        result.results.extend(
            ActionResult(action=action, success=True) for action in plan.actions()
        )
        log.info("Dry run of plan %s: %d action(s) not executed", plan.plan_id, len(result.results))
        return result

    run = _PlanRun(
        store=store,
        adapter=adapter,
        package_version=plan.package_version,
        synced_at=clock().isoformat(),
        semaphore=asyncio.Semaphore(concurrency),
    )
    for phase in (plan.creates, plan.updates, plan.deletes):
        for outcome in await run.phase(phase):
            result.results.append(outcome)
            if not outcome.success:
                verb = _VERBS[outcome.action.type]
                result.errors.append(f"{verb} {outcome.action.name}: {outcome.error}")

    result.results.extend(
        ActionResult(action=action, success=True, remote_id=action.remote_id)
        for action in plan.skipped
    )

    summary = result.summary
    log.info(
        "Applied plan %s: created=%d updated=%d deleted=%d failed=%d skipped=%d",
        plan.plan_id,
        summary.created,
        summary.updated,
        summary.deleted,
        summary.failed,
        summary.skipped,
    )
    return result


class _PlanRun[E: ManifestEntry, R: RemoteEntity]:
    def __init__(
        self,
        *,
        store: RemoteStore[R],
        adapter: ResourceAdapter[E, R],
        package_version: str | None,
        synced_at: str,
        semaphore: asyncio.Semaphore,
    ) -> None:
        self.store = store
        self.adapter = adapter
        self.package_version = package_version
        self.synced_at = synced_at
        self.semaphore = semaphore

    async def phase(self, actions: Sequence[PlanAction]) -> list[ActionResult]:
        # gather keeps input order, so results line up with the plan
        return list(await asyncio.gather(*(self._guarded(action) for action in actions)))

    async def _guarded(self, action: PlanAction) -> ActionResult:
        async with self.semaphore:
            try:
                remote_id = await self._execute(action)
            except Exception as exc:  # noqa: BLE001
                log.warning("%s %s failed: %s", _VERBS[action.type], action.name, exc)
                return ActionResult(
                    action=action,
                    success=False,
                    error=str(exc) or type(exc).__name__,
                    remote_id=action.remote_id,
                )
        log.debug("%s %s -> %s", _VERBS[action.type], action.name, remote_id)
        return ActionResult(action=action, success=True, remote_id=remote_id)

    async def _execute(self, action: PlanAction) -> str | None:
        match action.type:
            case ActionType.CREATE:
                return await self._create(action)
            case ActionType.UPDATE:
                return await self._update(action)
            case ActionType.ADOPT:
                return await self._adopt(action)
            case ActionType.DELETE:
                remote_id = _require_remote_id(action)
                await self.store.delete(remote_id)
                return remote_id
            case ActionType.SKIP:
                return action.remote_id
            case _:
                assert_never(action.type)

    async def _create(self, action: PlanAction) -> str:
        entry = _require_entry(action)
        self.adapter.validate(entry)
        metadata = self.adapter.build_metadata(
            entry, package_version=self.package_version, synced_at=self.synced_at
        )
        created = await self.store.create(self.adapter.create_spec(entry, metadata))
        return created.id

    async def _update(self, action: PlanAction) -> str:
        entry = _require_entry(action)
        remote_id = _require_remote_id(action)
        current = await self.store.get(remote_id)
        if not is_managed(current.metadata):
            msg = (
                f"{self.adapter.noun} {remote_id} ({action.name}) is not managed by {MANAGED_BY}; "
                "use the adopt flow to bring it under management"
            )
            raise OwnershipConflictError(msg)
        built = self.adapter.build_metadata(
            entry, package_version=self.package_version, synced_at=self.synced_at
        )
        patch = {
            **self.adapter.content_patch(entry, current),
            "metadata": refresh_metadata(current.metadata, built),
        }
        updated = await self.store.update(remote_id, patch)
        return updated.id

    async def _adopt(self, action: PlanAction) -> str:
        entry = _require_entry(action)
        remote_id = _require_remote_id(action)
        self.adapter.validate(entry)
        current = await self.store.get(remote_id)
        if has_foreign_owner(current.metadata):
            msg = (
                f"{self.adapter.noun} {remote_id} ({action.name}) was claimed by "
                f"'{current.metadata.get('managed_by')}' after planning"
            )
            raise OwnershipConflictError(msg)
        built = self.adapter.build_metadata(
            entry, package_version=self.package_version, synced_at=self.synced_at
        )
        metadata = adoption_metadata(
            current.metadata,
            built,
            adopted_at=self.synced_at,
            original_label=self.adapter.name_of(current),
        )
        patch = {**self.adapter.content_patch(entry, current), "metadata": metadata}
        updated = await self.store.update(remote_id, patch)
        return updated.id


def _require_entry(action: PlanAction) -> ManifestEntry:
    if action.entry is None:
        msg = f"{action.type} action for '{action.name}' carries no manifest entry"
        raise ValueError(msg)
    return action.entry


def _require_remote_id(action: PlanAction) -> str:
    if action.remote_id is None:
        msg = f"{action.type} action for '{action.name}' carries no remote id"
        raise ValueError(msg)
    return action.remote_id
