"""Discover, plan and apply for one resource kind."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from warden.config.reconcile import DEFAULT_CONCURRENCY

from .builder import build_plan
from .discovery import discover_candidates
from .executor import apply_plan

if TYPE_CHECKING:
    from collections.abc import Iterable

    from warden.domain.model import ManifestEntry, RemoteEntity
    from warden.domain.ports import RemoteStore

    from .kinds.base import ResourceAdapter
    from .plan import ApplyResult, ReconcilePlan


@dataclass(slots=True)
class ReconciliationEngine[E: ManifestEntry, R: RemoteEntity]:
    """Generic reconciler, parameterized by a kind adapter and a store."""

    store: RemoteStore[R]
    adapter: ResourceAdapter[E, R]
    concurrency: int = DEFAULT_CONCURRENCY

    async def plan(
        self,
        desired: Iterable[E],
        *,
        allow_delete: bool = False,
        package_version: str | None = None,
    ) -> ReconcilePlan:
        entries = list(desired)
        adapter = self.adapter.for_manifest(entries)
        candidates = await discover_candidates(
            self.store,
            adapter=adapter,
            desired_names={entry.name for entry in entries},
        )
        return build_plan(
            entries,
            candidates,
            adapter=adapter,
            allow_delete=allow_delete,
            package_version=package_version,
        )

    async def apply(self, plan: ReconcilePlan, *, dry_run: bool = False) -> ApplyResult:
        return await apply_plan(
            plan,
            self.store,
            adapter=self.adapter,
            dry_run=dry_run,
            concurrency=self.concurrency,
        )

    async def reconcile(
        self,
        desired: Iterable[E],
        *,
        allow_delete: bool = False,
        package_version: str | None = None,
        dry_run: bool = False,
    ) -> tuple[ReconcilePlan, ApplyResult]:
        plan = await self.plan(desired, allow_delete=allow_delete, package_version=package_version)
        return plan, await self.apply(plan, dry_run=dry_run)
