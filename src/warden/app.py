"""Application entry points wiring configuration, the Letta store and the engine."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from logging import getLogger
from typing import TYPE_CHECKING

from warden.adapters.letta import LettaBlockStore, LettaClient, LettaTemplateStore, LettaToolStore
from warden.config import get_letta_config, get_reconcile_config
from warden.domain.model import ResourceKind
from warden.domain.reconciliation import (
    BlockAdapter,
    ReconciliationEngine,
    TemplateAdapter,
    ToolAdapter,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable, Sequence

    from warden.adapters.http_resilience import ResilientClient
    from warden.config import LettaConfig, ReconcileConfig, ResilienceConfig
    from warden.domain.model import ManifestEntry
    from warden.domain.ports import RemoteStore
    from warden.domain.reconciliation import ApplyResult, ReconcilePlan, ResourceAdapter

    type ClientFactory = Callable[[ResilienceConfig], ResilientClient]

log = getLogger(__name__)


def build_adapter(
    kind: ResourceKind,
    *,
    deployment_id: str | None = None,
) -> ResourceAdapter[ManifestEntry, object]:
    match kind:
        case ResourceKind.BLOCK:
            return BlockAdapter()
        case ResourceKind.TOOL:
            return ToolAdapter()
        case ResourceKind.TEMPLATE:
            return TemplateAdapter(deployment_id=deployment_id)


def build_store(client: LettaClient, kind: ResourceKind) -> RemoteStore[object]:
    match kind:
        case ResourceKind.BLOCK:
            return LettaBlockStore(client)
        case ResourceKind.TOOL:
            return LettaToolStore(client)
        case ResourceKind.TEMPLATE:
            return LettaTemplateStore(client)



def plan_resources(  # noqa: PLR0913
    entries: Sequence[ManifestEntry],
    *,
    kind: ResourceKind,
    allow_delete: bool = False,
    package_version: str | None = None,
    deployment_id: str | None = None,
    letta_config: LettaConfig | None = None,
    reconcile_config: ReconcileConfig | None = None,
    client_factory: ClientFactory | None = None,
) -> ReconcilePlan:
    """Compute a plan for ``entries`` against the live Letta state. Read-only."""

    async def run() -> ReconcilePlan:
        async with _engine(
            kind,
            deployment_id=deployment_id,
            letta_config=letta_config,
            reconcile_config=reconcile_config,
            client_factory=client_factory,
        ) as (engine, settings):
            log.info("Planning %s reconciliation: entries=%d", kind, len(entries))
            return await engine.plan(
                entries,
                allow_delete=allow_delete,
                package_version=package_version or settings.package_version,
            )

    return asyncio.run(run())


def apply_resources(  # noqa: PLR0913
    entries: Sequence[ManifestEntry],
    *,
    kind: ResourceKind,
    dry_run: bool = False,
    allow_delete: bool = False,
    package_version: str | None = None,
    deployment_id: str | None = None,
    letta_config: LettaConfig | None = None,
    reconcile_config: ReconcileConfig | None = None,
    client_factory: ClientFactory | None = None,
) -> tuple[ReconcilePlan, ApplyResult]:
    """Plan and execute in one run against the live Letta state."""

    async def run() -> tuple[ReconcilePlan, ApplyResult]:
        async with _engine(
            kind,
            deployment_id=deployment_id,
            letta_config=letta_config,
            reconcile_config=reconcile_config,
            client_factory=client_factory,
        ) as (engine, settings):
            log.info(
                "Applying %s reconciliation: entries=%d, dry_run=%s, allow_delete=%s",
                kind,
                len(entries),
                dry_run,
                allow_delete,
            )
            return await engine.reconcile(
                entries,
                allow_delete=allow_delete,
                package_version=package_version or settings.package_version,
                dry_run=dry_run,
            )

    return asyncio.run(run())


@asynccontextmanager
async def _engine(
    kind: ResourceKind,
    *,
    deployment_id: str | None,
    letta_config: LettaConfig | None,
    reconcile_config: ReconcileConfig | None,
    client_factory: ClientFactory | None,
) -> AsyncIterator[tuple[ReconciliationEngine[ManifestEntry, object], ReconcileConfig]]:
    letta = letta_config or get_letta_config()
    settings = reconcile_config or get_reconcile_config()
    async with LettaClient(config=letta, client_factory=client_factory) as client:
        engine = ReconciliationEngine(
            store=build_store(client, kind),
            adapter=build_adapter(kind, deployment_id=deployment_id),
            concurrency=settings.concurrency,
        )
        yield engine, settings
