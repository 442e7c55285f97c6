"""Fetch candidate remote entities for one reconciliation run."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Set

    from warden.domain.model import RemoteEntity
    from warden.domain.ports import RemoteStore

    from .kinds.base import ResourceAdapter

log = getLogger(__name__)


async def discover_candidates[R: RemoteEntity](
    store: RemoteStore[R],
    *,
    adapter: ResourceAdapter[object, R],
    desired_names: Set[str],
) -> list[R]:
    """Union the kind's candidate queries, deduplicated by id in first-seen order."""

    queries = adapter.candidate_queries(desired_names)
    batches = await asyncio.gather(*(store.list(query) for query in queries))

    seen: set[str] = set()
    candidates: list[R] = []
    for batch in batches:
        for entity in batch:
            if entity.id in seen or not adapter.in_scope(entity):
                continue
            seen.add(entity.id)
            candidates.append(entity)

    log.debug(
        "Discovered %d %s candidate(s) from %d quer%s",
        len(candidates),
        adapter.kind,
        len(queries),
        "y" if len(queries) == 1 else "ies",
    )
    return candidates
