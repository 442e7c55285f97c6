"""Port for the hosted resource store.

The reconciliation core depends only on this shape. Field names in create
specs and update patches are domain attribute names (``value``, ``limit``,
``metadata``, ``source_code`` ...); translating them to a wire format is the
adapter's concern.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

type FieldValues = Mapping[str, object]


@dataclass(frozen=True, slots=True, kw_only=True)
class StoreQuery:
    """Filter for one list call. Unset fields are not sent."""

    label: str | None = None
    label_search: str | None = None
    name: str | None = None
    search: str | None = None
    templates_only: bool | None = None
    limit: int | None = None


@runtime_checkable
class RemoteStore[E](Protocol):
    """Async CRUD over one resource kind."""

    async def list(self, query: StoreQuery) -> Sequence[E]: ...

    async def get(self, entity_id: str) -> E: ...

    async def create(self, spec: FieldValues) -> E: ...

    async def update(self, entity_id: str, patch: FieldValues) -> E: ...

    async def delete(self, entity_id: str) -> None: ...
