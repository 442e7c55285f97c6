"""Actual-state entities as returned by the hosted store.

Instances are built by the store adapter after payload validation; the
reconciliation core never handles raw JSON.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType

_EMPTY: Mapping[str, object] = MappingProxyType({})


@dataclass(frozen=True, slots=True, kw_only=True)
class RemoteBlock:
    id: str
    label: str
    value: str
    limit: int | None = None
    description: str | None = None
    metadata: Mapping[str, object] = field(default=_EMPTY)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def name(self) -> str:
        return self.label


@dataclass(frozen=True, slots=True, kw_only=True)
class RemoteTool:
    id: str
    name: str
    json_schema: Mapping[str, object] = field(default=_EMPTY)
    source_code: str | None = None
    source_type: str | None = None
    description: str | None = None
    tool_type: str | None = None
    # user tags only; management tags are decoded into ``metadata``
    tags: tuple[str, ...] = ()
    metadata: Mapping[str, object] = field(default=_EMPTY)
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class RemoteTemplate:
    id: str
    template_name: str
    label: str
    value: str
    limit: int | None = None
    description: str | None = None
    metadata: Mapping[str, object] = field(default=_EMPTY)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def name(self) -> str:
        return self.template_name


type RemoteEntity = RemoteBlock | RemoteTool | RemoteTemplate
