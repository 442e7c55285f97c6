"""Letta response schemas for blocks and tools."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field

log = logging.getLogger(__name__)


class LettaBaseModel(BaseModel):
    model_config = ConfigDict(extra="allow")
    _logged_extra_keys: ClassVar[set[str]] = set()

    def model_post_init(self, _context: object, /) -> None:
        extras = self.__pydantic_extra__
        if not extras:
            return
        new_keys = set(extras).difference(self._logged_extra_keys)
        if not new_keys:
            return
        self._logged_extra_keys.update(new_keys)
        log.debug(
            "Letta %s: unmodeled keys: %s",
            type(self).__name__,
            ", ".join(sorted(new_keys)),
        )


class BlockPayload(LettaBaseModel):
    id: str
    label: str | None = None
    value: str = ""
    limit: int | None = None
    description: str | None = None
    metadata: dict[str, Any] | None = None
    template_name: str | None = None
    is_template: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ToolPayload(LettaBaseModel):
    id: str
    name: str
    description: str | None = None
    source_type: str | None = None
    source_code: str | None = None
    json_schema: dict[str, Any] | None = None
    tags: list[str] = Field(default_factory=list)
    tool_type: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ErrorPayload(LettaBaseModel):
    detail: Any = None
