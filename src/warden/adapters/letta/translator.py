"""Translate Letta payloads into domain entities and domain specs into request bodies."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from warden.domain.model import RemoteBlock, RemoteTemplate, RemoteTool
from warden.domain.reconciliation.kinds.tools import TAG_ENCODED_KEYS, is_management_tag

if TYPE_CHECKING:
    from collections.abc import Iterable

    from warden.domain.ports import FieldValues

    from .schema import BlockPayload, ToolPayload

log = getLogger(__name__)


def parse_block(payload: BlockPayload) -> RemoteBlock:
    return RemoteBlock(
        id=payload.id,
        label=payload.label or "",
        value=payload.value,
        limit=payload.limit,
        description=payload.description,
        metadata=dict(payload.metadata or {}),
        created_at=_aware(payload.created_at),
        updated_at=_aware(payload.updated_at),
    )


def parse_template(payload: BlockPayload) -> RemoteTemplate:
    # older templates carry only a label
    return RemoteTemplate(
        id=payload.id,
        template_name=payload.template_name or payload.label or "",
        label=payload.label or "",
        value=payload.value,
        limit=payload.limit,
        description=payload.description,
        metadata=dict(payload.metadata or {}),
        created_at=_aware(payload.created_at),
        updated_at=_aware(payload.updated_at),
    )


def parse_tool(payload: ToolPayload) -> RemoteTool:
    metadata, tags = decode_tool_tags(payload.tags)
    return RemoteTool(
        id=payload.id,
        name=payload.name,
        json_schema=dict(payload.json_schema or {}),
        source_code=payload.source_code,
        source_type=payload.source_type,
        description=payload.description,
        tool_type=payload.tool_type,
        tags=tags,
        metadata=metadata,
        created_at=_aware(payload.created_at),
        updated_at=_aware(payload.updated_at),
    )


def encode_tool_tags(metadata: Mapping[str, object], tags: Iterable[str]) -> list[str]:
    """User tags followed by ``key:value`` tags for every encodable metadata key."""

    encoded = [tag for tag in tags if not is_management_tag(tag)]
    for key in TAG_ENCODED_KEYS:
        value = metadata.get(key)
        if value is None:
            continue
        encoded.append(f"{key}:{value}")
    skipped = sorted(set(metadata).difference(TAG_ENCODED_KEYS))
    if skipped:
        log.debug("Tool metadata keys not representable as tags: %s", ", ".join(skipped))
    return encoded


def decode_tool_tags(tags: Iterable[str]) -> tuple[dict[str, object], tuple[str, ...]]:
    metadata: dict[str, object] = {}
    user: list[str] = []
    for tag in tags:
        if is_management_tag(tag):
            key, _, value = tag.partition(":")
            metadata[key] = value
        else:
            user.append(tag)
    return metadata, tuple(user)


def block_body(spec: FieldValues) -> dict[str, object]:
    return {key: value for key, value in spec.items() if key != "template_name"}


def template_body(spec: FieldValues) -> dict[str, object]:
    return {**dict(spec), "is_template": True}


def tool_body(spec: FieldValues, *, current_tags: Iterable[str] = ()) -> dict[str, object]:
    """Fold ``metadata`` into ``tags``; other fields pass through unchanged.

    ``current_tags`` supplies the user tags when ``spec`` updates metadata
    without touching tags.
    """

    body = {key: value for key, value in spec.items() if key not in {"metadata", "tags"}}
    metadata = spec.get("metadata")
    tags = spec.get("tags")
    if metadata is None and tags is None:
        return body
    user_tags = list(tags) if isinstance(tags, list | tuple) else list(current_tags)
    if isinstance(metadata, Mapping):
        body["tags"] = encode_tool_tags(metadata, user_tags)
    else:
        body["tags"] = user_tags
    return body


def _aware(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)
