"""Management metadata written onto remote entities.

An entity is reconciler-owned only when ``metadata["managed_by"]`` equals
:data:`MANAGED_BY`. Any other value, including absence, means the entity
belongs to someone else.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Final, NotRequired, Required, TypedDict

from .enums import Layer

MANAGED_BY: Final[str] = "warden"

MANAGED_BY_KEY: Final[str] = "managed_by"
LAYER_KEY: Final[str] = "layer"
ORG_KEY: Final[str] = "org"
PROJECT_KEY: Final[str] = "project"
PACKAGE_VERSION_KEY: Final[str] = "package_version"
LAST_SYNCED_KEY: Final[str] = "last_synced"
DESCRIPTION_KEY: Final[str] = "description"
SOURCE_PATH_KEY: Final[str] = "source_path"
ADOPTED_AT_KEY: Final[str] = "adopted_at"
ORIGINAL_LABEL_KEY: Final[str] = "original_label"

# Keys stamped exactly once at adoption and carried through later updates.
ADOPTION_KEYS: Final[tuple[str, ...]] = (ADOPTED_AT_KEY, ORIGINAL_LABEL_KEY)


class ManagedMetadata(TypedDict, total=False):
    managed_by: Required[str]
    layer: Required[str]
    org: NotRequired[str]
    project: NotRequired[str]
    package_version: NotRequired[str]
    last_synced: NotRequired[str]
    description: NotRequired[str]
    source_path: NotRequired[str]
    adopted_at: NotRequired[str]
    original_label: NotRequired[str]
    # block templates
    entity_type: NotRequired[str]
    deployment_id: NotRequired[str]
    entity_id: NotRequired[str]
    project_id: NotRequired[str]
    version: NotRequired[str]
    environment: NotRequired[str]


@dataclass(frozen=True, slots=True, kw_only=True)
class ManagedInfo:
    """Read view over the management metadata of one remote entity."""

    is_managed: bool
    layer: Layer | None = None
    org: str | None = None
    project: str | None = None
    package_version: str | None = None
    last_synced: str | None = None


UNMANAGED_INFO: Final[ManagedInfo] = ManagedInfo(is_managed=False)


def is_managed(metadata: Mapping[str, object] | None) -> bool:
    return metadata is not None and metadata.get(MANAGED_BY_KEY) == MANAGED_BY


def parse_management(metadata: Mapping[str, object] | None) -> ManagedInfo:
    if metadata is None or not is_managed(metadata):
        return UNMANAGED_INFO

    return ManagedInfo(
        is_managed=True,
        layer=_parse_layer(metadata.get(LAYER_KEY)),
        org=_str_or_none(metadata.get(ORG_KEY)),
        project=_str_or_none(metadata.get(PROJECT_KEY)),
        package_version=_str_or_none(metadata.get(PACKAGE_VERSION_KEY)),
        last_synced=_str_or_none(metadata.get(LAST_SYNCED_KEY)),
    )


def _parse_layer(value: object) -> Layer | None:
    if not isinstance(value, str):
        return None
    try:
        return Layer(value)
    except ValueError:
        return None


def _str_or_none(value: object) -> str | None:
    return value if isinstance(value, str) else None


# Every key warden writes; anything else on an entity belongs to someone else.
MANAGEMENT_KEYS: Final[frozenset[str]] = (
    ManagedMetadata.__required_keys__ | ManagedMetadata.__optional_keys__
)


def has_foreign_owner(metadata: Mapping[str, object] | None) -> bool:
    """True when another tool has claimed the entity via ``managed_by``."""

    if metadata is None or MANAGED_BY_KEY not in metadata:
        return False
    return metadata.get(MANAGED_BY_KEY) != MANAGED_BY


def refresh_metadata(
    existing: Mapping[str, object] | None,
    built: Mapping[str, object],
) -> dict[str, object]:
    """Replace management keys with ``built``, keeping foreign keys and adoption stamps."""

    current = dict(existing or {})
    merged = {key: value for key, value in current.items() if key not in MANAGEMENT_KEYS}
    merged.update(built)
    for key in ADOPTION_KEYS:
        if key in current:
            merged[key] = current[key]
    return merged


def adoption_metadata(
    existing: Mapping[str, object] | None,
    built: Mapping[str, object],
    *,
    adopted_at: str,
    original_label: str,
) -> dict[str, object]:
    """Merge management keys onto ``existing`` and stamp adoption once."""

    merged = {**dict(existing or {}), **built}
    merged.setdefault(ADOPTED_AT_KEY, adopted_at)
    merged.setdefault(ORIGINAL_LABEL_KEY, original_label)
    return merged
