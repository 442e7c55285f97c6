"""Ownership classification of remote entities.

Ownership is a pure function of metadata presence, naming-convention match
and desired-set membership. Content equality never plays a role.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from warden.domain.model.metadata import ManagedInfo, has_foreign_owner, parse_management

if TYPE_CHECKING:
    from collections.abc import Set

    from warden.domain.model import RemoteEntity

    from .kinds.base import ResourceAdapter


class Ownership(StrEnum):
    MANAGED = "managed"
    """Carries our metadata and is declared in the manifest."""
    ADOPTED = "adopted"
    """No metadata, but name follows the convention and is declared: adoption candidate."""
    ORPHANED = "orphaned"
    """Carries our metadata but no manifest entry references it any more."""
    UNMANAGED = "unmanaged"
    """Someone else's entity. Never touched."""


@dataclass(frozen=True, slots=True, kw_only=True)
class Classification:
    ownership: Ownership
    info: ManagedInfo
    reason: str


def classify[R: RemoteEntity](
    entity: R,
    desired_names: Set[str],
    *,
    adapter: ResourceAdapter[object, R],
) -> Classification:
    """Classify ``entity`` against the names declared in the manifest.

    The naming convention is a secondary signal: it can only promote an
    entity to adoption candidacy. Metadata from another manager always
    yields ``UNMANAGED``.
    """

    name = adapter.name_of(entity)
    info = parse_management(entity.metadata)
    in_desired = name in desired_names

    if info.is_managed:
        if in_desired:
            return Classification(
                ownership=Ownership.MANAGED,
                info=info,
                reason="Has management metadata and is declared in the manifest",
            )
        return Classification(
            ownership=Ownership.ORPHANED,
            info=info,
            reason="Has management metadata but is no longer declared in the manifest",
        )

    if has_foreign_owner(entity.metadata):
        return Classification(
            ownership=Ownership.UNMANAGED,
            info=info,
            reason=f"Managed by another tool ({entity.metadata.get('managed_by')})",
        )

    if not adapter.matches_convention(name):
        return Classification(
            ownership=Ownership.UNMANAGED,
            info=info,
            reason="No management metadata and name does not follow the naming convention",
        )

    if in_desired:
        return Classification(
            ownership=Ownership.ADOPTED,
            info=info,
            reason="Name follows the naming convention and is declared; needs metadata",
        )
    return Classification(
        ownership=Ownership.UNMANAGED,
        info=info,
        reason="Name follows the naming convention but is not declared in the manifest",
    )
