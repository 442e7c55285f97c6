"""Domain model for desired and actual resource state."""

from __future__ import annotations

from .enums import Layer, ResourceKind, SourceType, TemplateEnvironment
from .manifest import BlockEntry, ManifestEntry, TemplateEntry, ToolEntry
from .metadata import MANAGED_BY, ManagedInfo, ManagedMetadata, is_managed, parse_management
from .remote import RemoteBlock, RemoteEntity, RemoteTemplate, RemoteTool

__all__ = [
    "MANAGED_BY",
    "BlockEntry",
    "Layer",
    "ManagedInfo",
    "ManagedMetadata",
    "ManifestEntry",
    "RemoteBlock",
    "RemoteEntity",
    "RemoteTemplate",
    "RemoteTool",
    "ResourceKind",
    "SourceType",
    "TemplateEntry",
    "TemplateEnvironment",
    "ToolEntry",
    "is_managed",
    "parse_management",
]
