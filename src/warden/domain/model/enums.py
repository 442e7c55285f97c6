"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class Layer(StrEnum):
    """Scoping layer of a managed resource."""

    BASE = "base"
    ORG = "org"
    PROJECT = "project"
    USER = "user"
    LANE = "lane"


class ResourceKind(StrEnum):
    BLOCK = "block"
    TOOL = "tool"
    TEMPLATE = "template"


class SourceType(StrEnum):
    PYTHON = "python"
    TYPESCRIPT = "typescript"


class TemplateEnvironment(StrEnum):
    DEV = "dev"
    STAGING = "staging"
    PRODUCTION = "production"
