"""Per-kind rules for blocks, tools and templates."""

from __future__ import annotations

from .base import ResourceAdapter
from .blocks import BlockAdapter
from .templates import TemplateAdapter
from .tools import ToolAdapter

__all__ = ["BlockAdapter", "ResourceAdapter", "TemplateAdapter", "ToolAdapter"]
