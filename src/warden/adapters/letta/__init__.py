"""Letta store adapter."""

from __future__ import annotations

from .client import LettaAPIError, LettaClient
from .store import LettaBlockStore, LettaTemplateStore, LettaToolStore

__all__ = [
    "LettaAPIError",
    "LettaBlockStore",
    "LettaClient",
    "LettaTemplateStore",
    "LettaToolStore",
]
