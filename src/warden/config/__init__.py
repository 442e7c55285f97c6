"""Application configuration helpers."""

from __future__ import annotations

from .env import require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .letta import LettaConfig, get_letta_config
from .logging import configure_logging
from .reconcile import ReconcileConfig, get_reconcile_config

__all__ = [
    "ConfigurationError",
    "LettaConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ReconcileConfig",
    "ResilienceConfig",
    "RetryPolicy",
    "configure_logging",
    "get_letta_config",
    "get_reconcile_config",
    "require_env_var",
    "require_env_vars",
]
