"""Letta API configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_LETTA_BASE_URL = "https://api.letta.com"
LETTA_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class LettaConfig:
    """Holds Letta API configuration values."""

    api_key: str
    base_url: str
    resilience: ResilienceConfig
    project: str | None = None


def get_letta_config(*, resilience: ResilienceConfig | None = None) -> LettaConfig:
    values = require_env_vars(("LETTA_API_KEY",))
    base_url = (optional_env_var("LETTA_BASE_URL") or DEFAULT_LETTA_BASE_URL).rstrip("/")
    project = optional_env_var("LETTA_PROJECT")

    headers = {"Authorization": f"Bearer {values['LETTA_API_KEY']}"}
    if project:
        headers["X-Project"] = project

    return LettaConfig(
        api_key=values["LETTA_API_KEY"],
        base_url=base_url,
        project=project,
        resilience=resilience
        or ResilienceConfig(
            name="letta",
            base_url=f"{base_url}/v1",
            timeout_seconds=LETTA_TIMEOUT_SECONDS,
            retry=RetryPolicy(total=3),
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
            default_headers=headers,
        ),
    )
