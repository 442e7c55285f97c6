"""Rate-limited, retrying HTTP transport shared by API adapters."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from aiolimiter import AsyncLimiter
from httpx_retries import Retry, RetryTransport

from warden.config.http_resilience import RateLimit, ResilienceConfig, RetryPolicy

if TYPE_CHECKING:
    from types import TracebackType

    from httpx._types import QueryParamTypes

    from warden.config.http_resilience import ResponseHook

__all__ = [
    "RateLimit",
    "ResilienceConfig",
    "ResilientClient",
    "RetryPolicy",
    "build_retry",
]

log = getLogger(__name__)


def build_retry(policy: RetryPolicy) -> Retry:
    return Retry(
        total=policy.total,
        backoff_factor=policy.backoff_factor,
        max_backoff_wait=policy.max_backoff_wait,
        respect_retry_after_header=policy.respect_retry_after_header,
        allowed_methods=tuple(policy.allowed_methods),
        status_forcelist=tuple(policy.status_forcelist),
        retry_on_exceptions=policy.retry_on_exceptions,
        backoff_jitter=policy.backoff_jitter,
    )


class ResilientClient:
    """An ``httpx.AsyncClient`` behind a retry transport and an optional rate limiter.

    Retries happen inside the transport, so a single :meth:`request` call may
    hit the network several times but consumes one rate-limit slot.
    """

    def __init__(self, config: ResilienceConfig) -> None:
        self.config = config
        self._limiter: AsyncLimiter | None = (
            AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
            if config.ratelimit
            else None
        )
        hooks: list[ResponseHook] = [_log_response(config.name), *config.response_hooks]
        self._client = httpx.AsyncClient(
            base_url=config.base_url or "",
            timeout=config.timeout_seconds,
            headers=dict(config.default_headers or {}),
            event_hooks={"response": hooks},
            transport=RetryTransport(retry=build_retry(config.retry)),
        )

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: QueryParamTypes | None = None,
        json: object = None,
    ) -> httpx.Response:
        if self._limiter is None:
            return await self._client.request(method, url, params=params, json=json)
        async with self._limiter:
            return await self._client.request(method, url, params=params, json=json)


def _log_response(name: str) -> ResponseHook:
    async def hook(response: httpx.Response) -> None:
        request = response.request
        log.debug("[%s] %s %s -> %d", name, request.method, request.url, response.status_code)

    return hook
