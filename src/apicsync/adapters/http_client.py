"""Async httpx client with an optional client-side rate limit."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypedDict

import httpx
from aiolimiter import AsyncLimiter

from apicsync.config.http_client import HttpClientConfig, RateLimit, ResponseHook

if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import TracebackType

__all__ = ["HttpClientConfig", "RateLimit", "RateLimitedClient", "ResponseHook"]


class AsyncClientOptions(TypedDict, total=False):
    base_url: str
    timeout: float
    headers: dict[str, str]
    cookies: dict[str, str]
    verify: bool
    event_hooks: dict[str, list[ResponseHook]]
    transport: httpx.AsyncBaseTransport


def client_options(config: HttpClientConfig) -> AsyncClientOptions:
    options: AsyncClientOptions = {
        "timeout": config.timeout_seconds,
        "verify": config.verify_tls,
    }
    if config.base_url is not None:
        options["base_url"] = config.base_url
    if config.default_headers:
        options["headers"] = dict(config.default_headers)
    if config.cookies:
        options["cookies"] = dict(config.cookies)
    if config.response_hooks:
        options["event_hooks"] = {"response": list(config.response_hooks)}
    if config.transport is not None:
        options["transport"] = config.transport
    return options


class RateLimitedClient:
    """Sends each request once; httpx errors reach the caller unchanged."""

    def __init__(self, config: HttpClientConfig) -> None:
        self.config = config
        self._limiter = (
            AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
            if config.ratelimit is not None
            else None
        )
        self._client = httpx.AsyncClient(**client_options(config))

    async def __aenter__(self) -> RateLimitedClient:
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
        params: Mapping[str, str] | None = None,
        json: object = None,
    ) -> httpx.Response:
        if self._limiter is None:
            return await self._client.request(method, url, params=params, json=json)
        async with self._limiter:
            return await self._client.request(method, url, params=params, json=json)
