"""APIC REST API client."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from apicsync.adapters.http_client import RateLimitedClient
from apicsync.domain.errors import TransportError

from .schema import ApicResponse

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from apicsync.config.apic import ApicConfig
    from apicsync.config.http_client import HttpClientConfig

    from .translator import ApicPayload

log = getLogger(__name__)


class ApicAPIError(TransportError):
    """Raised when the APIC cannot be reached or answers with an error."""


def mo_path(dn: str) -> str:
    return f"/api/node/mo/{dn}.json"


class ApicClient:
    """Low-level HTTP client for managed-object endpoints.

    Calls run on one event loop owned by the client, so a single rate limiter
    and connection pool are shared by every request until ``close``.
    """

    def __init__(
        self,
        *,
        config: ApicConfig,
        client_factory: Callable[[HttpClientConfig], RateLimitedClient] | None = None,
    ) -> None:
        self._config = config
        self._http = config.http
        self._client_factory = client_factory or RateLimitedClient
        self._runner = asyncio.Runner()
        self._client: RateLimitedClient | None = None

    def __enter__(self) -> ApicClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def get_mo(self, dn: str, *, params: Mapping[str, str] | None = None) -> ApicResponse:
        return self._runner.run(self._request_async("GET", dn, params=params))

    def post_mo(self, dn: str, payload: ApicPayload) -> ApicResponse:
        return self._runner.run(self._request_async("POST", dn, payload=payload))

    def close(self) -> None:
        if self._client is not None:
            self._runner.run(self._client.aclose())
            self._client = None
        self._runner.close()

    async def _request_async(
        self,
        method: str,
        dn: str,
        *,
        params: Mapping[str, str] | None = None,
        payload: ApicPayload | None = None,
    ) -> ApicResponse:
        if self._http.base_url is None:
            raise ApicAPIError(
                "Missing APIC base_url in HTTP configuration", dn=dn, operation=method
            )
        path = mo_path(dn)
        log.debug("%s %s", method, path)
        if self._client is None:
            self._client = self._client_factory(self._http)
        try:
            response = await self._client.request(
                method,
                path,
                params=dict(params) if params else None,
                json=payload,
            )
        except httpx.HTTPError as exc:
            raise ApicAPIError(f"{method} {path} failed: {exc}", dn=dn, operation=method) from exc
        return _parse_response(response, method=method, dn=dn)


def _parse_response(response: httpx.Response, *, method: str, dn: str) -> ApicResponse:
    try:
        parsed = ApicResponse.model_validate(response.json())
    except (ValueError, ValidationError) as exc:
        if response.is_error:
            raise ApicAPIError(
                f"HTTP {response.status_code} {response.reason_phrase}",
                dn=dn,
                operation=method,
                status_code=response.status_code,
            ) from exc
        raise ApicAPIError(
            "Unexpected APIC response payload", dn=dn, operation=method
        ) from exc

    error = parsed.error()
    if response.is_error or error is not None:
        attributes = error.attributes if error is not None else {}
        code = attributes.get("code")
        text = attributes.get("text") or response.reason_phrase
        raise ApicAPIError(
            f"APIC error {code or response.status_code}: {text}",
            dn=dn,
            operation=method,
            status_code=response.status_code,
            code=code,
        )
    return parsed
