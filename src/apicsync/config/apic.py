"""APIC connection configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_bool, env_float, optional_env_var, require_env_vars
from .errors import ConfigurationError
from .http_client import HttpClientConfig, RateLimit

APIC_TIMEOUT_SECONDS = 30.0
APIC_TOKEN_COOKIE = "APIC-cookie"


@dataclass(frozen=True, slots=True)
class ApicConfig:
    """Holds APIC REST API configuration values."""

    base_url: str
    http: HttpClientConfig


def get_apic_config(*, http: HttpClientConfig | None = None) -> ApicConfig:
    values = require_env_vars(("APIC_BASE_URL",))
    base_url = values["APIC_BASE_URL"].strip().rstrip("/")
    if not base_url.startswith(("http://", "https://")):
        raise ConfigurationError(
            f"APIC_BASE_URL must be an http(s) URL: {base_url!r}", variables=("APIC_BASE_URL",)
        )

    if http is None:
        token = optional_env_var("APIC_TOKEN")
        http = HttpClientConfig(
            name="apic",
            base_url=base_url,
            timeout_seconds=env_float("APIC_TIMEOUT_SECONDS", default=APIC_TIMEOUT_SECONDS),
            verify_tls=env_bool("APIC_VERIFY_TLS", default=True),
            ratelimit=_rate_limit_from_env(),
            default_headers={"Accept": "application/json"},
            cookies={APIC_TOKEN_COOKIE: token} if token else None,
        )
    return ApicConfig(base_url=base_url, http=http)


def _rate_limit_from_env() -> RateLimit | None:
    calls_per_second = env_float("APIC_RATE_LIMIT", default=0.0)
    if calls_per_second < 0:
        raise ConfigurationError(
            "APIC_RATE_LIMIT must be non-negative", variables=("APIC_RATE_LIMIT",)
        )
    if calls_per_second == 0:
        return None
    return RateLimit(max_calls=max(1, int(calls_per_second)), per_seconds=1.0)
