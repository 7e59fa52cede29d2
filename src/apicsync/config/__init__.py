"""Application configuration helpers."""

from __future__ import annotations

from apicsync.common.logging import configure_logging

from .apic import ApicConfig, get_apic_config
from .env import require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_client import HttpClientConfig, RateLimit
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "ApicConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "HttpClientConfig",
    "MissingConfigurationError",
    "RateLimit",
    "StorageConfig",
    "configure_logging",
    "get_apic_config",
    "get_database_config",
    "get_storage_config",
    "require_env_var",
    "require_env_vars",
]
