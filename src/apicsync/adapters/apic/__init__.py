"""APIC REST adapter."""

from __future__ import annotations

from .client import ApicAPIError, ApicClient
from .transport import ApicTransport

__all__ = ["ApicAPIError", "ApicClient", "ApicTransport"]
