"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import StateRepository
from .transport import ObjectContainer, ObjectRecord, Transport
from .unit_of_work import StateRepositories, StateUnitOfWork

__all__ = [
    "ObjectContainer",
    "ObjectRecord",
    "StateRepositories",
    "StateRepository",
    "StateUnitOfWork",
    "Transport",
]
