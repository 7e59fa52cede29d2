"""SQLAlchemy adapter package for apicsync."""

from __future__ import annotations

from .mappings import create_all_tables, declared_state_table, metadata
from .repositories import SqlAlchemyStateRepository
from .unit_of_work import SqlAlchemyUnitOfWork, shutdown, startup

__all__ = [
    "SqlAlchemyStateRepository",
    "SqlAlchemyUnitOfWork",
    "create_all_tables",
    "declared_state_table",
    "metadata",
    "shutdown",
    "startup",
]
