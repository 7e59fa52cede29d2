"""SQLAlchemy table metadata for declared state."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import Column, DateTime, Dialect, MetaData, String, Table, Text, TypeDecorator

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from apicsync.domain.model import DeclaredValue

log = logging.getLogger(__name__)

metadata = MetaData()


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class DeclaredValuesType(TypeDecorator[dict[str, "DeclaredValue"]]):
    """JSON column; target sets are stored as sorted lists."""

    impl = Text
    cache_ok = True

    def process_bind_param(
        self, value: dict[str, DeclaredValue] | None, dialect: Dialect
    ) -> str | None:
        _ = dialect
        if value is None:
            return None
        payload: dict[str, str | list[str] | None] = {}
        for key, item in value.items():
            payload[key] = sorted(item) if isinstance(item, frozenset) else item
        return json.dumps(payload, sort_keys=True)

    def process_result_value(self, value: str | None, dialect: Dialect) -> dict[str, DeclaredValue]:
        _ = dialect
        if value is None:
            return {}
        loaded = json.loads(value)
        if not isinstance(loaded, dict):
            log.warning("Ignoring malformed declared values column: %r", value)
            return {}
        result: dict[str, DeclaredValue] = {}
        for key, item in cast(dict[str, Any], loaded).items():
            if isinstance(item, list):
                result[key] = frozenset(str(target) for target in cast(list[Any], item))
            elif item is None:
                result[key] = None
            else:
                result[key] = str(item)
        return result


declared_state_table = Table(
    "declared_state",
    metadata,
    Column("address", String(255), primary_key=True),
    Column("kind", String(64), nullable=False, index=True),
    Column("dn", String(1024), nullable=False, default=""),
    Column("declared_values", DeclaredValuesType(), nullable=False),
    Column("prior_values", DeclaredValuesType(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
)


def create_all_tables(engine: Engine) -> None:
    metadata.create_all(engine, checkfirst=True)
