"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import delete, insert, select, update

from apicsync.adapters.sqlalchemy.mappings import declared_state_table
from apicsync.domain.model import DeclaredState

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


class SqlAlchemyStateRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, address: str) -> DeclaredState | None:
        stmt = select(declared_state_table).where(declared_state_table.c.address == address)
        row = self.session.execute(stmt).one_or_none()
        if row is None:
            return None
        return DeclaredState(
            kind=row.kind,
            id=row.dn,
            values=dict(row.declared_values),
            prior=dict(row.prior_values),
        )

    def put(self, address: str, state: DeclaredState) -> None:
        row = {
            "kind": state.kind,
            "dn": state.id,
            "declared_values": dict(state.values),
            "prior_values": dict(state.prior),
            "updated_at": datetime.now(tz=UTC),
        }
        exists_stmt = select(declared_state_table.c.address).where(
            declared_state_table.c.address == address
        )
        if self.session.execute(exists_stmt).scalar_one_or_none() is None:
            self.session.execute(insert(declared_state_table).values(address=address, **row))
        else:
            self.session.execute(
                update(declared_state_table)
                .where(declared_state_table.c.address == address)
                .values(**row)
            )

    def remove(self, address: str) -> None:
        self.session.execute(
            delete(declared_state_table).where(declared_state_table.c.address == address)
        )

    def list_addresses(self) -> list[str]:
        stmt = select(declared_state_table.c.address).order_by(declared_state_table.c.address)
        return list(self.session.execute(stmt).scalars())
