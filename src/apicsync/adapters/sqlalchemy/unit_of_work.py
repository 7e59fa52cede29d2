"""SQLAlchemy-backed unit of work for declared state."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Literal, Self

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from apicsync.adapters.sqlalchemy.mappings import create_all_tables
from apicsync.adapters.sqlalchemy.repositories import SqlAlchemyStateRepository
from apicsync.config.storage import get_database_config
from apicsync.domain.ports.unit_of_work import StateRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the state store is used before ``startup()`` or out of order."""


@dataclass(slots=True)
class _Binding:
    engine: Engine | None = None
    sessions: sessionmaker[Session] | None = None

    def bind(self, engine: Engine | None) -> None:
        self.engine = engine
        self.sessions = (
            sessionmaker(bind=engine, expire_on_commit=False) if engine is not None else None
        )


_BINDING = _Binding()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> Engine:
    """Bind the state store to an engine and create the schema if needed."""

    if _BINDING.engine is not None and not force:
        raise StartupError("State store already started. Pass force=True to rebind.")

    resolved = engine or create_engine(database_uri or get_database_config().uri, future=True)
    create_all_tables(resolved)
    _BINDING.bind(resolved)
    log.debug("State store bound to %s", resolved.url)
    return resolved


def configured_engine() -> Engine | None:
    return _BINDING.engine


def is_started() -> bool:
    return _BINDING.engine is not None


def shutdown() -> None:
    """Dispose the bound engine (primarily for tests)."""

    if _BINDING.engine is not None:
        _BINDING.engine.dispose()
    _BINDING.bind(None)


class SqlAlchemyUnitOfWork:
    """One session per ``with`` block; uncommitted work is rolled back on exit."""

    def __init__(self) -> None:
        if _BINDING.sessions is None:
            raise StartupError(
                "State store not started. Call apicsync.adapters.sqlalchemy.startup() first."
            )
        self._sessions = _BINDING.sessions
        self._session: Session | None = None
        self._repositories: StateRepositories | None = None

    def __enter__(self) -> Self:
        if self._session is not None:
            raise StartupError("Unit of work already entered")
        self._session = self._sessions()
        self._repositories = StateRepositories(states=SqlAlchemyStateRepository(self._session))
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self._require_session()
        try:
            session.rollback()
        finally:
            session.close()
            self._session = None
            self._repositories = None
        return False

    @property
    def repositories(self) -> StateRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work used outside its with block")
        return self._repositories

    def commit(self) -> None:
        self._require_session().commit()

    def rollback(self) -> None:
        self._require_session().rollback()

    def _require_session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work used outside its with block")
        return self._session


if TYPE_CHECKING:
    from apicsync.domain.ports.unit_of_work import StateUnitOfWork

    _uow_check: StateUnitOfWork = SqlAlchemyUnitOfWork()
