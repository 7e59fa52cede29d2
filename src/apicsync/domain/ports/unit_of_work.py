"""Transaction boundary around the declared-state repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, Self, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from apicsync.domain.ports.persistence import StateRepository


@dataclass(slots=True)
class StateRepositories:
    states: StateRepository


@runtime_checkable
class StateUnitOfWork(Protocol):
    """Work inside ``with`` is discarded unless ``commit`` is called."""

    @property
    def repositories(self) -> StateRepositories: ...

    def __enter__(self) -> Self: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool | None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...
