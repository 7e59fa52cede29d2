"""Ports for persisting declared state."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from apicsync.domain.model import DeclaredState


@runtime_checkable
class StateRepository(Protocol):
    """Declared state keyed by resource address (``<kind>.<label>``)."""

    def get(self, address: str) -> DeclaredState | None: ...

    def put(self, address: str, state: DeclaredState) -> None: ...

    def remove(self, address: str) -> None: ...

    def list_addresses(self) -> list[str]: ...
