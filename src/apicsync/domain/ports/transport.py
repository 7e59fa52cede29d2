"""Port for the remote management API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

    from apicsync.domain.model import ManagedObject, RelationSpec


@dataclass(frozen=True, slots=True)
class ObjectRecord:
    class_name: str
    attributes: Mapping[str, str]


@dataclass(frozen=True, slots=True)
class ObjectContainer:
    """Result of a point lookup.

    Unknown DNs yield an empty container rather than a distinct status.
    """

    records: tuple[ObjectRecord, ...] = ()

    def attributes_of(self, class_name: str) -> Mapping[str, str]:
        for record in self.records:
            if record.class_name == class_name:
                return record.attributes
        return {}


@runtime_checkable
class Transport(Protocol):
    """Blocking calls against distinguished names.

    Implementations raise ``TransportError`` for network, API and payload failures.
    """

    def get(self, dn: str) -> ObjectContainer: ...

    def save(self, obj: ManagedObject) -> None: ...

    def delete_by_dn(self, dn: str, class_name: str) -> None: ...

    def create_relation(self, dn: str, relation: RelationSpec, target: str) -> None: ...

    def delete_relation(
        self, dn: str, relation: RelationSpec, target: str | None = None
    ) -> None: ...

    def read_relation(self, dn: str, relation: RelationSpec) -> tuple[str, ...]: ...


__all__ = ["ObjectContainer", "ObjectRecord", "Transport"]
