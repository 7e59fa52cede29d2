"""Transport port implementation backed by the APIC REST API."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .client import ApicClient
from .translator import (
    container_from_response,
    deletion_payload,
    object_payload,
    relation_payload,
    relation_targets,
)

if TYPE_CHECKING:
    from apicsync.config.apic import ApicConfig
    from apicsync.domain.model import ManagedObject, RelationSpec
    from apicsync.domain.ports import ObjectContainer


class ApicTransport:
    def __init__(self, *, config: ApicConfig, client: ApicClient | None = None) -> None:
        self._client = client or ApicClient(config=config)

    def close(self) -> None:
        self._client.close()

    def get(self, dn: str) -> ObjectContainer:
        return container_from_response(self._client.get_mo(dn))

    def save(self, obj: ManagedObject) -> None:
        self._client.post_mo(obj.distinguished_name, object_payload(obj))

    def delete_by_dn(self, dn: str, class_name: str) -> None:
        self._client.post_mo(dn, deletion_payload(dn, class_name))

    def create_relation(self, dn: str, relation: RelationSpec, target: str) -> None:
        child_dn = relation.child_dn(dn, target)
        self._client.post_mo(child_dn, relation_payload(dn, relation, target))

    def delete_relation(self, dn: str, relation: RelationSpec, target: str | None = None) -> None:
        if relation.multiple and target is None:
            for existing in self.read_relation(dn, relation):
                self.delete_relation(dn, relation, existing)
            return
        child_dn = relation.child_dn(dn, target)
        self._client.post_mo(child_dn, deletion_payload(child_dn, relation.class_name))

    def read_relation(self, dn: str, relation: RelationSpec) -> tuple[str, ...]:
        if relation.multiple:
            response = self._client.get_mo(
                dn,
                params={
                    "query-target": "children",
                    "target-subtree-class": relation.class_name,
                },
            )
        else:
            response = self._client.get_mo(relation.child_dn(dn))
        return relation_targets(response, relation)
