"""Translate between APIC payloads and domain objects."""

from __future__ import annotations

from typing import TYPE_CHECKING

from apicsync.domain.model import ObjectStatus
from apicsync.domain.ports import ObjectContainer, ObjectRecord

if TYPE_CHECKING:
    from apicsync.domain.model import ManagedObject, RelationSpec

    from .schema import ApicResponse

type ApicPayload = dict[str, dict[str, dict[str, str]]]


def container_from_response(response: ApicResponse) -> ObjectContainer:
    records = tuple(
        ObjectRecord(class_name=class_name, attributes=dict(body.attributes))
        for record in response.imdata
        for class_name, body in record.items()
    )
    return ObjectContainer(records=records)


def relation_targets(response: ApicResponse, relation: RelationSpec) -> tuple[str, ...]:
    targets: list[str] = []
    for record in response.imdata:
        body = record.get(relation.class_name)
        if body is None:
            continue
        target = body.attributes.get(relation.target_attribute, "")
        if target:
            targets.append(target)
    return tuple(targets)


def object_payload(obj: ManagedObject) -> ApicPayload:
    return {obj.CLASS_NAME: {"attributes": obj.to_wire()}}


def relation_payload(dn: str, relation: RelationSpec, target: str) -> ApicPayload:
    return {
        relation.class_name: {
            "attributes": {
                "dn": relation.child_dn(dn, target),
                relation.target_attribute: target,
            }
        }
    }


def deletion_payload(dn: str, class_name: str) -> ApicPayload:
    return {class_name: {"attributes": {"dn": dn, "status": ObjectStatus.DELETED.value}}}
