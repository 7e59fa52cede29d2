"""Typed records for the APIC managed objects handled by apicsync."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, ClassVar, Self

if TYPE_CHECKING:
    from collections.abc import Mapping


class ObjectStatus(StrEnum):
    """Write-only lifecycle marker understood by the APIC on POST."""

    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"


@dataclass(slots=True, kw_only=True)
class ManagedObject:
    """Attributes shared by every policy object.

    ``WIRE_FIELDS`` maps dataclass fields to APIC attribute names; subclasses extend
    it with their own attributes.
    """

    CLASS_NAME: ClassVar[str]
    RN_PREFIX: ClassVar[str]
    WIRE_FIELDS: ClassVar[Mapping[str, str]] = {
        "distinguished_name": "dn",
        "name": "name",
        "description": "descr",
        "annotation": "annotation",
        "name_alias": "nameAlias",
        "status": "status",
    }

    distinguished_name: str = ""
    name: str = ""
    description: str = ""
    annotation: str = ""
    name_alias: str = ""
    status: str = ""

    def to_wire(self) -> dict[str, str]:
        """Return the non-empty attributes keyed by their APIC names."""

        attributes: dict[str, str] = {}
        for field_name, wire_name in self.WIRE_FIELDS.items():
            value = getattr(self, field_name)
            if value:
                attributes[wire_name] = value
        return attributes

    @classmethod
    def from_wire(cls, attributes: Mapping[str, object]) -> Self:
        values = {
            field_name: _as_text(attributes.get(wire_name))
            for field_name, wire_name in cls.WIRE_FIELDS.items()
        }
        return cls(**values)


@dataclass(slots=True, kw_only=True)
class FirmwareGroup(ManagedObject):
    CLASS_NAME: ClassVar[str] = "firmwareFwGrp"
    RN_PREFIX: ClassVar[str] = "fwgrp-"
    WIRE_FIELDS: ClassVar[Mapping[str, str]] = {
        **ManagedObject.WIRE_FIELDS,
        "firmware_group_type": "type",
    }

    firmware_group_type: str = ""


@dataclass(slots=True, kw_only=True)
class ImportedContract(ManagedObject):
    CLASS_NAME: ClassVar[str] = "vzCPIf"
    RN_PREFIX: ClassVar[str] = "cif-"


def _as_text(value: object) -> str:
    if value is None:
        return ""
    return str(value)
