"""Public domain model surface."""

from __future__ import annotations

from apicsync.domain.model.identity import build_dn, parent_of, rn_of
from apicsync.domain.model.kinds import (
    DEFAULT_KINDS,
    DESCRIPTION_KEY,
    FIRMWARE_GROUP,
    IMPORTED_CONTRACT,
    NAME_KEY,
    AttributeMapping,
    KindRegistry,
    RelationSpec,
    ResourceKind,
    field_mapping,
)
from apicsync.domain.model.objects import (
    FirmwareGroup,
    ImportedContract,
    ManagedObject,
    ObjectStatus,
)
from apicsync.domain.model.state import DeclaredState, DeclaredValue

__all__ = [
    "DEFAULT_KINDS",
    "DESCRIPTION_KEY",
    "FIRMWARE_GROUP",
    "IMPORTED_CONTRACT",
    "NAME_KEY",
    "AttributeMapping",
    "DeclaredState",
    "DeclaredValue",
    "FirmwareGroup",
    "ImportedContract",
    "KindRegistry",
    "ManagedObject",
    "ObjectStatus",
    "RelationSpec",
    "ResourceKind",
    "build_dn",
    "field_mapping",
    "parent_of",
    "rn_of",
]
