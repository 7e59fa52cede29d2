"""Projection between typed objects and flat declared attributes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from apicsync.domain.errors import IdentityError, SchemaError
from apicsync.domain.model import DESCRIPTION_KEY, NAME_KEY, build_dn

if TYPE_CHECKING:
    from collections.abc import Mapping

    from apicsync.domain.model import DeclaredValue, ManagedObject, ResourceKind


def decode[TObject: ManagedObject](kind: ResourceKind[TObject], obj: TObject) -> dict[str, str]:
    """Project every mapped attribute; absent values come back as ``""``."""

    values = {mapping.key: mapping.decode(obj) for mapping in kind.attributes}
    values[DESCRIPTION_KEY] = obj.description
    return values


def encode[TObject: ManagedObject](
    kind: ResourceKind[TObject],
    values: Mapping[str, DeclaredValue],
    parent_dn: str,
    description: str,
) -> TObject:
    """Build the object to send, copying only attributes the caller set.

    Unset attributes stay empty and are left out of the wire payload, so values
    the server computed are not overwritten.
    """

    name = values.get(NAME_KEY)
    if not isinstance(name, str) or not name:
        raise IdentityError(f"{kind.key}: name is required", dn=parent_dn, operation="encode")

    obj = kind.object_type(
        distinguished_name=build_dn(parent_dn, name, kind.rn_prefix),
        description=description,
    )
    for mapping in kind.attributes:
        match values.get(mapping.key):
            case None | "":
                continue
            case str() as value:
                mapping.encode(obj, value)
            case other:
                raise SchemaError(
                    f"{mapping.key} expects a string, got {type(other).__name__}",
                    dn=obj.distinguished_name,
                    operation="encode",
                )
    return obj
