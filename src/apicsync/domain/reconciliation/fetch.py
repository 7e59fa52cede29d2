"""Point lookups of remote objects."""

from __future__ import annotations

from typing import TYPE_CHECKING

from apicsync.domain.errors import NotFoundError

if TYPE_CHECKING:
    from apicsync.domain.model import ManagedObject, ResourceKind
    from apicsync.domain.ports import Transport


def fetch_by_dn[TObject: ManagedObject](
    transport: Transport,
    kind: ResourceKind[TObject],
    dn: str,
    *,
    operation: str = "fetch",
) -> TObject:
    """Fetch and decode the object at ``dn``.

    The API answers unknown DNs with an empty container, so an object without a DN
    is reported as ``NotFoundError``. Transport errors propagate unchanged.
    """

    container = transport.get(dn)
    obj = kind.object_type.from_wire(container.attributes_of(kind.class_name))
    if not obj.distinguished_name:
        raise NotFoundError(f"{kind.class_name} not found", dn=dn, operation=operation)
    return obj
