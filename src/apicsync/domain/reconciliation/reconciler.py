"""Create/read/update/delete/import orchestration for one resource kind."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from apicsync.domain.errors import (
    IdentityError,
    NotFoundError,
    PartialRelationFailure,
    TransportError,
)
from apicsync.domain.model import (
    DESCRIPTION_KEY,
    NAME_KEY,
    DeclaredState,
    ObjectStatus,
    build_dn,
    parent_of,
)

from .fetch import fetch_by_dn
from .mapping import decode, encode
from .relations import (
    ReplaceApplied,
    ReplaceFailed,
    ReplacePartial,
    attach_relation,
    read_relation,
    replace_relation,
    targets_of,
)

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

    from apicsync.domain.model import DeclaredValue, ManagedObject, ResourceKind
    from apicsync.domain.ports import Transport

log = getLogger(__name__)


@contextmanager
def _during(operation: str, dn: str) -> Iterator[None]:
    try:
        yield
    except TransportError as exc:
        exc.add_note(f"while running {operation} on {dn}")
        raise


@dataclass(slots=True)
class Reconciler[TObject: ManagedObject]:
    """Drives one resource kind through its lifecycle.

    Operations mutate the given ``DeclaredState`` in place. The caller serialises
    operations per resource; nothing is cached between calls.
    """

    transport: Transport
    kind: ResourceKind[TObject]

    def create(self, state: DeclaredState) -> None:
        if state.exists:
            raise IdentityError(
                f"create requires an untracked resource, already tracking {state.id}",
                dn=state.id,
                operation="create",
            )
        log.debug("%s: Beginning Creation", self.kind.class_name)
        self.kind.validate(state.values)
        obj = self._encode(state)
        dn = obj.distinguished_name

        with _during("create", dn):
            self.transport.save(obj)

        for relation in self.kind.relations:
            value = state.get(relation.key)
            if not targets_of(value):
                continue
            try:
                with _during("create", dn):
                    attach_relation(self.transport, dn, relation, value)
            except TransportError as exc:
                # the object itself is committed, keep tracking it
                state.id = dn
                raise PartialRelationFailure(
                    f"object saved but relation {relation.key} could not be attached",
                    dn=dn,
                    operation="create",
                    relation=relation.key,
                    removed=(),
                    failed=targets_of(value),
                ) from exc

        state.id = dn
        log.debug("%s: Creation finished successfully", dn)
        self._refresh(state, operation="create")

    def read(self, state: DeclaredState) -> None:
        """Refresh ``state`` from the remote object.

        A missing object clears the identity instead of failing.
        """

        if not state.exists:
            log.debug("%s: nothing to read, resource is absent", self.kind.key)
            return
        log.debug("%s: Beginning Read", state.id)
        try:
            self._refresh(state, operation="read")
        except NotFoundError:
            log.info("%s: not found remotely, dropping from state", state.id)
            state.clear()
            return
        log.debug("%s: Read finished successfully", state.id)

    def update(self, state: DeclaredState) -> None:
        if not state.exists:
            raise IdentityError("update requires an identity", operation="update")
        log.debug("%s: Beginning Update", state.id)
        self.kind.validate(state.values)
        obj = self._encode(state)
        dn = state.id
        if obj.distinguished_name != dn:
            raise IdentityError(
                f"name and parent are immutable, declared values derive "
                f"{obj.distinguished_name}",
                dn=dn,
                operation="update",
            )
        obj.status = ObjectStatus.MODIFIED

        with _during("update", dn):
            self.transport.save(obj)

        for relation in self.kind.relations:
            if not state.has_change(relation.key):
                continue
            old, new = state.get_change(relation.key)
            match replace_relation(self.transport, dn, relation, old, new):
                case ReplaceApplied(removed=removed, added=added):
                    log.debug("%s: %s removed=%s added=%s", dn, relation.key, removed, added)
                case ReplaceFailed(error=error):
                    error.add_note(f"while running update on {dn}")
                    raise error
                case ReplacePartial(removed=removed, failed=failed, error=error):
                    raise PartialRelationFailure(
                        f"relation {relation.key} removed {list(removed)} "
                        f"but failed to attach {list(failed)}",
                        dn=dn,
                        operation="update",
                        relation=relation.key,
                        removed=removed,
                        failed=failed,
                    ) from error

        log.debug("%s: Update finished successfully", dn)
        self._refresh(state, operation="update")

    def delete(self, state: DeclaredState) -> None:
        if not state.exists:
            log.debug("%s: nothing to delete, resource is absent", self.kind.key)
            return
        dn = state.id
        log.debug("%s: Beginning Destroy", dn)
        with _during("delete", dn):
            self.transport.delete_by_dn(dn, self.kind.class_name)
        state.clear()
        log.debug("%s: Destroy finished successfully", dn)

    def import_state(self, dn: str) -> DeclaredState:
        """Build declared state from nothing but the object's DN."""

        if not dn:
            raise IdentityError("import requires a DN", operation="import")
        log.debug("%s: Beginning Import", dn)
        state = DeclaredState(kind=self.kind.key, id=dn)
        self._refresh(state, operation="import", strict_relations=True)
        log.debug("%s: Import finished successfully", dn)
        return state

    def lookup(self, values: Mapping[str, DeclaredValue]) -> DeclaredState:
        """Read-only lookup by name (and parent), failing when absent."""

        name = values.get(NAME_KEY)
        if not isinstance(name, str) or not name:
            raise IdentityError(f"{self.kind.key}: name is required", operation="lookup")
        dn = build_dn(self.kind.parent_dn(values), name, self.kind.rn_prefix)
        with _during("lookup", dn):
            obj = fetch_by_dn(self.transport, self.kind, dn, operation="lookup")
        state = DeclaredState(kind=self.kind.key)
        self._apply(state, obj)
        state.snapshot()
        return state

    def _encode(self, state: DeclaredState) -> TObject:
        return encode(
            self.kind,
            state.values,
            self.kind.parent_dn(state.values),
            state.get_text(DESCRIPTION_KEY),
        )

    def _refresh(
        self, state: DeclaredState, *, operation: str, strict_relations: bool = False
    ) -> None:
        dn = state.id
        with _during(operation, dn):
            obj = fetch_by_dn(self.transport, self.kind, dn, operation=operation)
        self._apply(state, obj)

        for relation in self.kind.relations:
            try:
                with _during(operation, dn):
                    value = read_relation(self.transport, dn, relation)
            except TransportError as exc:
                if strict_relations:
                    raise
                # relation reads are best-effort, the previous value stays
                log.warning("%s: error while reading relation %s: %s", dn, relation.class_name, exc)
                continue
            state.set(relation.key, value)

        state.snapshot()

    def _apply(self, state: DeclaredState, obj: TObject) -> None:
        values: dict[str, DeclaredValue] = dict(decode(self.kind, obj))
        if self.kind.parent_key is not None:
            values[self.kind.parent_key] = parent_of(obj.distinguished_name)
        state.id = obj.distinguished_name
        state.values.update(values)
