"""Relation sub-resources attached below a primary object.

A relation child is identified by its target, so changing a target is always a
removal followed by a creation. ``replace_relation`` reports the three possible
outcomes explicitly: everything applied, nothing changed, or old targets removed
without the new ones attached.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from apicsync.domain.errors import TransportError

if TYPE_CHECKING:
    from apicsync.domain.model import DeclaredValue, RelationSpec
    from apicsync.domain.ports import Transport

log = getLogger(__name__)


class ReplaceStatus(StrEnum):
    APPLIED = "applied"
    FAILED = "failed"
    PARTIAL = "partial"


@dataclass(slots=True, kw_only=True)
class ReplaceApplied:
    removed: tuple[str, ...] = ()
    added: tuple[str, ...] = ()
    status: Literal[ReplaceStatus.APPLIED] = ReplaceStatus.APPLIED


@dataclass(slots=True, kw_only=True)
class ReplaceFailed:
    """Nothing was changed remotely."""

    error: TransportError
    status: Literal[ReplaceStatus.FAILED] = ReplaceStatus.FAILED


@dataclass(slots=True, kw_only=True)
class ReplacePartial:
    """Old targets are gone; ``failed`` targets were not attached."""

    removed: tuple[str, ...]
    added: tuple[str, ...]
    failed: tuple[str, ...]
    error: TransportError
    status: Literal[ReplaceStatus.PARTIAL] = ReplaceStatus.PARTIAL


type ReplaceResult = ReplaceApplied | ReplaceFailed | ReplacePartial


def targets_of(value: DeclaredValue) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, frozenset):
        return tuple(sorted(value))
    return (value,) if value else ()


def read_relation(transport: Transport, dn: str, relation: RelationSpec) -> str | frozenset[str]:
    """Return the current target (``""`` when unset) or target set."""

    targets = transport.read_relation(dn, relation)
    if relation.multiple:
        return frozenset(targets)
    if len(targets) > 1:
        log.warning("%s: %s has %d targets, using the first", dn, relation.class_name, len(targets))
    return targets[0] if targets else ""


def attach_relation(
    transport: Transport, dn: str, relation: RelationSpec, value: DeclaredValue
) -> tuple[str, ...]:
    """Create every declared target; returns the targets attached."""

    targets = targets_of(value)
    for target in targets:
        transport.create_relation(dn, relation, target)
    return targets


def replace_relation(
    transport: Transport,
    dn: str,
    relation: RelationSpec,
    old: DeclaredValue,
    new: DeclaredValue,
) -> ReplaceResult:
    old_targets = set(targets_of(old))
    new_targets = set(targets_of(new))
    if relation.multiple:
        to_remove = sorted(old_targets - new_targets)
        to_add = sorted(new_targets - old_targets)
    else:
        to_remove = sorted(old_targets)
        to_add = sorted(new_targets)

    removed: list[str] = []
    try:
        if relation.multiple:
            for target in to_remove:
                transport.delete_relation(dn, relation, target)
                removed.append(target)
        else:
            # removing an absent single relation is a no-op on the API side
            transport.delete_relation(dn, relation)
            removed.extend(to_remove)
    except TransportError as exc:
        if not removed:
            return ReplaceFailed(error=exc)
        return ReplacePartial(removed=tuple(removed), added=(), failed=tuple(to_add), error=exc)

    added: list[str] = []
    try:
        for target in to_add:
            transport.create_relation(dn, relation, target)
            added.append(target)
    except TransportError as exc:
        if not removed and not added:
            return ReplaceFailed(error=exc)
        failed = tuple(target for target in to_add if target not in added)
        return ReplacePartial(
            removed=tuple(removed), added=tuple(added), failed=failed, error=exc
        )

    return ReplaceApplied(removed=tuple(removed), added=tuple(added))
