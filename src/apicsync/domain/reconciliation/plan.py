"""Deciding which lifecycle operation brings a resource to its declared values."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from apicsync.domain.model import NAME_KEY

if TYPE_CHECKING:
    from collections.abc import Mapping

    from apicsync.domain.model import DeclaredState, DeclaredValue, ManagedObject, ResourceKind


class PlanAction(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    REPLACE = "replace"
    NOOP = "noop"


def immutable_keys(kind: ResourceKind[ManagedObject]) -> tuple[str, ...]:
    """Keys that are part of the DN and cannot be changed in place."""

    if kind.parent_key is None:
        return (NAME_KEY,)
    return (kind.parent_key, NAME_KEY)


def overlay_desired(
    kind: ResourceKind[ManagedObject],
    state: DeclaredState,
    desired: Mapping[str, DeclaredValue],
) -> None:
    """Write declared values over the refreshed state.

    Attributes left out keep the value read from the API (the server may compute
    them); relations left out are declared absent.
    """

    for key, value in desired.items():
        state.set(key, value)
    for relation in kind.relations:
        if relation.key not in desired:
            state.set(relation.key, None)


def plan_action(
    kind: ResourceKind[ManagedObject],
    state: DeclaredState,
    desired: Mapping[str, DeclaredValue],
) -> PlanAction:
    """Classify ``state`` (freshly read, not yet overlaid) against ``desired``."""

    if not state.exists:
        return PlanAction.CREATE
    for key in immutable_keys(kind):
        if key in desired and desired[key] != state.prior.get(key):
            return PlanAction.REPLACE
    relation_keys = {relation.key for relation in kind.relations}
    for key in kind.declared_keys:
        if key in relation_keys:
            if _differs(desired.get(key), state.prior.get(key)):
                return PlanAction.UPDATE
        # empty attributes are never sent, so they cannot drive an update
        elif desired.get(key) and _differs(desired[key], state.prior.get(key)):
            return PlanAction.UPDATE
    return PlanAction.NOOP


def _differs(left: DeclaredValue, right: DeclaredValue) -> bool:
    return (left or None) != (right or None)
