"""Reconciliation of declared state against the remote object graph."""

from __future__ import annotations

from .fetch import fetch_by_dn
from .mapping import decode, encode
from .plan import PlanAction, immutable_keys, overlay_desired, plan_action
from .reconciler import Reconciler
from .relations import (
    ReplaceApplied,
    ReplaceFailed,
    ReplacePartial,
    ReplaceResult,
    ReplaceStatus,
    attach_relation,
    read_relation,
    replace_relation,
    targets_of,
)

__all__ = [
    "PlanAction",
    "Reconciler",
    "ReplaceApplied",
    "ReplaceFailed",
    "ReplacePartial",
    "ReplaceResult",
    "ReplaceStatus",
    "attach_relation",
    "decode",
    "encode",
    "fetch_by_dn",
    "immutable_keys",
    "overlay_desired",
    "plan_action",
    "read_relation",
    "replace_relation",
    "targets_of",
]
