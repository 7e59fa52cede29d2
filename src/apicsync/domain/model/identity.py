"""Distinguished-name derivation.

A DN is a ``/``-separated path of relative names (RNs). RNs may embed bracketed
values that contain slashes themselves (``subnet-[10.0.0.1/24]``), so splitting
only happens on separators outside brackets.
"""

from __future__ import annotations

from apicsync.domain.errors import IdentityError

DN_SEPARATOR = "/"


def build_dn(parent_dn: str, name: str, rn_prefix: str) -> str:
    """Return ``parent_dn/rn_prefix+name``."""

    if not name:
        raise IdentityError("name must not be empty", dn=parent_dn, operation="build_dn")
    if not parent_dn:
        raise IdentityError(
            f"parent DN missing for {rn_prefix}{name}", operation="build_dn"
        )
    return f"{parent_dn}{DN_SEPARATOR}{rn_prefix}{name}"


def parent_of(dn: str) -> str:
    """Strip the last RN from ``dn``."""

    index = _last_separator(dn)
    if index <= 0:
        raise IdentityError("DN has no parent segment", dn=dn, operation="parent_of")
    return dn[:index]


def rn_of(dn: str) -> str:
    """Return the last RN of ``dn``."""

    index = _last_separator(dn)
    if index < 0:
        return dn
    return dn[index + 1 :]


def _last_separator(dn: str) -> int:
    depth = 0
    for index in range(len(dn) - 1, -1, -1):
        char = dn[index]
        if char == "]":
            depth += 1
        elif char == "[":
            depth = max(0, depth - 1)
        elif char == DN_SEPARATOR and depth == 0:
            return index
    return -1
