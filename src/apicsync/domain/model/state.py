"""Declared state tracked for one resource instance."""

from __future__ import annotations

from dataclasses import dataclass, field

# ``None`` marks a value the caller did not set; multi-valued relations hold sets.
type DeclaredValue = str | frozenset[str] | None


@dataclass(slots=True, kw_only=True)
class DeclaredState:
    """Desired values plus the snapshot observed by the latest successful read.

    ``id`` is the DN of the remote object, or ``""`` while the resource is absent.
    Change detection compares ``values`` with ``prior``.
    """

    kind: str
    id: str = ""
    values: dict[str, DeclaredValue] = field(default_factory=dict)
    prior: dict[str, DeclaredValue] = field(default_factory=dict)

    @property
    def exists(self) -> bool:
        return bool(self.id)

    def get(self, key: str) -> DeclaredValue:
        return self.values.get(key)

    def get_text(self, key: str) -> str:
        value = self.values.get(key)
        if isinstance(value, str):
            return value
        return ""

    def set(self, key: str, value: DeclaredValue) -> None:
        self.values[key] = value

    def has_change(self, key: str) -> bool:
        return _normalize(self.values.get(key)) != _normalize(self.prior.get(key))

    def get_change(self, key: str) -> tuple[DeclaredValue, DeclaredValue]:
        return self.prior.get(key), self.values.get(key)

    def snapshot(self) -> None:
        """Record the current values as last-known remote state."""

        self.prior = dict(self.values)

    def clear(self) -> None:
        """Mark the resource absent; declared values are kept for recreation."""

        self.id = ""
        self.prior = {}


def _normalize(value: DeclaredValue) -> DeclaredValue:
    # unset and empty compare equal
    if value is None or value == "":
        return None
    if isinstance(value, frozenset) and not value:
        return None
    return value
