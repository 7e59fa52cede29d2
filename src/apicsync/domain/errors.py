"""Error taxonomy shared by the reconciliation core and its adapters."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


class ReconcileError(RuntimeError):
    """Base error carrying the DN and operation it was raised for."""

    def __init__(self, message: str, *, dn: str = "", operation: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.dn = dn
        self.operation = operation

    def __str__(self) -> str:
        context = " ".join(part for part in (self.operation, self.dn) if part)
        if not context:
            return self.message
        return f"{context}: {self.message}"


class NotFoundError(ReconcileError):
    """The remote object does not exist at the requested DN."""


class TransportError(ReconcileError):
    """Network, API or payload failure reported by a transport adapter."""

    def __init__(
        self,
        message: str,
        *,
        dn: str = "",
        operation: str = "",
        status_code: int | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message, dn=dn, operation=operation)
        self.status_code = status_code
        self.code = code


class IdentityError(ReconcileError, ValueError):
    """A DN could not be derived or is malformed."""


class SchemaError(ReconcileError, ValueError):
    """Declared values do not satisfy the resource kind's schema."""


class PartialRelationFailure(ReconcileError):
    """Old relation targets were removed but the new ones could not be attached."""

    def __init__(
        self,
        message: str,
        *,
        dn: str,
        operation: str,
        relation: str,
        removed: Iterable[str],
        failed: Iterable[str],
    ) -> None:
        super().__init__(message, dn=dn, operation=operation)
        self.relation = relation
        self.removed = tuple(removed)
        self.failed = tuple(failed)


class UnknownAddressError(ReconcileError, LookupError):
    """No declared state is tracked under the given resource address."""
