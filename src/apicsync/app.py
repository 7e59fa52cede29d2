"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from apicsync.adapters.apic import ApicTransport
from apicsync.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, is_started, startup
from apicsync.config import get_apic_config
from apicsync.declarations import split_address
from apicsync.domain.errors import ReconcileError, SchemaError, UnknownAddressError
from apicsync.domain.model import DEFAULT_KINDS, DeclaredState
from apicsync.domain.ports.unit_of_work import StateUnitOfWork
from apicsync.domain.reconciliation import (
    PlanAction,
    Reconciler,
    overlay_desired,
    plan_action,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from apicsync.declarations import Declaration
    from apicsync.domain.model import DeclaredValue, KindRegistry, ManagedObject
    from apicsync.domain.ports import Transport

UnitOfWorkFactory = Callable[[], StateUnitOfWork]


log = getLogger(__name__)


@dataclass(slots=True)
class ApplyResult:
    actions: dict[str, PlanAction] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


def apply_declarations(
    declarations: Iterable[Declaration],
    *,
    transport: Transport | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    registry: KindRegistry = DEFAULT_KINDS,
) -> ApplyResult:
    """Converge every declared resource; failures are collected per address."""

    effective_transport = transport or _default_transport()
    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()
    result = ApplyResult()
    for declaration in declarations:
        try:
            action = apply_declaration(
                declaration,
                transport=effective_transport,
                unit_of_work_factory=effective_uow,
                registry=registry,
            )
        except ReconcileError as exc:
            log.error("%s: %s", declaration.address, exc)  # noqa: TRY400
            result.errors[declaration.address] = str(exc)
            continue
        result.actions[declaration.address] = action

    log.info(
        "Apply finished: %s, errors=%s",
        ", ".join(f"{action}={count}" for action, count in _count(result.actions).items())
        or "nothing declared",
        len(result.errors),
    )
    return result


def apply_declaration(
    declaration: Declaration,
    *,
    transport: Transport,
    unit_of_work_factory: UnitOfWorkFactory,
    registry: KindRegistry = DEFAULT_KINDS,
) -> PlanAction:
    kind = registry.get(declaration.kind)
    reconciler = Reconciler(transport=transport, kind=kind)
    with unit_of_work_factory() as uow:
        states = uow.repositories.states
        state = states.get(declaration.address) or DeclaredState(kind=kind.key)
        if state.kind != kind.key:
            raise SchemaError(
                f"{declaration.address} is tracked as {state.kind}, not {kind.key}",
                dn=state.id,
                operation="apply",
            )
        try:
            action = _converge(reconciler, state, declaration.values)
        finally:
            # partial progress (e.g. a saved object whose relation failed) is kept
            states.put(declaration.address, state)
            uow.commit()
    log.info("%s: %s %s", declaration.address, action, state.id or "(absent)")
    return action


def destroy_resource(
    address: str,
    *,
    transport: Transport | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    registry: KindRegistry = DEFAULT_KINDS,
) -> None:
    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()
    with effective_uow() as uow:
        states = uow.repositories.states
        state = _require_state(states.get(address), address)
        reconciler = Reconciler(
            transport=transport or _default_transport(), kind=registry.get(state.kind)
        )
        reconciler.delete(state)
        states.remove(address)
        uow.commit()
    log.info("%s: destroyed", address)


def import_resource(
    address: str,
    dn: str,
    *,
    transport: Transport | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    registry: KindRegistry = DEFAULT_KINDS,
) -> DeclaredState:
    kind_key, _label = split_address(address)
    reconciler = Reconciler(
        transport=transport or _default_transport(), kind=registry.get(kind_key)
    )
    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()
    with effective_uow() as uow:
        states = uow.repositories.states
        existing = states.get(address)
        if existing is not None and existing.exists:
            raise SchemaError(
                f"{address} already manages {existing.id}", dn=dn, operation="import"
            )
        state = reconciler.import_state(dn)
        states.put(address, state)
        uow.commit()
    log.info("%s: imported %s", address, dn)
    return state


def refresh_states(
    addresses: Iterable[str] | None = None,
    *,
    transport: Transport | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    registry: KindRegistry = DEFAULT_KINDS,
) -> dict[str, DeclaredState]:
    """Re-read tracked resources; vanished objects are marked absent."""

    effective_transport = transport or _default_transport()
    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()
    refreshed: dict[str, DeclaredState] = {}
    with effective_uow() as uow:
        states = uow.repositories.states
        for address in addresses if addresses is not None else states.list_addresses():
            state = _require_state(states.get(address), address)
            Reconciler(transport=effective_transport, kind=registry.get(state.kind)).read(state)
            states.put(address, state)
            refreshed[address] = state
        uow.commit()
    return refreshed


def show_state(
    address: str, *, unit_of_work_factory: UnitOfWorkFactory | None = None
) -> DeclaredState:
    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()
    with effective_uow() as uow:
        return _require_state(uow.repositories.states.get(address), address)


def lookup_resource(
    kind_key: str,
    values: Mapping[str, DeclaredValue],
    *,
    transport: Transport | None = None,
    registry: KindRegistry = DEFAULT_KINDS,
) -> DeclaredState:
    reconciler = Reconciler(
        transport=transport or _default_transport(), kind=registry.get(kind_key)
    )
    return reconciler.lookup(values)


def _converge(
    reconciler: Reconciler[ManagedObject],
    state: DeclaredState,
    desired: Mapping[str, DeclaredValue],
) -> PlanAction:
    reconciler.read(state)
    action = plan_action(reconciler.kind, state, desired)
    match action:
        case PlanAction.CREATE:
            state.values = dict(desired)
            state.prior = {}
            reconciler.create(state)
        case PlanAction.REPLACE:
            reconciler.delete(state)
            state.values = dict(desired)
            reconciler.create(state)
        case PlanAction.UPDATE:
            overlay_desired(reconciler.kind, state, desired)
            reconciler.update(state)
        case PlanAction.NOOP:
            pass
    return action


def _require_state(state: DeclaredState | None, address: str) -> DeclaredState:
    if state is None:
        raise UnknownAddressError(f"{address} is not tracked", operation="state")
    return state


def _count(actions: Mapping[str, PlanAction]) -> dict[str, int]:
    counts: dict[str, int] = {}
    for action in actions.values():
        counts[action.value] = counts.get(action.value, 0) + 1
    return counts


def _default_transport() -> Transport:
    return ApicTransport(config=get_apic_config())


def _default_unit_of_work_factory() -> UnitOfWorkFactory:
    if not is_started():
        startup()
    return SqlAlchemyUnitOfWork
