from __future__ import annotations

import logging

import pytest

from apicsync.domain.errors import (
    IdentityError,
    NotFoundError,
    PartialRelationFailure,
    SchemaError,
    TransportError,
)
from apicsync.domain.model import (
    FIRMWARE_GROUP,
    IMPORTED_CONTRACT,
    DeclaredState,
    FirmwareGroup,
    ImportedContract,
)
from apicsync.domain.reconciliation import Reconciler
from tests.helpers.fake_apic import TAG_GROUP, TAGS, FakeApic

DN = "uni/fabric/fwgrp-fw1"
RELATION = "relation_firmware_rs_fwgrpp"
FWGRPP = FIRMWARE_GROUP.relation(RELATION)


@pytest.fixture
def apic() -> FakeApic:
    return FakeApic(computed={"firmwareFwGrp": {"type": "range", "annotation": "orchestrator"}})


@pytest.fixture
def reconciler(apic: FakeApic) -> Reconciler[FirmwareGroup]:
    return Reconciler(transport=apic, kind=FIRMWARE_GROUP)


def _declared(**values: str) -> DeclaredState:
    return DeclaredState(kind=FIRMWARE_GROUP.key, values=dict(values))


def test_create_saves_object_attaches_relation_and_reads_back(
    apic: FakeApic, reconciler: Reconciler[FirmwareGroup]
) -> None:
    state = _declared(name="fw1", description="spines", **{RELATION: "pol1"})

    reconciler.create(state)

    assert state.id == DN
    assert apic.attributes(DN)["descr"] == "spines"
    assert apic.targets(DN, FWGRPP) == ["pol1"]
    assert state.values == {
        "name": "fw1",
        "annotation": "orchestrator",
        "name_alias": "",
        "firmware_group_type": "range",
        "description": "spines",
        RELATION: "pol1",
    }
    assert state.prior == state.values


def test_create_leaves_server_computed_attributes_untouched(
    apic: FakeApic, reconciler: Reconciler[FirmwareGroup]
) -> None:
    reconciler.create(_declared(name="fw1"))

    assert apic.attributes(DN) == {
        "dn": DN,
        "name": "fw1",
        "type": "range",
        "annotation": "orchestrator",
    }


def test_create_rejects_invalid_values(reconciler: Reconciler[FirmwareGroup]) -> None:
    with pytest.raises(SchemaError):
        reconciler.create(_declared(name="fw1", colour="blue"))


def test_create_propagates_transport_errors_with_context(
    apic: FakeApic, reconciler: Reconciler[FirmwareGroup]
) -> None:
    apic.fail("save")
    state = _declared(name="fw1")

    with pytest.raises(TransportError) as excinfo:
        reconciler.create(state)

    assert not state.exists
    assert f"while running create on {DN}" in excinfo.value.__notes__


def test_create_tracks_object_when_relation_attach_fails(
    apic: FakeApic, reconciler: Reconciler[FirmwareGroup]
) -> None:
    apic.fail("create_relation")
    state = _declared(name="fw1", **{RELATION: "pol1"})

    with pytest.raises(PartialRelationFailure) as excinfo:
        reconciler.create(state)

    assert state.id == DN
    assert DN in apic.objects
    assert excinfo.value.relation == RELATION
    assert excinfo.value.failed == ("pol1",)


def test_read_refreshes_from_remote(
    apic: FakeApic, reconciler: Reconciler[FirmwareGroup]
) -> None:
    state = _declared(name="fw1")
    reconciler.create(state)
    apic.attributes(DN)["descr"] = "changed out of band"

    reconciler.read(state)

    assert state.get("description") == "changed out of band"
    assert state.prior["description"] == "changed out of band"


def test_read_of_vanished_object_clears_identity(
    apic: FakeApic, reconciler: Reconciler[FirmwareGroup]
) -> None:
    state = _declared(name="fw1")
    reconciler.create(state)
    apic.delete_by_dn(DN, "firmwareFwGrp")

    reconciler.read(state)
    reconciler.read(state)

    assert not state.exists
    assert state.prior == {}


def test_read_and_delete_of_absent_resource_do_nothing(
    apic: FakeApic, reconciler: Reconciler[FirmwareGroup]
) -> None:
    state = _declared(name="fw1")

    reconciler.read(state)
    reconciler.delete(state)

    assert apic.calls == []


def test_read_keeps_previous_relation_when_relation_read_fails(
    apic: FakeApic,
    reconciler: Reconciler[FirmwareGroup],
    caplog: pytest.LogCaptureFixture,
) -> None:
    state = _declared(name="fw1", **{RELATION: "pol1"})
    reconciler.create(state)
    apic.fail("read_relation")

    with caplog.at_level(logging.WARNING):
        reconciler.read(state)

    assert state.get(RELATION) == "pol1"
    assert "error while reading relation firmwareRsFwgrpp" in caplog.text


def test_update_transitions_single_relation(
    apic: FakeApic, reconciler: Reconciler[FirmwareGroup]
) -> None:
    state = _declared(name="fw1", **{RELATION: "pol1"})
    reconciler.create(state)
    apic.calls.clear()

    state.set(RELATION, "pol2")
    reconciler.update(state)

    assert apic.targets(DN, FWGRPP) == ["pol2"]
    assert apic.operations()[:3] == ["save", "delete_relation", "create_relation"]
    assert state.prior[RELATION] == "pol2"


def test_update_removes_relation_declared_absent(
    apic: FakeApic, reconciler: Reconciler[FirmwareGroup]
) -> None:
    state = _declared(name="fw1", **{RELATION: "pol1"})
    reconciler.create(state)

    state.set(RELATION, None)
    reconciler.update(state)

    assert apic.targets(DN, FWGRPP) == []
    assert state.get(RELATION) == ""


def test_update_skips_unchanged_relations(
    apic: FakeApic, reconciler: Reconciler[FirmwareGroup]
) -> None:
    state = _declared(name="fw1", **{RELATION: "pol1"})
    reconciler.create(state)
    apic.calls.clear()

    state.set("description", "new")
    reconciler.update(state)

    assert "delete_relation" not in apic.operations()
    assert "create_relation" not in apic.operations()
    assert apic.attributes(DN)["descr"] == "new"


def test_update_rejects_rename(reconciler: Reconciler[FirmwareGroup]) -> None:
    state = _declared(name="fw1")
    reconciler.create(state)

    state.set("name", "fw2")

    with pytest.raises(IdentityError):
        reconciler.update(state)


def test_create_refuses_tracked_state(
    apic: FakeApic, reconciler: Reconciler[FirmwareGroup]
) -> None:
    state = _declared(name="fw1")
    reconciler.create(state)
    apic.calls.clear()

    with pytest.raises(IdentityError, match="already tracking"):
        reconciler.create(state)

    assert apic.calls == []


def test_firmware_group_lifecycle_round_trip() -> None:
    apic = FakeApic()
    reconciler = Reconciler(transport=apic, kind=FIRMWARE_GROUP)
    state = _declared(name="fw1", firmware_group_type="ALL")

    reconciler.create(state)

    assert state.id == DN
    assert apic.attributes(DN)["type"] == "ALL"

    reconciler.read(state)

    assert state.get("firmware_group_type") == "ALL"
    assert state.get("name") == "fw1"

    reconciler.delete(state)

    assert not state.exists
    assert DN not in apic.objects

    reconciler.read(state)

    assert not state.exists


def test_update_requires_identity(reconciler: Reconciler[FirmwareGroup]) -> None:
    with pytest.raises(IdentityError):
        reconciler.update(_declared(name="fw1"))


def test_update_reports_relation_failure_without_changes(
    apic: FakeApic, reconciler: Reconciler[FirmwareGroup]
) -> None:
    state = _declared(name="fw1", **{RELATION: "pol1"})
    reconciler.create(state)
    apic.fail("delete_relation")

    state.set(RELATION, "pol2")
    with pytest.raises(TransportError) as excinfo:
        reconciler.update(state)

    assert not isinstance(excinfo.value, PartialRelationFailure)
    assert apic.targets(DN, FWGRPP) == ["pol1"]
    assert state.prior[RELATION] == "pol1"


def test_partial_relation_failure_recovers_on_next_update(
    apic: FakeApic, reconciler: Reconciler[FirmwareGroup]
) -> None:
    state = _declared(name="fw1", **{RELATION: "pol1"})
    reconciler.create(state)
    apic.fail("create_relation")

    state.set(RELATION, "pol2")
    with pytest.raises(PartialRelationFailure) as excinfo:
        reconciler.update(state)

    assert excinfo.value.removed == ("pol1",)
    assert excinfo.value.failed == ("pol2",)
    assert apic.targets(DN, FWGRPP) == []

    reconciler.read(state)
    assert state.get(RELATION) == ""

    state.set(RELATION, "pol2")
    reconciler.update(state)

    assert apic.targets(DN, FWGRPP) == ["pol2"]
    assert state.prior[RELATION] == "pol2"


def test_delete_removes_object_and_clears_identity(
    apic: FakeApic, reconciler: Reconciler[FirmwareGroup]
) -> None:
    state = _declared(name="fw1", **{RELATION: "pol1"})
    reconciler.create(state)

    reconciler.delete(state)

    assert not state.exists
    assert DN not in apic.objects
    assert ("delete_by_dn", DN, "firmwareFwGrp") in apic.calls


def test_import_rebuilds_state_from_dn(apic: FakeApic) -> None:
    dn = "uni/tn-common/cif-web"
    apic.seed(ImportedContract(distinguished_name=dn, name="web", description="shared"))
    apic.create_relation(dn, IMPORTED_CONTRACT.relation("relation_vz_rs_if"), "uni/tn-t1/brc-web")

    state = Reconciler(transport=apic, kind=IMPORTED_CONTRACT).import_state(dn)

    assert state.id == dn
    assert state.values["tenant_dn"] == "uni/tn-common"
    assert state.values["name"] == "web"
    assert state.values["description"] == "shared"
    assert state.values["relation_vz_rs_if"] == "uni/tn-t1/brc-web"
    assert state.prior == state.values


def test_import_fails_on_relation_read_error(apic: FakeApic) -> None:
    apic.seed(FirmwareGroup(distinguished_name=DN, name="fw1"))
    apic.fail("read_relation")

    with pytest.raises(TransportError):
        Reconciler(transport=apic, kind=FIRMWARE_GROUP).import_state(DN)


def test_import_of_missing_dn_is_not_found(reconciler: Reconciler[FirmwareGroup]) -> None:
    with pytest.raises(NotFoundError):
        reconciler.import_state(DN)


def test_lookup_reads_without_tracking(
    apic: FakeApic, reconciler: Reconciler[FirmwareGroup]
) -> None:
    apic.seed(FirmwareGroup(distinguished_name=DN, name="fw1", firmware_group_type="ALL"))

    state = reconciler.lookup({"name": "fw1"})

    assert state.id == DN
    assert state.get("firmware_group_type") == "ALL"
    assert state.get(RELATION) is None
    assert "save" not in apic.operations()


def test_lookup_of_missing_object_fails(reconciler: Reconciler[FirmwareGroup]) -> None:
    with pytest.raises(NotFoundError):
        reconciler.lookup({"name": "missing"})


def test_multi_valued_relation_lifecycle(apic: FakeApic) -> None:
    reconciler = Reconciler(transport=apic, kind=TAG_GROUP)
    dn = "uni/test/tgrp-g1"
    state = DeclaredState(
        kind=TAG_GROUP.key, values={"name": "g1", "relation_tags": frozenset({"a", "b"})}
    )

    reconciler.create(state)
    assert state.get("relation_tags") == frozenset({"a", "b"})

    state.set("relation_tags", frozenset({"b", "c"}))
    reconciler.update(state)

    assert sorted(apic.targets(dn, TAGS)) == ["b", "c"]
    assert state.prior["relation_tags"] == frozenset({"b", "c"})
