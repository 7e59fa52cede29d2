from __future__ import annotations

import pytest

from apicsync.domain.model import FIRMWARE_GROUP
from apicsync.domain.reconciliation import (
    ReplaceApplied,
    ReplaceFailed,
    ReplacePartial,
    ReplaceStatus,
    attach_relation,
    read_relation,
    replace_relation,
    targets_of,
)
from tests.helpers.fake_apic import TAGS, FakeApic

DN = "uni/fabric/fwgrp-fw1"
FWGRPP = FIRMWARE_GROUP.relation("relation_firmware_rs_fwgrpp")
TAG_DN = "uni/test/tgrp-g1"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, ()),
        ("", ()),
        ("pol1", ("pol1",)),
        (frozenset({"b", "a"}), ("a", "b")),
    ],
)
def test_targets_of(value: str | frozenset[str] | None, expected: tuple[str, ...]) -> None:
    assert targets_of(value) == expected


def test_read_single_relation_defaults_to_empty(fake_apic: FakeApic) -> None:
    assert read_relation(fake_apic, DN, FWGRPP) == ""

    attach_relation(fake_apic, DN, FWGRPP, "pol1")

    assert read_relation(fake_apic, DN, FWGRPP) == "pol1"


def test_replace_single_relation_removes_then_creates(fake_apic: FakeApic) -> None:
    attach_relation(fake_apic, DN, FWGRPP, "pol1")
    fake_apic.calls.clear()

    result = replace_relation(fake_apic, DN, FWGRPP, "pol1", "pol2")

    assert result == ReplaceApplied(removed=("pol1",), added=("pol2",))
    assert result.status is ReplaceStatus.APPLIED
    assert fake_apic.operations() == ["delete_relation", "create_relation"]
    assert fake_apic.targets(DN, FWGRPP) == ["pol2"]


def test_replace_single_relation_with_nothing_only_removes(fake_apic: FakeApic) -> None:
    attach_relation(fake_apic, DN, FWGRPP, "pol1")

    result = replace_relation(fake_apic, DN, FWGRPP, "pol1", None)

    assert result == ReplaceApplied(removed=("pol1",), added=())
    assert fake_apic.targets(DN, FWGRPP) == []


def test_replace_reports_failure_when_nothing_changed(fake_apic: FakeApic) -> None:
    attach_relation(fake_apic, DN, FWGRPP, "pol1")
    fake_apic.fail("delete_relation")

    result = replace_relation(fake_apic, DN, FWGRPP, "pol1", "pol2")

    assert isinstance(result, ReplaceFailed)
    assert fake_apic.targets(DN, FWGRPP) == ["pol1"]


def test_replace_reports_partial_when_old_target_is_gone(fake_apic: FakeApic) -> None:
    attach_relation(fake_apic, DN, FWGRPP, "pol1")
    fake_apic.fail("create_relation")

    result = replace_relation(fake_apic, DN, FWGRPP, "pol1", "pol2")

    assert isinstance(result, ReplacePartial)
    assert result.removed == ("pol1",)
    assert result.added == ()
    assert result.failed == ("pol2",)
    assert fake_apic.targets(DN, FWGRPP) == []


def test_replace_multi_relation_touches_only_the_difference(fake_apic: FakeApic) -> None:
    attach_relation(fake_apic, TAG_DN, TAGS, frozenset({"a", "b"}))
    fake_apic.calls.clear()

    result = replace_relation(
        fake_apic, TAG_DN, TAGS, frozenset({"a", "b"}), frozenset({"b", "c"})
    )

    assert result == ReplaceApplied(removed=("a",), added=("c",))
    assert fake_apic.calls == [
        ("delete_relation", TAG_DN, "a"),
        ("create_relation", TAG_DN, "c"),
    ]
    assert read_relation(fake_apic, TAG_DN, TAGS) == frozenset({"b", "c"})


def test_replace_multi_relation_partial_keeps_attached_targets(fake_apic: FakeApic) -> None:
    attach_relation(fake_apic, TAG_DN, TAGS, frozenset({"a"}))
    fake_apic.fail("create_relation")

    result = replace_relation(fake_apic, TAG_DN, TAGS, frozenset({"a"}), frozenset({"b", "c"}))

    assert isinstance(result, ReplacePartial)
    assert result.removed == ("a",)
    assert result.failed == ("b", "c")
