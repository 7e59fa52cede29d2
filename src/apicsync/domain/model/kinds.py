"""Resource kinds: how declared attributes map onto typed managed objects."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from apicsync.domain.errors import SchemaError

from .objects import FirmwareGroup, ImportedContract, ManagedObject

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from .state import DeclaredValue

DESCRIPTION_KEY: Final[str] = "description"
NAME_KEY: Final[str] = "name"


@dataclass(frozen=True, slots=True)
class AttributeMapping[TObject: ManagedObject]:
    """One declared key with its projection from and onto the typed object."""

    key: str
    decode: Callable[[TObject], str]
    encode: Callable[[TObject, str], None]


def field_mapping[TObject: ManagedObject](
    key: str, field_name: str | None = None
) -> AttributeMapping[TObject]:
    attribute = field_name or key

    def decode(obj: TObject) -> str:
        return getattr(obj, attribute)

    def encode(obj: TObject, value: str) -> None:
        setattr(obj, attribute, value)

    return AttributeMapping(key=key, decode=decode, encode=encode)


@dataclass(frozen=True, slots=True)
class RelationSpec:
    """A relation child object (``Rs`` class) hanging below the primary object.

    Single-valued relations live at a fixed RN. Multi-valued ones embed the target
    in the RN (``rn`` contains ``{target}``) and are declared as a set.
    """

    key: str
    class_name: str
    rn: str
    target_attribute: str
    multiple: bool = False

    def child_rn(self, target: str | None = None) -> str:
        if not self.multiple:
            return self.rn
        if not target:
            raise SchemaError(f"{self.key} needs a target to address a child", operation="rn")
        return self.rn.format(target=target)

    def child_dn(self, dn: str, target: str | None = None) -> str:
        return f"{dn}/{self.child_rn(target)}"


COMMON_ATTRIBUTES: Final[tuple[AttributeMapping[ManagedObject], ...]] = (
    field_mapping(NAME_KEY),
    field_mapping("annotation"),
    field_mapping("name_alias"),
)


@dataclass(frozen=True, slots=True)
class ResourceKind[TObject: ManagedObject]:
    key: str
    object_type: type[TObject]
    attributes: tuple[AttributeMapping[TObject], ...]
    relations: tuple[RelationSpec, ...] = ()
    parent_key: str | None = None
    default_parent: str | None = None

    @property
    def class_name(self) -> str:
        return self.object_type.CLASS_NAME

    @property
    def rn_prefix(self) -> str:
        return self.object_type.RN_PREFIX

    @property
    def declared_keys(self) -> frozenset[str]:
        keys = {mapping.key for mapping in self.attributes}
        keys.add(DESCRIPTION_KEY)
        keys.update(relation.key for relation in self.relations)
        if self.parent_key is not None:
            keys.add(self.parent_key)
        return frozenset(keys)

    def relation(self, key: str) -> RelationSpec:
        for relation in self.relations:
            if relation.key == key:
                return relation
        raise SchemaError(f"{self.key} has no relation {key!r}")

    def parent_dn(self, values: Mapping[str, DeclaredValue]) -> str:
        if self.parent_key is None:
            parent = self.default_parent
        else:
            declared = values.get(self.parent_key)
            parent = declared if isinstance(declared, str) and declared else None
        if not parent:
            raise SchemaError(f"{self.key}: missing required attribute {self.parent_key!r}")
        return parent

    def validate(self, values: Mapping[str, DeclaredValue]) -> None:
        """Reject unknown keys, missing required keys and mistyped relation values."""

        unknown = sorted(set(values).difference(self.declared_keys))
        if unknown:
            raise SchemaError(f"{self.key}: unsupported attributes: {', '.join(unknown)}")
        required = [NAME_KEY] if self.parent_key is None else [self.parent_key, NAME_KEY]
        missing = [key for key in required if not values.get(key)]
        if missing:
            raise SchemaError(f"{self.key}: missing required attributes: {', '.join(missing)}")
        relations = {relation.key: relation for relation in self.relations}
        for key, value in values.items():
            if value is None:
                continue
            relation = relations.get(key)
            if relation is not None and relation.multiple:
                if not isinstance(value, frozenset):
                    raise SchemaError(f"{self.key}: {key} expects a set of targets")
            elif not isinstance(value, str):
                raise SchemaError(f"{self.key}: {key} expects a string")


FIRMWARE_GROUP: Final[ResourceKind[FirmwareGroup]] = ResourceKind(
    key="aci_firmware_group",
    object_type=FirmwareGroup,
    attributes=(*COMMON_ATTRIBUTES, field_mapping("firmware_group_type")),
    relations=(
        RelationSpec(
            key="relation_firmware_rs_fwgrpp",
            class_name="firmwareRsFwgrpp",
            rn="rsfwgrpp",
            target_attribute="tnFirmwareFwPName",
        ),
    ),
    default_parent="uni/fabric",
)

IMPORTED_CONTRACT: Final[ResourceKind[ImportedContract]] = ResourceKind(
    key="aci_imported_contract",
    object_type=ImportedContract,
    attributes=COMMON_ATTRIBUTES,
    relations=(
        RelationSpec(
            key="relation_vz_rs_if",
            class_name="vzRsIf",
            rn="rsif",
            target_attribute="tDn",
        ),
    ),
    parent_key="tenant_dn",
)


class KindRegistry:
    """Lookup of resource kinds by their declared key."""

    def __init__(self, kinds: Iterable[ResourceKind[ManagedObject]] = ()) -> None:
        self._kinds: dict[str, ResourceKind[ManagedObject]] = {}
        for kind in kinds:
            self.register(kind)

    def register(self, kind: ResourceKind[ManagedObject]) -> None:
        if kind.key in self._kinds:
            raise SchemaError(f"Resource kind already registered: {kind.key}")
        self._kinds[kind.key] = kind

    def get(self, key: str) -> ResourceKind[ManagedObject]:
        try:
            return self._kinds[key]
        except KeyError:
            raise SchemaError(f"Unknown resource kind: {key}") from None

    def __contains__(self, key: object) -> bool:
        return key in self._kinds

    def keys(self) -> tuple[str, ...]:
        return tuple(sorted(self._kinds))


DEFAULT_KINDS = KindRegistry(
    (FIRMWARE_GROUP, IMPORTED_CONTRACT)  # pyright: ignore[reportArgumentType]
)
