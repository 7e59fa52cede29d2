"""Loading declared resources from TOML documents.

Each table ``[<kind>.<label>]`` declares one resource; arrays become target sets
for multi-valued relations.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, cast

from apicsync.domain.errors import SchemaError
from apicsync.domain.model import DEFAULT_KINDS

if TYPE_CHECKING:
    from apicsync.domain.model import DeclaredValue, KindRegistry


@dataclass(frozen=True, slots=True)
class Declaration:
    address: str
    kind: str
    values: dict[str, DeclaredValue]


def split_address(address: str) -> tuple[str, str]:
    kind, separator, label = address.partition(".")
    if not separator or not kind or not label:
        raise SchemaError(f"Invalid resource address {address!r}, expected <kind>.<label>")
    return kind, label


def load_declarations(
    path: str | Path, *, registry: KindRegistry = DEFAULT_KINDS
) -> list[Declaration]:
    with Path(path).open("rb") as handle:
        document = tomllib.load(handle)
    return parse_declarations(document, registry=registry)


def parse_declarations(
    document: dict[str, Any], *, registry: KindRegistry = DEFAULT_KINDS
) -> list[Declaration]:
    declarations: list[Declaration] = []
    for kind_key, resources in document.items():
        kind = registry.get(kind_key)
        if not isinstance(resources, dict):
            raise SchemaError(f"{kind_key} must be a table of resources")
        for label, raw_values in cast(dict[str, Any], resources).items():
            address = f"{kind_key}.{label}"
            if not isinstance(raw_values, dict):
                raise SchemaError(f"{address} must be a table of attributes")
            values = {
                key: _declared_value(address, key, value)
                for key, value in cast(dict[str, Any], raw_values).items()
            }
            kind.validate(values)
            declarations.append(Declaration(address=address, kind=kind_key, values=values))
    return declarations


def _declared_value(address: str, key: str, value: object) -> DeclaredValue:
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        items = cast(list[Any], value)
        if all(isinstance(item, str) for item in items):
            return frozenset(cast(list[str], items))
    raise SchemaError(f"{address}: {key} must be a string or a list of strings")
