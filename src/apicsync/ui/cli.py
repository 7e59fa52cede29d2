# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from apicsync.app import (
    apply_declarations,
    destroy_resource,
    import_resource,
    lookup_resource,
    refresh_states,
    show_state,
)
from apicsync.config import configure_logging
from apicsync.declarations import load_declarations
from apicsync.domain.model import DEFAULT_KINDS, NAME_KEY

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from apicsync.domain.model import DeclaredState, DeclaredValue

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile declared APIC objects")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        default="INFO",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Logging verbosity (default: %(default)s)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    apply = subparsers.add_parser("apply", help="Converge declared resources")
    apply.add_argument(
        "--file",
        "-f",
        type=str,
        default="apicsync.toml",
        help="TOML document declaring the resources (default: %(default)s)",
    )

    refresh = subparsers.add_parser("refresh", help="Re-read tracked resources from the APIC")
    refresh.add_argument(
        "addresses",
        nargs="*",
        help="Resource addresses to refresh (defaults to every tracked resource)",
    )

    destroy = subparsers.add_parser("destroy", help="Delete a tracked resource")
    destroy.add_argument("address", help="Resource address, e.g. aci_firmware_group.main")

    import_ = subparsers.add_parser("import", help="Adopt an existing object by DN")
    import_.add_argument("address", help="Resource address to track the object under")
    import_.add_argument("dn", help="Distinguished name of the existing object")

    show = subparsers.add_parser("show", help="Print the tracked state of a resource")
    show.add_argument("address", help="Resource address")

    lookup = subparsers.add_parser("lookup", help="Read an existing object without tracking it")
    lookup.add_argument("kind", choices=DEFAULT_KINDS.keys(), help="Resource kind")
    lookup.add_argument("--name", type=str, required=True, help="Object name")
    lookup.add_argument(
        "--parent",
        type=str,
        help="Parent DN, for kinds whose parent is declared (e.g. uni/tn-common)",
    )

    return parser.parse_args(list(argv))


def _lookup_values(args: argparse.Namespace) -> dict[str, DeclaredValue]:
    kind = DEFAULT_KINDS.get(args.kind)
    values: dict[str, DeclaredValue] = {NAME_KEY: args.name}
    if kind.parent_key is not None:
        if not args.parent:
            raise ValueError(f"{args.kind} requires --parent")
        values[kind.parent_key] = args.parent
    elif args.parent:
        raise ValueError(f"{args.kind} does not take --parent")
    return values


def _render(state: DeclaredState) -> str:
    values = {
        key: sorted(value) if isinstance(value, frozenset) else value
        for key, value in sorted(state.values.items())
    }
    return json.dumps({"kind": state.kind, "id": state.id, "values": values}, indent=2)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(level=parsed_args.log_level)
        lookup_values = _lookup_values(parsed_args) if parsed_args.command == "lookup" else {}
        declarations = (
            load_declarations(parsed_args.file) if parsed_args.command == "apply" else []
        )
    except (ValueError, OSError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "apply":
            result = apply_declarations(declarations)
            if not result.ok:
                sys.exit(1)
        elif parsed_args.command == "refresh":
            refreshed = refresh_states(parsed_args.addresses or None)
            for address, state in refreshed.items():
                log.info("%s: %s", address, state.id or "absent")
        elif parsed_args.command == "destroy":
            destroy_resource(parsed_args.address)
        elif parsed_args.command == "import":
            print(_render(import_resource(parsed_args.address, parsed_args.dn)))
        elif parsed_args.command == "show":
            print(_render(show_state(parsed_args.address)))
        elif parsed_args.command == "lookup":
            print(_render(lookup_resource(parsed_args.kind, lookup_values)))
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error during reconciliation")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
