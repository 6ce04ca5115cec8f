"""Entry point: python -m contractgen [SPEC] [-o OUT]

Reads the API description, derives every endpoint's contracts and writes
generated/contracts.json for the renderers.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import load_settings
from .contract_builder import build_contracts
from .errors import SpecLoadError
from .loader import load_spec
from .manifest import build_manifest, write_manifest
from .registry import SchemaRegistry
from .schema_parser import resolve_registry

logger = logging.getLogger("contractgen")


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    settings = load_settings()
    parser = argparse.ArgumentParser(
        prog="contractgen",
        description="Derive canonical names and type contracts from an API description.",
    )
    parser.add_argument(
        "spec",
        nargs="?",
        type=Path,
        default=settings.spec_path,
        help="API description (.json/.yaml), default: %(default)s",
    )
    parser.add_argument(
        "-o", "--out",
        type=Path,
        default=settings.output_path,
        help="manifest output path, default: %(default)s",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="exit non-zero if any endpoint fails",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    args = parser.parse_args(argv)
    args.log_level = "DEBUG" if args.verbose else settings.log_level
    return args


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        spec = load_spec(args.spec)
    except SpecLoadError as exc:
        logger.error("%s", exc)
        return 2

    outcomes = build_contracts(spec)
    schemas = resolve_registry(SchemaRegistry.from_spec(spec))
    manifest = build_manifest(
        outcomes,
        schemas,
        version=str(spec.get("info", {}).get("version", "unknown")),
    )
    output_path = write_manifest(manifest, args.out)

    failed = len(manifest["failures"])
    print(
        f"Generated {output_path} ({len(manifest['endpoints'])} endpoints,"
        f" {len(schemas)} schemas, {failed} failed)"
    )
    if args.strict and failed:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
