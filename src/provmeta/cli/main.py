# main.py
# SPDX-License-Identifier: MIT

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

from ..core.config import ExtractionConfig, load_config_from_path
from ..core.contacts import parse_contact
from ..core.dates import resolve_date
from ..core.headers import HeaderBlock
from ..core.licenses import classify_license
from ..core.log import configure_logging
from ..core.metadata import extract_metadata


def _build_parser() -> argparse.ArgumentParser:
    """Build the provmeta argument parser.

    Returns:
        argparse.ArgumentParser: Parser with ``inspect``, ``license``,
        ``date`` and ``contact`` subcommands.
    """
    parser = argparse.ArgumentParser(prog="provmeta", description="Infer provenance metadata from document headers")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (e.g., DEBUG, INFO, WARNING).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_document_args(p: argparse.ArgumentParser) -> None:
        p.add_argument("file", help="Document to read.")
        p.add_argument("--directory", help="Directory for the external license detector.")
        p.add_argument("--package", help="Package name for the forge lookup.")
        p.add_argument("-c", "--config", help="Config file (TOML or JSON).")
        p.add_argument("--offline", action="store_true", help="Disable the detector and forge fallbacks.")

    inspect_p = subparsers.add_parser("inspect", help="Print all metadata as JSON.")
    add_document_args(inspect_p)
    inspect_p.add_argument("--no-sanitize", action="store_true", help="Do not apply remap tables.")

    license_p = subparsers.add_parser("license", help="Print the license identifier.")
    add_document_args(license_p)

    date_p = subparsers.add_parser("date", help="Resolve a free-text date.")
    date_p.add_argument("value", help="Date string.")

    contact_p = subparsers.add_parser("contact", help="Parse a name/email string.")
    contact_p.add_argument("value", help="Contact string.")

    return parser


def _load_config(args: argparse.Namespace) -> ExtractionConfig:
    cfg = load_config_from_path(args.config) if args.config else ExtractionConfig()
    if args.offline:
        cfg.license = replace(cfg.license, use_detector=False)
        cfg.forge = replace(cfg.forge, enabled=False)
    return cfg


def _dispatch(args: argparse.Namespace) -> int:
    configure_logging(level=args.log_level)

    if args.command in ("inspect", "license"):
        cfg = _load_config(args)
        doc = HeaderBlock.from_path(Path(args.file))
        if args.command == "inspect":
            meta = extract_metadata(
                doc,
                args.directory,
                args.package,
                config=cfg,
                sanitize=not args.no_sanitize,
            )
            print(json.dumps(meta.to_dict(), indent=2))
            return 0
        license_id = classify_license(doc, args.directory, args.package, config=cfg)
        if license_id is None:
            return 1
        print(license_id)
        return 0

    if args.command == "date":
        resolved = resolve_date(args.value)
        if resolved is None:
            return 1
        print(resolved)
        return 0

    if args.command == "contact":
        contact = parse_contact(args.value)
        if contact is None:
            return 1
        print(f"{contact.name or ''}\t{contact.email or ''}")
        return 0

    raise ValueError(f"Unknown command: {args.command}")  # pragma: no cover


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for the provmeta command-line interface.

    Args:
        argv (Sequence[str] | None): Arguments to parse instead of
            ``sys.argv[1:]``.

    Returns:
        int: Process exit code; 1 when nothing could be determined or an
        error occurred.
    """
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    try:
        return _dispatch(args)
    except Exception as exc:  # noqa: BLE001
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
