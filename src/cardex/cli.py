"""Command-line front end for the vehicle catalog.

Subcommands::

    cardex list
    cardex show INDEX
    cardex add SOURCE --name NAME --motor-type TYPE --max-power POWER
    cardex gc
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from cardex.config import CardexConfig
from cardex.exceptions import CardexError, CorruptCatalogError
from cardex.models.vehicle import VehicleRecord
from cardex.session import CatalogSession

_logger = logging.getLogger(__name__)


def _format_details(record: VehicleRecord) -> str:
    return "\n".join(
        (
            f"Name: {record.name}",
            f"Motor type: {record.motor_type}",
            f"Max. power: {record.max_power}",
            f"Image: {record.image_uri}",
        )
    )


def _cmd_list(session: CatalogSession, args: argparse.Namespace) -> int:
    for index, record in enumerate(session.records):
        print(f"{index:>3}  {record.name}")
    return 0


def _cmd_show(session: CatalogSession, args: argparse.Namespace) -> int:
    try:
        record = session.select(args.index)
    except IndexError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    print(_format_details(record))
    session.back()
    return 0


def _cmd_add(session: CatalogSession, args: argparse.Namespace) -> int:
    if not asyncio.run(session.async_begin_add(args.source)):
        print(f"error: could not read image {args.source}", file=sys.stderr)
        return 1
    result = session.submit_add(args.name, args.motor_type, args.max_power)
    print(f"Added #{result.index}: {result.record.name}")
    if not result.persisted:
        print(f"warning: catalog not saved: {result.error}", file=sys.stderr)
        return 1
    return 0


def _cmd_gc(session: CatalogSession, args: argparse.Namespace) -> int:
    try:
        removed = session.collect_orphaned_images()
    except (CardexError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    for path in removed:
        print(f"removed {path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cardex", description="Browse and extend the vehicle catalog.")
    parser.add_argument("--data-dir", type=Path, default=None, help="App data directory (default: $CARDEX_DATA_DIR)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_list = sub.add_parser("list", help="List all vehicles")
    p_list.set_defaults(func=_cmd_list)

    p_show = sub.add_parser("show", help="Show one vehicle's details")
    p_show.add_argument("index", type=int)
    p_show.set_defaults(func=_cmd_show)

    p_add = sub.add_parser("add", help="Add a vehicle with a photo")
    p_add.add_argument("source", help="Image path, file:// URI or http(s) URL")
    p_add.add_argument("--name", required=True)
    p_add.add_argument("--motor-type", required=True)
    p_add.add_argument("--max-power", required=True)
    p_add.set_defaults(func=_cmd_add)

    p_gc = sub.add_parser("gc", help="Delete ingested images no vehicle uses")
    p_gc.set_defaults(func=_cmd_gc)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    overrides = {"data_dir": args.data_dir} if args.data_dir is not None else {}
    try:
        config = CardexConfig.from_env(**overrides)
        session = CatalogSession.open(config)
    except CorruptCatalogError as exc:
        print(f"error: stored catalog is corrupt: {exc}", file=sys.stderr)
        return 1
    except CardexError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    _logger.debug("Session opened data_dir=%s records=%d", config.data_dir, len(session.records))
    return int(args.func(session, args))


if __name__ == "__main__":
    sys.exit(main())
