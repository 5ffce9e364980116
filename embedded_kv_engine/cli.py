"""Command line front end: kvdb [options] get KEY | put KEY VALUE."""

from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler

from .config import StoreConfig, StoreKind
from .database import Database
from .errors import KVError, NotFoundError

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="kvdb", description="Append-only key/value store.")
    parser.add_argument("-f", "--file", default="simple.db", help="log file (default: %(default)s)")
    parser.add_argument(
        "--store",
        choices=[k.value for k in StoreKind if k is not StoreKind.MEMORY],
        default=StoreKind.INDEXED.value,
        help="storage strategy, persisted to --file (default: %(default)s)",
    )
    parser.add_argument("--snapshot", default=None, help="index snapshot path (indexed store only)")
    parser.add_argument("--debug", action="store_true", help="log debug output to stderr")

    sub = parser.add_subparsers(dest="command", required=True)
    get_p = sub.add_parser("get", help="get value for key")
    get_p.add_argument("key")
    put_p = sub.add_parser("put", help="set value for key")
    put_p.add_argument("key")
    put_p.add_argument("value")
    return parser


def _setup_logging(debug: bool, err: Console) -> None:
    handler = RichHandler(console=err, show_path=False, markup=False)
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    out = Console(highlight=False, markup=False, emoji=False, soft_wrap=True)
    err = Console(stderr=True, highlight=False, markup=False, emoji=False, soft_wrap=True)
    _setup_logging(args.debug, err)

    config = StoreConfig(kind=StoreKind(args.store), path=args.file, snapshot_path=args.snapshot)
    try:
        with Database.from_config(config) as db:
            if args.command == "put":
                logger.debug("put key=%s value=%s", args.key, args.value)
                db.put(args.key, args.value)
                return EXIT_OK
            value = db.get(args.key)
    except NotFoundError as e:
        err.print(str(e))
        return EXIT_NOT_FOUND
    except (KVError, OSError, ValueError) as e:
        err.print(f"error: {e}")
        return EXIT_ERROR
    # raw write: rich would expand tabs and drop control characters
    out.file.write(value + "\n")
    out.file.flush()
    return EXIT_OK
