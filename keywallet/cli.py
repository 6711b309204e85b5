"""CLI entry point for keywallet.

Usage:
    keywallet -d DB -a create -c CATEGORY [-i ITEM [-e KEY[,VALUE]]]
    keywallet -d DB -a read   [-c CATEGORY [-i ITEM [-e KEY]]]
    keywallet -d DB -a update -c CAT[:NEW] [-i ITEM[:NEW] [-e ENTRY]]
    keywallet -d DB -a delete -c CATEGORY [-i ITEM [-e KEY]]

Environment:
    KEYWALLET_LOG_LEVEL   logging level (default WARNING)
    KEYWALLET_CONFIG      path to an optional YAML settings file
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

from keywallet import __version__

logger = logging.getLogger(__name__)


def _setup_logging() -> None:
    """Configure logging based on KEYWALLET_LOG_LEVEL env var."""
    level = os.environ.get("KEYWALLET_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _get_config():
    """Load settings from KEYWALLET_CONFIG, or defaults when it is unset."""
    from keywallet.config import Config

    return Config(os.environ.get("KEYWALLET_CONFIG"))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="keywallet",
        description="keywallet category/item/entry record manager",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-d", "--database", help="Path of the database file")
    parser.add_argument(
        "-a", "--action",
        help="Action to be performed: create, read, update or delete",
    )
    parser.add_argument("-c", "--category", help="Category identifier (update: OLD:NEW)")
    parser.add_argument("-i", "--item", help="Item identifier (update: OLD:NEW)")
    parser.add_argument(
        "-e", "--entry",
        help="Entry (create: KEY[,VALUE]; update: KEY, OLD:NEW, OLD:NEW,VALUE or OLD,VALUE)",
    )
    return parser


def cmd_execute(args: argparse.Namespace) -> int:
    """Run the requested action and print READ output."""
    from keywallet.commands import CommandArgs, run
    from keywallet.errors import WalletError

    try:
        config = _get_config()
        _ = config.settings
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        output = run(CommandArgs.from_namespace(args), config)
    except WalletError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if output is not None:
        print(output)
    return 0


def main(argv: list[str] | None = None):
    _setup_logging()

    parser = build_parser()
    args = parser.parse_args(argv)

    sys.exit(cmd_execute(args))


if __name__ == "__main__":
    main()
