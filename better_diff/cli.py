"""Command-line front door for better_diff.

Help requests print the version; every other argument list starts the
interactive session in the current directory.
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from . import __version__
from .runtime import run_app

PROGRAM_NAME = "better_diff"


def version_text() -> str:
    return f"{PROGRAM_NAME} {__version__}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=PROGRAM_NAME, add_help=False, allow_abbrev=False)
    parser.add_argument("-h", "--help", action="store_true", dest="show_help")
    parser.add_argument("words", nargs="*")
    return parser


def is_help_request(argv: Sequence[str]) -> bool:
    """True only for exactly ``help``, ``-h``, ``--help`` or ``diff help``."""
    args, unknown = build_parser().parse_known_args(list(argv))
    if unknown or len(argv) > 2:
        return False
    if args.show_help:
        return len(argv) == 1
    return args.words in (["help"], ["diff", "help"])


def main(argv: Sequence[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    if is_help_request(args):
        print(version_text())
        return 0
    return run_app()


def console_main() -> None:
    raise SystemExit(main())
