"""Command-line entry point: print the lowered form of a JavaScript file."""

from __future__ import annotations

import argparse
import logging
import sys

from . import constants
from .api import dump_lowered
from .errors import LoweringError


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="destructure",
        description="Lower extended destructuring patterns to plain bindings",
    )
    parser.add_argument(
        "file", nargs="?", default="-", help="Source file to lower (default: stdin)"
    )
    parser.add_argument(
        "--language",
        "-l",
        default="javascript",
        choices=constants.SUPPORTED_LANGUAGES,
        help="Source language (default: javascript)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Log every lowering decision"
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.file == "-":
        source = sys.stdin.read()
    else:
        with open(args.file, encoding="utf-8") as f:
            source = f.read()

    try:
        print(dump_lowered(source, args.language))
    except LoweringError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
