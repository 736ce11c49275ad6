"""
Command-line entry point.

    xr-wrangle [-I DIR] [-D NAME[=VALUE]] [-o FILE] [-v] HEADER [HEADER ...]

Prints the three registry paste sections; any fatal condition is logged to
stderr and exits with status 1 without printing partial output.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import WranglerConfig
from .driver import convert_headers
from .errors import WranglerError

logger = logging.getLogger(__name__)


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="xr-wrangle",
        description="Convert OpenXR vendor extension headers into registry XML fragments",
    )
    parser.add_argument("headers", nargs="+", type=Path, help="extension header files")
    parser.add_argument("-I", "--include-dir", dest="include_dirs", action="append",
                        default=[], help="additional include directory")
    parser.add_argument("-D", "--define", dest="defines", action="append",
                        default=[], help="predefine a macro (NAME or NAME=VALUE)")
    parser.add_argument("-o", "--output", type=Path, default=None,
                        help="write to FILE instead of stdout")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="-v for progress, -vv for debug output")
    return parser


def build_config(args: argparse.Namespace) -> WranglerConfig:
    config = WranglerConfig(include_dirs=[str(d) for d in args.include_dirs])
    for define in args.defines:
        config.add_define(define)
    return config


def configure_logging(verbosity: int):
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(
        level=level, stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


def main(argv: Optional[List[str]] = None):
    args = build_argument_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        text = convert_headers([str(h) for h in args.headers], build_config(args))
    except WranglerError as err:
        logger.error("%s", err)
        raise SystemExit(1) from err

    if args.output is None:
        sys.stdout.write(text)
        return
    try:
        args.output.write_text(text, encoding="utf-8")
    except OSError as err:
        logger.error("Cannot write %s: %s", args.output, err)
        raise SystemExit(1) from err


if __name__ == "__main__":
    main()
