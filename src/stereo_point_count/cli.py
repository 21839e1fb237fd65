from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional, Sequence

from . import __version__
from .annotate import DEFAULT_MARKER_RADIUS
from .config import PointCountConfig, config_from_args
from .errors import ConfigurationError
from .pipeline import run_batch
from .report import write_report
from .utils.finder import resolve_images, validate_output_directory

logger = logging.getLogger(__name__)

PROG = "stereopointcounter"
DESCRIPTION = (
    "Performs automated Stereology point counting on probability images passed in via --images path"
)

EXIT_OK = 0
EXIT_INVALID_ARGS = 1
EXIT_UNKNOWN_OPTION = 2
EXIT_UNEXPECTED_ARGS = 3
EXIT_MISSING_GRIDX = 4
EXIT_MISSING_GRIDY = 5
EXIT_MISSING_IMAGES = 6
EXIT_MISSING_THRESHOLD = 7

_HELP_FLAGS = ("-h", "--help", "-v", "--version")

# Checked in this order; the first missing option decides the exit code.
_REQUIRED_OPTIONS: tuple[tuple[str, str, int], ...] = (
    ("gridx", "--gridx", EXIT_MISSING_GRIDX),
    ("gridy", "--gridy", EXIT_MISSING_GRIDY),
    ("images", "--images", EXIT_MISSING_IMAGES),
    ("threshold", "--threshold", EXIT_MISSING_THRESHOLD),
)

_HANDLER_TAG = "_stereo_point_count_handler"


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports bad values as ConfigurationError instead of exiting."""

    def error(self, message: str):
        raise ConfigurationError(f"Error parsing arguments: {message}", EXIT_INVALID_ARGS)


def build_parser() -> argparse.ArgumentParser:
    """Create the command line parser. Required options are checked after parsing."""
    parser = _ArgumentParser(prog=PROG, description=DESCRIPTION, allow_abbrev=False)
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
        help="Print version and exit.",
    )
    parser.add_argument(
        "-i",
        "--images",
        dest="images",
        default=None,
        help="Single greyscale image or directory of *.png images.",
    )
    parser.add_argument(
        "--gridx",
        dest="gridx",
        type=int,
        default=None,
        help="Grid size in X. A value of 4 generates 4 vertical lines evenly spaced across the image.",
    )
    parser.add_argument(
        "--gridy",
        dest="gridy",
        type=int,
        default=None,
        help="Grid size in Y. A value of 8 generates 8 horizontal lines evenly spaced across the image.",
    )
    parser.add_argument(
        "-t",
        "--threshold",
        dest="threshold",
        type=int,
        default=None,
        help="Pixel intensity (0 - 255) at or above which an intersection is a positive hit.",
    )
    parser.add_argument(
        "-s",
        "--saveimages",
        dest="saveimages",
        default=None,
        help="Directory to write annotated images (grid lines plus markers on positive hits).",
    )
    parser.add_argument(
        "--radius",
        dest="radius",
        type=float,
        default=DEFAULT_MARKER_RADIUS,
        help=f"Radius in pixels of the markers drawn around positive hits (default: {DEFAULT_MARKER_RADIUS:g}).",
    )
    parser.add_argument(
        "--clamp-spacing",
        dest="clamp_spacing",
        action="store_true",
        help="Clamp grid spacing to one pixel instead of skipping images smaller than the grid.",
    )
    parser.add_argument(
        "--verbose",
        dest="verbose",
        action="store_true",
        help="Log per-image progress to standard error.",
    )
    return parser


def configure_logging(verbose: bool = False) -> None:
    """Send package log records to the current standard error stream."""
    package_logger = logging.getLogger(__package__)
    for handler in list(package_logger.handlers):
        if getattr(handler, _HANDLER_TAG, False):
            package_logger.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    setattr(handler, _HANDLER_TAG, True)
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def parse_config(parser: argparse.ArgumentParser, argv: Sequence[str]) -> tuple[PointCountConfig, argparse.Namespace]:
    """Parse and validate ``argv``; every failure is a ConfigurationError with its exit code."""
    args, extras = parser.parse_known_args(list(argv))

    unknown = [arg for arg in extras if arg.startswith("-") and arg != "-"]
    if unknown:
        raise ConfigurationError(
            "Unknown option(s) found\n" + "\n".join(f"\t{arg}" for arg in unknown),
            EXIT_UNKNOWN_OPTION,
        )
    if extras:
        raise ConfigurationError(
            "Unexpected options found:\n" + "\n".join(f"#{i}: {arg}" for i, arg in enumerate(extras)),
            EXIT_UNEXPECTED_ARGS,
        )

    for dest, flag, exit_code in _REQUIRED_OPTIONS:
        if getattr(args, dest) is None:
            raise ConfigurationError(f"{flag} required. Run with --help for more information", exit_code)

    return config_from_args(args), args


def main(argv: Optional[Sequence[str]] = None) -> int:
    argv: List[str] = list(sys.argv[1:] if argv is None else argv)
    parser = build_parser()

    if len(argv) < 2 and not any(arg in _HELP_FLAGS for arg in argv):
        print("Invalid arguments\n", file=sys.stderr)
        parser.print_help(sys.stdout)
        return EXIT_INVALID_ARGS

    try:
        config, args = parse_config(parser, argv)
        configure_logging(args.verbose)
        if config.save_images:
            validate_output_directory(config.save_dir)
    except ConfigurationError as exc:
        print(exc, file=sys.stderr)
        return exc.exit_code
    except SystemExit as exc:
        # --help and --version
        return exc.code if isinstance(exc.code, int) else EXIT_OK

    images = resolve_images(args.images)
    batch = run_batch(images, config)
    write_report(batch.results, batch.summary, sys.stdout)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
