"""Argument parsing functionality for lockdedupe."""

import argparse

from constants import Constants
from versioning.models import Strategy


def _flatten(values):
    """Merge repeated ``nargs='+'`` flags into one list."""
    if not values:
        return []
    return [item for group in values for item in group]


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="lockdedupe",
        description=(
            "lockdedupe - Merge duplicated versions of the same package in a Yarn lockfile"
        ),
        add_help=True,
    )

    parser.add_argument("FILE",
                        help=f"Path to the lockfile (default: {Constants.DEFAULT_LOCKFILE})",
                        nargs="?",
                        default=Constants.DEFAULT_LOCKFILE)
    parser.add_argument("-s", "--strategy",
                        dest="STRATEGY",
                        help="Deduplication strategy (default: fewerHighest)",
                        action="store", type=str,
                        choices=[s.value for s in Strategy],
                        default=None)

    output_group = parser.add_mutually_exclusive_group()
    output_group.add_argument("-l", "--list",
                              dest="LIST",
                              help="Do not change the lockfile, list the duplicated packages instead",
                              action="store_true")
    output_group.add_argument("--print",
                              dest="PRINT",
                              help="Do not change the lockfile, print the result to stdout instead",
                              action="store_true")

    parser.add_argument("--fail",
                        dest="FAIL",
                        help="Exit with a non-zero status code when duplicates were found",
                        action="store_true")
    parser.add_argument("--scopes",
                        dest="SCOPES",
                        help="Only deduplicate packages from these scopes",
                        action="append", nargs="+", type=str)
    parser.add_argument("--packages",
                        dest="PACKAGES",
                        help="Only deduplicate these packages",
                        action="append", nargs="+", type=str)
    parser.add_argument("--exclude",
                        dest="EXCLUDE",
                        help="Never deduplicate these packages",
                        action="append", nargs="+", type=str)
    parser.add_argument("--exclude-scopes",
                        dest="EXCLUDE_SCOPES",
                        help="Never deduplicate packages from these scopes",
                        action="append", nargs="+", type=str)
    parser.add_argument("--includePrerelease",
                        dest="INCLUDE_PRERELEASE",
                        help="Consider prerelease versions when matching ranges",
                        action="store_true",
                        default=None)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to a YAML config file with dedupe defaults",
                        action="store",
                        type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default=None)
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)

    args = parser.parse_args(argv)
    args.SCOPES = _flatten(args.SCOPES)
    args.PACKAGES = _flatten(args.PACKAGES)
    args.EXCLUDE = _flatten(args.EXCLUDE)
    args.EXCLUDE_SCOPES = _flatten(args.EXCLUDE_SCOPES)
    return args
