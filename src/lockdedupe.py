"""lockdedupe - Merge duplicated package versions in a Yarn Berry lockfile.

    Returns:
        int: Exit code
"""
import logging
import os
import sys

from constants import ExitCodes, _load_yaml_config
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from args import parse_args
from dedupe.service import fix_duplicates, list_duplicates
from dedupe.rewriter import RewriteError
from lockfile.descriptor import DescriptorParseError
from lockfile.yarn_berry import LockfileParseError
from versioning.models import DedupeOptions, Strategy

logger = logging.getLogger(__name__)

FAIL_MESSAGE = "Found duplicated entries. Run lockdedupe to deduplicate them."


def build_options(args):
    """Merge config-file defaults with CLI flags (CLI wins).

    Args:
        args (argparse.Namespace): Parsed CLI arguments.

    Returns:
        DedupeOptions: Effective options.
    """
    cfg = _load_yaml_config(getattr(args, "CONFIG", None))
    options = DedupeOptions.from_mapping(cfg)
    if args.SCOPES:
        options.include_scopes = list(args.SCOPES)
    if args.PACKAGES:
        options.include_packages = list(args.PACKAGES)
    if args.EXCLUDE:
        options.exclude_packages = list(args.EXCLUDE)
    if args.EXCLUDE_SCOPES:
        options.exclude_scopes = list(args.EXCLUDE_SCOPES)
    if args.STRATEGY:
        options.strategy = Strategy.parse(args.STRATEGY)
    if args.INCLUDE_PRERELEASE is not None:
        options.include_prerelease = bool(args.INCLUDE_PRERELEASE)
    return options


def read_lockfile(path):
    """Reads the lockfile, preserving its line endings.

    Args:
        path (str): Lockfile path.

    Returns:
        str: File contents.
    """
    with open(path, "r", encoding="utf-8", newline="") as file:
        return file.read()


def write_lockfile(path, content):
    with open(path, "w", encoding="utf-8", newline="") as file:
        file.write(content)


def run(args):
    """Run one list/print/fix pass and return the exit code."""
    try:
        options = build_options(args)
    except (OSError, ValueError) as e:
        logging.error("Invalid configuration: %s", e)
        return ExitCodes.FILE_ERROR.value

    path = args.FILE
    if not os.path.isabs(path):
        path = os.path.join(os.getcwd(), path)

    try:
        content = read_lockfile(path)
    except FileNotFoundError as e:
        logging.error("File not found: %s, aborting", e)
        return ExitCodes.FILE_ERROR.value
    except IOError as e:
        logging.error("IO error: %s, aborting", e)
        return ExitCodes.FILE_ERROR.value

    if is_debug_enabled(logger):
        logger.debug(
            "Deduplicating lockfile",
            extra=extra_context(
                component="cli",
                action="list" if args.LIST else "print" if args.PRINT else "fix",
                target=path,
                strategy=options.strategy.value,
            ),
        )

    try:
        duplicates = list_duplicates(content, options)
        if args.LIST:
            for line in duplicates:
                print(line)
        else:
            fixed = fix_duplicates(content, options)
            if args.PRINT:
                sys.stdout.write(fixed)
            elif fixed != content:
                write_lockfile(path, fixed)
                if duplicates:
                    print(f"Found duplicates, {os.path.basename(path)} changed")
    except (LockfileParseError, DescriptorParseError) as e:
        logging.error("Could not parse %s: %s", path, e)
        return ExitCodes.PARSE_ERROR.value
    except RewriteError as e:
        logging.error("Could not rewrite %s: %s", path, e)
        return ExitCodes.PARSE_ERROR.value
    except IOError as e:
        logging.error("IO error: %s, aborting", e)
        return ExitCodes.FILE_ERROR.value

    if duplicates and args.FAIL:
        sys.stderr.write(FAIL_MESSAGE + "\n")
        return ExitCodes.DUPLICATES_FOUND.value
    return ExitCodes.SUCCESS.value


def main():
    """Main function of the program."""
    args = parse_args()
    configure_logging(args.LOG_LEVEL, args.LOG_FILE)
    sys.exit(run(args))


if __name__ == "__main__":
    main()
