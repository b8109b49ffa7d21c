"""Argument parsing functionality for sgversion."""

import argparse

from .constants import Constants, OutputFormats


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="sgversion",
        description=(
            "sgversion - Compute the version of a commit from the release tags of its git repository"
        ),
        add_help=True,
    )

    parser.add_argument("-C", "--path",
                        dest="PATH",
                        help="Path inside the repository (default: current directory)",
                        action="store", type=str,
                        default=".")
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to a YAML or JSON configuration file "
                             "(default: .sgversion.yml, .sgversion.yaml or .sgversion.json at the repository root)",
                        action="store",
                        type=str)

    head_group = parser.add_mutually_exclusive_group()
    head_group.add_argument("--head-commit",
                            dest="HEAD_COMMIT",
                            help="Commit (sha, tag or branch) to resolve instead of HEAD",
                            action="store",
                            type=str)
    head_group.add_argument("--head-branch",
                            dest="HEAD_BRANCH",
                            help="Branch whose tip is resolved instead of HEAD",
                            action="store",
                            type=str)

    parser.add_argument("--set",
                        dest="CONFIG_SET",
                        help="Override a configuration option: KEY=VALUE (repeatable)",
                        action="append",
                        type=str,
                        default=[])
    parser.add_argument("--tag",
                        dest="TAG_OVERRIDES",
                        help="Apply a tag as if it existed: COMMIT=TAG, COMMIT may be 'head' (repeatable)",
                        action="append",
                        type=str,
                        default=[])

    parser.add_argument("-f", "--format",
                        dest="OUTPUT_FORMAT",
                        help="Output format (text or json, default: text)",
                        action="store",
                        type=str.lower,
                        choices=Constants.SUPPORTED_FORMATS,
                        default=OutputFormats.TEXT.value)
    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Write the result to this file instead of the console",
                        action="store",
                        type=str)
    parser.add_argument("--explain",
                        dest="EXPLAIN",
                        help="Log how the version was computed",
                        action="store_true")
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='WARNING')
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)

    return parser.parse_args(argv)
