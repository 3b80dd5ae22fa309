"""Main CLI entry point for xportal."""

import argparse
import logging
import sys
from typing import List, Optional

from xportal.config import BuildConfig
from xportal.exec import CancelToken, trap_signals

from .commands import print_version, run_build, run_dev


def _directive(flag: str):
    """argparse type tagging each value with its flag, keeping --with/--replace interleaved."""
    def convert(value: str):
        return (flag, value)
    return convert


def create_build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the build command."""
    parser = argparse.ArgumentParser(
        prog='xportal build',
        description='Build a custom Portal binary with plugins'
    )
    parser.add_argument(
        'portal_version',
        nargs='?',
        default='',
        help='Portal version to build (default: $PORTAL_VERSION or latest)'
    )
    parser.add_argument(
        '--with',
        dest='directives',
        action='append',
        type=_directive('--with'),
        metavar='MODULE[@VERSION][=REPLACEMENT]',
        help='Plugin module to add (can be specified multiple times)'
    )
    parser.add_argument(
        '--replace',
        dest='directives',
        action='append',
        type=_directive('--replace'),
        metavar='MODULE[@VERSION]=REPLACEMENT',
        help='Replace directive to add (can be specified multiple times)'
    )
    parser.add_argument(
        '--output',
        type=str,
        default='',
        help='Output file (default: ./portal)'
    )
    return parser


def setup_logging(config: BuildConfig) -> None:
    logging.basicConfig(
        level=logging.DEBUG if config.debug else logging.INFO,
        format='%(asctime)s [%(levelname)s] %(message)s'
    )


def main(args: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    ``build`` and ``version`` are subcommands; anything else runs the
    current project in development mode with all arguments forwarded.
    """
    if args is None:
        args = sys.argv[1:]

    if args and args[0] == 'version':
        return print_version()

    config = BuildConfig.from_env()
    setup_logging(config)

    token = CancelToken()
    restore_signals = trap_signals(token)
    try:
        if args and args[0] == 'build':
            parsed_args = create_build_parser().parse_args(args[1:])
            return run_build(parsed_args, config, token)
        return run_dev(args, config, token)
    finally:
        restore_signals()


if __name__ == '__main__':
    sys.exit(main())
