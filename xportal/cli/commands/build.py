"""Build command implementation."""

import dataclasses
import logging
from argparse import Namespace

from xportal.config import BuildConfig
from xportal.directives import parse_directives
from xportal.exceptions import XPortalError
from xportal.exec import CancelToken
from xportal.orchestrator import BuildOrchestrator
from xportal.replacements import load_default_replacements, merge_replacements


logger = logging.getLogger(__name__)


def run_build(args: Namespace, config: BuildConfig, token: CancelToken) -> int:
    """
    Build a Portal binary from command-line plugins and replacements.

    Returns:
        0 on success, otherwise the exit code of the failure
    """
    try:
        plugins, replacements = parse_directives(args.directives)
        replacements = merge_replacements(replacements, [], load_default_replacements())

        # Prefer the version from the command line over the environment
        if args.portal_version:
            config = dataclasses.replace(config, portal_version=args.portal_version)

        output = args.output or config.default_output_file()

        orchestrator = BuildOrchestrator(config, plugins, replacements)
        orchestrator.build(token, output)
        return 0

    except XPortalError as e:
        logger.error(f"{e}")
        return e.exit_code
