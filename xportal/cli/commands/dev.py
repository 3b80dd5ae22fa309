"""Development mode: build the current project into Portal and run it."""

import logging
import os
from typing import List

from xportal.config import BuildConfig
from xportal.exceptions import IntrospectionError, XPortalError
from xportal.exec import CancelToken
from xportal.modules import list_modules, normalize_import_path
from xportal.orchestrator import BuildOrchestrator
from xportal.replacements import load_default_replacements, merge_replacements
from xportal.types import Dependency


logger = logging.getLogger(__name__)


def run_dev(args: List[str], config: BuildConfig, token: CancelToken) -> int:
    """
    Build Portal with the project in the current directory plugged in, then run it.

    Args:
        args: Arguments forwarded to the built binary
        config: Build configuration
        token: Cancellation token shared with the signal handler

    Returns:
        The binary's exit status, or the exit code of a fatal error
    """
    output = config.default_output_file()

    try:
        # The user's replace directives only apply in their own go.mod, so carry
        # them through to the temporary module along with the project itself
        modules = list_modules(config)
        if not modules.module_path:
            raise IntrospectionError("no main module found; run inside a Go module")

        cwd = os.getcwd()
        import_path = normalize_import_path(modules.module_path, cwd, modules.module_dir or "")

        replacements = merge_replacements([], modules.replacements, load_default_replacements())

        orchestrator = BuildOrchestrator(config, [Dependency(import_path)], replacements)
        orchestrator.build(token, output)
        if config.skip_build:
            return 0

        return orchestrator.run(token, output, args)

    except XPortalError as e:
        logger.error(f"{e}")
        return e.exit_code
