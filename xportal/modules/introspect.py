"""Module graph introspection through ``go list -m -json all``."""

import io
import logging
import subprocess
from typing import Optional

from ..config import BuildConfig
from ..exceptions import IntrospectionError
from .reconciler import ReconcileResult, reconcile
from .stream import iter_module_records


logger = logging.getLogger(__name__)


def list_modules(config: BuildConfig, cwd: Optional[str] = None) -> ReconcileResult:
    """
    Reconcile the module graph of the project in ``cwd``.

    The toolchain output is decoded as it is produced; stderr is inherited
    so toolchain diagnostics reach the user unchanged.

    Args:
        config: Build configuration (selects the Go binary)
        cwd: Project directory (default: current directory)

    Returns:
        ReconcileResult for the project's main module

    Raises:
        IntrospectionError: If the command fails or its output cannot be reconciled
    """
    argv = [config.go_binary, "list", "-mod=readonly", "-m", "-json", "all"]
    logger.debug(f"Executing command: {argv}")

    try:
        proc = subprocess.Popen(argv, cwd=cwd, stdout=subprocess.PIPE)
    except OSError as e:
        raise IntrospectionError(f"exec {argv}: {e}") from e

    with proc:
        stream = io.TextIOWrapper(proc.stdout, encoding="utf-8")
        try:
            result = reconcile(iter_module_records(stream))
        except IntrospectionError:
            proc.kill()
            raise
        exit_code = proc.wait()

    if exit_code != 0:
        raise IntrospectionError(f"exec {argv}: exit status {exit_code}")

    return result
