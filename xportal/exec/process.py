"""
Cancellable child-process execution.

All toolchain calls and the artifact run go through here so a cancelled
token terminates the child instead of leaving it orphaned.
"""

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union

from .cancel import CancelToken


logger = logging.getLogger(__name__)


@dataclass
class ProcessResult:
    """Result of a finished child process."""
    argv: List[str]
    exit_code: int
    cancelled: bool = False


def terminate(proc: subprocess.Popen) -> None:
    """Ask a running child to exit; tolerate it having exited already."""
    if proc.poll() is not None:
        return
    logger.debug(f"Terminating process {proc.pid}")
    try:
        proc.terminate()
    except ProcessLookupError:
        pass


def wait(proc: subprocess.Popen, token: CancelToken) -> int:
    """
    Wait for ``proc``, terminating it if ``token`` is cancelled meanwhile.

    Returns:
        The child's return code
    """
    with token.on_cancel(lambda: terminate(proc)):
        proc.wait()

    return proc.returncode


def run_process(
    argv: List[str],
    token: CancelToken,
    cwd: Optional[Union[str, Path]] = None,
    env: Optional[Dict[str, str]] = None,
) -> ProcessResult:
    """
    Run a command to completion with inherited stdio.

    Args:
        argv: Command and arguments (no shell)
        token: Cancellation token; cancelling terminates the child
        cwd: Working directory
        env: Variables added to the current environment

    Returns:
        ProcessResult with exit code and whether the run was cancelled

    Raises:
        OSError: If the command cannot be started
    """
    process_env = os.environ.copy()
    if env:
        process_env.update(env)

    logger.debug(f"Executing command: {argv}")
    proc = subprocess.Popen(argv, cwd=str(cwd) if cwd else None, env=process_env)

    return ProcessResult(
        argv=list(argv),
        exit_code=wait(proc, token),
        cancelled=token.cancelled,
    )
