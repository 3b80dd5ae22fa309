"""
Build orchestration and artifact supervision.

Drives the external builder, optionally grants the artifact permission to
bind privileged ports, and in development mode runs it as a child process
until it exits or the shared token is cancelled.
"""

import logging
import os
import shutil
import subprocess
from enum import Enum
from typing import Callable, List

from .builder import GoBuilder
from .config import BuildConfig
from .exceptions import ArtifactLaunchError, BuildCancelled, BuildError
from .exec import CancelToken, run_process, wait
from .types import Dependency, Replace


logger = logging.getLogger(__name__)


class BuildState(str, Enum):
    """Lifecycle of one build-and-run invocation."""
    IDLE = "idle"
    BUILDING = "building"
    BUILD_FAILED = "build_failed"
    BUILT = "built"
    RUNNING = "running"
    EXITED = "exited"
    KILLED = "killed"
    CLEANED_UP = "cleaned_up"


BuilderFactory = Callable[[BuildConfig, List[Dependency], List[Replace]], GoBuilder]


class BuildOrchestrator:
    """
    Builds a Portal binary and, in development mode, supervises it.

    Plugins and replacements are copied on construction and never modified.
    """

    def __init__(
        self,
        config: BuildConfig,
        plugins: List[Dependency],
        replacements: List[Replace],
        builder_factory: BuilderFactory = GoBuilder,
    ):
        """
        Initialize orchestrator.

        Args:
            config: Immutable build configuration
            plugins: Modules to compile in
            replacements: Final, ordered replace directives
            builder_factory: Creates the external builder
        """
        self.config = config
        self.plugins = tuple(plugins)
        self.replacements = tuple(replacements)
        self.builder_factory = builder_factory
        self.state = BuildState.IDLE

    def build(self, token: CancelToken, output: str) -> None:
        """
        Build the artifact and apply setcap if requested.

        Raises:
            BuildError: If the builder or setcap fails (message passed through)
            BuildCancelled: If the token is cancelled; the state becomes KILLED
        """
        self.state = BuildState.BUILDING
        builder = self.builder_factory(self.config, list(self.plugins), list(self.replacements))
        try:
            builder.build(token, output)
        except BuildCancelled:
            self.state = BuildState.KILLED
            raise
        except BuildError:
            self.state = BuildState.BUILD_FAILED
            raise
        self.state = BuildState.BUILT

        if self.config.skip_build:
            return

        try:
            self.setcap_if_requested(token, output)
        except BuildCancelled:
            self.state = BuildState.KILLED
            raise

    def setcap_if_requested(self, token: CancelToken, output: str) -> None:
        """Grant ``cap_net_bind_service`` to the artifact when XPORTAL_SETCAP=1."""
        if not self.config.setcap:
            return

        argv = ["setcap", "cap_net_bind_service=+ep", output]
        # Run directly when sudo isn't available or we were told not to use it
        if self.config.use_sudo and shutil.which("sudo") is not None:
            argv = ["sudo", *argv]

        logger.info(f"Setting capabilities (requires admin privileges): {argv}")
        try:
            result = run_process(argv, token)
        except OSError as e:
            raise BuildError(f"failed to setcap on the binary: {e}") from e
        if result.cancelled:
            raise BuildCancelled("cancelled while setting capabilities")
        if result.exit_code != 0:
            raise BuildError(f"failed to setcap on the binary: exit status {result.exit_code}")

    def run(self, token: CancelToken, output: str, args: List[str]) -> int:
        """
        Run the built artifact with inherited stdio until it exits.

        Args:
            token: Cancellation token; cancelling terminates the child
            output: Artifact path
            args: Arguments forwarded to the artifact

        Returns:
            The artifact's exit status (128 + signal number if killed by a signal)

        Raises:
            ArtifactLaunchError: If the artifact cannot be started
        """
        argv = [output, *args]
        logger.info(f"Running {argv}\n")

        try:
            # stdio is inherited from this process
            proc = subprocess.Popen(argv)
        except OSError as e:
            raise ArtifactLaunchError(f"failed to start {output}: {e}") from e

        self.state = BuildState.RUNNING
        try:
            exit_code = wait(proc, token)
        finally:
            self.state = BuildState.KILLED if token.cancelled else BuildState.EXITED
            self.cleanup(output)

        if exit_code < 0:
            return 128 - exit_code
        return exit_code

    def cleanup(self, output: str) -> None:
        """
        Delete the artifact unless cleanup is skipped.

        A missing artifact is not an error; other failures are logged only,
        since a usable build already exists.
        """
        if self.config.skip_cleanup:
            logger.info(f"Skipping cleanup as requested; leaving artifact: {output}")
            return

        try:
            os.remove(output)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"Deleting temporary binary {output}: {e}")
        self.state = BuildState.CLEANED_UP
