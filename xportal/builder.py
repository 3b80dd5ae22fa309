"""
Go toolchain builder for custom Portal binaries.

Writes a throwaway main module that blank-imports every plugin, applies the
replace directives in order, resolves requirements and compiles.
"""

import logging
import os
import shlex
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List

from .config import BuildConfig
from .exceptions import BuildCancelled, BuildError
from .exec import CancelToken, run_process
from .types import Dependency, Replace


logger = logging.getLogger(__name__)

PORTAL_MODULE = "go.lumeweb.com/portal"
PORTAL_CMD_PACKAGE = PORTAL_MODULE + "/cmd"

MAIN_TEMPLATE = """package main

import (
\tportalcmd "{cmd_package}"

\t// plug in modules here
{imports})

func main() {{
\tportalcmd.Main()
}}
"""


@dataclass
class GoBuilder:
    """
    Builds a Portal binary with the given plugins and replacements.

    Attributes:
        config: Build configuration
        plugins: Modules compiled in alongside the host
        replacements: Replace directives, applied in order
    """
    config: BuildConfig
    plugins: List[Dependency] = field(default_factory=list)
    replacements: List[Replace] = field(default_factory=list)

    def build(self, token: CancelToken, output: str) -> None:
        """
        Build the binary to ``output``.

        Args:
            token: Cancellation token shared with the signal handler
            output: Artifact path

        Raises:
            BuildError: If any toolchain step fails
            BuildCancelled: If the token was cancelled during the build
        """
        if not output:
            raise BuildError("output file path is required")
        output = os.path.abspath(output)

        workdir = Path(tempfile.mkdtemp(prefix="buildenv_"))
        logger.info(f"Temporary folder: {workdir}")
        try:
            self._write_main(workdir)
            self._go(token, workdir, ["mod", "init", "portal"])
            for replace in self.replacements:
                logger.info(f"Replace {replace.old} => {replace.new}")
                self._go(token, workdir, ["mod", "edit", "-replace", str(replace)])
            self._require(token, workdir)

            if self.config.skip_build:
                logger.info("Skipping build as requested")
                return

            logger.info("Building Portal")
            self._go(token, workdir, self._build_args(output))
            logger.info(f"Build complete: {output}")
        finally:
            if self.config.skip_cleanup:
                logger.info(f"Skipping cleanup as requested; leaving folder intact: {workdir}")
            else:
                logger.info(f"Cleaning up temporary folder: {workdir}")
                shutil.rmtree(workdir, ignore_errors=True)

    def _write_main(self, workdir: Path) -> None:
        imports = "".join(f'\t_ "{plugin.package_path}"\n' for plugin in self.plugins)
        content = MAIN_TEMPLATE.format(cmd_package=PORTAL_CMD_PACKAGE, imports=imports)
        (workdir / "main.go").write_text(content)
        logger.debug(f"Writing main module:\n{content}")

    def _require(self, token: CancelToken, workdir: Path) -> None:
        mod_flags = shlex.split(self.config.mod_flags)
        host = Dependency(PORTAL_MODULE, self.config.portal_version)
        self._go(token, workdir, ["get", *mod_flags, str(host)])

        for plugin in self.plugins:
            self._go(token, workdir, ["get", *mod_flags, str(plugin)])

    def _build_args(self, output: str) -> List[str]:
        args = ["build", "-o", output, "-trimpath"]
        if self.config.race_detector:
            args.append("-race")
        if self.config.debug:
            args.append("-v")
        args += shlex.split(self.config.build_flags)
        return args

    def _env(self) -> Dict[str, str]:
        return {"CGO_ENABLED": "1"}

    def _go(self, token: CancelToken, workdir: Path, args: List[str]) -> None:
        token.raise_if_cancelled()
        argv = [self.config.go_binary, *args]
        logger.info(f"exec: {shlex.join(argv)}")

        try:
            result = run_process(argv, token, cwd=workdir, env=self._env())
        except OSError as e:
            raise BuildError(f"exec {argv}: {e}") from e

        if result.cancelled:
            raise BuildCancelled(f"cancelled: {shlex.join(argv)}")
        if result.exit_code != 0:
            raise BuildError(f"exec {argv}: exit status {result.exit_code}")
