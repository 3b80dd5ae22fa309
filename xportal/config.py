"""Process configuration read from the environment.

The environment is read exactly once, at startup, into an immutable
``BuildConfig`` which is then passed to every component that needs it.
"""

import os
import sys
from dataclasses import dataclass
from typing import Mapping, Optional


def _flag(environ: Mapping[str, str], name: str) -> bool:
    """Boolean options are enabled only by the literal value ``1``."""
    return environ.get(name) == "1"


@dataclass(frozen=True)
class BuildConfig:
    """
    Immutable build and run configuration.

    Attributes:
        portal_version: Host application version (PORTAL_VERSION)
        race_detector: Compile with the race detector (XPORTAL_RACE_DETECTOR)
        skip_build: Prepare the build environment but do not compile (XPORTAL_SKIP_BUILD)
        skip_cleanup: Keep temporary files and the built artifact (XPORTAL_SKIP_CLEANUP)
        debug: Verbose build diagnostics (XPORTAL_DEBUG)
        build_flags: Extra ``go build`` flags (XPORTAL_GO_BUILD_FLAGS)
        mod_flags: Extra ``go get``/``go mod`` flags (XPORTAL_GO_MOD_FLAGS)
        setcap: Grant the artifact cap_net_bind_service after building (XPORTAL_SETCAP)
        use_sudo: Allow running setcap through sudo (XPORTAL_SUDO != 0)
        go_binary: Go toolchain executable (XPORTAL_WHICH_GO)
        goos: Target operating system (GOOS), empty for the host's
    """
    portal_version: str = ""
    race_detector: bool = False
    skip_build: bool = False
    skip_cleanup: bool = False
    debug: bool = False
    build_flags: str = ""
    mod_flags: str = ""
    setcap: bool = False
    use_sudo: bool = True
    go_binary: str = "go"
    goos: str = ""

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "BuildConfig":
        """Create configuration from environment variables (default: os.environ)."""
        if environ is None:
            environ = os.environ

        skip_build = _flag(environ, "XPORTAL_SKIP_BUILD")
        return cls(
            portal_version=environ.get("PORTAL_VERSION", ""),
            race_detector=_flag(environ, "XPORTAL_RACE_DETECTOR"),
            skip_build=skip_build,
            # Nothing gets built, so there is nothing worth deleting either
            skip_cleanup=_flag(environ, "XPORTAL_SKIP_CLEANUP") or skip_build,
            debug=_flag(environ, "XPORTAL_DEBUG"),
            build_flags=environ.get("XPORTAL_GO_BUILD_FLAGS", ""),
            mod_flags=environ.get("XPORTAL_GO_MOD_FLAGS", ""),
            setcap=_flag(environ, "XPORTAL_SETCAP"),
            use_sudo=environ.get("XPORTAL_SUDO") != "0",
            go_binary=environ.get("XPORTAL_WHICH_GO") or "go",
            goos=environ.get("GOOS", ""),
        )

    @property
    def target_os(self) -> str:
        """Operating system the binary is compiled for."""
        if self.goos:
            return self.goos
        return "windows" if sys.platform.startswith("win") else sys.platform

    def default_output_file(self) -> str:
        """Default artifact path in the current directory (``./portal`` or ``./portal.exe``)."""
        output = "." + os.sep + "portal"
        if self.target_os == "windows":
            output += ".exe"
        return output
