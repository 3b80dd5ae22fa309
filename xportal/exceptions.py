"""xportal exceptions."""

import json
from typing import Optional


class XPortalError(Exception):
    """Base class for fatal xportal errors.

    Every error carries the process exit code the CLI should terminate with,
    allowing command handlers to catch it and map it directly.
    """

    exit_code = 1


class DirectiveError(XPortalError):
    """Raised for malformed command-line input (directive syntax, missing flag values)."""

    exit_code = 2


class ConfigurationError(XPortalError):
    """Raised when packaged or environment configuration cannot be used."""

    exit_code = 2


class IntrospectionError(XPortalError):
    """Raised when the module introspection stream cannot be reconciled.

    When the failure comes from decoding a record, the raw decode error is
    kept on ``decode_error`` (and chained as ``__cause__`` by the raiser).
    """

    def __init__(self, message: str, decode_error: Optional[json.JSONDecodeError] = None):
        self.decode_error = decode_error
        if decode_error is not None:
            message = f"{message}: {decode_error}"
        super().__init__(message)


class BuildError(XPortalError):
    """Raised when the external builder fails; the message is passed through verbatim."""


class BuildCancelled(BuildError):
    """Raised when a toolchain invocation was aborted by cancellation."""

    exit_code = 130


class ArtifactLaunchError(XPortalError):
    """Raised when the built artifact cannot be started."""
