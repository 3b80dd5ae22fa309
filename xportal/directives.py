"""Parsing of ``module[@version][=replacement]`` command-line directives."""

import logging
import os
from typing import List, Optional, Tuple

from .exceptions import DirectiveError
from .types import Dependency, Replace


logger = logging.getLogger(__name__)

VERSION_SPLIT = "@"
REPLACE_SPLIT = "="


def split_with(arg: str) -> Tuple[str, str, str]:
    """
    Split a directive into module path, version and replacement target.

    The first ``=`` separates the replacement. Module paths may legally
    contain ``@``, so the version is whatever follows the *last* ``@`` before
    the ``=``. Versions may be branch names containing ``/``.

    Args:
        arg: Directive text, e.g. ``example.com/mod@v1.2.0=../mod``

    Returns:
        Tuple of (module, version, replacement); missing parts are empty strings

    Raises:
        DirectiveError: If the module path is empty
    """
    module, _, replacement = arg.partition(REPLACE_SPLIT)

    version = ""
    head, sep, tail = module.rpartition(VERSION_SPLIT)
    if sep:
        module, version = head, tail

    # Easy to leave a trailing slash when pasting from a URL; never valid on a module path
    module = module.rstrip("/")

    if not module:
        raise DirectiveError(f"module name is required: {arg!r}")

    return module, version, replacement


def absolutize_replacement(replacement: str, cwd: Optional[str] = None) -> str:
    """
    Make a ``.``-relative replacement target absolute.

    The temporary build module lives in a different directory than the
    caller, so relative targets are anchored at the current directory.
    """
    if not replacement.startswith("."):
        return replacement
    base = cwd or os.getcwd()
    return os.path.normpath(os.path.join(base, replacement))


def parse_directives(
    directives: Optional[List[Tuple[str, str]]],
    cwd: Optional[str] = None,
) -> Tuple[List[Dependency], List[Replace]]:
    """
    Turn repeated ``--with`` and ``--replace`` values into plugins and replacements.

    Args:
        directives: (flag, value) pairs in command-line order
        cwd: Directory relative replacement targets are anchored at

    Returns:
        Tuple of (plugins, explicit replacements), both in command-line order

    Raises:
        DirectiveError: On malformed directives or a ``--replace`` without target
    """
    plugins: List[Dependency] = []
    replacements: List[Replace] = []

    for flag, value in directives or []:
        module, version, replacement = split_with(value)
        if flag == "--with":
            plugins.append(Dependency(module, version))
        elif not replacement:
            raise DirectiveError(f"expected value after --replace flag: {value!r}")

        if replacement:
            resolved = absolutize_replacement(replacement, cwd)
            if resolved != replacement:
                logger.info(f"Resolved relative replacement {value} to {resolved}")
            replacements.append(Replace(str(Dependency(module, version)), resolved))

    return plugins, replacements
