"""Merging of explicit, carried-through and default replace directives."""

from importlib import resources
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .exceptions import ConfigurationError
from .types import Dependency, Replace


DEFAULTS_RESOURCE = "default_replacements.yaml"
REQUIRED_KEYS = ("old_module", "old_version", "new_module", "new_version")


def merge_replacements(
    explicit: Sequence[Replace],
    carried: Sequence[Replace],
    defaults: Sequence[Replace],
) -> List[Replace]:
    """
    Combine replacement sources front-to-back: explicit, carried, defaults.

    Nothing is deduplicated. Repeated ``old`` entries are handed to the
    builder, which applies the toolchain's own conflict policy.
    """
    return [*explicit, *carried, *defaults]


def parse_default_replacements(document: Optional[Dict[str, Any]]) -> List[Replace]:
    """
    Convert a loaded defaults document into replace directives.

    Raises:
        ConfigurationError: If the document does not have the expected shape
    """
    if document is None:
        return []
    if not isinstance(document, dict) or not isinstance(document.get("replacements", []), list):
        raise ConfigurationError("default replacements must be a mapping with a 'replacements' list")

    replacements = []
    for i, entry in enumerate(document.get("replacements", [])):
        if not isinstance(entry, dict):
            raise ConfigurationError(f"default replacement #{i} must be a mapping")
        missing = [key for key in REQUIRED_KEYS if not entry.get(key)]
        if missing:
            raise ConfigurationError(f"default replacement #{i} is missing: {', '.join(missing)}")

        replacements.append(Replace(
            str(Dependency(entry["old_module"], str(entry["old_version"]))),
            str(Dependency(entry["new_module"], str(entry["new_version"]))),
        ))
    return replacements


def load_default_replacements() -> List[Replace]:
    """Load the built-in fork table shipped with the package."""
    text = resources.files("xportal.data").joinpath(DEFAULTS_RESOURCE).read_text(encoding="utf-8")
    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to load default replacements: {e}") from e
    return parse_default_replacements(document)
