"""xportal: build and run custom Portal binaries with plugins."""

from .config import BuildConfig
from .directives import split_with
from .modules import reconcile
from .orchestrator import BuildOrchestrator, BuildState
from .replacements import load_default_replacements, merge_replacements
from .types import Dependency, ModuleRecord, Replace

__all__ = [
    "BuildConfig",
    "BuildOrchestrator",
    "BuildState",
    "Dependency",
    "ModuleRecord",
    "Replace",
    "load_default_replacements",
    "merge_replacements",
    "reconcile",
    "split_with",
]
