"""CLI command handlers."""

from .build import run_build
from .dev import run_dev
from .version import print_version

__all__ = ['run_build', 'run_dev', 'print_version']
