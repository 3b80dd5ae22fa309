"""Version command implementation."""

from xportal.version import xportal_version


def print_version() -> int:
    print(xportal_version())
    return 0
