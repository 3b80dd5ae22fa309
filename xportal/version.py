"""Version and install provenance of xportal itself."""

import json
from importlib import metadata


DISTRIBUTION = "xportal"


def xportal_version() -> str:
    """
    Return a detailed version string, if available.

    Installs from a direct URL (editable checkouts, VCS URLs) append
    ``=> <url>`` and the commit, when recorded.
    """
    try:
        dist = metadata.distribution(DISTRIBUTION)
    except metadata.PackageNotFoundError:
        return "unknown"

    version = dist.version
    direct_url = dist.read_text("direct_url.json")
    if not direct_url:
        return version

    try:
        origin = json.loads(direct_url)
    except json.JSONDecodeError:
        return version

    url = origin.get("url")
    if url:
        version += f" => {url}"
        commit = origin.get("vcs_info", {}).get("commit_id")
        if commit:
            version += f"@{commit}"
    return version
