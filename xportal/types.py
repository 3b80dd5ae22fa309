"""
Core value types shared by the parser, reconciler, merger and builder.

Defines module dependencies, replace directives and the module records
reported by ``go list -m -json``.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Dependency:
    """
    A module to pull into the build.

    Attributes:
        package_path: Module (or package) import path
        version: Optional version query; empty means latest/unspecified
    """
    package_path: str
    version: str = ""

    def __str__(self) -> str:
        if self.version:
            return f"{self.package_path}@{self.version}"
        return self.package_path


@dataclass(frozen=True)
class Replace:
    """
    A single replace directive.

    Attributes:
        old: Module reference being replaced (``path`` or ``path@version``)
        new: Replacement module reference or filesystem path
    """
    old: str
    new: str

    def __str__(self) -> str:
        return f"{self.old}={self.new}"


@dataclass
class ModuleRecord:
    """One module entry from the toolchain's introspection stream."""
    path: str
    version: str = ""
    main: bool = False
    dir: str = ""
    replace: Optional["ModuleRecord"] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ModuleRecord":
        """Build a record from decoded JSON using the toolchain's field names."""
        replace = data.get("Replace")
        return cls(
            path=data.get("Path", ""),
            version=data.get("Version", ""),
            main=bool(data.get("Main", False)),
            dir=data.get("Dir", ""),
            replace=cls.from_dict(replace) if isinstance(replace, dict) else None,
        )
