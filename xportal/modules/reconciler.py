"""
Reconciliation of the project's module graph into replace directives.

Replace directives only apply in the main module's go.mod. Since the build
happens in a temporary module, the user's own directives have to be carried
through, and the project itself must replace any registry copy of it.
"""

import logging
import os
import posixpath
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from ..exceptions import IntrospectionError
from ..types import ModuleRecord, Replace


logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """Results of reconciling one introspection stream."""
    module_path: Optional[str]
    module_dir: Optional[str]
    replacements: List[Replace] = field(default_factory=list)


class GraphReconciler:
    """
    Turns a stream of module records into an ordered list of replacements.

    Records are fed one at a time. The root (main) module may show up after
    records whose relative replacement targets depend on its directory, so
    such targets are appended unresolved and patched by ``finish()``.
    """

    def __init__(self):
        self.module_path: Optional[str] = None
        self.module_dir: Optional[str] = None
        self.replacements: List[Replace] = []
        # (index into replacements, unresolved relative path)
        self._unjoined: List[Tuple[int, str]] = []
        self._finished = False

    def feed(self, record: ModuleRecord) -> None:
        """
        Process a single module record.

        Args:
            record: Decoded module record

        Raises:
            IntrospectionError: If a second main module is reported
        """
        if record.main:
            if self.module_path is not None:
                raise IntrospectionError(
                    f"multiple main modules reported: {self.module_path} and {record.path}"
                )
            self.module_path = record.path
            self.module_dir = record.dir
            self.replacements.append(Replace(record.path, record.dir))
            return

        if record.replace is None:
            return

        # 1. Target is a module: a version is required in this case
        # 2. Target is an absolute path: used as-is
        # 3. Target is a relative path: anchored at the main module's directory
        dst_path = record.replace.path
        if record.replace.version:
            dst = f"{dst_path}@{record.replace.version}"
        elif os.path.isabs(dst_path):
            dst = dst_path
        elif self.module_dir:
            dst = _join(self.module_dir, dst_path)
            logger.info(f"Resolved relative replacement {dst_path} to {dst}")
        else:
            dst = dst_path
            self._unjoined.append((len(self.replacements), dst_path))

        self.replacements.append(Replace(record.path, dst))

    def finish(self) -> ReconcileResult:
        """
        Backfill deferred relative targets once the stream is exhausted.

        Returns:
            ReconcileResult with the main module and ordered replacements

        Raises:
            IntrospectionError: If relative targets remain but no main module directory was seen
        """
        if self._finished:
            raise RuntimeError("reconciliation already finished")
        self._finished = True

        if self._unjoined and not self.module_dir:
            pending = ", ".join(path for _, path in self._unjoined)
            raise IntrospectionError(
                f"cannot resolve relative replacements without a main module directory: {pending}"
            )

        for index, unresolved in self._unjoined:
            resolved = _join(self.module_dir, unresolved)
            logger.info(f"Resolved previously-unjoined relative replacement {unresolved} to {resolved}")
            self.replacements[index] = Replace(self.replacements[index].old, resolved)
        self._unjoined.clear()

        return ReconcileResult(
            module_path=self.module_path,
            module_dir=self.module_dir,
            replacements=self.replacements,
        )


def reconcile(records: Iterable[ModuleRecord]) -> ReconcileResult:
    """Reconcile every record of a stream; see ``GraphReconciler``."""
    reconciler = GraphReconciler()
    for record in records:
        reconciler.feed(record)
    return reconciler.finish()


def normalize_import_path(module_path: str, cwd: str, module_dir: str) -> str:
    """
    Compute the import path of the package in the current directory.

    For example, if module ``foo/a`` is rooted at ``/home/foo/a`` and the
    current directory is ``/home/foo/a/b``, the package to import is ``foo/a/b``.
    The module root itself, or a directory outside it, maps to ``module_path``.
    """
    root = module_dir.rstrip(os.sep)
    # Whole path segments only: /home/u/app2 is not inside /home/u/app
    if not cwd.startswith(root + os.sep):
        return posixpath.normpath(module_path)

    suffix = cwd[len(root):].replace(os.sep, "/").lstrip("/")
    return posixpath.normpath(posixpath.join(module_path, suffix))


def _join(base: str, relative: str) -> str:
    return os.path.normpath(os.path.join(base, relative))
