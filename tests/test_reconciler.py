"""Tests for module graph reconciliation into replace directives."""

import logging
import os

import pytest

from xportal.exceptions import IntrospectionError
from xportal.modules.reconciler import GraphReconciler, normalize_import_path, reconcile
from xportal.types import ModuleRecord, Replace


ROOT = ModuleRecord(path="example.com/app", main=True, dir="/home/u/app")


def replaced(path, target, version=""):
    return ModuleRecord(path=path, version="v1.0.0", replace=ModuleRecord(path=target, version=version))


class TestReconcile:
    """Test extraction and resolution of replace directives."""

    def test_root_self_replacement(self):
        """The project always replaces any registry copy of itself."""
        result = reconcile([ROOT])

        assert result.module_path == "example.com/app"
        assert result.module_dir == "/home/u/app"
        assert result.replacements == [Replace("example.com/app", "/home/u/app")]

    def test_unreplaced_modules_skipped(self):
        result = reconcile([ROOT, ModuleRecord(path="example.com/other", version="v1.2.0")])

        assert result.replacements == [Replace("example.com/app", "/home/u/app")]

    def test_versioned_target(self):
        """A target with a version is a module reference."""
        result = reconcile([ROOT, replaced("example.com/dep", "example.com/fork", "v1.1.0")])

        assert result.replacements[1] == Replace("example.com/dep", "example.com/fork@v1.1.0")

    def test_absolute_target_kept(self):
        result = reconcile([replaced("example.com/dep", "/opt/dep"), ROOT])

        assert result.replacements[0] == Replace("example.com/dep", "/opt/dep")

    def test_relative_target_after_root(self, caplog):
        with caplog.at_level(logging.INFO):
            result = reconcile([ROOT, replaced("example.com/dep", "../dep")])

        assert result.replacements[1] == Replace("example.com/dep", os.path.normpath("/home/u/dep"))
        assert "Resolved relative replacement ../dep" in caplog.text

    def test_root_last_backfills_in_place(self, caplog):
        """Relative targets seen before the root are patched without reordering."""
        records = [
            ModuleRecord(path="example.com/app/dep", replace=ModuleRecord(path="./local")),
            ROOT,
        ]

        with caplog.at_level(logging.INFO):
            result = reconcile(records)

        assert result.replacements == [
            Replace("example.com/app/dep", os.path.normpath("/home/u/app/local")),
            Replace("example.com/app", "/home/u/app"),
        ]
        assert "previously-unjoined" in caplog.text

    def test_resolution_independent_of_root_position(self):
        deps = [
            replaced("example.com/a", "./a"),
            replaced("example.com/b", "example.com/b-fork", "v2.0.0"),
            replaced("example.com/c", "../c"),
        ]

        first = reconcile([ROOT, *deps])
        last = reconcile([*deps, ROOT])
        middle = reconcile([deps[0], ROOT, *deps[1:]])

        def targets(result):
            return {r.old: r.new for r in result.replacements}

        assert targets(first) == targets(last) == targets(middle)
        assert targets(last)["example.com/a"] == os.path.normpath("/home/u/app/a")
        assert targets(last)["example.com/c"] == os.path.normpath("/home/u/c")

    def test_missing_root_with_relative_target_fails(self):
        """No root means relative targets cannot be resolved."""
        with pytest.raises(IntrospectionError, match="./local"):
            reconcile([replaced("example.com/dep", "./local")])

    def test_missing_root_with_module_targets_only(self):
        result = reconcile([
            replaced("example.com/dep", "example.com/fork", "v1.0.0"),
            replaced("example.com/abs", "/opt/abs"),
        ])

        assert result.module_path is None
        assert result.replacements == [
            Replace("example.com/dep", "example.com/fork@v1.0.0"),
            Replace("example.com/abs", "/opt/abs"),
        ]

    def test_duplicate_root_rejected(self):
        with pytest.raises(IntrospectionError, match="multiple main modules"):
            reconcile([ROOT, ModuleRecord(path="example.com/other", main=True, dir="/x")])

    def test_duplicates_preserved(self):
        """Repeated replacements for one module are passed through, not merged."""
        result = reconcile([
            ROOT,
            replaced("example.com/dep", "/one"),
            replaced("example.com/dep", "/two"),
        ])

        assert [r.new for r in result.replacements[1:]] == ["/one", "/two"]

    def test_finish_only_once(self):
        reconciler = GraphReconciler()
        reconciler.feed(ROOT)
        reconciler.finish()

        with pytest.raises(RuntimeError):
            reconciler.finish()


class TestNormalizeImportPath:
    """Test import path computation for subdirectories of the module root."""

    def test_module_root(self):
        assert normalize_import_path("foo/a", "/home/foo/a", "/home/foo/a") == "foo/a"

    def test_subdirectory(self):
        assert normalize_import_path("foo/a", "/home/foo/a/b", "/home/foo/a") == "foo/a/b"

    def test_nested_subdirectory(self):
        assert normalize_import_path("foo/a", "/home/foo/a/b/c", "/home/foo/a") == "foo/a/b/c"

    def test_sibling_directory_sharing_prefix(self):
        """A sibling whose name extends the module directory is not a subdirectory."""
        assert normalize_import_path("example.com/app", "/home/u/app2", "/home/u/app") == "example.com/app"

    def test_module_dir_with_trailing_separator(self):
        assert normalize_import_path("foo/a", "/home/foo/a/b", "/home/foo/a/") == "foo/a/b"
