"""Module graph introspection and reconciliation."""

from .introspect import list_modules
from .reconciler import GraphReconciler, ReconcileResult, normalize_import_path, reconcile
from .stream import iter_module_records

__all__ = [
    "GraphReconciler",
    "ReconcileResult",
    "iter_module_records",
    "list_modules",
    "normalize_import_path",
    "reconcile",
]
