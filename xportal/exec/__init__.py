"""
Execution module for xportal.
Handles cancellation, signal trapping and child-process supervision.
"""

from .cancel import CancelToken, trap_signals
from .process import ProcessResult, run_process, terminate, wait

__all__ = [
    "CancelToken",
    "trap_signals",
    "ProcessResult",
    "run_process",
    "terminate",
    "wait",
]
