"""
Cancellation token shared by every blocking operation.

A SIGINT handler cancels the token; operations that spawn child processes
register a callback that terminates their child, so waits return promptly
without polling.
"""

import logging
import signal
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, List

from ..exceptions import BuildCancelled


logger = logging.getLogger(__name__)


class CancelToken:
    """Advisory, one-shot cancellation signal."""

    def __init__(self):
        self._event = threading.Event()
        # Reentrant: cancel() may run from a signal handler on a thread already holding it
        self._lock = threading.RLock()
        self._callbacks: List[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Cancel the token and run registered callbacks once."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks = list(self._callbacks)

        for callback in callbacks:
            callback()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise BuildCancelled("operation cancelled")

    @contextmanager
    def on_cancel(self, callback: Callable[[], None]) -> Iterator[None]:
        """
        Register ``callback`` for the duration of the block.

        If the token is already cancelled the callback runs immediately.
        """
        with self._lock:
            already_cancelled = self._event.is_set()
            if not already_cancelled:
                self._callbacks.append(callback)

        if already_cancelled:
            callback()

        try:
            yield
        finally:
            with self._lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)


def trap_signals(token: CancelToken) -> Callable[[], None]:
    """
    Cancel ``token`` on SIGINT.

    Returns:
        Function restoring the previous SIGINT handler
    """
    def handle(signum, frame):
        logger.info("SIGINT: Shutting down")
        token.cancel()

    previous = signal.signal(signal.SIGINT, handle)

    def restore() -> None:
        signal.signal(signal.SIGINT, previous)

    return restore
