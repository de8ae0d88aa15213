"""Cooperative cancellation for plot scans.

A ``CancellationToken`` is a single-shot flag that the walker polls
before each file. Operator interrupts (SIGINT / SIGTERM) are routed into
the token by ``handle_interrupts`` for the duration of a scan, so a
header parse in progress always completes before cancellation is seen.
"""

from __future__ import annotations

import logging
import signal
import threading
from collections.abc import Iterator
from contextlib import contextmanager

logger = logging.getLogger(__name__)

__all__ = [
    "CancellationToken",
    "ScanCancelled",
    "handle_interrupts",
]


class ScanCancelled(Exception):
    """Raised inside a scan when its cancellation token has been tripped.

    Never escapes ``collect_binding_list``: cancellation discards the
    partial result and is reported as "no result", not as an error.
    """


class CancellationToken:
    """Single-shot cancellation flag, safe to trip from a signal handler."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self.reason: str | None = None

    def cancel(self, reason: str = "cancelled") -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    @property
    def cancelled(self) -> bool:
        """Non-blocking poll of the flag."""
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """Raise ``ScanCancelled`` once the token has been tripped."""
        if self._event.is_set():
            raise ScanCancelled(self.reason or "cancelled")

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.cancelled})"


_INTERRUPT_SIGNALS = (signal.SIGINT, signal.SIGTERM)


@contextmanager
def handle_interrupts(token: CancellationToken) -> Iterator[CancellationToken]:
    """Route SIGINT/SIGTERM into ``token`` while the block runs.

    Previous handlers are restored on exit. Signal handlers can only be
    installed from the main thread; elsewhere the token is yielded
    unchanged and only explicit ``cancel()`` calls trip it.
    """
    if threading.current_thread() is not threading.main_thread():
        logger.debug("Not on main thread, interrupt handlers not installed")
        yield token
        return

    def _on_signal(signum: int, _frame: object) -> None:
        token.cancel(f"received {signal.Signals(signum).name}")

    previous = {sig: signal.signal(sig, _on_signal) for sig in _INTERRUPT_SIGNALS}
    try:
        yield token
    finally:
        for sig, handler in previous.items():
            # None means the handler was installed outside Python
            signal.signal(sig, signal.SIG_DFL if handler is None else handler)
