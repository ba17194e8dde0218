"""
Process-wide cancellation.

A CancelToken is created once at startup, wired to SIGINT/SIGTERM and
handed to every blocking call. Nothing reads it from global state.
"""

from __future__ import annotations

import signal
import sys
import threading

from .errors import CancelledError


class CancelToken:
    """Cooperative cancellation flag shared by all calls of one run."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self.reason = ""

    def cancel(self, reason: str = "cancelled") -> None:
        if not self._event.is_set():
            self.reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise CancelledError(self.reason)

    def sleep(self, seconds: float) -> None:
        """Sleep for up to `seconds`, waking early (and raising) on cancellation."""
        if self._event.wait(max(seconds, 0)):
            raise CancelledError(self.reason)


def setup_signal_handler() -> CancelToken:
    """
    Return a token that is cancelled on the first SIGINT/SIGTERM.

    A second signal terminates the process immediately with status 1.
    """
    token = CancelToken()

    def _handler(signum, frame):
        if token.cancelled:
            sys.exit(1)
        token.cancel(f"received {signal.Signals(signum).name}")

    signal.signal(signal.SIGINT, _handler)
    signal.signal(signal.SIGTERM, _handler)
    return token
