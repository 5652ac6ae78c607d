"""Cooperative cancellation for long-running repository operations."""

from __future__ import annotations

import threading


class OperationCancelled(Exception):
    """Raised when an operation notices its cancellation token was set."""


class CancellationToken:
    """Thread-safe flag checked before each outgoing request."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelled("Operation was cancelled.")
