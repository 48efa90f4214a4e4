"""Cooperative cancellation shared by the scanner and the rule engine."""

from __future__ import annotations

import threading


class CancelToken:
    """A one-way flag. Long-running loops poll ``cancelled`` at safe points."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def __repr__(self) -> str:
        return f"CancelToken(cancelled={self.cancelled})"
