"""
Pathfinder Engine
Copyright (c) 2026 Chris Menendez.
All Rights Reserved.
See LICENSE for permitted use.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, List

from pf_engine.ai.errors import AnalysisCancelled

logger = logging.getLogger(__name__)


class CancelToken:
    """
    Cooperative cancellation flag shared between a caller and one pipeline run.

    Callbacks registered while a request is in flight are invoked on cancel(), which is how
    an abandoned run closes its open HTTP session.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: List[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks = list(self._callbacks)
            self._callbacks.clear()
        for callback in callbacks:
            try:
                callback()
            except Exception as exc:
                logger.warning("[cancel][callback] close callback failed: %s", exc)

    def register(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register a close callback; returns a function that unregisters it."""
        with self._lock:
            run_now = self._event.is_set()
            if not run_now:
                self._callbacks.append(callback)
        if run_now:
            callback()

        def _unregister() -> None:
            with self._lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)

        return _unregister

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise AnalysisCancelled()


__all__ = ["CancelToken"]
