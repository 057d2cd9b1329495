"""
Debounced recompute scheduler for interactive front ends.

Every settings change calls `submit(params)`. The computation only runs once the
settings have been quiet for `delay` seconds, and a result is delivered only if no
newer submission arrived while it was computing.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

P = TypeVar("P")
R = TypeVar("R")


class DebouncedRecompute(Generic[P, R]):
    """
    Parameters
    ----------
    compute : callable
        params -> result. Runs on a timer thread (or the caller's thread for
        immediate submissions and flush()).
    on_result : callable
        result -> None. Called only for the latest submission.
    delay : float
        Quiet period in seconds before a pending submission runs.
    """

    def __init__(
        self,
        compute: Callable[[P], R],
        on_result: Callable[[R], Any],
        delay: float = 0.3,
    ):
        if delay < 0:
            raise ValueError(f"delay must be >= 0, got {delay}")
        self.compute = compute
        self.on_result = on_result
        self.delay = delay

        self._lock = threading.Lock()
        # serialises delivery so an older result can never land after a newer one
        self._deliver_lock = threading.RLock()
        self._timer: Optional[threading.Timer] = None
        self._pending: Optional[P] = None
        self._has_pending = False
        self._generation = 0
        self._closed = False

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._has_pending

    def submit(self, params: P, immediate: bool = False) -> int:
        """
        Schedule a recompute for `params`, superseding anything pending or in flight.
        Returns the generation number of this submission.
        """
        with self._lock:
            if self._closed:
                raise RuntimeError("DebouncedRecompute is closed")
            self._cancel_timer()
            self._generation += 1
            gen = self._generation
            if immediate:
                self._pending, self._has_pending = None, False
            else:
                self._pending, self._has_pending = params, True
                self._timer = threading.Timer(self.delay, self._fire, args=(gen,))
                self._timer.daemon = True
                self._timer.start()

        if immediate:
            self._run(gen, params)
        return gen

    def flush(self) -> bool:
        """Run the pending submission now on the caller's thread. False if nothing was pending."""
        with self._lock:
            if not self._has_pending:
                return False
            self._cancel_timer()
            params, gen = self._pending, self._generation
            self._pending, self._has_pending = None, False
        self._run(gen, params)
        return True

    def close(self) -> None:
        """Cancel anything pending; results still in flight are discarded."""
        with self._lock:
            self._closed = True
            self._cancel_timer()
            self._pending, self._has_pending = None, False
            self._generation += 1

    def __enter__(self) -> "DebouncedRecompute[P, R]":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ------------------------------------------------------------------

    def _cancel_timer(self) -> None:
        # caller holds the lock
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self, gen: int) -> None:
        with self._lock:
            if gen != self._generation or not self._has_pending:
                return
            params = self._pending
            self._pending, self._has_pending = None, False
            self._timer = None
        self._run(gen, params)

    def _run(self, gen: int, params: P) -> None:
        result = self.compute(params)
        with self._deliver_lock:
            with self._lock:
                stale = gen != self._generation
            if stale:
                logger.debug("Discarding stale result for generation %d", gen)
                return
            self.on_result(result)
