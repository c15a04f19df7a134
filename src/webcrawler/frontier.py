"""
Thread-safe, deduplicating URL frontier shared by the crawl workers.
"""
from __future__ import annotations

import threading
import time
from collections import deque
from typing import Deque, Optional, Set, Tuple


class Frontier:
    """
    FIFO work queue of URLs with blocking pop and explicit shutdown.

    A URL is admitted at most once for the lifetime of the frontier (until
    ``reset()``): the membership test and the insert into ``discovered``
    happen under the same lock. After ``finish()`` pushes are discarded,
    but URLs already pending can still be popped.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._pending: Deque[str] = deque()
        self._discovered: Set[str] = set()
        self._closed = False
        self._in_flight = 0

    def push(self, url: str) -> bool:
        """Queue url unless it was seen before. Returns True if newly admitted."""
        with self._cond:
            if self._closed or url in self._discovered:
                return False
            self._discovered.add(url)
            self._pending.append(url)
            self._cond.notify()
            return True

    def pop(self, timeout: Optional[float] = None) -> Tuple[Optional[str], bool]:
        """
        Block until a URL is available or the frontier is closed.

        Returns ``(url, True)`` for the next pending URL. Returns
        ``(None, False)`` once the frontier is closed and drained, or when
        ``timeout`` seconds pass without either happening.

        Every successful pop must be matched by a ``task_done()`` call.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._cond:
            while not self._pending and not self._closed:
                if deadline is None:
                    self._cond.wait()
                    continue
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return None, False
                self._cond.wait(remaining)
            if not self._pending:
                return None, False
            self._in_flight += 1
            return self._pending.popleft(), True

    def task_done(self) -> None:
        """Mark a popped URL as fully processed."""
        with self._cond:
            if self._in_flight <= 0:
                raise ValueError("task_done() called more times than pop()")
            self._in_flight -= 1
            if self._is_idle():
                self._cond.notify_all()

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Wait until nothing is pending or in flight. Returns False on timeout."""
        with self._cond:
            return self._cond.wait_for(self._is_idle, timeout)

    def finish(self) -> None:
        """Close the frontier and wake every blocked consumer. Idempotent."""
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def reset(self) -> None:
        """Return to a fresh, open, empty state."""
        with self._cond:
            self._pending.clear()
            self._discovered.clear()
            self._closed = False
            self._in_flight = 0
            self._cond.notify_all()

    def size(self) -> int:
        with self._cond:
            return len(self._pending)

    def discovered_count(self) -> int:
        with self._cond:
            return len(self._discovered)

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def _is_idle(self) -> bool:
        return not self._pending and self._in_flight == 0
