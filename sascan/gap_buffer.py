"""Gap buffers and the pools that pass them between worker threads."""

from __future__ import annotations

import threading
from collections import deque

__all__ = ["GapBuffer", "GapBufferPool", "EmptyPoolError"]


class EmptyPoolError(LookupError):
    """A buffer was requested from an empty pool."""


class GapBuffer:
    """A fixed-capacity buffer of gap indices split into super-blocks.

    ``size`` is the capacity in items (``size_bytes // item_size``);
    ``filled`` is how many items are in use; ``sblock_beg`` and
    ``sblock_size`` describe one section of ``content`` per increaser.
    """

    __slots__ = ("filled", "size", "content", "sblock_size", "sblock_beg")

    def __init__(self, size_bytes: int, n_increasers: int, item_size: int = 4) -> None:
        if item_size <= 0:
            raise ValueError("item_size must be positive")
        if n_increasers < 0:
            raise ValueError("n_increasers must be non-negative")
        self.filled = 0
        self.size = size_bytes // item_size
        self.content = [0] * self.size
        self.sblock_size = [0] * n_increasers
        self.sblock_beg = [0] * n_increasers


class GapBufferPool:
    """FIFO pool of gap buffers, used for both empty and full buffers.

    ``lock`` guards the pool and ``cv`` is a condition on it; callers
    hold ``lock`` around ``add``, ``get`` and the state queries.
    """

    def __init__(self, worker_threads: int = 0) -> None:
        self._worker_threads = worker_threads
        self._worker_threads_finished = 0
        self._queue: deque[GapBuffer] = deque()
        self.lock = threading.Lock()
        self.cv = threading.Condition(self.lock)

    def add(self, buffer: GapBuffer) -> None:
        """Put a buffer at the back of the pool."""
        self._queue.append(buffer)

    def available(self) -> bool:
        """Return True if the pool holds at least one buffer."""
        return bool(self._queue)

    def get(self) -> GapBuffer:
        """Remove and return the oldest buffer."""
        if not self._queue:
            raise EmptyPoolError("requesting a gap buffer from empty pool")
        return self._queue.popleft()

    def finished(self) -> bool:
        """Return True once every worker has reported completion."""
        return self._worker_threads_finished == self._worker_threads

    def increment_finished_workers(self) -> None:
        """Record that one more worker has finished."""
        self._worker_threads_finished += 1