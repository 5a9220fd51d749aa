"""Parallel application of gap buffers to an in-memory gap array."""

from __future__ import annotations

import threading

from .gap_buffer import GapBuffer, GapBufferPool
from .inmem_gap_array import InmemGapArray

__all__ = ["GapParallelUpdater", "inmem_gap_updater"]


class GapParallelUpdater:
    """A fixed team of threads that apply gap buffers to a gap array.

    Thread ``i`` handles super-block ``i`` of every buffer passed to
    :meth:`update`; the call returns once all threads are done. Use as a
    context manager or call :meth:`close` to stop the threads.
    """

    def __init__(self, gap_array: InmemGapArray, threads_cnt: int) -> None:
        if threads_cnt < 1:
            raise ValueError("threads_cnt must be at least 1")
        self._gap = gap_array
        self._threads_cnt = threads_cnt
        self._buffer: GapBuffer | None = None
        self._avail = [False] * threads_cnt
        self._no_more = False
        self._avail_cv = threading.Condition()
        self._finished = 0
        self._finished_cv = threading.Condition()
        self._errors: list[BaseException] = []
        self._closed = False
        self._threads = [
            threading.Thread(target=self._worker, args=(i,), daemon=True)
            for i in range(threads_cnt)
        ]
        for t in self._threads:
            t.start()

    def _worker(self, worker_id: int) -> None:
        while True:
            with self._avail_cv:
                while not self._avail[worker_id] and not self._no_more:
                    self._avail_cv.wait()
                if not self._avail[worker_id]:
                    return
                self._avail[worker_id] = False
                buf = self._buffer

            try:
                beg = buf.sblock_beg[worker_id]
                end = beg + buf.sblock_size[worker_id]
                for x in buf.content[beg:end]:
                    self._gap.add(x)
            except Exception as exc:  # reported to the caller of update()
                with self._finished_cv:
                    self._errors.append(exc)

            with self._finished_cv:
                self._finished += 1
                if self._finished == self._threads_cnt:
                    self._finished_cv.notify()

    def update(self, buffer: GapBuffer) -> None:
        """Apply every value in the buffer's super-blocks to the gap array."""
        if self._closed:
            raise RuntimeError("updater is closed")
        if len(buffer.sblock_beg) != self._threads_cnt or len(buffer.sblock_size) != self._threads_cnt:
            raise ValueError(
                f"buffer has {len(buffer.sblock_beg)} super-blocks, "
                f"updater has {self._threads_cnt} threads"
            )

        with self._finished_cv:
            self._finished = 0
            self._errors.clear()
        with self._avail_cv:
            self._buffer = buffer
            self._avail = [True] * self._threads_cnt
            self._avail_cv.notify_all()

        with self._finished_cv:
            while self._finished != self._threads_cnt:
                self._finished_cv.wait()
            errors = list(self._errors)
        if errors:
            raise errors[0]

    def close(self) -> None:
        """Stop and join all worker threads."""
        if self._closed:
            return
        self._closed = True
        with self._avail_cv:
            self._no_more = True
            self._avail_cv.notify_all()
        for t in self._threads:
            t.join()

    def __enter__(self) -> GapParallelUpdater:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def inmem_gap_updater(
    full_gap_buffers: GapBufferPool,
    empty_gap_buffers: GapBufferPool,
    gap: InmemGapArray,
    n_increasers: int,
) -> None:
    """Apply full buffers to ``gap`` until all producers have finished.

    Each processed buffer is returned to ``empty_gap_buffers``.
    """
    with GapParallelUpdater(gap, n_increasers) as updater:
        while True:
            with full_gap_buffers.cv:
                while not full_gap_buffers.available() and not full_gap_buffers.finished():
                    full_gap_buffers.cv.wait()
                if not full_gap_buffers.available():
                    break
                buffer = full_gap_buffers.get()

            updater.update(buffer)

            with empty_gap_buffers.cv:
                empty_gap_buffers.add(buffer)
                empty_gap_buffers.cv.notify()