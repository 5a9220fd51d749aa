"""An in-memory gap array with one byte per entry plus a list of overflows."""

from __future__ import annotations

import threading
from bisect import bisect_left, bisect_right
from concurrent.futures import ThreadPoolExecutor
from itertools import accumulate
from typing import Sequence

__all__ = ["InmemGapArray"]

_MAX_BLOCK_SIZE = 4 << 20


class InmemGapArray:
    """Gap values stored modulo 256 in ``count``.

    Every time an entry wraps around to zero, its index is appended to
    ``excess``; the true value at ``j`` is ``count[j]`` plus 256 times the
    number of occurrences of ``j`` in ``excess``.
    """

    def __init__(self, length: int) -> None:
        if length < 0:
            raise ValueError("length must be non-negative")
        self.length = length
        self.count = bytearray(length)
        self.excess: list[int] = []
        self._excess_lock = threading.Lock()

    def __len__(self) -> int:
        return self.length

    def add(self, x: int) -> None:
        """Increase the gap value at index ``x`` by one."""
        if not 0 <= x < self.length:
            raise IndexError(f"gap index out of range: {x}")
        v = (self.count[x] + 1) & 255
        self.count[x] = v
        if v == 0:
            with self._excess_lock:
                self.excess.append(x)

    def _sorted_excess(self) -> list[int]:
        with self._excess_lock:
            self.excess.sort()
            return list(self.excess)

    def value(self, j: int) -> int:
        """Return the full gap value at index ``j``."""
        if not 0 <= j < self.length:
            raise IndexError(f"gap index out of range: {j}")
        excess = self._sorted_excess()
        return self.count[j] + 256 * (bisect_right(excess, j) - bisect_left(excess, j))

    def _check_block_size(self, block_size: int) -> None:
        if block_size < 1:
            raise ValueError("block size must be positive")

    def _single_query(
        self, excess: list[int], block_size: int, gapsum: Sequence[int], a: int
    ) -> tuple[int, int]:
        n_blocks = (self.length + block_size - 1) // block_size
        j = 0
        while j + 1 < n_blocks and gapsum[j + 1] + block_size * (j + 1) - 1 < a:
            j += 1

        total = gapsum[j]
        j *= block_size
        ptr = bisect_left(excess, j)
        count = self.count
        while j < self.length:
            gap_j = count[j]
            while ptr < len(excess) and excess[ptr] == j:
                gap_j += 256
                ptr += 1
            if j + total + gap_j >= a:
                return j, total + gap_j
            total += gap_j
            j += 1
        raise ValueError(f"query {a} exceeds the range of the gap array")

    def answer_single_gap_query(
        self, block_size: int, gapsum: Sequence[int], a: int
    ) -> tuple[int, int]:
        """Find the smallest ``j`` with ``j + gap[0] + .. + gap[j] >= a``.

        ``gapsum[i]`` must hold ``gap[0] + .. + gap[i * block_size - 1]``.
        Returns ``(j, gap[0] + .. + gap[j])``.
        """
        self._check_block_size(block_size)
        if self.length == 0:
            raise ValueError("empty gap array")
        return self._single_query(self._sorted_excess(), block_size, gapsum, a)

    def _block_sums(
        self, excess: list[int], range_beg: int, range_end: int, max_block_size: int
    ) -> list[int]:
        sums = []
        for block_id in range(range_beg, range_end):
            block_beg = block_id * max_block_size
            block_end = min(block_beg + max_block_size, self.length)
            occ = bisect_right(excess, block_end - 1) - bisect_left(excess, block_beg)
            sums.append(256 * max(0, occ) + sum(self.count[block_beg:block_end]))
        return sums

    def compute_sum2(self, range_beg: int, range_end: int, max_block_size: int) -> list[int]:
        """Return the sum of gap values of each block in ``[range_beg, range_end)``."""
        self._check_block_size(max_block_size)
        return self._block_sums(self._sorted_excess(), range_beg, range_end, max_block_size)

    def _prefix_sum(
        self, excess: list[int], j: int, max_block_size: int, gapsum: Sequence[int]
    ) -> int:
        block_id = min(j // max_block_size, len(gapsum) - 1)
        scan_beg = block_id * max_block_size
        occ = bisect_right(excess, j - 1) - bisect_left(excess, scan_beg)
        return gapsum[block_id] + 256 * max(0, occ) + sum(self.count[scan_beg:j])

    def compute_sum3(self, j: int, max_block_size: int, gapsum: Sequence[int]) -> int:
        """Return ``gap[0] + .. + gap[j - 1]`` using block prefix sums ``gapsum``."""
        self._check_block_size(max_block_size)
        if not 0 <= j <= self.length:
            raise IndexError(f"prefix end out of range: {j}")
        if not gapsum:
            raise ValueError("gapsum must not be empty")
        return self._prefix_sum(self._sorted_excess(), j, max_block_size, gapsum)

    def answer_queries(
        self, queries: Sequence[int], max_threads: int = 1, i0: int | None = None
    ) -> tuple[list[tuple[int, int]], int | None]:
        """Answer many gap queries in parallel.

        Each answer is the pair returned by :meth:`answer_single_gap_query`.
        When ``i0`` is given, the second result is ``gap[0] + .. + gap[i0]``;
        otherwise it is None.
        """
        if max_threads < 1:
            raise ValueError("max_threads must be at least 1")
        if self.length == 0:
            raise ValueError("empty gap array")

        excess = self._sorted_excess()
        max_block_size = min(_MAX_BLOCK_SIZE, (self.length + max_threads - 1) // max_threads)
        n_blocks = (self.length + max_block_size - 1) // max_block_size
        range_size = (n_blocks + max_threads - 1) // max_threads
        starts = range(0, n_blocks, range_size)

        with ThreadPoolExecutor(max_workers=max_threads) as pool:
            parts = pool.map(
                lambda beg: self._block_sums(
                    excess, beg, min(beg + range_size, n_blocks), max_block_size
                ),
                starts,
            )
            block_sums = [s for part in parts for s in part]
            gapsum = list(accumulate(block_sums, initial=0))[:-1]
            answers = list(
                pool.map(
                    lambda a: self._single_query(excess, max_block_size, gapsum, a),
                    queries,
                )
            )

        result = None
        if i0 is not None:
            result = self._prefix_sum(excess, i0 + 1, max_block_size, gapsum)
        return answers, result