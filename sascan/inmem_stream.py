"""Streaming the suffixes of a text range through a block's rank structure.

Each streamed suffix is mapped to its gap index (the number of the block's
suffixes smaller than it). Indices are collected in gap buffers, split into
one value-range section per increaser thread and handed on through pools.
"""

from __future__ import annotations

from itertools import accumulate
from typing import MutableSequence, Protocol, Sequence

from .gap_buffer import GapBuffer, GapBufferPool
from .utils import random_long

__all__ = ["inmem_parallel_stream"]

_MAX_BUCKETS = 4096
_BUFFER_SAMPLE_SIZE = 512


class _RankQuery(Protocol):
    def rank(self, i: int, c: int) -> int: ...


def _sample_partition(
    temp: list[int], n_increasers: int, gap_range_size: int
) -> tuple[list[int], list[int]]:
    """Split values by boundaries taken from a random sample of them."""
    filled = len(temp)
    samples = sorted(
        {temp[random_long(0, filled - 1)] for _ in range(_BUFFER_SAMPLE_SIZE)}
    )
    lbound = [gap_range_size] * (n_increasers + 1)
    step = (len(samples) + n_increasers - 1) // n_increasers
    t, p = 1, step
    while p < len(samples):
        lbound[t] = (samples[p - 1] + samples[p] + 1) // 2
        t += 1
        p += step
    lbound[0] = 0

    ids = []
    sizes = [0] * n_increasers
    for x in temp:
        sid = n_increasers
        while lbound[sid] > x:
            sid -= 1
        ids.append(sid)
        sizes[sid] += 1
    return ids, sizes


def _partition(
    buf: GapBuffer,
    temp: list[int],
    block_count: list[int],
    bucket_size_bits: int,
    n_increasers: int,
    gap_range_size: int,
) -> None:
    """Store ``temp`` in ``buf`` grouped into ``n_increasers`` value ranges."""
    filled = len(temp)
    n_buckets = len(block_count)
    ideal = (filled + n_increasers - 1) // n_increasers

    bucket_to_sblock = [n_increasers - 1] * n_buckets
    sizes = []
    largest = 0
    beg = 0
    for t in range(n_increasers):
        end, size = beg, 0
        while end < n_buckets and size < ideal:
            size += block_count[end]
            end += 1
        sizes.append(size)
        largest = max(largest, size)
        bucket_to_sblock[beg:end] = [t] * (end - beg)
        beg = end

    if largest < 4 * ideal:
        ids = [bucket_to_sblock[x >> bucket_size_bits] for x in temp]
    else:
        # The quick partition is badly skewed; fall back to sampling.
        ids, sizes = _sample_partition(temp, n_increasers, gap_range_size)

    starts = list(accumulate(sizes, initial=0))[:-1]
    buf.sblock_size[:] = sizes
    buf.sblock_beg[:] = starts
    ptr = list(starts)
    for x, sid in zip(temp, ids):
        buf.content[ptr[sid]] = x
        ptr[sid] += 1


def inmem_parallel_stream(
    text: bytes | bytearray | memoryview,
    stream_block_beg: int,
    stream_block_end: int,
    last: int,
    count: Sequence[int],
    full_gap_buffers: GapBufferPool,
    empty_gap_buffers: GapBufferPool,
    i: int,
    i0: int,
    rank: _RankQuery,
    gap_range_size: int,
    n_increasers: int,
    gt: MutableSequence,
    need_gt: bool = False,
) -> int:
    """Stream suffixes starting in ``[stream_block_beg, stream_block_end)``.

    Suffixes are processed right to left. ``i`` is the gap index of the
    suffix at ``stream_block_end``; each step computes the index of the
    suffix one position to the left from ``count`` (cumulative symbol
    counts), ``rank``, the block's last symbol ``last``, the position ``i0``
    and the bit ``gt[len(text) - j]``. With ``need_gt`` the bits
    ``gt[len(text) - j]`` are overwritten with ``i > i0``.

    Empty buffers are taken from ``empty_gap_buffers`` and, once filled and
    partitioned, put into ``full_gap_buffers``; on return one finished
    worker is recorded there. Returns the last gap index computed.
    """
    if n_increasers < 1:
        raise ValueError("n_increasers must be at least 1")
    if gap_range_size < 1:
        raise ValueError("gap_range_size must be positive")
    text_length = len(text)
    if not 0 <= stream_block_beg <= stream_block_end <= text_length:
        raise ValueError("stream range out of the text")

    bucket_size_bits = 0
    while (gap_range_size + (1 << bucket_size_bits) - 1) >> bucket_size_bits > _MAX_BUCKETS:
        bucket_size_bits += 1
    n_buckets = (gap_range_size + (1 << bucket_size_bits) - 1) >> bucket_size_bits

    try:
        j = stream_block_end
        gt_bit = bool(gt[text_length - j])
        while j > stream_block_beg:
            with empty_gap_buffers.cv:
                while not empty_gap_buffers.available():
                    empty_gap_buffers.cv.wait()
                buf = empty_gap_buffers.get()
                empty_gap_buffers.cv.notify()

            if len(buf.sblock_size) != n_increasers or len(buf.sblock_beg) != n_increasers:
                raise ValueError(
                    f"gap buffer has {len(buf.sblock_size)} super-blocks, "
                    f"expected {n_increasers}"
                )
            filled = min(j - stream_block_beg, buf.size)
            if filled <= 0:
                raise ValueError("gap buffer has no capacity")

            temp: list[int] = []
            block_count = [0] * n_buckets
            for _ in range(filled):
                new_gt_bit = i > i0
                if need_gt:
                    gt[text_length - j] = 1 if new_gt_bit else 0
                c = text[j - 1]
                delta = 1 if new_gt_bit and c == 0 else 0
                i = count[c] + rank.rank(i, c) - delta
                if c == last and gt_bit:
                    i += 1
                if not 0 <= i < gap_range_size:
                    raise ValueError(f"gap index {i} outside [0, {gap_range_size})")
                temp.append(i)
                block_count[i >> bucket_size_bits] += 1
                j -= 1
                gt_bit = bool(gt[text_length - j])

            buf.filled = filled
            _partition(buf, temp, block_count, bucket_size_bits, n_increasers, gap_range_size)

            with full_gap_buffers.cv:
                full_gap_buffers.add(buf)
                full_gap_buffers.cv.notify()
    finally:
        with full_gap_buffers.cv:
            full_gap_buffers.increment_finished_workers()
            full_gap_buffers.cv.notify_all()
    return i