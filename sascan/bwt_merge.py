"""Merging the partial BWTs of two half-blocks into the BWT of the block."""

from __future__ import annotations

from bisect import bisect_left
from concurrent.futures import ThreadPoolExecutor
from itertools import islice
from typing import Iterable

__all__ = ["merge_bwt"]


def merge_bwt(
    left_bwt: bytes | bytearray | memoryview,
    right_bwt: bytes | bytearray | memoryview,
    left_block_i0: int,
    right_block_i0: int,
    left_block_last: int,
    bv: Iterable,
    max_threads: int = 1,
) -> tuple[bytes, int]:
    """Interleave two partial BWTs as directed by the bit vector ``bv``.

    Position ``j`` of the result takes the next symbol of ``right_bwt`` when
    bit ``j`` is set and of ``left_bwt`` otherwise. The symbol at the
    ``right_block_i0``-th set bit is then replaced by ``left_block_last``.
    Returns the merged BWT and the position of the ``left_block_i0``-th
    clear bit.
    """
    if max_threads < 1:
        raise ValueError("max_threads must be at least 1")
    if not 0 <= left_block_last <= 255:
        raise ValueError(f"symbol out of byte range: {left_block_last}")

    left = bytes(left_bwt)
    right = bytes(right_bwt)
    block_size = len(left) + len(right)
    if block_size == 0:
        raise ValueError("cannot merge two empty blocks")

    bits = [bool(b) for b in islice(bv, block_size)]
    if len(bits) < block_size:
        raise ValueError(f"bit vector holds {len(bits)} bits, need {block_size}")
    ones = [j for j, bit in enumerate(bits) if bit]
    zeros = [j for j, bit in enumerate(bits) if not bit]
    if len(ones) != len(right):
        raise ValueError(
            f"bit vector has {len(ones)} set bits, right block has {len(right)} symbols"
        )

    max_range_size = (block_size + max_threads - 1) // max_threads
    starts = range(0, block_size, max_range_size)

    def merge_range(beg: int) -> bytes:
        end = min(beg + max_range_size, block_size)
        right_ptr = bisect_left(ones, beg)
        left_ptr = beg - right_ptr
        out = bytearray()
        for bit in bits[beg:end]:
            if bit:
                out.append(right[right_ptr])
                right_ptr += 1
            else:
                out.append(left[left_ptr])
                left_ptr += 1
        return bytes(out)

    with ThreadPoolExecutor(max_workers=len(starts)) as pool:
        merged = bytearray(b"".join(pool.map(merge_range, starts)))

    if not 0 <= right_block_i0 < len(ones):
        raise ValueError(f"no set bit with index {right_block_i0}")
    if not 0 <= left_block_i0 < len(zeros):
        raise ValueError(f"no clear bit with index {left_block_i0}")

    merged[ones[right_block_i0]] = left_block_last
    return bytes(merged), zeros[left_block_i0]