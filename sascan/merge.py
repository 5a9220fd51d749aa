"""Merging partial suffix arrays of half-blocks into the full suffix array."""

from __future__ import annotations

from dataclasses import dataclass, field
from math import isqrt
from typing import Iterable, Iterator

__all__ = ["HalfBlockInfo", "merge"]


@dataclass(order=True)
class HalfBlockInfo:
    """A half-block ``[beg, end)`` with its partial suffix array and gaps.

    ``psa`` lists the block's suffixes (relative to ``beg``) in the order of
    the whole text. ``gap`` holds, for every position between those suffixes,
    how many suffixes of later half-blocks fall there; it is not used for
    the last half-block. Instances order by ``beg``.
    """

    beg: int
    end: int
    psa: Iterable[int] = field(compare=False, default=())
    gap: Iterable[int] | None = field(compare=False, default=None)


def _next(it: Iterator[int], what: str) -> int:
    try:
        return next(it)
    except StopIteration:
        raise ValueError(f"{what} ended too early") from None


def merge(hblock_info: list[HalfBlockInfo]) -> list[int]:
    """Return the suffix array of the text covered by the half-blocks.

    The list is sorted by ``beg`` in place.
    """
    if not hblock_info:
        raise ValueError("no half-blocks to merge")
    hblock_info.sort()
    n_block = len(hblock_info)
    text_length = sum(h.end - h.beg for h in hblock_info)

    psa = [iter(h.psa) for h in hblock_info]
    gaps: list[Iterator[int]] = []
    for idx, h in enumerate(hblock_info[:-1]):
        if h.gap is None:
            raise ValueError(f"half-block {idx} has no gap values")
        gaps.append(iter(h.gap))

    gap_head = [_next(g, f"gap of half-block {idx}") for idx, g in enumerate(gaps)]
    gap_head.append(0)

    # Group blocks into superblocks of about sqrt(n_block) blocks that keep
    # their minimum gap head and a pending decrement.
    tmp = isqrt(n_block)
    sblock_size, sblock_size_log = 1, 0
    while sblock_size * 2 <= tmp:
        sblock_size *= 2
        sblock_size_log += 1
    n_sblocks = (n_block + sblock_size - 1) // sblock_size
    sb_min = [
        min(gap_head[k * sblock_size:min(n_block, (k + 1) * sblock_size)])
        for k in range(n_sblocks)
    ]
    sb_dec = [0] * n_sblocks

    result = []
    try:
        for _ in range(text_length):
            k = 0
            while sb_min[k] != 0:
                sb_min[k] -= 1
                sb_dec[k] += 1
                k += 1

            sblock_beg = k << sblock_size_log
            sblock_end = min(n_block, sblock_beg + sblock_size)
            dec = sb_dec[k]
            new_min = text_length
            j = sblock_beg
            while gap_head[j] != dec:
                gap_head[j] -= dec + 1
                new_min = min(new_min, gap_head[j])
                j += 1

            result.append(_next(psa[j], f"suffix array of half-block {j}") + hblock_info[j].beg)
            if j != n_block - 1:
                gap_head[j] = _next(gaps[j], f"gap of half-block {j}")
            new_min = min(new_min, gap_head[j])
            j += 1

            while j < sblock_end:
                gap_head[j] -= dec
                new_min = min(new_min, gap_head[j])
                j += 1

            sb_min[k] = new_min
            sb_dec[k] = 0
    except IndexError:
        raise ValueError("gap values are inconsistent with the half-blocks") from None
    return result