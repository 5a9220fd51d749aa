"""Block-parallel copying of suffix-array values and BWT symbols."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Sequence, TypeVar

from .bwtsa import BwtSa

__all__ = ["copy_values", "copy_bwt"]

T = TypeVar("T")
R = TypeVar("R")


def _blockwise(src: Sequence[T], max_threads: int, convert: Callable[[Sequence[T]], list[R]]) -> list[R]:
    if max_threads < 1:
        raise ValueError("max_threads must be at least 1")
    length = len(src)
    if length == 0:
        return []
    block = (length + max_threads - 1) // max_threads
    slices = [src[beg:beg + block] for beg in range(0, length, block)]
    with ThreadPoolExecutor(max_workers=len(slices)) as pool:
        parts = list(pool.map(convert, slices))
    return [x for part in parts for x in part]


def copy_values(src: Sequence, max_threads: int) -> list[int]:
    """Return the integer value of every element of ``src``."""
    return _blockwise(src, max_threads, lambda part: [int(x) for x in part])


def copy_bwt(items: Sequence[BwtSa], max_threads: int) -> bytes:
    """Return the BWT symbols of ``items`` as bytes."""
    return bytes(_blockwise(items, max_threads, lambda part: [x.bwt for x in part]))