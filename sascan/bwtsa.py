"""Suffix-array entries paired with their BWT symbol."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

__all__ = ["BwtSa", "expand"]


@dataclass(slots=True)
class BwtSa:
    """A suffix-array value ``sa`` together with the BWT byte ``bwt``."""

    sa: int
    bwt: int = 0

    def __post_init__(self) -> None:
        self.sa = int(self.sa)
        if not 0 <= self.bwt <= 255:
            raise ValueError(f"bwt symbol out of byte range: {self.bwt}")

    def __int__(self) -> int:
        return self.sa

    def __index__(self) -> int:
        return self.sa


def expand(values: Iterable[int], max_threads: int) -> list[BwtSa]:
    """Turn plain suffix-array values into BwtSa entries, keeping order."""
    if max_threads < 1:
        raise ValueError("max_threads must be at least 1")
    return [BwtSa(v) for v in values]