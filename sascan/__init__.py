"""Building blocks for block-wise suffix array construction: rank, gap arrays, streaming and merging."""

__version__ = "0.1.1"

__all__ = [
    "bwt_merge",
    "bwtsa",
    "gap_buffer",
    "inmem_gap_array",
    "inmem_stream",
    "inmem_update",
    "merge",
    "parallel_copy",
    "rank",
    "rank_encode",
    "sizes",
    "utils",
]