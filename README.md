# sascan

`sascan` is a pure-Python library of the pieces used to build a suffix array
one block at a time. The suffixes of each block are ordered separately, gap
arrays record how suffixes of later blocks fall between them, and the partial
results are merged into the suffix array of the whole text.

## What is inside

- `sascan.rank` and `sascan.rank_encode`: `Rank4n` answers `rank(i, c)`, the
  number of occurrences of byte `c` in `text[:i]`. It is built on the
  context-block encoding (`RankEncoding`) made by `encode`.
- `sascan.inmem_gap_array`: `InmemGapArray` stores gap values modulo 256 with
  a list of overflows (`excess`). `add` increments an entry, `value` reads it,
  and `answer_queries` finds, in parallel, the smallest `j` with
  `j + gap[0] + .. + gap[j] >= a` for each query `a`.
- `sascan.gap_buffer`: `GapBuffer` and the thread-safe FIFO `GapBufferPool`
  (with `lock` and `cv`) that pass buffers between producers and consumers.
  `get` on an empty pool raises `EmptyPoolError`.
- `sascan.inmem_stream`: `inmem_parallel_stream` walks a text range right to
  left, computes the gap index of every suffix through a rank structure and
  fills partitioned gap buffers.
- `sascan.inmem_update`: `GapParallelUpdater` (a context manager) applies one
  buffer at a time to an `InmemGapArray` with a team of threads;
  `inmem_gap_updater` drains a pool of full buffers until all producers are
  finished.
- `sascan.bwt_merge`: `merge_bwt` interleaves the BWTs of two neighbouring
  half-blocks by following a bit vector.
- `sascan.merge`: `merge` joins the partial suffix arrays described by a list
  of `HalfBlockInfo` records.
- `sascan.bwtsa` and `sascan.parallel_copy`: `BwtSa` pairs a suffix-array
  value with its BWT byte; `expand`, `copy_values` and `copy_bwt` convert
  between plain and paired arrays.
- `sascan.sizes`: `parse_number` reads memory sizes with metric or IEC
  suffixes.
- `sascan.utils`: helpers for files, randomness and integer logarithms.

## Examples

Rank queries (small block sizes keep the tables small for short texts):

```python
from sascan.rank import Rank4n

r = Rank4n(b"abracadabra", sblock_size_log=8, cblock_size_log=4)
r.rank(5, ord("a"))   # 2: "a" occurs twice in "abrac"
```

Merge the partial suffix arrays of the half-blocks `"a"` and `"b"` of the
text `"ab"`:

```python
from sascan.merge import HalfBlockInfo, merge

blocks = [
    HalfBlockInfo(beg=1, end=2, psa=[0]),
    HalfBlockInfo(beg=0, end=1, psa=[0], gap=[0, 1]),
]
merge(blocks)   # [0, 1]; the list is also sorted by beg
```

Merge two partial BWTs:

```python
from sascan.bwt_merge import merge_bwt

merge_bwt(b"ab", b"c", 0, 0, ord("x"), [0, 1, 0])   # (b"axb", 0)
```

Read a memory budget:

```python
from sascan.sizes import parse_number

parse_number("10k")    # 10000
parse_number("1Mi")    # 1048576
parse_number("3G")     # 3000000000
```

The suffixes `k`, `m`, `g` and `t` are powers of 1000; `ki`, `mi`, `gi` and
`ti` are powers of 1024. Letter case does not matter. Anything else after the
digits raises `ValueError`.

Integer logarithms:

```python
from sascan.utils import log2ceil, log2floor

log2ceil(5)    # 3
log2floor(5)   # 2
```

## What it does not do

`sascan` provides the parts, not a finished suffix-array builder. It does not
compute the suffix array of a block itself: the partial suffix arrays and gap
values given to `merge`, and the bit vectors given to `merge_bwt`, must come
from elsewhere. There is no command-line program, and nothing reads an input
text file or writes a suffix array file on its own.

## Requirements

Python 3.10 or later. The library uses only the standard library.