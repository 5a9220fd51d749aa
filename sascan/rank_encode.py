"""Construction of the two-level rank encoding of a byte sequence.

The sequence is cut into context blocks (cblocks) grouped into super
blocks (sblocks). Each cblock is encoded either as type-I (occurrence
lists with a lookup table, used when the block holds many distinct
frequent symbols) or as type-II (frequent symbols in a "freq trunk",
the remaining ones in a "rare trunk"). Queries on the result are
answered by :class:`sascan.rank.Rank4n`.
"""

from __future__ import annotations

import enum
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from itertools import accumulate

from .utils import log2ceil

__all__ = ["CharType", "RankEncoding", "encode", "SIGMA", "SIGMA_LOG"]

SIGMA_LOG = 8
SIGMA = 1 << SIGMA_LOG
_UINT32 = 0xFFFFFFFF


class CharType(enum.IntEnum):
    """How a symbol is represented inside one type-II cblock."""

    FREQ = 1
    RARE = 2
    MISSING = 3


@dataclass
class RankEncoding:
    """All tables of an encoded sequence.

    Per-symbol tables are flat lists: ``sblock_header`` and
    ``cblock_header2`` are indexed ``(block_id << 8) + c``, while
    ``mapping_type`` and ``mapping_index`` are indexed
    ``c * n_cblocks + cblock_id``.
    """

    length: int
    sblock_size_log: int
    cblock_size_log: int
    count: list[int] = field(default_factory=lambda: [0] * SIGMA)
    sblock_header: list[int] = field(default_factory=list)
    cblock_header: list[int] = field(default_factory=list)
    cblock_header2: list[int] = field(default_factory=list)
    cblock_type: list[bool] = field(default_factory=list)
    mapping_type: list[int] = field(default_factory=list)
    mapping_index: list[int] = field(default_factory=list)
    freq_trunk: list[int] = field(default_factory=list)
    rare_trunk: list[int] = field(default_factory=list)

    @property
    def cblock_size(self) -> int:
        return 1 << self.cblock_size_log

    @property
    def sblock_size(self) -> int:
        return 1 << self.sblock_size_log

    @property
    def cblocks_in_sblock_log(self) -> int:
        return self.sblock_size_log - self.cblock_size_log

    @property
    def n_cblocks(self) -> int:
        return (self.length + self.cblock_size - 1) // self.cblock_size

    @property
    def n_sblocks(self) -> int:
        per = 1 << self.cblocks_in_sblock_log
        return (self.n_cblocks + per - 1) // per

    @property
    def list_mask(self) -> int:
        """Mask of the occurrence-list start field in ``cblock_header2``."""
        return (2 << self.cblock_size_log) - 1

    @property
    def count_shift(self) -> int:
        """Shift of the cumulative-count field in ``cblock_header2``."""
        return self.cblock_size_log + 6


def _ranges(n_items: int, max_threads: int) -> list[range]:
    if n_items == 0:
        return []
    size = (n_items + max_threads - 1) // max_threads
    return [range(beg, min(beg + size, n_items)) for beg in range(0, n_items, size)]


def _encode_type_one_range(
    enc: RankEncoding,
    text: bytes,
    cblocks: range,
    rare_trunk_size: list[int],
) -> None:
    """Classify cblocks, store symbol mappings and encode type-I cblocks."""
    log = enc.cblock_size_log
    cs = enc.cblock_size
    n_cblocks = enc.n_cblocks
    header2 = enc.cblock_header2
    trunk = enc.freq_trunk
    occ = [0] * (cs + 1)

    for cblock_id in cblocks:
        cblock_beg = cblock_id << log
        cblock_end = cblock_beg + cs
        maxj = min(cblock_end, enc.length)

        counts = [0] * SIGMA
        for ch in text[cblock_beg:maxj]:
            counts[ch] += 1
        counts[0] += cblock_end - maxj

        list_beg = list(accumulate(counts, initial=0))[:SIGMA]
        hb = cblock_id << SIGMA_LOG
        for c in range(SIGMA):
            header2[hb + c] = list_beg[c] << 5

        sorted_chars = sorted((cnt, c) for c, cnt in enumerate(counts) if cnt)

        # Separate about 3% of the rarest symbols.
        rare_cnt = rare_sum = 0
        while rare_cnt < len(sorted_chars) and 16 * (rare_sum + sorted_chars[rare_cnt][0]) <= cs:
            rare_sum += sorted_chars[rare_cnt][0]
            rare_cnt += 1

        # One extra slot in the frequent set is the rare-symbol marker.
        freq_cnt_log = log2ceil(len(sorted_chars) - rare_cnt + 1)
        freq_cnt = 1 << freq_cnt_log
        rare_cnt = max(0, len(sorted_chars) + 1 - freq_cnt)

        rare_chars = sorted(c for _, c in sorted_chars[:rare_cnt])
        freq_chars = sorted(c for _, c in sorted_chars[rare_cnt:])

        rare_cnt_log = 0
        if rare_cnt:
            rare_cnt_log = log2ceil(rare_cnt)
            rare_cnt = 1 << rare_cnt_log

        enc.cblock_header[cblock_id] = freq_cnt_log | (rare_cnt_log << 8)

        for c in range(SIGMA):
            enc.mapping_type[c * n_cblocks + cblock_id] = CharType.MISSING
        isfreq = [False] * SIGMA
        for idx, c in enumerate(freq_chars):
            isfreq[c] = True
            enc.mapping_index[c * n_cblocks + cblock_id] = idx
            enc.mapping_type[c * n_cblocks + cblock_id] = CharType.FREQ
        for idx, c in enumerate(rare_chars):
            enc.mapping_index[c * n_cblocks + cblock_id] = idx
            enc.mapping_type[c * n_cblocks + cblock_id] = CharType.RARE

        nofreq_cnt = sum(cnt for c, cnt in enumerate(counts) if not isfreq[c])

        if freq_cnt >= 128:
            enc.cblock_type[cblock_id] = True

            # Lists of occurrences, padding counted as symbol 0.
            ptr = list(list_beg)
            for offset, ch in enumerate(text[cblock_beg:maxj]):
                occ[ptr[ch]] = offset
                ptr[ch] += 1
            for offset in range(maxj - cblock_beg, cs):
                occ[ptr[0]] = offset
                ptr[0] += 1

            for c in range(SIGMA):
                freq = counts[c]
                lookup_bits = log2ceil(freq + 2)
                header2[hb + c] |= lookup_bits
                min_block_size = cs // freq if freq else 0
                refpoint_mask_neg = ~((1 << (31 - lookup_bits)) - 1)
                low_mask = (1 << lookup_bits) - 1
                base = cblock_beg + list_beg[c]

                for j in range(freq):
                    trunk[base + j] = freq + 1
                if freq:
                    trunk[base + freq - 1] = freq

                refpoints = []
                block_beg = 0
                for j in range(freq):
                    refpoints.append(block_beg & refpoint_mask_neg)
                    block_beg += min_block_size
                    if (block_beg * freq) >> log == j:
                        block_beg += 1

                for j in reversed(range(freq)):
                    o = occ[list_beg[c] + j]
                    block_id = (o * freq) >> log
                    refpoint = refpoints[block_id]
                    idx = base + block_id
                    trunk[idx] = ((trunk[idx] & ~low_mask) | j) & _UINT32
                    trunk[base + j] = (trunk[base + j] | ((o - refpoint) << lookup_bits)) & _UINT32
        elif rare_cnt:
            rare_blocks = 1 + (nofreq_cnt + rare_cnt - 1) // rare_cnt
            rare_trunk_size[cblock_id] = rare_blocks * rare_cnt


def _accumulate_headers(enc: RankEncoding, rare_trunk_size: list[int]) -> None:
    """Fill cumulative counts, sblock headers and rare-trunk pointers."""
    log = enc.cblock_size_log
    cs = enc.cblock_size
    sblock_mask = enc.sblock_size - 1
    list_mask = enc.list_mask
    shift = enc.count_shift
    header2 = enc.cblock_header2
    count = enc.count

    rare_total = 0
    for cblock_id in range(enc.n_cblocks):
        cblock_beg = cblock_id << log
        enc.cblock_header[cblock_id] |= rare_total << 16
        rare_total += rare_trunk_size[cblock_id]

        hb = cblock_id << SIGMA_LOG
        for c in range(SIGMA):
            header2[hb + c] |= count[c] << shift

        if not cblock_beg & sblock_mask:
            sb = (cblock_beg >> enc.sblock_size_log) << SIGMA_LOG
            enc.sblock_header[sb:sb + SIGMA] = count

        starts = [(header2[hb + c] >> 5) & list_mask for c in range(SIGMA)]
        starts.append(cs)
        for c in range(SIGMA):
            count[c] += starts[c + 1] - starts[c]

    enc.rare_trunk = [0] * rare_total


def _encode_type_two_range(enc: RankEncoding, text: bytes, cblocks: range) -> None:
    """Encode the type-II cblocks in the given range."""
    log = enc.cblock_size_log
    cs = enc.cblock_size
    n_cblocks = enc.n_cblocks
    shift = enc.count_shift
    trunk = enc.freq_trunk
    rare_trunk = enc.rare_trunk
    length = enc.length

    for cblock_id in cblocks:
        if enc.cblock_type[cblock_id]:
            continue
        cblock_beg = cblock_id << log
        cblock_end = cblock_beg + cs
        hb = cblock_id << SIGMA_LOG

        cur_count = [enc.cblock_header2[hb + c] >> shift for c in range(SIGMA)]
        header = enc.cblock_header[cblock_id]
        r_filled = r_ptr = header >> 16
        freq_cnt = 1 << (header & 255)
        rare_cnt = 1 << ((header >> 8) & 255)
        rare_mask = rare_cnt - 1

        freq_chars: list[int] = []
        rare_chars: list[int] = []
        freq_map = [0] * SIGMA
        rare_map = [0] * SIGMA
        israre = [1] * SIGMA
        for c in range(SIGMA):
            kind = enc.mapping_type[c * n_cblocks + cblock_id]
            index = enc.mapping_index[c * n_cblocks + cblock_id]
            if kind == CharType.FREQ:
                israre[c] = 0
                freq_chars.append(c)
                freq_map[c] = index
            elif kind == CharType.RARE:
                rare_chars.append(c)
                rare_map[c] = index
                freq_map[c] = freq_cnt - 1
        if not rare_chars:
            rare_cnt = 0

        sb = (cblock_beg >> enc.sblock_size_log) << SIGMA_LOG
        sblock_h = enc.sblock_header[sb:sb + SIGMA]
        off = [cur_count[c] - sblock_h[c] for c in range(SIGMA)]

        nofreq_cnt = 0
        for i in range(cblock_beg, cblock_end, freq_cnt):
            for j, ch in enumerate(freq_chars):
                trunk[i + j] = off[ch] << 8
            trunk[i + freq_cnt - 1] = nofreq_cnt << 8
            for j in range(i, i + freq_cnt):
                c = text[j] if j < length else 0
                trunk[j] |= freq_map[c]
                if israre[c]:
                    if not nofreq_cnt & rare_mask:
                        for ch in rare_chars:
                            rare_trunk[r_filled] = off[ch] << 8
                            r_filled += 1
                        r_filled += rare_cnt - len(rare_chars)
                    rare_trunk[r_ptr] |= rare_map[c]
                    r_ptr += 1
                off[c] += 1
                nofreq_cnt += israre[c]

        cur_count = [sblock_h[c] + off[c] for c in range(SIGMA)]
        for j in range(rare_cnt):
            ch = rare_chars[j] if j < len(rare_chars) else 0
            local_rank = cur_count[ch] - enc.sblock_header[sb + ch]
            rare_trunk[r_filled] = local_rank << 8
            r_filled += 1


def encode(
    text: bytes | bytearray | memoryview,
    max_threads: int = 1,
    sblock_size_log: int = 24,
    cblock_size_log: int = 20,
) -> RankEncoding:
    """Build the rank encoding of ``text`` using up to ``max_threads`` workers."""
    if max_threads < 1:
        raise ValueError("max_threads must be at least 1")
    if cblock_size_log < 4:
        raise ValueError("cblock_size_log must be at least 4")
    if sblock_size_log < cblock_size_log:
        raise ValueError("sblock_size_log must not be smaller than cblock_size_log")
    if sblock_size_log > 24:
        raise ValueError("sblock_size_log must be at most 24")

    data = bytes(text)
    enc = RankEncoding(len(data), sblock_size_log, cblock_size_log)
    if not data:
        return enc

    n_cblocks = enc.n_cblocks
    enc.sblock_header = [0] * (enc.n_sblocks * SIGMA)
    enc.cblock_header = [0] * n_cblocks
    enc.cblock_header2 = [0] * (n_cblocks * SIGMA)
    enc.cblock_type = [False] * n_cblocks
    enc.mapping_type = [int(CharType.MISSING)] * (n_cblocks * SIGMA)
    enc.mapping_index = [0] * (n_cblocks * SIGMA)
    enc.freq_trunk = [0] * (n_cblocks * enc.cblock_size)

    ranges = _ranges(n_cblocks, max_threads)
    rare_trunk_size = [0] * n_cblocks
    with ThreadPoolExecutor(max_workers=max_threads) as pool:
        list(pool.map(lambda r: _encode_type_one_range(enc, data, r, rare_trunk_size), ranges))
    _accumulate_headers(enc, rare_trunk_size)
    with ThreadPoolExecutor(max_workers=max_threads) as pool:
        list(pool.map(lambda r: _encode_type_two_range(enc, data, r), ranges))

    # Remove the padding zeros of the last cblock.
    enc.count[0] -= n_cblocks * enc.cblock_size - enc.length
    return enc