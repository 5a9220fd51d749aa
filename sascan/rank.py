"""Rank queries over a byte sequence using the two-level rank encoding."""

from __future__ import annotations

from .rank_encode import SIGMA, SIGMA_LOG, CharType, RankEncoding, encode

__all__ = ["Rank4n"]


class Rank4n:
    """Answers ``rank(i, c)``: the number of occurrences of ``c`` in ``text[:i]``.

    The sequence is encoded once by :func:`sascan.rank_encode.encode`;
    queries then read only the compact tables of that encoding.
    """

    def __init__(
        self,
        text: bytes | bytearray | memoryview,
        max_threads: int = 1,
        sblock_size_log: int = 24,
        cblock_size_log: int = 20,
    ) -> None:
        self.encoding: RankEncoding = encode(text, max_threads, sblock_size_log, cblock_size_log)

    @property
    def length(self) -> int:
        """Length of the encoded sequence."""
        return self.encoding.length

    @property
    def count(self) -> tuple[int, ...]:
        """Number of occurrences of every byte value in the whole sequence."""
        return tuple(self.encoding.count)

    def __len__(self) -> int:
        return self.encoding.length

    def rank(self, i: int, c: int) -> int:
        """Return the number of occurrences of byte ``c`` among the first ``i`` symbols."""
        if not 0 <= c < SIGMA:
            raise ValueError(f"symbol out of byte range: {c}")
        enc = self.encoding
        if i <= 0:
            return 0
        if i >= enc.length:
            return enc.count[c]
        cblock_id = i >> enc.cblock_size_log
        if enc.cblock_type[cblock_id]:
            return self._rank_type_one(i, c, cblock_id)
        return self._rank_type_two(i, c, cblock_id)

    def _rank_type_one(self, i: int, c: int, cblock_id: int) -> int:
        enc = self.encoding
        log = enc.cblock_size_log
        cblock_beg = cblock_id << log
        cblock_i = i - cblock_beg

        header2 = enc.cblock_header2
        hb = cblock_id << SIGMA_LOG
        entry = header2[hb + c]
        rank_up_to_cblock = entry >> enc.count_shift

        list_beg = (entry >> 5) & enc.list_mask
        if c == SIGMA - 1:
            list_end = enc.cblock_size
        else:
            list_end = (header2[hb + c + 1] >> 5) & enc.list_mask
        if list_beg == list_end:
            return rank_up_to_cblock

        lookup_bits = entry & 31
        refpoint_dist_log = 31 - lookup_bits
        i_refpoint_offset = cblock_i & ((1 << refpoint_dist_log) - 1)
        threshold = 1 << (log - lookup_bits + 1)

        list_size = list_end - list_beg
        approx = (cblock_i * list_size) >> log
        lookup_mask = (1 << lookup_bits) - 1
        trunk = enc.freq_trunk
        base = cblock_beg + list_beg
        empty_marker = list_size + 1

        begin = trunk[base + approx] & lookup_mask
        if begin == empty_marker:
            # The block holding cblock_i is empty: its rank is where the next one starts.
            approx += 1
            while trunk[base + approx] & lookup_mask == empty_marker:
                approx += 1
            return rank_up_to_cblock + (trunk[base + approx] & lookup_mask)

        if approx + 1 == list_size:
            next_block_begin = list_size
        else:
            next_block_begin = trunk[base + approx + 1] & lookup_mask
            if next_block_begin == empty_marker:
                approx += 1
                while trunk[base + approx + 1] & lookup_mask == empty_marker:
                    approx += 1
                next_block_begin = trunk[base + approx + 1] & lookup_mask

        if (
            i_refpoint_offset < threshold
            and begin != next_block_begin
            and (trunk[base + begin] >> lookup_bits) >= 2 * threshold
        ):
            # Occurrences of this block are stored relative to the previous reference point.
            i_refpoint_offset += 1 << refpoint_dist_log

        while begin < next_block_begin and (trunk[base + begin] >> lookup_bits) < i_refpoint_offset:
            begin += 1
        return rank_up_to_cblock + begin

    def _rank_type_two(self, i: int, c: int, cblock_id: int) -> int:
        enc = self.encoding
        n_cblocks = enc.n_cblocks
        sblock_rank = enc.sblock_header[((i >> enc.sblock_size_log) << SIGMA_LOG) + c]

        idx = c * n_cblocks + cblock_id
        kind = enc.mapping_type[idx]
        c_map = enc.mapping_index[idx]

        header = enc.cblock_header[cblock_id]
        freq_cnt_bits = header & 255
        rare_cnt_bits = (header >> 8) & 255
        block_start = (i >> freq_cnt_bits) << freq_cnt_bits
        trunk = enc.freq_trunk

        if kind == CharType.FREQ:
            block_rank = trunk[block_start + c_map] >> 8
            extra = sum(1 for v in trunk[block_start:i] if v & 255 == c_map)
            return sblock_rank + block_rank + extra

        if kind == CharType.RARE:
            rare_ptr = header >> 16
            marker = (1 << freq_cnt_bits) - 1
            new_i = trunk[block_start + (1 << freq_cnt_bits) - 1] >> 8
            new_i += sum(1 for v in trunk[block_start:i] if v & 255 == marker)

            rare = enc.rare_trunk
            rare_start = (new_i >> rare_cnt_bits) << rare_cnt_bits
            block_rank = rare[rare_ptr + rare_start + c_map] >> 8
            extra = sum(
                1 for v in rare[rare_ptr + rare_start:rare_ptr + new_i] if v & 255 == c_map
            )
            return sblock_rank + block_rank + extra

        # The symbol does not occur in this cblock: find the next cblock where it does.
        in_sblock_log = enc.cblocks_in_sblock_log
        in_sblock_mask = (1 << in_sblock_log) - 1
        while (
            cblock_id < n_cblocks
            and cblock_id & in_sblock_mask
            and enc.mapping_type[c * n_cblocks + cblock_id] == CharType.MISSING
        ):
            cblock_id += 1

        if cblock_id == n_cblocks:
            return enc.count[c]
        if not cblock_id & in_sblock_mask:
            return enc.sblock_header[((cblock_id >> in_sblock_log) << SIGMA_LOG) + c]
        return self.rank(cblock_id << enc.cblock_size_log, c)