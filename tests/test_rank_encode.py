from collections import Counter

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from sascan.rank_encode import SIGMA, CharType, encode


def _sample_text(n, alphabet):
    return bytes(alphabet[(i * 7 + i // 3) % len(alphabet)] for i in range(n))


def test_empty_text_has_no_blocks():
    enc = encode(b"", 2, 6, 4)
    assert enc.n_cblocks == 0
    assert enc.count == [0] * SIGMA
    assert enc.freq_trunk == []


def test_counts_match_symbol_frequencies():
    text = _sample_text(100, b"abcde")
    enc = encode(text, 3, 6, 4)
    counter = Counter(text)
    assert enc.count == [counter.get(c, 0) for c in range(SIGMA)]


def test_padding_zeros_are_not_counted():
    text = bytes([0, 1, 0, 2, 3]) * 4  # 20 bytes, cblocks of 16
    enc = encode(text, 1, 6, 4)
    assert enc.count[0] == text.count(0)
    assert enc.n_cblocks == 2


def test_sblock_headers_hold_prefix_counts():
    text = _sample_text(300, b"xyzw01")
    enc = encode(text, 2, 6, 4)
    for sblock_id in range(enc.n_sblocks):
        prefix = Counter(text[: sblock_id * enc.sblock_size])
        row = enc.sblock_header[sblock_id * SIGMA:(sblock_id + 1) * SIGMA]
        assert row == [prefix.get(c, 0) for c in range(SIGMA)]


def test_cblock_header2_fields():
    text = _sample_text(70, b"abc")
    enc = encode(text, 2, 8, 4)
    cs = enc.cblock_size
    for cid in range(enc.n_cblocks):
        block = text[cid * cs:(cid + 1) * cs]
        block += bytes(cs - len(block))
        local = Counter(block)
        prefix = Counter(text[: cid * cs])
        start = 0
        for c in range(SIGMA):
            h = enc.cblock_header2[(cid << 8) + c]
            assert h >> enc.count_shift == prefix.get(c, 0)
            assert (h >> 5) & enc.list_mask == start
            assert h & 31 == 0
            start += local.get(c, 0)


def test_small_alphabet_gives_type_two_blocks_with_freq_mapping():
    text = _sample_text(64, b"ab")
    enc = encode(text, 1, 6, 4)
    assert enc.cblock_type == [False] * enc.n_cblocks
    n = enc.n_cblocks
    for cid in range(n):
        assert enc.mapping_type[ord("z") * n + cid] == CharType.MISSING
        for c in b"ab":
            assert enc.mapping_type[c * n + cid] == CharType.FREQ


def test_freq_trunk_low_byte_is_symbol_mapping():
    text = _sample_text(48, b"pq")
    enc = encode(text, 2, 6, 4)
    n = enc.n_cblocks
    for j, c in enumerate(text):
        cid = j >> enc.cblock_size_log
        assert enc.freq_trunk[j] & 255 == enc.mapping_index[c * n + cid]


def test_many_distinct_symbols_give_type_one_block():
    text = bytes(range(256))
    enc = encode(text, 1, 8, 8)
    assert enc.cblock_type == [True]
    assert enc.rare_trunk == []
    assert enc.count == [1] * SIGMA


def test_result_does_not_depend_on_thread_count():
    text = _sample_text(500, bytes(range(40)))
    assert encode(text, 1, 6, 4) == encode(text, 5, 6, 4)


@pytest.mark.parametrize(
    "args",
    [(0, 6, 4), (1, 6, 3), (1, 4, 5), (1, 25, 20)],
)
def test_invalid_parameters(args):
    with pytest.raises(ValueError):
        encode(b"abc", *args)


@settings(max_examples=40, deadline=None)
@given(st.binary(max_size=200), st.integers(min_value=1, max_value=4))
def test_random_texts_counts_and_thread_invariance(text, threads):
    enc = encode(text, threads, 6, 4)
    counter = Counter(text)
    assert enc.count == [counter.get(c, 0) for c in range(SIGMA)]
    assert enc == encode(text, 1, 6, 4)