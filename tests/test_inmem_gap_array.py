from itertools import accumulate

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from sascan.inmem_gap_array import InmemGapArray


def _build(length, adds):
    gap = InmemGapArray(length)
    for x in adds:
        gap.add(x)
    return gap


@st.composite
def gap_inputs(draw):
    length = draw(st.integers(min_value=1, max_value=30))
    adds = draw(st.lists(st.integers(min_value=0, max_value=length - 1), max_size=80))
    heavy = draw(st.lists(st.integers(min_value=0, max_value=length - 1), max_size=2))
    for x in heavy:
        adds.extend([x] * 300)
    return length, adds


def test_add_wraps_into_excess():
    gap = _build(4, [2] * 256)
    assert gap.count[2] == 0
    assert gap.excess == [2]
    assert gap.value(2) == 256


def test_value_counts_adds():
    gap = _build(3, [1] * 600 + [0])
    assert gap.value(1) == 600
    assert gap.value(0) == 1
    assert gap.value(2) == 0


def test_add_out_of_range():
    gap = InmemGapArray(3)
    with pytest.raises(IndexError):
        gap.add(3)
    with pytest.raises(IndexError):
        gap.add(-1)


def test_negative_length_rejected():
    with pytest.raises(ValueError):
        InmemGapArray(-1)


def test_queries_on_empty_array_rejected():
    gap = InmemGapArray(0)
    with pytest.raises(ValueError):
        gap.answer_queries([0], 1)


def test_answer_queries_requires_threads():
    gap = InmemGapArray(2)
    with pytest.raises(ValueError):
        gap.answer_queries([0], 0)


def test_all_zero_gap_answers_identity():
    gap = InmemGapArray(10)
    answers, result = gap.answer_queries(list(range(10)), 3)
    assert answers == [(a, 0) for a in range(10)]
    assert result is None


def test_query_beyond_range_raises():
    gap = _build(3, [0, 1])
    with pytest.raises(ValueError):
        gap.answer_single_gap_query(3, [0], 100)


@settings(max_examples=60, deadline=None)
@given(gap_inputs(), st.integers(min_value=1, max_value=7))
def test_compute_sum2_totals_adds(data, block_size):
    length, adds = data
    gap = _build(length, adds)
    n_blocks = (length + block_size - 1) // block_size
    sums = gap.compute_sum2(0, n_blocks, block_size)
    assert len(sums) == n_blocks
    assert sum(sums) == len(adds)


@settings(max_examples=60, deadline=None)
@given(gap_inputs(), st.integers(min_value=1, max_value=7), st.data())
def test_compute_sum3_is_prefix_count(data, block_size, draw):
    length, adds = data
    gap = _build(length, adds)
    n_blocks = (length + block_size - 1) // block_size
    gapsum = list(accumulate(gap.compute_sum2(0, n_blocks, block_size), initial=0))[:-1]
    j = draw.draw(st.integers(min_value=0, max_value=length))
    assert gap.compute_sum3(j, block_size, gapsum) == sum(1 for x in adds if x < j)


@settings(max_examples=60, deadline=None)
@given(gap_inputs(), st.integers(min_value=1, max_value=7), st.data())
def test_single_query_satisfies_definition(data, block_size, draw):
    length, adds = data
    gap = _build(length, adds)
    n_blocks = (length + block_size - 1) // block_size
    gapsum = list(accumulate(gap.compute_sum2(0, n_blocks, block_size), initial=0))[:-1]
    a = draw.draw(st.integers(min_value=0, max_value=length - 1 + len(adds)))
    b, c = gap.answer_single_gap_query(block_size, gapsum, a)
    assert 0 <= b < length
    assert c == sum(1 for x in adds if x <= b)
    assert b + c >= a
    if b > 0:
        assert (b - 1) + (c - gap.value(b)) < a


@settings(max_examples=40, deadline=None)
@given(gap_inputs(), st.integers(min_value=1, max_value=5), st.data())
def test_answer_queries_matches_single_queries(data, max_threads, draw):
    length, adds = data
    gap = _build(length, adds)
    top = length - 1 + len(adds)
    queries = draw.draw(st.lists(st.integers(min_value=0, max_value=top), max_size=6))
    i0 = draw.draw(st.integers(min_value=0, max_value=length - 1))
    answers, result = gap.answer_queries(queries, max_threads, i0)
    assert result == sum(1 for x in adds if x <= i0)
    gapsum = [0]
    for a, (b, c) in zip(queries, answers):
        assert (b, c) == gap.answer_single_gap_query(length, gapsum, a)