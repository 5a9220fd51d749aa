import pytest
from hypothesis import given, strategies as st

from sascan.bwtsa import BwtSa, expand


def test_entry_converts_to_its_sa_value():
    x = BwtSa(7, 3)
    assert int(x) == 7
    assert [10, 20, 30, 40, 50, 60, 70, 80][x] == 80


def test_default_bwt_is_zero():
    assert BwtSa(5).bwt == 0


def test_bwt_symbol_must_be_a_byte():
    with pytest.raises(ValueError):
        BwtSa(1, 256)
    with pytest.raises(ValueError):
        BwtSa(1, -1)


def test_bwt_is_mutable():
    x = BwtSa(2)
    x.bwt = 200
    assert x == BwtSa(2, 200)


@given(st.lists(st.integers(0, 2**40 - 1)), st.integers(1, 16))
def test_expand_preserves_values_and_order(values, threads):
    result = expand(values, threads)
    assert [int(r) for r in result] == values
    assert all(r.bwt == 0 for r in result)


def test_expand_accepts_iterators():
    result = expand(iter(range(5)), 2)
    assert [r.sa for r in result] == list(range(5))


def test_expand_rejects_zero_threads():
    with pytest.raises(ValueError):
        expand([1, 2], 0)