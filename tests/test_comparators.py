import pytest
from hypothesis import given, strategies as st

from timingsafe.comparators import (
    COMPARATORS,
    bytes_eq,
    compare_digest,
    constant_time_compare,
    get_comparator,
    unsafe_compare,
)

ALL = [constant_time_compare, compare_digest, bytes_eq, unsafe_compare]


@pytest.mark.parametrize("compare", ALL)
def test_equal(compare):
    assert compare(b"secret123", b"secret123") is True


@pytest.mark.parametrize("compare", ALL)
def test_unequal(compare):
    assert compare(b"secret123", b"Secret123") is False
    assert compare(b"secret123", b"secret124") is False


@pytest.mark.parametrize("compare", ALL)
def test_different_lengths(compare):
    assert compare(b"secret", b"secret123") is False


@pytest.mark.parametrize("compare", ALL)
def test_accepts_bytearray_against_bytes(compare):
    assert compare(bytearray(b"abc"), b"abc") is True
    assert compare(bytearray(b"abd"), b"abc") is False


def test_registry_lookup():
    assert get_comparator("compare_digest") is compare_digest
    assert set(COMPARATORS) == {
        "constant_time_compare", "compare_digest", "bytes_eq", "unsafe_compare",
    }
    with pytest.raises(ValueError):
        get_comparator("memcmp")


@pytest.mark.fuzz
@given(st.binary(max_size=64), st.binary(max_size=64))
def test_comparators_agree_with_equality_fuzz(a, b):
    expected = a == b
    for compare in ALL:
        assert compare(a, b) == expected
