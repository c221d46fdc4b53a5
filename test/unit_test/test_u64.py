"""
Unit tests for the U64 value type and amount normalization
"""

from decimal import Decimal

import pytest

from stableswap_client.errors import ErrorCode, ValueOutOfRangeError
from stableswap_client.types import U64, U64_MAX, to_u64, to_u8


def test_u64_bytes():
    value = U64(1000)

    assert value.to_bytes_le() == bytes.fromhex("e803000000000000")
    assert U64.from_bytes(bytes.fromhex("de03000000000000")) == 990
    assert U64.from_bytes(b"\xff" * 8) == U64_MAX


def test_u64_is_int():
    value = U64(7)
    assert isinstance(value, int)
    assert value + 1 == 8
    assert repr(value) == "U64(7)"


@pytest.mark.parametrize("bad", [-1, 2**64, True, 1.0, "5"])
def test_u64_rejects(bad):
    with pytest.raises(ValueOutOfRangeError):
        U64(bad)


def test_u64_from_bytes_wrong_length():
    with pytest.raises(ValueOutOfRangeError):
        U64.from_bytes(b"\x01\x02")


@pytest.mark.parametrize("value, expected", [
    (0, 0),
    (U64_MAX, U64_MAX),
    (U64(12), 12),
    (Decimal("1000"), 1000),
    (Decimal("1E+3"), 1000),
    (990.0, 990),
    (float(2**53), 2**53),
])
def test_to_u64_accepts(value, expected):
    result = to_u64(value)
    assert isinstance(result, U64)
    assert result == expected


@pytest.mark.parametrize("value", [
    -1,
    2**64,
    True,
    False,
    1.5,
    -3.0,
    float(2**60),
    float("nan"),
    float("inf"),
    Decimal("0.1"),
    Decimal("-2"),
    Decimal("NaN"),
    "100",
    None,
])
def test_to_u64_rejects(value):
    with pytest.raises(ValueOutOfRangeError) as exc_info:
        to_u64(value, "amount_in")

    error = exc_info.value
    assert error.code == ErrorCode.VALUE_OUT_OF_RANGE
    assert error.name == "amount_in"
    assert "amount_in" in str(error)


def test_value_error_compatible():
    # Callers catching ValueError still see range failures
    with pytest.raises(ValueError):
        to_u64(-5)


def test_to_u8():
    assert to_u8(0, "nonce") == 0
    assert to_u8(255, "nonce") == 255
    with pytest.raises(ValueOutOfRangeError):
        to_u8(256, "nonce")
    with pytest.raises(ValueOutOfRangeError):
        to_u8(True, "nonce")
