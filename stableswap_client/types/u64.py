"""
Unsigned 64-bit integer type used for amounts and fee coefficients
"""

from decimal import Decimal
from numbers import Integral
from typing import Union

from ..errors import ValueOutOfRangeError

U64_MAX = 2**64 - 1

# Largest integer a float represents exactly
MAX_SAFE_FLOAT_INT = 2**53


class U64(int):
    """
    Arbitrary-precision integer constrained to [0, 2^64 - 1]

    Serializes to the 8-byte little-endian form the program stores.

    Usage:
        amount = U64(1000)
        U64.from_bytes(amount.to_bytes_le()) == amount
    """

    def __new__(cls, value: int = 0):
        if isinstance(value, bool) or not isinstance(value, Integral):
            raise ValueOutOfRangeError.out_of_range("u64", value, U64_MAX)
        value = int(value)
        if value < 0 or value > U64_MAX:
            raise ValueOutOfRangeError.out_of_range("u64", value, U64_MAX)
        return super().__new__(cls, value)

    @classmethod
    def from_bytes(cls, data: bytes, byteorder: str = "little", *, signed: bool = False) -> "U64":
        """Decode an 8-byte little-endian buffer"""
        if len(data) != 8:
            raise ValueOutOfRangeError(
                f"u64 buffer must be 8 bytes, got {len(data)}",
                name="u64",
                value=bytes(data),
            )
        return cls(int.from_bytes(data, byteorder, signed=signed))

    def to_bytes_le(self) -> bytes:
        return int(self).to_bytes(8, "little")

    def __repr__(self) -> str:
        return f"U64({int(self)})"


Amount = Union[int, U64, Decimal, float]


def to_u64(value: Amount, name: str = "amount") -> U64:
    """
    Normalize a caller-supplied amount to U64.

    Accepts ints, U64, integral Decimals, and integral floats no larger than
    2^53 in magnitude. Everything else raises ValueOutOfRangeError.

    Args:
        value: Amount to normalize
        name: Argument name for the error message

    Returns:
        U64 value
    """
    if isinstance(value, U64):
        return value
    if isinstance(value, bool):
        raise ValueOutOfRangeError.out_of_range(name, value, U64_MAX)

    if isinstance(value, float):
        if not value.is_integer() or abs(value) > MAX_SAFE_FLOAT_INT:
            raise ValueOutOfRangeError.out_of_range(name, value, U64_MAX)
        value = int(value)
    elif isinstance(value, Decimal):
        if not value.is_finite() or value != value.to_integral_value():
            raise ValueOutOfRangeError.out_of_range(name, value, U64_MAX)
        value = int(value)
    elif not isinstance(value, Integral):
        raise ValueOutOfRangeError.out_of_range(name, value, U64_MAX)

    if value < 0 or value > U64_MAX:
        raise ValueOutOfRangeError.out_of_range(name, value, U64_MAX)
    return U64(value)


def to_u8(value: int, name: str) -> int:
    """Validate a single-byte field (e.g. the authority nonce)"""
    if isinstance(value, bool) or not isinstance(value, Integral) or not 0 <= value <= 0xFF:
        raise ValueOutOfRangeError.out_of_range(name, value, 0xFF)
    return int(value)
