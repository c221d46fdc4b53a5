"""
Common type definitions
"""

from typing import Union

from solders.pubkey import Pubkey

from ..errors import InvalidAddressError


PubkeyLike = Union[Pubkey, str]


def to_pubkey(value: PubkeyLike, name: str = "address") -> Pubkey:
    """
    Convert a base58 string or Pubkey to Pubkey

    Args:
        value: Address as Pubkey or base58 string
        name: Argument name reported on failure

    Returns:
        solders Pubkey

    Raises:
        InvalidAddressError: value is not a valid base58 public key
    """
    if isinstance(value, Pubkey):
        return value
    try:
        return Pubkey.from_string(value)
    except (TypeError, ValueError) as e:
        raise InvalidAddressError.invalid(name, value, e) from e
