"""
StableSwap Pool Account Parser

Decodes the fixed-layout swap info account written by the program.
"""

import struct
from dataclasses import dataclass

from solders.pubkey import Pubkey

from ..errors import MalformedAccountError
from ..types import PoolDescriptor, PubkeyLike, U64, to_pubkey
from .constants import PUBKEY_SIZE, U64_SIZE
from .instructions import derive_authority


# Layout:
# - u8: is_initialized (offset 0)
# - publicKey(32): pool_token_mint (offset 1)
# - publicKey(32): token_account_a (offset 33)
# - publicKey(32): token_account_b (offset 65)
# - publicKey(32): mint_a (offset 97)
# - publicKey(32): mint_b (offset 129)
# - publicKey(32): token_program_id (offset 161)
# - u64: amp_factor (offset 193)
# - u64: fee_numerator (offset 201)
# - u64: fee_denominator (offset 209)
STABLE_SWAP_LAYOUT = struct.Struct("<B32s32s32s32s32s32sQQQ")

STABLE_SWAP_SPAN = STABLE_SWAP_LAYOUT.size

IS_INITIALIZED_OFFSET = 0
POOL_TOKEN_MINT_OFFSET = 1
TOKEN_ACCOUNT_A_OFFSET = POOL_TOKEN_MINT_OFFSET + PUBKEY_SIZE
TOKEN_ACCOUNT_B_OFFSET = TOKEN_ACCOUNT_A_OFFSET + PUBKEY_SIZE
MINT_A_OFFSET = TOKEN_ACCOUNT_B_OFFSET + PUBKEY_SIZE
MINT_B_OFFSET = MINT_A_OFFSET + PUBKEY_SIZE
TOKEN_PROGRAM_ID_OFFSET = MINT_B_OFFSET + PUBKEY_SIZE
AMP_FACTOR_OFFSET = TOKEN_PROGRAM_ID_OFFSET + PUBKEY_SIZE
FEE_NUMERATOR_OFFSET = AMP_FACTOR_OFFSET + U64_SIZE
FEE_DENOMINATOR_OFFSET = FEE_NUMERATOR_OFFSET + U64_SIZE


@dataclass(frozen=True)
class StableSwapState:
    """Fields stored in the swap info account, as decoded"""
    is_initialized: bool
    pool_token_mint: Pubkey
    token_account_a: Pubkey
    token_account_b: Pubkey
    mint_a: Pubkey
    mint_b: Pubkey
    token_program_id: Pubkey
    amp_factor: U64
    fee_numerator: U64
    fee_denominator: U64


def span_in_bytes() -> int:
    """Size of the swap info account, used to size the account allocation"""
    return STABLE_SWAP_SPAN


def parse_pool_state(account_data: bytes, address: str = None) -> StableSwapState:
    """
    Parse swap info account data

    Args:
        account_data: Raw account data bytes
        address: Account address, only used in error messages

    Returns:
        Decoded StableSwapState

    Raises:
        MalformedAccountError: Wrong length or unrecognized initialization flag
    """
    if len(account_data) != STABLE_SWAP_SPAN:
        raise MalformedAccountError.wrong_length(STABLE_SWAP_SPAN, len(account_data), address)

    (
        is_initialized,
        pool_token_mint,
        token_account_a,
        token_account_b,
        mint_a,
        mint_b,
        token_program_id,
        amp_factor,
        fee_numerator,
        fee_denominator,
    ) = STABLE_SWAP_LAYOUT.unpack(bytes(account_data))

    # bool is encoded as a single 0/1 byte
    if is_initialized not in (0, 1):
        raise MalformedAccountError.bad_init_flag(is_initialized, address)

    return StableSwapState(
        is_initialized=bool(is_initialized),
        pool_token_mint=Pubkey.from_bytes(pool_token_mint),
        token_account_a=Pubkey.from_bytes(token_account_a),
        token_account_b=Pubkey.from_bytes(token_account_b),
        mint_a=Pubkey.from_bytes(mint_a),
        mint_b=Pubkey.from_bytes(mint_b),
        token_program_id=Pubkey.from_bytes(token_program_id),
        amp_factor=U64(amp_factor),
        fee_numerator=U64(fee_numerator),
        fee_denominator=U64(fee_denominator),
    )


def decode_pool_state(
    account_data: bytes,
    address: PubkeyLike,
    program_id: PubkeyLike,
) -> PoolDescriptor:
    """
    Decode swap info account data into a PoolDescriptor

    The authority is not stored in the account; it is derived from
    (address, program_id).

    Args:
        account_data: Raw account data bytes
        address: Swap info account address
        program_id: StableSwap program ID

    Returns:
        PoolDescriptor snapshot
    """
    address = to_pubkey(address, "address")
    program_id = to_pubkey(program_id, "program_id")
    state = parse_pool_state(account_data, str(address))

    return PoolDescriptor(
        program_id=program_id,
        address=address,
        authority=derive_authority(address, program_id),
        token_program_id=state.token_program_id,
        pool_token_mint=state.pool_token_mint,
        token_account_a=state.token_account_a,
        token_account_b=state.token_account_b,
        mint_a=state.mint_a,
        mint_b=state.mint_b,
        amp_factor=state.amp_factor,
        fee_numerator=state.fee_numerator,
        fee_denominator=state.fee_denominator,
        is_initialized=state.is_initialized,
    )
