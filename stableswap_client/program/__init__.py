"""
StableSwap on-chain program bindings

Account layout decoding and instruction encoding for the stable swap program.
"""

from .constants import (
    TOKEN_PROGRAM_ID,
    SYSTEM_PROGRAM_ID,
    InstructionTag,
)
from .instructions import (
    find_authority,
    derive_authority,
    create_pool_account_instruction,
    initialize_instruction,
    swap_instruction,
    deposit_instruction,
    withdraw_instruction,
)
from .layout import (
    STABLE_SWAP_LAYOUT,
    STABLE_SWAP_SPAN,
    StableSwapState,
    span_in_bytes,
    parse_pool_state,
    decode_pool_state,
)

__all__ = [
    # Constants
    "TOKEN_PROGRAM_ID",
    "SYSTEM_PROGRAM_ID",
    "InstructionTag",
    # Instructions
    "find_authority",
    "derive_authority",
    "create_pool_account_instruction",
    "initialize_instruction",
    "swap_instruction",
    "deposit_instruction",
    "withdraw_instruction",
    # Layout
    "STABLE_SWAP_LAYOUT",
    "STABLE_SWAP_SPAN",
    "StableSwapState",
    "span_in_bytes",
    "parse_pool_state",
    "decode_pool_state",
]
