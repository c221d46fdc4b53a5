"""
StableSwap program constants
"""

from enum import IntEnum

# Program IDs
TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
SYSTEM_PROGRAM_ID = "11111111111111111111111111111111"

# Field sizes in the on-chain records
PUBKEY_SIZE = 32
U64_SIZE = 8


class InstructionTag(IntEnum):
    """First byte of every instruction, read by the program dispatcher"""
    INITIALIZE = 0
    SWAP = 1
    DEPOSIT = 2
    WITHDRAW = 3


# Instruction data layouts (tag included)
INITIALIZE_DATA_FORMAT = "<BBQQQ"   # tag, nonce, amp_factor, fee_numerator, fee_denominator
SWAP_DATA_FORMAT = "<BQQ"           # tag, amount_in, minimum_amount_out
DEPOSIT_DATA_FORMAT = "<BQQQ"       # tag, token_a, token_b, min_pool_tokens
WITHDRAW_DATA_FORMAT = "<BQQQ"      # tag, pool_tokens, min_token_a, min_token_b
