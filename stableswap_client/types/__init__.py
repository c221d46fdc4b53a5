"""
Type definitions for the StableSwap client
"""

from .common import PubkeyLike, to_pubkey
from .u64 import U64, U64_MAX, Amount, to_u64, to_u8
from .account import AccountInfo, ConfirmationStatus, SignatureStatus
from .instruction import AccountRef, InstructionRequest
from .pool import PoolDescriptor
from .transaction import TransactionAttempt, TxStatus

__all__ = [
    "PubkeyLike",
    "to_pubkey",
    "U64",
    "U64_MAX",
    "Amount",
    "to_u64",
    "to_u8",
    "AccountInfo",
    "ConfirmationStatus",
    "SignatureStatus",
    "AccountRef",
    "InstructionRequest",
    "PoolDescriptor",
    "TransactionAttempt",
    "TxStatus",
]
