"""
StableSwap Client - Python client for the stable swap pool program on Solana

Provides:
- Account layout decoding for the swap info account
- Instruction encoding (initialize, swap, deposit, withdraw)
- Transaction building, sending and bounded confirmation
- StableSwap: load/create a pool and trade against it
"""

from .client import StableSwap
from .types import (
    U64,
    AccountInfo,
    AccountRef,
    InstructionRequest,
    PoolDescriptor,
    SignatureStatus,
    TransactionAttempt,
    TxStatus,
    to_u64,
)
from .errors import (
    StableSwapError,
    ErrorCode,
    RpcError,
    SubmissionError,
    ConfirmationTimeoutError,
    ProgramRejectedError,
    ValueOutOfRangeError,
    AccountNotFoundError,
    MalformedAccountError,
    InvalidAuthorityError,
    PoolNotInitializedError,
)
from .program import (
    STABLE_SWAP_SPAN,
    derive_authority,
    decode_pool_state,
    initialize_instruction,
    swap_instruction,
    deposit_instruction,
    withdraw_instruction,
)
from .infra import (
    LedgerTransport,
    RpcClient,
    RpcClientConfig,
    LocalSigner,
    create_signer,
    TxBuilder,
    TxBuilderConfig,
    send_and_confirm_transaction,
)

__version__ = "0.1.0"

__all__ = [
    # Client
    "StableSwap",
    # Types
    "U64",
    "AccountInfo",
    "AccountRef",
    "InstructionRequest",
    "PoolDescriptor",
    "SignatureStatus",
    "TransactionAttempt",
    "TxStatus",
    "to_u64",
    # Errors
    "StableSwapError",
    "ErrorCode",
    "RpcError",
    "SubmissionError",
    "ConfirmationTimeoutError",
    "ProgramRejectedError",
    "ValueOutOfRangeError",
    "AccountNotFoundError",
    "MalformedAccountError",
    "InvalidAuthorityError",
    "PoolNotInitializedError",
    # Program
    "STABLE_SWAP_SPAN",
    "derive_authority",
    "decode_pool_state",
    "initialize_instruction",
    "swap_instruction",
    "deposit_instruction",
    "withdraw_instruction",
    # Infrastructure
    "LedgerTransport",
    "RpcClient",
    "RpcClientConfig",
    "LocalSigner",
    "create_signer",
    "TxBuilder",
    "TxBuilderConfig",
    "send_and_confirm_transaction",
]
