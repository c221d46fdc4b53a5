"""
Error definitions for the StableSwap client
"""

from .exceptions import (
    ErrorCode,
    StableSwapError,
    RpcError,
    SubmissionError,
    ConfirmationTimeoutError,
    ProgramRejectedError,
    TransactionStateError,
    ValueOutOfRangeError,
    InvalidAddressError,
    AccountNotFoundError,
    MalformedAccountError,
    InvalidAuthorityError,
    PoolNotInitializedError,
    SignerError,
    ConfigurationError,
)

__all__ = [
    "ErrorCode",
    "StableSwapError",
    "RpcError",
    "SubmissionError",
    "ConfirmationTimeoutError",
    "ProgramRejectedError",
    "TransactionStateError",
    "ValueOutOfRangeError",
    "InvalidAddressError",
    "AccountNotFoundError",
    "MalformedAccountError",
    "InvalidAuthorityError",
    "PoolNotInitializedError",
    "SignerError",
    "ConfigurationError",
]
