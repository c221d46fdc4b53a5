"""
Exception definitions for the StableSwap client
"""

from enum import Enum
from typing import Any, List, Optional


class ErrorCode(Enum):
    """
    Unified error codes for StableSwap client operations

    1xxx - RPC errors
    2xxx - Transaction lifecycle errors
    3xxx - Value/encoding errors
    4xxx - Pool account errors
    6xxx - Signer errors
    9xxx - Configuration errors
    """
    # RPC errors (recoverable)
    RPC_CONNECTION_FAILED = "1001"
    RPC_TIMEOUT = "1002"
    RPC_RATE_LIMITED = "1003"
    RPC_INVALID_RESPONSE = "1004"

    # Transaction errors
    TX_SUBMISSION_FAILED = "2001"
    TX_CONFIRMATION_TIMEOUT = "2002"
    TX_PROGRAM_REJECTED = "2003"
    TX_INVALID_STATE = "2004"

    # Value errors
    VALUE_OUT_OF_RANGE = "3001"
    INVALID_ADDRESS = "3002"

    # Pool account errors
    ACCOUNT_NOT_FOUND = "4001"
    ACCOUNT_MALFORMED = "4002"
    POOL_NOT_INITIALIZED = "4003"
    POOL_INVALID_AUTHORITY = "4004"

    # Signer errors
    SIGNER_NOT_CONFIGURED = "6001"
    SIGNER_FAILED = "6002"

    # Configuration errors
    CONFIG_INVALID = "9001"
    CONFIG_MISSING = "9002"


class StableSwapError(Exception):
    """
    Base exception for all StableSwap client errors

    Attributes:
        message: Human-readable error message
        code: Error code for programmatic handling
        recoverable: Whether the error might succeed on retry
        original_error: The underlying exception if any
        details: Additional error context (operation, addresses, transport message)
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        recoverable: bool = False,
        original_error: Optional[Exception] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.recoverable = recoverable
        self.original_error = original_error
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"

    @property
    def should_retry(self) -> bool:
        """Indicate if the operation should be retried"""
        return self.recoverable


class RpcError(StableSwapError):
    """
    RPC-related errors - typically recoverable

    Raised when:
    - Connection to RPC endpoint fails
    - Request times out
    - Rate limit is hit
    - Node answers with a JSON-RPC error object
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.RPC_CONNECTION_FAILED,
        original_error: Optional[Exception] = None,
        endpoint: Optional[str] = None,
    ):
        super().__init__(
            message,
            code,
            recoverable=True,
            original_error=original_error,
            details={"endpoint": endpoint} if endpoint else None,
        )
        self.endpoint = endpoint

    @property
    def rpc_error_code(self) -> Optional[int]:
        """JSON-RPC error code returned by the node, if any"""
        return self.details.get("rpc_error_code")

    @property
    def rpc_error_data(self) -> Any:
        """JSON-RPC error data returned by the node, if any"""
        return self.details.get("rpc_error_data")

    @classmethod
    def connection_failed(cls, endpoint: str, error: Exception = None) -> "RpcError":
        return cls(
            f"Failed to connect to RPC endpoint: {endpoint}",
            ErrorCode.RPC_CONNECTION_FAILED,
            original_error=error,
            endpoint=endpoint,
        )

    @classmethod
    def timeout(cls, endpoint: str, timeout_seconds: float) -> "RpcError":
        return cls(
            f"RPC request timed out after {timeout_seconds}s",
            ErrorCode.RPC_TIMEOUT,
            endpoint=endpoint,
        )

    @classmethod
    def rate_limited(cls, endpoint: str) -> "RpcError":
        return cls(
            "RPC rate limit exceeded",
            ErrorCode.RPC_RATE_LIMITED,
            endpoint=endpoint,
        )


class SubmissionError(StableSwapError):
    """
    Transaction was not accepted by the ledger - recoverable

    The signed payload never reached the ledger (or was refused by the node
    before acceptance). Safe to retry with a freshly built and signed
    transaction.
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        accounts: Optional[List[str]] = None,
        original_error: Optional[Exception] = None,
        transport_message: Optional[str] = None,
    ):
        super().__init__(
            message,
            ErrorCode.TX_SUBMISSION_FAILED,
            recoverable=True,
            original_error=original_error,
            details={
                "operation": operation,
                "accounts": accounts or [],
                "transport_message": transport_message,
            },
        )
        self.operation = operation
        self.accounts = accounts or []

    @classmethod
    def from_transport(
        cls,
        operation: str,
        error: Exception,
        accounts: Optional[List[str]] = None,
    ) -> "SubmissionError":
        return cls(
            f"{operation}: transaction not accepted: {error}",
            operation=operation,
            accounts=accounts,
            original_error=error,
            transport_message=str(error),
        )


class ConfirmationTimeoutError(StableSwapError):
    """
    Finality was not observed within the polling bound - NOT blindly retryable

    The transaction may or may not have landed. Check the on-chain effect of
    ``signature`` before sending anything again.
    """

    def __init__(
        self,
        message: str,
        signature: Optional[str] = None,
        operation: Optional[str] = None,
        accounts: Optional[List[str]] = None,
        polls: Optional[int] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            message,
            ErrorCode.TX_CONFIRMATION_TIMEOUT,
            recoverable=False,
            original_error=original_error,
            details={
                "operation": operation,
                "signature": signature,
                "accounts": accounts or [],
                "polls": polls,
            },
        )
        self.signature = signature
        self.operation = operation
        self.accounts = accounts or []

    @classmethod
    def not_finalized(
        cls,
        operation: str,
        signature: str,
        polls: int,
        accounts: Optional[List[str]] = None,
        last_error: Optional[Exception] = None,
    ) -> "ConfirmationTimeoutError":
        return cls(
            f"{operation}: transaction {signature} not confirmed after {polls} polls",
            signature=signature,
            operation=operation,
            accounts=accounts,
            polls=polls,
            original_error=last_error,
        )


class ProgramRejectedError(StableSwapError):
    """
    The remote program refused the instruction - not retryable as-is

    ``program_error`` carries the ledger's error payload verbatim
    (e.g. ``{"InstructionError": [0, {"Custom": 1}]}``).
    """

    def __init__(
        self,
        message: str,
        program_error: Any = None,
        signature: Optional[str] = None,
        operation: Optional[str] = None,
        accounts: Optional[List[str]] = None,
        logs: Optional[list] = None,
    ):
        super().__init__(
            message,
            ErrorCode.TX_PROGRAM_REJECTED,
            recoverable=False,
            details={
                "operation": operation,
                "signature": signature,
                "program_error": program_error,
                "accounts": accounts or [],
                "logs": logs,
            },
        )
        self.program_error = program_error
        self.signature = signature
        self.operation = operation
        self.accounts = accounts or []
        self.logs = logs or []

    @classmethod
    def rejected(
        cls,
        operation: str,
        program_error: Any,
        signature: Optional[str] = None,
        accounts: Optional[List[str]] = None,
        logs: Optional[list] = None,
    ) -> "ProgramRejectedError":
        return cls(
            f"{operation}: program rejected transaction: {program_error}",
            program_error=program_error,
            signature=signature,
            operation=operation,
            accounts=accounts,
            logs=logs,
        )


class TransactionStateError(StableSwapError):
    """Illegal lifecycle transition on a transaction attempt"""

    def __init__(self, message: str, label: Optional[str] = None):
        super().__init__(
            message,
            ErrorCode.TX_INVALID_STATE,
            recoverable=False,
            details={"operation": label},
        )

    @classmethod
    def invalid_transition(cls, label: str, current: str, target: str) -> "TransactionStateError":
        return cls(
            f"{label}: cannot move transaction from {current} to {target}",
            label=label,
        )


class ValueOutOfRangeError(StableSwapError, ValueError):
    """
    Amount outside the unsigned 64-bit domain

    Raised before any I/O when a caller supplies a negative, fractional or
    too-large value.
    """

    def __init__(self, message: str, name: Optional[str] = None, value: Any = None):
        super().__init__(
            message,
            ErrorCode.VALUE_OUT_OF_RANGE,
            recoverable=False,
            details={"name": name, "value": repr(value)},
        )
        self.name = name
        self.value = value

    @classmethod
    def out_of_range(cls, name: str, value: Any, upper: int) -> "ValueOutOfRangeError":
        return cls(
            f"{name} must be an integer in [0, {upper}], got {value!r}",
            name=name,
            value=value,
        )


class InvalidAddressError(StableSwapError, ValueError):
    """Address argument that is not a valid base58 public key"""

    def __init__(self, message: str, name: Optional[str] = None, value: Any = None,
                 original_error: Optional[Exception] = None):
        super().__init__(
            message,
            ErrorCode.INVALID_ADDRESS,
            recoverable=False,
            original_error=original_error,
            details={"name": name, "value": repr(value)},
        )
        self.name = name
        self.value = value

    @classmethod
    def invalid(cls, name: str, value: Any, error: Exception = None) -> "InvalidAddressError":
        return cls(
            f"{name} is not a valid base58 address: {value!r}",
            name=name,
            value=value,
            original_error=error,
        )


class AccountNotFoundError(StableSwapError):
    """Account does not exist on chain"""

    def __init__(self, message: str, address: Optional[str] = None):
        super().__init__(
            message,
            ErrorCode.ACCOUNT_NOT_FOUND,
            recoverable=False,
            details={"address": address},
        )
        self.address = address

    @classmethod
    def not_found(cls, address: str) -> "AccountNotFoundError":
        return cls(f"Account not found: {address}", address=address)


class MalformedAccountError(StableSwapError):
    """
    Account data does not match the pool layout - fatal

    Raised when:
    - Data length differs from the fixed record span
    - Initialization flag is not 0 or 1
    - Account is not owned by the expected program
    """

    def __init__(
        self,
        message: str,
        address: Optional[str] = None,
        code: ErrorCode = ErrorCode.ACCOUNT_MALFORMED,
    ):
        super().__init__(
            message,
            code,
            recoverable=False,
            details={"address": address},
        )
        self.address = address

    @classmethod
    def wrong_length(cls, expected: int, actual: int, address: Optional[str] = None) -> "MalformedAccountError":
        return cls(
            f"Invalid pool account size: expected {expected} bytes, got {actual}",
            address=address,
        )

    @classmethod
    def bad_init_flag(cls, flag: int, address: Optional[str] = None) -> "MalformedAccountError":
        return cls(
            f"Invalid initialization flag byte: 0x{flag:02x}",
            address=address,
        )

    @classmethod
    def wrong_owner(cls, address: str, owner: str, expected: str) -> "MalformedAccountError":
        return cls(
            f"Invalid owner for {address}: expected {expected}, got {owner}",
            address=address,
        )


class InvalidAuthorityError(MalformedAccountError):
    """Pool authority does not match the program-derived address"""

    def __init__(self, message: str, address: Optional[str] = None):
        super().__init__(message, address=address, code=ErrorCode.POOL_INVALID_AUTHORITY)

    @classmethod
    def mismatch(cls, address: str, authority: str, expected: str) -> "InvalidAuthorityError":
        return cls(
            f"Invalid authority for pool {address}: expected {expected}, got {authority}",
            address=address,
        )


class PoolNotInitializedError(StableSwapError):
    """Pool account has a valid shape but is not initialized yet"""

    def __init__(self, message: str, address: Optional[str] = None):
        super().__init__(
            message,
            ErrorCode.POOL_NOT_INITIALIZED,
            recoverable=False,
            details={"address": address},
        )
        self.address = address

    @classmethod
    def not_initialized(cls, address: str) -> "PoolNotInitializedError":
        return cls(f"Invalid token swap state: pool {address} is not initialized", address=address)


class SignerError(StableSwapError):
    """
    Signing-related errors

    Raised when:
    - No signer configured
    - A required signer is missing for a transaction
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.SIGNER_FAILED,
        recoverable: bool = False,
    ):
        super().__init__(message, code, recoverable=recoverable)

    @classmethod
    def not_configured(cls) -> "SignerError":
        return cls(
            "No signer configured. Provide a keypair or SOLANA_KEYPAIR_PATH.",
            ErrorCode.SIGNER_NOT_CONFIGURED,
        )

    @classmethod
    def failed(cls, reason: str) -> "SignerError":
        return cls(f"Signing failed: {reason}", ErrorCode.SIGNER_FAILED)


class ConfigurationError(StableSwapError):
    """
    Configuration-related errors

    Raised when:
    - Required configuration is missing
    - Configuration values are invalid
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.CONFIG_INVALID,
    ):
        super().__init__(message, code, recoverable=False)

    @classmethod
    def missing(cls, param: str) -> "ConfigurationError":
        return cls(f"Missing required configuration: {param}", ErrorCode.CONFIG_MISSING)

    @classmethod
    def invalid(cls, param: str, reason: str) -> "ConfigurationError":
        return cls(f"Invalid configuration '{param}': {reason}", ErrorCode.CONFIG_INVALID)
