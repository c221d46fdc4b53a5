"""
Retry Logic Helper Module

Bounded retry for transaction submission, plus classification of transport
failures. Includes structured logging with correlation IDs for transaction
tracing.
"""

import logging
import time
import uuid
import contextvars
from enum import Enum
from typing import Any, Callable, Optional, TypeVar

from ..errors import ErrorCode, RpcError, SubmissionError
from ..config import config as global_config

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Context variable for correlation ID (thread-safe)
_correlation_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    'correlation_id', default=None
)


def generate_correlation_id() -> str:
    """Generate a unique correlation ID for transaction tracing."""
    return uuid.uuid4().hex[:12]


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from context."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: Optional[str]) -> contextvars.Token:
    """Set the correlation ID in context. Returns token for reset."""
    return _correlation_id.set(correlation_id)


class CorrelationContext:
    """
    Context manager for correlation ID scoping.

    Usage:
        with CorrelationContext("swap") as cid:
            logger.info(f"[{cid}] Starting operation")
    """

    def __init__(self, prefix: Optional[str] = None):
        self.correlation_id = generate_correlation_id()
        if prefix:
            self.correlation_id = f"{prefix}_{self.correlation_id}"
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> str:
        self._token = set_correlation_id(self.correlation_id)
        return self.correlation_id

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._token is not None:
            _correlation_id.reset(self._token)


def log_with_correlation(
    level: int,
    message: str,
    operation_name: str,
    attempt: Optional[int] = None,
    max_retries: Optional[int] = None,
    **extra
):
    """
    Log message with correlation ID and structured context.

    Args:
        level: Logging level (logging.INFO, logging.WARNING, etc.)
        message: Log message
        operation_name: Name of the operation being executed
        attempt: Current attempt number (1-indexed)
        max_retries: Maximum number of retries
        **extra: Additional context fields
    """
    cid = get_correlation_id()

    parts = []
    if cid:
        parts.append(f"[{cid}]")
    parts.append(f"[{operation_name}]")
    if attempt is not None and max_retries is not None:
        parts.append(f"[{attempt}/{max_retries}]")
    parts.append(message)

    log_message = " ".join(parts)

    extra_context = {
        "correlation_id": cid,
        "operation": operation_name,
        "attempt": attempt,
        "max_retries": max_retries,
        **extra
    }

    logger.log(level, log_message, extra=extra_context)


class SendOutcome(Enum):
    """How a failed sendTransaction call should be treated"""
    NOT_ACCEPTED = "not_accepted"        # safe to rebuild, re-sign and resend
    AMBIGUOUS = "ambiguous"              # may have landed; confirm the known signature
    PROGRAM_REJECTED = "program_rejected"  # preflight ran the program and it refused


# JSON-RPC code for "Transaction simulation failed" during preflight
PREFLIGHT_FAILURE_CODE = -32002
ALREADY_PROCESSED_MESSAGE = "already been processed"


def _preflight_error(error: RpcError) -> Any:
    data = error.rpc_error_data
    if isinstance(data, dict):
        return data.get("err")
    return None


def _already_processed(err: Any) -> bool:
    if isinstance(err, dict):
        return "AlreadyProcessed" in err
    return err == "AlreadyProcessed"


def classify_send_error(error: RpcError) -> SendOutcome:
    """
    Classify a transport failure raised by sendTransaction.

    - Read/write timeouts, including any failure reported after one: the
      node may have received the payload
    - AlreadyProcessed: an earlier broadcast of this signature landed
    - Preflight InstructionError: the program refused the instruction
    - Everything else (connect failure, rate limit, node-side rejection,
      stale blockhash): the ledger never accepted the transaction
    """
    if error.code == ErrorCode.RPC_TIMEOUT:
        return SendOutcome.AMBIGUOUS

    err = _preflight_error(error)
    if _already_processed(err) or ALREADY_PROCESSED_MESSAGE in error.message.lower():
        return SendOutcome.AMBIGUOUS

    if error.rpc_error_code == PREFLIGHT_FAILURE_CODE:
        if isinstance(err, dict) and "InstructionError" in err:
            return SendOutcome.PROGRAM_REJECTED

    return SendOutcome.NOT_ACCEPTED


def preflight_details(error: RpcError):
    """(program_error, logs) from a preflight failure"""
    data = error.rpc_error_data if isinstance(error.rpc_error_data, dict) else {}
    return data.get("err"), data.get("logs") or []


def execute_with_retry(
    operation: Callable[[int], T],
    operation_name: str,
    max_retries: Optional[int] = None,
    retry_delay: Optional[float] = None,
) -> T:
    """
    Run ``operation`` and retry it only when it raises SubmissionError.

    The operation receives the 0-indexed attempt number and must rebuild and
    re-sign its transaction on every call. Any other exception propagates
    immediately. Linear backoff: retry_delay, 2*retry_delay, ...

    Args:
        operation: Callable taking the attempt number
        operation_name: Name for logging purposes
        max_retries: Maximum attempts (defaults to config.tx.send_max_retries)
        retry_delay: Base delay between attempts (defaults to config.tx.retry_delay)

    Returns:
        Result of the first successful attempt

    Raises:
        SubmissionError: When every attempt failed before ledger acceptance
    """
    max_retries = max_retries if max_retries is not None else global_config.tx.send_max_retries
    retry_delay = retry_delay if retry_delay is not None else global_config.tx.retry_delay
    max_retries = max(1, max_retries)

    for attempt in range(max_retries):
        try:
            result = operation(attempt)
            if attempt > 0:
                log_with_correlation(
                    logging.INFO,
                    f"Succeeded after {attempt + 1} attempts",
                    operation_name,
                    attempt + 1,
                    max_retries,
                )
            return result

        except SubmissionError as e:
            if attempt < max_retries - 1:
                log_with_correlation(
                    logging.WARNING,
                    f"Not accepted, rebuilding: {e.message}",
                    operation_name,
                    attempt + 1,
                    max_retries,
                    error_type="submission",
                )
                time.sleep(retry_delay * (attempt + 1))
                continue

            log_with_correlation(
                logging.ERROR,
                f"Max retries ({max_retries}) exceeded: {e.message}",
                operation_name,
                attempt + 1,
                max_retries,
                error_type="submission",
            )
            raise
