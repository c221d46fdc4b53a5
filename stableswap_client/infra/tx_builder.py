"""
Transaction builder and sender

Drives a transaction attempt through build -> sign -> submit -> confirm:
- Building versioned transactions (optional compute budget)
- Signing with the fee payer and any extra signers
- Sending, with bounded resubmission before ledger acceptance
- Bounded confirmation polling with a caller cutoff
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

from solders.compute_budget import set_compute_unit_limit, set_compute_unit_price
from solders.hash import Hash
from solders.keypair import Keypair
from solders.message import MessageV0
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import VersionedTransaction

from .retry import (
    CorrelationContext,
    SendOutcome,
    classify_send_error,
    execute_with_retry,
    log_with_correlation,
    preflight_details,
)
from .signer import Signer, as_signer
from .transport import LedgerTransport
from ..types import ConfirmationStatus, InstructionRequest, TransactionAttempt, TxStatus
from ..errors import (
    ConfirmationTimeoutError,
    ProgramRejectedError,
    RpcError,
    SignerError,
    SubmissionError,
)
from ..config import config as global_config

logger = logging.getLogger(__name__)

# MessageV0 is signed with its version prefix
MESSAGE_V0_PREFIX = bytes([0x80])

SignerLike = Union[Signer, Keypair]


@dataclass
class TxBuilderConfig:
    """
    Transaction builder runtime configuration

    Allows per-builder overrides while pulling defaults from the global config
    (stableswap_client.config.TxConfig).

    Usage:
        # Use all defaults from environment
        builder = TxBuilder(rpc)

        # Override specific settings
        config = TxBuilderConfig(confirmation_max_polls=60, confirmation_poll_interval=0.5)
        builder = TxBuilder(rpc, config=config)
    """
    compute_units: int = None
    compute_unit_price: int = None
    send_max_retries: int = None
    retry_delay: float = None
    confirmation_poll_interval: float = None
    confirmation_max_polls: int = None
    confirmation_timeout: float = None

    def __post_init__(self):
        """Apply defaults from global config for any unset values"""
        if self.compute_units is None:
            self.compute_units = global_config.tx.compute_units
        if self.compute_unit_price is None:
            self.compute_unit_price = global_config.tx.compute_unit_price
        if self.send_max_retries is None:
            self.send_max_retries = global_config.tx.send_max_retries
        if self.retry_delay is None:
            self.retry_delay = global_config.tx.retry_delay
        if self.confirmation_poll_interval is None:
            self.confirmation_poll_interval = global_config.tx.confirmation_poll_interval
        if self.confirmation_max_polls is None:
            self.confirmation_max_polls = global_config.tx.confirmation_max_polls
        if self.confirmation_timeout is None:
            self.confirmation_timeout = global_config.tx.confirmation_timeout


class TxBuilder:
    """
    Transaction builder and sender

    Usage:
        builder = TxBuilder(rpc)

        # Build, sign, send and confirm
        signature = builder.submit("swap", [instruction], payer)

        # Or step by step
        attempt = builder.build("swap", [instruction], payer)
        builder.sign(attempt, [payer])
        builder.send(attempt)
        builder.confirm(attempt, timeout=20.0)
    """

    def __init__(
        self,
        transport: LedgerTransport,
        config: Optional[TxBuilderConfig] = None,
    ):
        self._transport = transport
        self._config = config or TxBuilderConfig()

    @property
    def config(self) -> TxBuilderConfig:
        return self._config

    def build(
        self,
        label: str,
        instructions: Sequence[InstructionRequest],
        fee_payer: SignerLike,
        extra_signers: Sequence[SignerLike] = (),
    ) -> TransactionAttempt:
        """
        Compile a fresh attempt against a new blockhash

        Args:
            label: Operation name for diagnostics
            instructions: Instructions in execution order
            fee_payer: Fee payer (first signer)
            extra_signers: Other required signers

        Returns:
            TransactionAttempt in BUILT state
        """
        payer = as_signer(fee_payer)
        signers = [payer] + [as_signer(s) for s in extra_signers]

        all_instructions = []
        if self._config.compute_units > 0:
            all_instructions.append(set_compute_unit_limit(self._config.compute_units))
        if self._config.compute_unit_price > 0:
            all_instructions.append(set_compute_unit_price(self._config.compute_unit_price))
        all_instructions.extend(ix.to_instruction() for ix in instructions)

        attempt = TransactionAttempt(
            label=label,
            instructions=list(instructions),
            fee_payer=payer.pubkey,
            signers=[s.pubkey for s in signers],
        )

        try:
            recent_blockhash = self._transport.get_latest_blockhash()
        except RpcError as e:
            error = SubmissionError.from_transport(label, e, attempt.addresses())
            attempt.fail(error)
            raise error from e

        message = MessageV0.try_compile(
            Pubkey.from_string(payer.pubkey),
            all_instructions,
            [],  # Address lookup tables
            Hash.from_string(recent_blockhash),
        )

        attempt.recent_blockhash = recent_blockhash
        attempt.compiled_message = message
        attempt.message = MESSAGE_V0_PREFIX + bytes(message)

        logger.debug(
            f"Built {label}: {len(all_instructions)} instructions, "
            f"{message.header.num_required_signatures} required signatures"
        )
        return attempt

    def sign(self, attempt: TransactionAttempt, signers: Sequence[SignerLike]) -> TransactionAttempt:
        """
        Sign with every required signer

        Raises:
            SignerError: If a required signer was not provided
        """
        message = attempt.compiled_message
        account_keys = list(message.account_keys)
        num_required_signatures = message.header.num_required_signatures

        by_pubkey = {}
        for s in signers:
            signer = as_signer(s)
            by_pubkey[signer.pubkey] = signer

        signatures: List[Signature] = []
        missing: List[str] = []
        for i in range(num_required_signatures):
            key = str(account_keys[i])
            signer = by_pubkey.pop(key, None)
            if signer is None:
                missing.append(key)
                continue
            signatures.append(Signature.from_bytes(signer.sign(attempt.message)))

        if missing:
            error = SignerError.failed(
                f"{attempt.label}: missing signatures for required signers: {', '.join(missing)}"
            )
            attempt.fail(error)
            raise error

        for key in by_pubkey:
            logger.warning(f"Signer {key} is not required by {attempt.label}, ignored")

        signed_tx = VersionedTransaction.populate(message, signatures)

        attempt.signed_tx = bytes(signed_tx)
        attempt.signature = str(signatures[0])
        attempt.advance(TxStatus.SIGNED)
        return attempt

    def send(self, attempt: TransactionAttempt) -> str:
        """
        Broadcast a signed attempt

        Returns:
            Transaction signature

        Raises:
            SubmissionError: Ledger did not accept the transaction
            ProgramRejectedError: Preflight ran the program and it refused
        """
        if attempt.state != TxStatus.SIGNED:
            attempt.advance(TxStatus.SUBMITTED)  # raises TransactionStateError

        try:
            signature = self._transport.send_transaction(attempt.signed_tx)
        except RpcError as e:
            outcome = classify_send_error(e)

            if outcome == SendOutcome.PROGRAM_REJECTED:
                program_error, logs = preflight_details(e)
                error = ProgramRejectedError.rejected(
                    attempt.label,
                    program_error,
                    signature=attempt.signature,
                    accounts=attempt.addresses(),
                    logs=logs,
                )
                attempt.fail(error)
                raise error from e

            if outcome == SendOutcome.NOT_ACCEPTED:
                error = SubmissionError.from_transport(attempt.label, e, attempt.addresses())
                attempt.fail(error)
                raise error from e

            # Payload may have reached the node; the signature is known locally
            log_with_correlation(
                logging.WARNING,
                f"Send outcome unknown ({e.message}), confirming {attempt.signature}",
                attempt.label,
            )
            attempt.advance(TxStatus.SUBMITTED)
            return attempt.signature

        if signature and signature != attempt.signature:
            logger.warning(f"Node returned signature {signature}, expected {attempt.signature}")

        attempt.advance(TxStatus.SUBMITTED)
        log_with_correlation(logging.INFO, f"Transaction sent: {attempt.signature}", attempt.label)
        return attempt.signature

    def confirm(self, attempt: TransactionAttempt, timeout: Optional[float] = None) -> str:
        """
        Poll until the attempt is confirmed, rejected, or the bound is hit

        Args:
            attempt: SUBMITTED attempt
            timeout: Caller cutoff in seconds (defaults to config.confirmation_timeout)

        Returns:
            Transaction signature

        Raises:
            ProgramRejectedError: Transaction landed with an error
            ConfirmationTimeoutError: No finality within max polls / cutoff
        """
        if attempt.state != TxStatus.SUBMITTED:
            attempt.advance(TxStatus.CONFIRMED)  # raises TransactionStateError

        cutoff = timeout if timeout is not None else self._config.confirmation_timeout
        deadline = time.monotonic() + cutoff
        max_polls = max(1, self._config.confirmation_max_polls)
        polls = 0
        last_error: Optional[RpcError] = None

        while polls < max_polls:
            polls += 1
            try:
                status = self._transport.get_confirmation_status(attempt.signature)
            except RpcError as e:
                last_error = e
                logger.debug(f"Error checking transaction status: {e}")
                status = None

            if status is not None and status.status == ConfirmationStatus.CONFIRMED:
                attempt.advance(TxStatus.CONFIRMED)
                log_with_correlation(
                    logging.INFO,
                    f"Transaction confirmed: {attempt.signature}",
                    attempt.label,
                    slot=status.slot,
                )
                return attempt.signature

            if status is not None and status.status == ConfirmationStatus.FAILED:
                error = ProgramRejectedError.rejected(
                    attempt.label,
                    status.error,
                    signature=attempt.signature,
                    accounts=attempt.addresses(),
                )
                attempt.fail(error)
                log_with_correlation(
                    logging.WARNING,
                    f"Transaction {attempt.signature} failed on-chain: {status.error}",
                    attempt.label,
                )
                raise error

            remaining = deadline - time.monotonic()
            if remaining <= 0 or polls >= max_polls:
                break
            time.sleep(min(self._config.confirmation_poll_interval, remaining))

        error = ConfirmationTimeoutError.not_finalized(
            attempt.label,
            attempt.signature,
            polls,
            accounts=attempt.addresses(),
            last_error=last_error,
        )
        attempt.fail(error)
        log_with_correlation(
            logging.WARNING,
            f"Transaction {attempt.signature} not confirmed after {polls} polls",
            attempt.label,
        )
        raise error

    def submit(
        self,
        label: str,
        instructions: Sequence[InstructionRequest],
        fee_payer: SignerLike,
        extra_signers: Sequence[SignerLike] = (),
        timeout: Optional[float] = None,
    ) -> str:
        """
        Build, sign, send and confirm in one call

        Only failures before ledger acceptance are retried, each time with a
        rebuilt and re-signed transaction. Nothing is retried once the
        transaction may have been accepted.

        Args:
            label: Operation name for diagnostics
            instructions: Instructions in execution order
            fee_payer: Fee payer
            extra_signers: Additional required signers
            timeout: Confirmation cutoff in seconds

        Returns:
            Transaction signature
        """
        if not instructions:
            raise ValueError(f"{label}: transaction has no instructions")

        signers = [fee_payer, *extra_signers]

        with CorrelationContext(label):
            def build_sign_send(attempt_number: int) -> TransactionAttempt:
                attempt = self.build(label, instructions, fee_payer, extra_signers)
                self.sign(attempt, signers)
                self.send(attempt)
                return attempt

            attempt = execute_with_retry(
                build_sign_send,
                label,
                max_retries=self._config.send_max_retries,
                retry_delay=self._config.retry_delay,
            )
            return self.confirm(attempt, timeout=timeout)


def send_and_confirm_transaction(
    label: str,
    transport: LedgerTransport,
    instructions: Sequence[InstructionRequest],
    fee_payer: SignerLike,
    *extra_signers: SignerLike,
    config: Optional[TxBuilderConfig] = None,
    timeout: Optional[float] = None,
) -> str:
    """
    Submit ``instructions`` as one transaction and wait for confirmation

    Returns:
        Transaction signature
    """
    return TxBuilder(transport, config=config).submit(
        label,
        instructions,
        fee_payer,
        extra_signers=extra_signers,
        timeout=timeout,
    )
