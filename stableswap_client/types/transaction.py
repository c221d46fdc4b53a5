"""
Transaction attempt and lifecycle status
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional

from .instruction import InstructionRequest


class TxStatus(Enum):
    """Lifecycle state of a transaction attempt"""
    BUILT = "built"
    SIGNED = "signed"
    SUBMITTED = "submitted"
    CONFIRMED = "confirmed"
    FAILED = "failed"


_TRANSITIONS: Dict[TxStatus, FrozenSet[TxStatus]] = {
    TxStatus.BUILT: frozenset({TxStatus.SIGNED, TxStatus.FAILED}),
    TxStatus.SIGNED: frozenset({TxStatus.SUBMITTED, TxStatus.FAILED}),
    TxStatus.SUBMITTED: frozenset({TxStatus.CONFIRMED, TxStatus.FAILED}),
    TxStatus.CONFIRMED: frozenset(),
    TxStatus.FAILED: frozenset(),
}


@dataclass
class TransactionAttempt:
    """
    One build/sign/send/confirm pass over a set of instructions

    A resend always uses a new attempt (fresh blockhash, fresh signatures).

    Attributes:
        label: Operation name for diagnostics
        instructions: Instructions in transaction order
        fee_payer: Fee payer pubkey (base58)
        signers: Pubkeys that must sign (base58), fee payer first
        state: Current lifecycle state
        recent_blockhash: Blockhash the message was compiled against
        message: Serialized message bytes (what gets signed)
        signed_tx: Serialized signed transaction
        signature: First signature (transaction id), known once signed
        error: Failure reason once FAILED
        compiled_message: Compiled solders message backing ``message``
    """
    label: str
    instructions: List[InstructionRequest]
    fee_payer: str
    signers: List[str] = field(default_factory=list)
    state: TxStatus = TxStatus.BUILT
    recent_blockhash: Optional[str] = None
    message: Optional[bytes] = None
    signed_tx: Optional[bytes] = None
    signature: Optional[str] = None
    error: Optional[Exception] = None
    compiled_message: Any = field(default=None, repr=False, compare=False)

    @property
    def is_terminal(self) -> bool:
        return self.state in (TxStatus.CONFIRMED, TxStatus.FAILED)

    @property
    def is_confirmed(self) -> bool:
        return self.state == TxStatus.CONFIRMED

    def addresses(self) -> List[str]:
        """All account addresses referenced by the instructions, in order, deduplicated"""
        seen: List[str] = []
        for ix in self.instructions:
            for address in ix.addresses():
                if address not in seen:
                    seen.append(address)
        return seen

    def advance(self, target: TxStatus) -> None:
        """Move to ``target``, rejecting transitions the lifecycle does not allow"""
        if target not in _TRANSITIONS[self.state]:
            from ..errors import TransactionStateError
            raise TransactionStateError.invalid_transition(self.label, self.state.value, target.value)
        self.state = target

    def fail(self, error: Exception) -> None:
        if not self.is_terminal:
            self.state = TxStatus.FAILED
        self.error = error

    def __str__(self) -> str:
        sig_display = f"{self.signature[:16]}..." if self.signature else "unsigned"
        return f"TransactionAttempt({self.label}, {self.state.value}, {sig_display})"
