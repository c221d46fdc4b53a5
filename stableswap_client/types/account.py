"""
Ledger account and signature status types returned by a transport
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


@dataclass(frozen=True)
class AccountInfo:
    """
    Raw on-chain account

    Attributes:
        data: Account data bytes
        owner: Owning program (base58)
        lamports: Account balance in lamports
    """
    data: bytes
    owner: str
    lamports: int = 0

    def __repr__(self) -> str:
        return f"AccountInfo(owner={self.owner[:8]}..., len={len(self.data)})"


class ConfirmationStatus(Enum):
    """Observed state of a submitted transaction"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"


@dataclass(frozen=True)
class SignatureStatus:
    """
    Confirmation status of one signature

    Attributes:
        status: Pending, confirmed or failed
        error: Ledger error payload when failed (passed through verbatim)
        slot: Slot the transaction landed in, if known
    """
    status: ConfirmationStatus
    error: Optional[Any] = None
    slot: Optional[int] = None

    @classmethod
    def pending(cls) -> "SignatureStatus":
        return cls(ConfirmationStatus.PENDING)

    @classmethod
    def confirmed(cls, slot: Optional[int] = None) -> "SignatureStatus":
        return cls(ConfirmationStatus.CONFIRMED, slot=slot)

    @classmethod
    def failed(cls, error: Any, slot: Optional[int] = None) -> "SignatureStatus":
        return cls(ConfirmationStatus.FAILED, error=error, slot=slot)
