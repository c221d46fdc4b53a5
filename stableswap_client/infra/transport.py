"""
Ledger transport protocol

The pool client and transaction builder only talk to the ledger through this
interface. RpcClient is the JSON-RPC implementation; tests use an in-memory
fake.
"""

from typing import Optional, Protocol, runtime_checkable

from ..types import AccountInfo, SignatureStatus


@runtime_checkable
class LedgerTransport(Protocol):
    """
    Protocol for ledger access

    Implementations raise RpcError for transport-level failures.
    """

    def fetch_account(self, address: str) -> Optional[AccountInfo]:
        """Account at ``address`` or None if it does not exist"""
        ...

    def send_transaction(self, transaction: bytes) -> str:
        """Broadcast a signed transaction, returning its signature (base58)"""
        ...

    def get_confirmation_status(self, signature: str) -> SignatureStatus:
        """Current status of a submitted signature"""
        ...

    def minimum_balance_for_rent_exemption(self, size: int) -> int:
        """Lamports needed for an account of ``size`` bytes to be rent exempt"""
        ...

    def get_latest_blockhash(self) -> str:
        """Recent blockhash (base58) to compile a transaction against"""
        ...
