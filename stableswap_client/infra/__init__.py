"""
Infrastructure layer for the StableSwap client

Provides:
- LedgerTransport: Ledger access protocol
- RpcClient: HTTP RPC wrapper with retry logic
- Signer: Transaction signing abstraction (local keypair)
- TxBuilder: Transaction assembly, sending and confirmation
"""

from .transport import LedgerTransport
from .rpc import RpcClient, RpcClientConfig
from .signer import (
    Signer,
    LocalSigner,
    as_signer,
    create_signer,
)
from .retry import (
    CorrelationContext,
    SendOutcome,
    classify_send_error,
    execute_with_retry,
    get_correlation_id,
)
from .tx_builder import TxBuilder, TxBuilderConfig, send_and_confirm_transaction

__all__ = [
    "LedgerTransport",
    "RpcClient",
    "RpcClientConfig",
    "Signer",
    "LocalSigner",
    "as_signer",
    "create_signer",
    "CorrelationContext",
    "SendOutcome",
    "classify_send_error",
    "execute_with_retry",
    "get_correlation_id",
    "TxBuilder",
    "TxBuilderConfig",
    "send_and_confirm_transaction",
]
