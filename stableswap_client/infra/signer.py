"""
Transaction signing abstractions

Provides a unified signing interface for local signing with a keypair.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Optional, Protocol, Union, runtime_checkable

import base58
from solders.keypair import Keypair

from ..errors import SignerError, ConfigurationError
from ..config import config as global_config

logger = logging.getLogger(__name__)


@runtime_checkable
class Signer(Protocol):
    """
    Protocol for transaction signers

    Implementations must provide:
    - pubkey: The signer's public key (base58)
    - sign(): Sign message bytes
    """

    @property
    def pubkey(self) -> str:
        """Signer's public key (base58)"""
        ...

    def sign(self, message: bytes) -> bytes:
        """
        Sign a message

        Args:
            message: Message bytes to sign

        Returns:
            64-byte signature
        """
        ...


class LocalSigner:
    """
    Local signer using a Solana keypair

    Usage:
        from solders.keypair import Keypair

        signer = LocalSigner(Keypair())
        signature = signer.sign(message_bytes)
    """

    def __init__(self, keypair: Keypair):
        self._keypair = keypair

    @property
    def pubkey(self) -> str:
        """Public key as base58 string"""
        return str(self._keypair.pubkey())

    @property
    def keypair(self) -> Keypair:
        return self._keypair

    def sign(self, message: bytes) -> bytes:
        """Sign message bytes"""
        return bytes(self._keypair.sign_message(message))

    @classmethod
    def from_bytes(cls, secret_key: bytes) -> "LocalSigner":
        """Create signer from secret key bytes (64 bytes)"""
        return cls(Keypair.from_bytes(secret_key))

    @classmethod
    def from_base58(cls, secret_key: str) -> "LocalSigner":
        """Create signer from base58 secret key"""
        return cls.from_bytes(base58.b58decode(secret_key))

    @classmethod
    def from_file(cls, path: str) -> "LocalSigner":
        """
        Create signer from keypair file

        Supports:
        - JSON array format (Solana CLI): [1,2,3,...]
        - Raw bytes file (64 bytes)
        """
        with open(path, "rb") as f:
            content = f.read()

        try:
            data = json.loads(content.decode("utf-8"))
            if isinstance(data, list):
                return cls.from_bytes(bytes(data))
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.debug(f"Keypair file {path} is not JSON, trying raw bytes")

        if len(content) == 64:
            return cls.from_bytes(content)

        raise ConfigurationError.invalid("keypair_file", f"Cannot parse keypair file: {path}")

    def __repr__(self) -> str:
        return f"LocalSigner({self.pubkey[:8]}...)"


def as_signer(value: Union[Signer, Keypair]) -> Signer:
    """Accept a Signer or a bare solders Keypair"""
    if isinstance(value, Keypair):
        return LocalSigner(value)
    if isinstance(value, Signer):
        return value
    raise SignerError.failed(f"Unsupported signer type: {type(value).__name__}")


def create_signer(
    keypair: Optional[Keypair] = None,
    keypair_path: Optional[str] = None,
) -> Signer:
    """
    Create signer based on configuration

    Priority:
    1. keypair: Use LocalSigner with provided keypair
    2. keypair_path: Load keypair from file
    3. Environment: SOLANA_KEYPAIR_PATH

    Raises:
        SignerError: If no valid signer configuration found
    """
    if keypair is not None:
        return LocalSigner(keypair)

    if keypair_path is not None:
        return LocalSigner.from_file(keypair_path)

    if global_config.signer.keypair_path and os.path.isfile(global_config.signer.keypair_path):
        return LocalSigner.from_file(global_config.signer.keypair_path)

    raise SignerError.not_configured()
