"""
Test Signer Module

Tests for local signer functionality.
"""

import sys
import json
import os
import tempfile
from pathlib import Path

import base58
import pytest
from solders.keypair import Keypair

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from stableswap_client.infra.signer import LocalSigner, Signer, as_signer, create_signer
from stableswap_client.errors import ConfigurationError, ErrorCode, SignerError


def test_local_signer_from_base58():
    """Test LocalSigner creation from base58 private key"""
    print("Testing LocalSigner from base58...")

    keypair = Keypair()
    secret = base58.b58encode(bytes(keypair)).decode("ascii")

    signer = LocalSigner.from_base58(secret)
    assert signer.pubkey == str(keypair.pubkey())

    print("  LocalSigner from base58: PASSED")


def test_local_signer_sign():
    """Test LocalSigner sign method"""
    print("Testing LocalSigner sign...")

    keypair = Keypair()
    signer = LocalSigner(keypair)

    message = b"test message to sign"
    signature = signer.sign(message)

    assert len(signature) == 64  # Ed25519 signature is 64 bytes
    assert signature == bytes(keypair.sign_message(message))
    assert isinstance(signer, Signer)

    print("  LocalSigner sign: PASSED")


def test_keypair_loading_json():
    """Test keypair loading from Solana CLI JSON array"""
    print("Testing keypair loading (JSON)...")

    keypair = Keypair()

    with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False) as f:
        json.dump(list(bytes(keypair)), f)
        temp_path = f.name

    try:
        signer = LocalSigner.from_file(temp_path)
        assert signer.pubkey == str(keypair.pubkey())
    finally:
        os.unlink(temp_path)

    print("  Keypair loading (JSON): PASSED")


def test_keypair_loading_raw_bytes():
    """Test keypair loading from a 64-byte raw file"""
    keypair = Keypair()

    with tempfile.NamedTemporaryFile(mode='wb', suffix='.bin', delete=False) as f:
        f.write(bytes(keypair))
        temp_path = f.name

    try:
        signer = LocalSigner.from_file(temp_path)
        assert signer.pubkey == str(keypair.pubkey())
    finally:
        os.unlink(temp_path)


def test_keypair_loading_invalid():
    with tempfile.NamedTemporaryFile(mode='wb', suffix='.bin', delete=False) as f:
        f.write(b"not a keypair")
        temp_path = f.name

    try:
        with pytest.raises(ConfigurationError):
            LocalSigner.from_file(temp_path)
    finally:
        os.unlink(temp_path)


def test_as_signer():
    """Keypairs are wrapped, signers pass through"""
    keypair = Keypair()

    wrapped = as_signer(keypair)
    assert isinstance(wrapped, LocalSigner)
    assert wrapped.pubkey == str(keypair.pubkey())
    assert as_signer(wrapped) is wrapped

    with pytest.raises(SignerError):
        as_signer("not a signer")


def test_signer_factory():
    """Test signer factory functions"""
    print("Testing signer factory...")

    keypair = Keypair()
    signer = create_signer(keypair=keypair)
    assert isinstance(signer, LocalSigner)
    assert signer.pubkey == str(keypair.pubkey())

    print("  Signer factory: PASSED")


def test_signer_factory_not_configured(monkeypatch):
    from stableswap_client.config import config

    monkeypatch.setattr(config.signer, "keypair_path", "")

    with pytest.raises(SignerError) as exc_info:
        create_signer()
    assert exc_info.value.code == ErrorCode.SIGNER_NOT_CONFIGURED


def main():
    """Run all signer tests"""
    print("=" * 60)
    print("Signer Tests")
    print("=" * 60)

    tests = [
        test_local_signer_from_base58,
        test_local_signer_sign,
        test_keypair_loading_json,
        test_keypair_loading_raw_bytes,
        test_keypair_loading_invalid,
        test_as_signer,
        test_signer_factory,
    ]

    for test in tests:
        test()

    print("=" * 60)
    print("All signer tests passed")


if __name__ == "__main__":
    main()
