"""
Shared fixtures for unit tests.

FakeTransport is an in-memory ledger: it records every submitted transaction
and replays scripted send failures and confirmation statuses. No network.
"""

import sys
from pathlib import Path

import pytest
from solders.hash import Hash
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.transaction import VersionedTransaction

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from stableswap_client.infra import TxBuilderConfig
from stableswap_client.program import STABLE_SWAP_LAYOUT, TOKEN_PROGRAM_ID, derive_authority
from stableswap_client.types import AccountInfo, PoolDescriptor, SignatureStatus, U64


class FakeTransport:
    """
    In-memory LedgerTransport

    Attributes:
        accounts: address -> AccountInfo
        sent: raw bytes of every send_transaction call, in order
        send_errors: exceptions raised by successive send_transaction calls
        statuses: SignatureStatus (or exception) returned by successive polls;
            default_status once exhausted
    """

    def __init__(self, rent: int = 2_400_000):
        self.accounts = {}
        self.sent = []
        self.send_errors = []
        self.statuses = []
        self.default_status = SignatureStatus.confirmed(slot=100)
        self.status_queries = []
        self.rent = rent
        self.rent_queries = []
        self.blockhash_calls = 0

    def add_account(self, address, data: bytes, owner) -> None:
        self.accounts[str(address)] = AccountInfo(data=bytes(data), owner=str(owner), lamports=self.rent)

    def fetch_account(self, address):
        return self.accounts.get(str(address))

    def send_transaction(self, transaction: bytes) -> str:
        self.sent.append(bytes(transaction))
        if self.send_errors:
            raise self.send_errors.pop(0)
        tx = VersionedTransaction.from_bytes(transaction)
        return str(tx.signatures[0])

    def get_confirmation_status(self, signature: str) -> SignatureStatus:
        self.status_queries.append(signature)
        if self.statuses:
            status = self.statuses.pop(0)
            if isinstance(status, Exception):
                raise status
            return status
        return self.default_status

    def minimum_balance_for_rent_exemption(self, size: int) -> int:
        self.rent_queries.append(size)
        return self.rent

    def get_latest_blockhash(self) -> str:
        self.blockhash_calls += 1
        return str(Hash(bytes([self.blockhash_calls % 256]) * 32))

    def sent_transactions(self):
        return [VersionedTransaction.from_bytes(raw) for raw in self.sent]


def pack_pool_state(
    is_initialized,
    pool_token_mint,
    token_account_a,
    token_account_b,
    mint_a,
    mint_b,
    token_program_id,
    amp_factor,
    fee_numerator,
    fee_denominator,
) -> bytes:
    """Encode a swap info account the way the program writes it"""
    return STABLE_SWAP_LAYOUT.pack(
        int(is_initialized),
        bytes(pool_token_mint),
        bytes(token_account_a),
        bytes(token_account_b),
        bytes(mint_a),
        bytes(mint_b),
        bytes(token_program_id),
        int(amp_factor),
        int(fee_numerator),
        int(fee_denominator),
    )


def pack_descriptor(descriptor: PoolDescriptor) -> bytes:
    return pack_pool_state(
        descriptor.is_initialized,
        descriptor.pool_token_mint,
        descriptor.token_account_a,
        descriptor.token_account_b,
        descriptor.mint_a,
        descriptor.mint_b,
        descriptor.token_program_id,
        descriptor.amp_factor,
        descriptor.fee_numerator,
        descriptor.fee_denominator,
    )


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def payer():
    return Keypair()


@pytest.fixture
def program_id():
    return Pubkey.new_unique()


@pytest.fixture
def pool_keypair():
    return Keypair()


@pytest.fixture
def fast_config():
    """No sleeping, small bounds"""
    return TxBuilderConfig(
        compute_units=0,
        compute_unit_price=0,
        send_max_retries=3,
        retry_delay=0,
        confirmation_poll_interval=0,
        confirmation_max_polls=3,
        confirmation_timeout=5.0,
    )


@pytest.fixture
def descriptor(program_id):
    address = Pubkey.new_unique()
    return PoolDescriptor(
        program_id=program_id,
        address=address,
        authority=derive_authority(address, program_id),
        token_program_id=Pubkey.from_string(TOKEN_PROGRAM_ID),
        pool_token_mint=Pubkey.new_unique(),
        token_account_a=Pubkey.new_unique(),
        token_account_b=Pubkey.new_unique(),
        mint_a=Pubkey.new_unique(),
        mint_b=Pubkey.new_unique(),
        amp_factor=U64(100),
        fee_numerator=U64(4),
        fee_denominator=U64(10_000),
    )
