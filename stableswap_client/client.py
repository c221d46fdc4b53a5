"""
StableSwap - Client for a deployed stable swap pool

Loads or creates a pool and submits swap, deposit and withdraw transactions
against it.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from .infra import LedgerTransport, Signer, TxBuilder, TxBuilderConfig, as_signer
from .program import (
    STABLE_SWAP_SPAN,
    TOKEN_PROGRAM_ID,
    create_pool_account_instruction,
    decode_pool_state,
    deposit_instruction,
    initialize_instruction,
    swap_instruction,
    withdraw_instruction,
)
from .types import Amount, PoolDescriptor, PubkeyLike, U64, to_pubkey, to_u64, to_u8
from .errors import AccountNotFoundError, MalformedAccountError, PoolNotInitializedError

logger = logging.getLogger(__name__)


class StableSwap:
    """
    Client for one stable swap pool

    Holds an immutable PoolDescriptor snapshot. swap/deposit/withdraw never
    refresh it; call load() again to observe new pool state.

    Usage:
        from solders.keypair import Keypair

        rpc = RpcClient("https://api.devnet.solana.com")
        pool = StableSwap.load(rpc, pool_address, program_id, payer)

        signature = pool.swap(
            user_source, pool.token_account_a,
            pool.token_account_b, user_destination,
            amount_in=1_000_000, minimum_amount_out=990_000,
        )
    """

    def __init__(
        self,
        transport: LedgerTransport,
        descriptor: PoolDescriptor,
        payer: Union[Signer, Keypair],
        config: Optional[TxBuilderConfig] = None,
    ):
        self._transport = transport
        self._descriptor = descriptor
        self._payer = as_signer(payer)
        self._tx_builder = TxBuilder(transport, config=config)

    @property
    def transport(self) -> LedgerTransport:
        return self._transport

    @property
    def descriptor(self) -> PoolDescriptor:
        """Pool state as of load/create"""
        return self._descriptor

    @property
    def payer(self) -> Signer:
        return self._payer

    @property
    def tx_builder(self) -> TxBuilder:
        return self._tx_builder

    @property
    def address(self) -> Pubkey:
        return self._descriptor.address

    @property
    def program_id(self) -> Pubkey:
        return self._descriptor.program_id

    @property
    def authority(self) -> Pubkey:
        return self._descriptor.authority

    @property
    def token_program_id(self) -> Pubkey:
        return self._descriptor.token_program_id

    @property
    def pool_token_mint(self) -> Pubkey:
        return self._descriptor.pool_token_mint

    @property
    def token_account_a(self) -> Pubkey:
        return self._descriptor.token_account_a

    @property
    def token_account_b(self) -> Pubkey:
        return self._descriptor.token_account_b

    @property
    def mint_a(self) -> Pubkey:
        return self._descriptor.mint_a

    @property
    def mint_b(self) -> Pubkey:
        return self._descriptor.mint_b

    @property
    def amp_factor(self) -> U64:
        return self._descriptor.amp_factor

    @property
    def fee_numerator(self) -> U64:
        return self._descriptor.fee_numerator

    @property
    def fee_denominator(self) -> U64:
        return self._descriptor.fee_denominator

    @staticmethod
    def get_min_balance_rent_for_exempt_stable_swap(transport: LedgerTransport) -> int:
        """Lamports needed to keep a swap info account rent exempt"""
        return transport.minimum_balance_for_rent_exemption(STABLE_SWAP_SPAN)

    @classmethod
    def load(
        cls,
        transport: LedgerTransport,
        address: PubkeyLike,
        program_id: PubkeyLike,
        payer: Union[Signer, Keypair],
        config: Optional[TxBuilderConfig] = None,
    ) -> "StableSwap":
        """
        Load an on-chain pool

        Args:
            transport: Ledger transport
            address: Swap info account
            program_id: StableSwap program that owns the account
            payer: Pays for transactions submitted through this client
            config: Optional transaction builder configuration

        Returns:
            StableSwap over the decoded descriptor

        Raises:
            AccountNotFoundError: No account at address
            MalformedAccountError: Wrong owner, size or init flag encoding
            PoolNotInitializedError: Account exists but is not initialized
        """
        address = to_pubkey(address, "address")
        program_id = to_pubkey(program_id, "program_id")

        account = transport.fetch_account(str(address))
        if account is None:
            raise AccountNotFoundError.not_found(str(address))

        if account.owner != str(program_id):
            raise MalformedAccountError.wrong_owner(str(address), account.owner, str(program_id))

        descriptor = decode_pool_state(account.data, address, program_id)
        if not descriptor.is_initialized:
            raise PoolNotInitializedError.not_initialized(str(address))

        logger.debug(f"Loaded pool {address}: amp={descriptor.amp_factor}, fee={descriptor.fee_rate}")
        return cls(transport, descriptor, payer, config=config)

    @classmethod
    def create(
        cls,
        transport: LedgerTransport,
        payer: Union[Signer, Keypair],
        stable_swap_account: Union[Signer, Keypair],
        authority: PubkeyLike,
        token_account_a: PubkeyLike,
        token_account_b: PubkeyLike,
        pool_token_mint: PubkeyLike,
        mint_a: PubkeyLike,
        mint_b: PubkeyLike,
        destination_pool_token_account: PubkeyLike,
        program_id: PubkeyLike,
        token_program_id: Optional[PubkeyLike],
        nonce: int,
        amp_factor: Amount,
        fee_numerator: Amount,
        fee_denominator: Amount,
        config: Optional[TxBuilderConfig] = None,
        timeout: Optional[float] = None,
    ) -> "StableSwap":
        """
        Allocate and initialize a new pool in one transaction

        The returned client wraps the locally built descriptor; it is not
        re-fetched from the ledger.

        Raises:
            ValueOutOfRangeError: nonce or an amount does not fit its field
            InvalidAuthorityError: authority is not the pool's program address
        """
        payer = as_signer(payer)
        pool_signer = as_signer(stable_swap_account)
        pool_address = Pubkey.from_string(pool_signer.pubkey)
        program_id = to_pubkey(program_id, "program_id")
        token_program_id = to_pubkey(token_program_id or TOKEN_PROGRAM_ID, "token_program_id")

        descriptor = PoolDescriptor(
            program_id=program_id,
            address=pool_address,
            authority=to_pubkey(authority, "authority"),
            token_program_id=token_program_id,
            pool_token_mint=to_pubkey(pool_token_mint, "pool_token_mint"),
            token_account_a=to_pubkey(token_account_a, "token_account_a"),
            token_account_b=to_pubkey(token_account_b, "token_account_b"),
            mint_a=to_pubkey(mint_a, "mint_a"),
            mint_b=to_pubkey(mint_b, "mint_b"),
            amp_factor=to_u64(amp_factor, "amp_factor"),
            fee_numerator=to_u64(fee_numerator, "fee_numerator"),
            fee_denominator=to_u64(fee_denominator, "fee_denominator"),
        )

        initialize = initialize_instruction(
            pool_account=pool_address,
            authority=descriptor.authority,
            token_account_a=descriptor.token_account_a,
            token_account_b=descriptor.token_account_b,
            pool_token_mint=descriptor.pool_token_mint,
            destination_pool_token_account=destination_pool_token_account,
            program_id=program_id,
            nonce=to_u8(nonce, "nonce"),
            amp_factor=descriptor.amp_factor,
            fee_numerator=descriptor.fee_numerator,
            fee_denominator=descriptor.fee_denominator,
            token_program_id=token_program_id,
        )

        balance_needed = cls.get_min_balance_rent_for_exempt_stable_swap(transport)
        allocate = create_pool_account_instruction(
            payer=payer.pubkey,
            new_account=pool_address,
            lamports=balance_needed,
            space=STABLE_SWAP_SPAN,
            program_id=program_id,
        )

        client = cls(transport, descriptor, payer, config=config)
        signature = client.tx_builder.submit(
            "createAccount and InitializeSwap",
            [allocate, initialize],
            payer,
            extra_signers=[pool_signer],
            timeout=timeout,
        )
        logger.info(f"Created pool {pool_address}: {signature}")
        return client

    def swap(
        self,
        user_source: PubkeyLike,
        pool_source: PubkeyLike,
        pool_destination: PubkeyLike,
        user_destination: PubkeyLike,
        amount_in: Amount,
        minimum_amount_out: Amount,
        timeout: Optional[float] = None,
    ) -> str:
        """
        Swap one pool token for the other

        Args:
            user_source: User account debited
            pool_source: Pool reserve credited (same mint as user_source)
            pool_destination: Pool reserve debited
            user_destination: User account credited
            amount_in: Amount of source token to swap
            minimum_amount_out: Slippage floor, enforced by the program
            timeout: Confirmation cutoff in seconds

        Returns:
            Transaction signature
        """
        d = self._descriptor
        ix = swap_instruction(
            d.address,
            d.authority,
            user_source,
            pool_source,
            pool_destination,
            user_destination,
            d.program_id,
            d.token_program_id,
            amount_in,
            minimum_amount_out,
        )
        return self._tx_builder.submit("swap", [ix], self._payer, timeout=timeout)

    def deposit(
        self,
        user_account_a: PubkeyLike,
        user_account_b: PubkeyLike,
        pool_account: PubkeyLike,
        token_amount_a: Amount,
        token_amount_b: Amount,
        minimum_pool_token_amount: Amount,
        timeout: Optional[float] = None,
    ) -> str:
        """
        Deposit both tokens for pool tokens

        Args:
            user_account_a: User token A account
            user_account_b: User token B account
            pool_account: Destination for minted pool tokens
            token_amount_a: Amount of token A
            token_amount_b: Amount of token B
            minimum_pool_token_amount: Minimum pool tokens to receive
            timeout: Confirmation cutoff in seconds

        Returns:
            Transaction signature
        """
        d = self._descriptor
        ix = deposit_instruction(
            d.address,
            d.authority,
            user_account_a,
            user_account_b,
            d.token_account_a,
            d.token_account_b,
            d.pool_token_mint,
            pool_account,
            d.program_id,
            d.token_program_id,
            token_amount_a,
            token_amount_b,
            minimum_pool_token_amount,
        )
        return self._tx_builder.submit("deposit", [ix], self._payer, timeout=timeout)

    def withdraw(
        self,
        user_account_a: PubkeyLike,
        user_account_b: PubkeyLike,
        pool_account: PubkeyLike,
        pool_token_amount: Amount,
        minimum_token_a: Amount,
        minimum_token_b: Amount,
        timeout: Optional[float] = None,
    ) -> str:
        """
        Burn pool tokens for both underlying tokens

        Args:
            user_account_a: Receives token A
            user_account_b: Receives token B
            pool_account: Pool token account burned from
            pool_token_amount: Pool tokens to burn
            minimum_token_a: Minimum token A to receive
            minimum_token_b: Minimum token B to receive
            timeout: Confirmation cutoff in seconds

        Returns:
            Transaction signature
        """
        d = self._descriptor
        ix = withdraw_instruction(
            d.address,
            d.authority,
            d.pool_token_mint,
            pool_account,
            d.token_account_a,
            d.token_account_b,
            user_account_a,
            user_account_b,
            d.program_id,
            d.token_program_id,
            pool_token_amount,
            minimum_token_a,
            minimum_token_b,
        )
        return self._tx_builder.submit("withdraw", [ix], self._payer, timeout=timeout)

    def __repr__(self) -> str:
        return f"StableSwap({self._descriptor!r})"
