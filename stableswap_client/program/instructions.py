"""
StableSwap Instruction Builders

Every builder is pure: it validates and encodes its arguments and returns an
InstructionRequest. Account order and writability follow the program's
dispatcher exactly.
"""

import struct
from typing import Optional, Tuple

from solders.pubkey import Pubkey
from solders.system_program import CreateAccountParams, create_account

from ..types import (
    AccountRef,
    Amount,
    InstructionRequest,
    PubkeyLike,
    to_pubkey,
    to_u64,
    to_u8,
)
from .constants import (
    TOKEN_PROGRAM_ID,
    InstructionTag,
    INITIALIZE_DATA_FORMAT,
    SWAP_DATA_FORMAT,
    DEPOSIT_DATA_FORMAT,
    WITHDRAW_DATA_FORMAT,
)


def find_authority(pool: PubkeyLike, program_id: PubkeyLike) -> Tuple[Pubkey, int]:
    """
    Find the pool authority PDA and its bump seed.

    Seeds: [pool address bytes]

    Args:
        pool: Swap info account address
        program_id: StableSwap program ID

    Returns:
        (authority, bump)
    """
    seeds = [bytes(to_pubkey(pool, "pool"))]
    return Pubkey.find_program_address(seeds, to_pubkey(program_id, "program_id"))


def derive_authority(pool: PubkeyLike, program_id: PubkeyLike) -> Pubkey:
    """Pool authority PDA for (pool, program_id)"""
    authority, _ = find_authority(pool, program_id)
    return authority


def _readonly(pubkey: PubkeyLike, name: str) -> AccountRef:
    return AccountRef(to_pubkey(pubkey, name), is_signer=False, is_writable=False)


def _writable(pubkey: PubkeyLike, name: str) -> AccountRef:
    return AccountRef(to_pubkey(pubkey, name), is_signer=False, is_writable=True)


def create_pool_account_instruction(
    payer: PubkeyLike,
    new_account: PubkeyLike,
    lamports: int,
    space: int,
    program_id: PubkeyLike,
) -> InstructionRequest:
    """
    Build system program create_account for the swap info account.

    Both payer and new account must sign the enclosing transaction.

    Args:
        payer: Funding account
        new_account: Account to allocate
        lamports: Rent-exempt balance to transfer
        space: Bytes to allocate (the swap info span)
        program_id: Owner of the new account (StableSwap program)

    Returns:
        InstructionRequest for create_account
    """
    ix = create_account(
        CreateAccountParams(
            from_pubkey=to_pubkey(payer, "payer"),
            to_pubkey=to_pubkey(new_account, "new_account"),
            lamports=int(lamports),
            space=int(space),
            owner=to_pubkey(program_id, "program_id"),
        )
    )
    return InstructionRequest.from_instruction("create_account", ix)


def initialize_instruction(
    pool_account: PubkeyLike,
    authority: PubkeyLike,
    token_account_a: PubkeyLike,
    token_account_b: PubkeyLike,
    pool_token_mint: PubkeyLike,
    destination_pool_token_account: PubkeyLike,
    program_id: PubkeyLike,
    nonce: int,
    amp_factor: Amount,
    fee_numerator: Amount,
    fee_denominator: Amount,
    token_program_id: Optional[PubkeyLike] = None,
) -> InstructionRequest:
    """
    Build initialize instruction (tag 0).

    Data: tag(u8) | nonce(u8) | amp_factor(u64) | fee_numerator(u64) | fee_denominator(u64)

    Accounts:
        0. [writable] Swap info account
        1. [] Authority
        2. [] Token account A
        3. [] Token account B
        4. [writable] Pool token mint
        5. [writable] Destination pool token account
        6. [] Token program
    """
    data = struct.pack(
        INITIALIZE_DATA_FORMAT,
        InstructionTag.INITIALIZE,
        to_u8(nonce, "nonce"),
        to_u64(amp_factor, "amp_factor"),
        to_u64(fee_numerator, "fee_numerator"),
        to_u64(fee_denominator, "fee_denominator"),
    )

    accounts = (
        _writable(pool_account, "pool_account"),
        _readonly(authority, "authority"),
        _readonly(token_account_a, "token_account_a"),
        _readonly(token_account_b, "token_account_b"),
        _writable(pool_token_mint, "pool_token_mint"),
        _writable(destination_pool_token_account, "destination_pool_token_account"),
        _readonly(token_program_id or TOKEN_PROGRAM_ID, "token_program_id"),
    )

    return InstructionRequest("initialize", to_pubkey(program_id, "program_id"), accounts, data)


def swap_instruction(
    pool: PubkeyLike,
    authority: PubkeyLike,
    user_source: PubkeyLike,
    pool_source: PubkeyLike,
    pool_destination: PubkeyLike,
    user_destination: PubkeyLike,
    program_id: PubkeyLike,
    token_program_id: PubkeyLike,
    amount_in: Amount,
    minimum_amount_out: Amount,
) -> InstructionRequest:
    """
    Build swap instruction (tag 1).

    The program enforces minimum_amount_out; it is only transported here.

    Data: tag(u8) | amount_in(u64) | minimum_amount_out(u64)

    Accounts:
        0. [] Swap info account
        1. [] Authority
        2. [writable] User source token account
        3. [writable] Pool source reserve
        4. [writable] Pool destination reserve
        5. [writable] User destination token account
        6. [] Token program
    """
    data = struct.pack(
        SWAP_DATA_FORMAT,
        InstructionTag.SWAP,
        to_u64(amount_in, "amount_in"),
        to_u64(minimum_amount_out, "minimum_amount_out"),
    )

    accounts = (
        _readonly(pool, "pool"),
        _readonly(authority, "authority"),
        _writable(user_source, "user_source"),
        _writable(pool_source, "pool_source"),
        _writable(pool_destination, "pool_destination"),
        _writable(user_destination, "user_destination"),
        _readonly(token_program_id, "token_program_id"),
    )

    return InstructionRequest("swap", to_pubkey(program_id, "program_id"), accounts, data)


def deposit_instruction(
    pool: PubkeyLike,
    authority: PubkeyLike,
    user_account_a: PubkeyLike,
    user_account_b: PubkeyLike,
    pool_token_account_a: PubkeyLike,
    pool_token_account_b: PubkeyLike,
    pool_token_mint: PubkeyLike,
    destination_pool_account: PubkeyLike,
    program_id: PubkeyLike,
    token_program_id: PubkeyLike,
    token_amount_a: Amount,
    token_amount_b: Amount,
    minimum_pool_token_amount: Amount,
) -> InstructionRequest:
    """
    Build deposit instruction (tag 2).

    Data: tag(u8) | token_amount_a(u64) | token_amount_b(u64) | minimum_pool_token_amount(u64)

    Accounts:
        0. [] Swap info account
        1. [] Authority
        2. [writable] User token A account
        3. [writable] User token B account
        4. [writable] Pool reserve A
        5. [writable] Pool reserve B
        6. [writable] Pool token mint
        7. [writable] Destination pool token account
        8. [] Token program
    """
    data = struct.pack(
        DEPOSIT_DATA_FORMAT,
        InstructionTag.DEPOSIT,
        to_u64(token_amount_a, "token_amount_a"),
        to_u64(token_amount_b, "token_amount_b"),
        to_u64(minimum_pool_token_amount, "minimum_pool_token_amount"),
    )

    accounts = (
        _readonly(pool, "pool"),
        _readonly(authority, "authority"),
        _writable(user_account_a, "user_account_a"),
        _writable(user_account_b, "user_account_b"),
        _writable(pool_token_account_a, "pool_token_account_a"),
        _writable(pool_token_account_b, "pool_token_account_b"),
        _writable(pool_token_mint, "pool_token_mint"),
        _writable(destination_pool_account, "destination_pool_account"),
        _readonly(token_program_id, "token_program_id"),
    )

    return InstructionRequest("deposit", to_pubkey(program_id, "program_id"), accounts, data)


def withdraw_instruction(
    pool: PubkeyLike,
    authority: PubkeyLike,
    pool_token_mint: PubkeyLike,
    source_pool_account: PubkeyLike,
    pool_token_account_a: PubkeyLike,
    pool_token_account_b: PubkeyLike,
    user_account_a: PubkeyLike,
    user_account_b: PubkeyLike,
    program_id: PubkeyLike,
    token_program_id: PubkeyLike,
    pool_token_amount: Amount,
    minimum_token_a: Amount,
    minimum_token_b: Amount,
) -> InstructionRequest:
    """
    Build withdraw instruction (tag 3).

    Data: tag(u8) | pool_token_amount(u64) | minimum_token_a(u64) | minimum_token_b(u64)

    Accounts:
        0. [] Swap info account
        1. [] Authority
        2. [writable] Pool token mint
        3. [writable] Source pool token account
        4. [writable] Pool reserve A
        5. [writable] Pool reserve B
        6. [writable] User token A account
        7. [writable] User token B account
        8. [] Token program
    """
    data = struct.pack(
        WITHDRAW_DATA_FORMAT,
        InstructionTag.WITHDRAW,
        to_u64(pool_token_amount, "pool_token_amount"),
        to_u64(minimum_token_a, "minimum_token_a"),
        to_u64(minimum_token_b, "minimum_token_b"),
    )

    accounts = (
        _readonly(pool, "pool"),
        _readonly(authority, "authority"),
        _writable(pool_token_mint, "pool_token_mint"),
        _writable(source_pool_account, "source_pool_account"),
        _writable(pool_token_account_a, "pool_token_account_a"),
        _writable(pool_token_account_b, "pool_token_account_b"),
        _writable(user_account_a, "user_account_a"),
        _writable(user_account_b, "user_account_b"),
        _readonly(token_program_id, "token_program_id"),
    )

    return InstructionRequest("withdraw", to_pubkey(program_id, "program_id"), accounts, data)
