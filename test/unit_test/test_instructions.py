"""
Unit tests for instruction encoding

Account lists are checked against literal fixtures: order and writability
are what the program dispatcher reads.
"""

import struct
import unittest
from decimal import Decimal

import pytest
from solders.pubkey import Pubkey

from stableswap_client.errors import ErrorCode, InvalidAddressError, ValueOutOfRangeError
from stableswap_client.program import (
    SYSTEM_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    InstructionTag,
    create_pool_account_instruction,
    deposit_instruction,
    derive_authority,
    find_authority,
    initialize_instruction,
    swap_instruction,
    withdraw_instruction,
)
from stableswap_client.types import AccountRef


def _keys(n):
    return [Pubkey.new_unique() for _ in range(n)]


def _flags(ix):
    return [(acc.pubkey, acc.is_signer, acc.is_writable) for acc in ix.accounts]


class TestSwapInstruction(unittest.TestCase):

    def setUp(self):
        (self.pool, self.authority, self.user_source, self.pool_source,
         self.pool_destination, self.user_destination, self.program_id) = _keys(7)
        self.token_program = Pubkey.from_string(TOKEN_PROGRAM_ID)

    def _swap(self, amount_in, minimum_amount_out):
        return swap_instruction(
            self.pool,
            self.authority,
            self.user_source,
            self.pool_source,
            self.pool_destination,
            self.user_destination,
            self.program_id,
            self.token_program,
            amount_in,
            minimum_amount_out,
        )

    def test_payload_bytes(self):
        ix = self._swap(1000, 990)

        self.assertEqual(len(ix.data), 17)
        self.assertEqual(ix.data, bytes.fromhex("01" "e803000000000000" "de03000000000000"))
        self.assertEqual(ix.tag, InstructionTag.SWAP)

    def test_accounts(self):
        ix = self._swap(1000, 990)

        self.assertEqual(ix.program_id, self.program_id)
        self.assertEqual(_flags(ix), [
            (self.pool, False, False),
            (self.authority, False, False),
            (self.user_source, False, True),
            (self.pool_source, False, True),
            (self.pool_destination, False, True),
            (self.user_destination, False, True),
            (self.token_program, False, False),
        ])

    def test_accepts_base58_strings(self):
        ix = swap_instruction(
            str(self.pool), str(self.authority), str(self.user_source), str(self.pool_source),
            str(self.pool_destination), str(self.user_destination), str(self.program_id),
            TOKEN_PROGRAM_ID, 5, 4,
        )
        self.assertEqual(ix.accounts[0].pubkey, self.pool)
        self.assertEqual(ix.accounts[6].pubkey, self.token_program)

    def test_invalid_base58_names_argument(self):
        with self.assertRaises(InvalidAddressError) as ctx:
            swap_instruction(
                self.pool, self.authority, "not-base58!", self.pool_source,
                self.pool_destination, self.user_destination, self.program_id,
                self.token_program, 5, 4,
            )
        self.assertEqual(ctx.exception.name, "user_source")
        self.assertEqual(ctx.exception.code, ErrorCode.INVALID_ADDRESS)
        self.assertIn("user_source", str(ctx.exception))
        self.assertIsNotNone(ctx.exception.original_error)

    def test_invalid_program_id_names_argument(self):
        with self.assertRaises(InvalidAddressError) as ctx:
            swap_instruction(
                self.pool, self.authority, self.user_source, self.pool_source,
                self.pool_destination, self.user_destination, "0OIl",
                self.token_program, 5, 4,
            )
        self.assertEqual(ctx.exception.name, "program_id")

    def test_max_u64(self):
        ix = self._swap(2**64 - 1, 0)
        self.assertEqual(ix.data[1:9], b"\xff" * 8)
        self.assertEqual(ix.data[9:], bytes(8))

    def test_negative_amount_rejected(self):
        with self.assertRaises(ValueOutOfRangeError) as ctx:
            self._swap(-1, 0)
        self.assertEqual(ctx.exception.name, "amount_in")

    def test_too_large_amount_rejected(self):
        with self.assertRaises(ValueOutOfRangeError) as ctx:
            self._swap(1, 2**64)
        self.assertEqual(ctx.exception.name, "minimum_amount_out")

    def test_fractional_amount_rejected(self):
        with self.assertRaises(ValueOutOfRangeError):
            self._swap(Decimal("1.5"), 0)
        with self.assertRaises(ValueOutOfRangeError):
            self._swap(0.5, 0)

    def test_integral_decimal_and_float_accepted(self):
        ix = self._swap(Decimal("1000"), 990.0)
        self.assertEqual(ix.data, struct.pack("<BQQ", 1, 1000, 990))

    def test_to_instruction(self):
        ix = self._swap(1000, 990).to_instruction()

        self.assertEqual(ix.program_id, self.program_id)
        self.assertEqual(bytes(ix.data), bytes.fromhex("01e803000000000000de03000000000000"))
        self.assertEqual(len(ix.accounts), 7)
        self.assertTrue(ix.accounts[2].is_writable)
        self.assertFalse(ix.accounts[0].is_writable)


class TestDepositInstruction(unittest.TestCase):

    def test_payload_and_accounts(self):
        (pool, authority, user_a, user_b, pool_a, pool_b, mint,
         destination, program_id, token_program) = _keys(10)

        ix = deposit_instruction(
            pool, authority, user_a, user_b, pool_a, pool_b, mint,
            destination, program_id, token_program, 100, 200, 50,
        )

        self.assertEqual(ix.name, "deposit")
        self.assertEqual(ix.data, struct.pack("<BQQQ", 2, 100, 200, 50))
        self.assertEqual(len(ix.data), 25)
        self.assertEqual(_flags(ix), [
            (pool, False, False),
            (authority, False, False),
            (user_a, False, True),
            (user_b, False, True),
            (pool_a, False, True),
            (pool_b, False, True),
            (mint, False, True),
            (destination, False, True),
            (token_program, False, False),
        ])

    def test_out_of_range(self):
        keys = _keys(10)
        with self.assertRaises(ValueOutOfRangeError):
            deposit_instruction(*keys, 1, 1, -5)


class TestWithdrawInstruction(unittest.TestCase):

    def test_payload_and_accounts(self):
        (pool, authority, mint, source, pool_a, pool_b, user_a,
         user_b, program_id, token_program) = _keys(10)

        ix = withdraw_instruction(
            pool, authority, mint, source, pool_a, pool_b, user_a,
            user_b, program_id, token_program, 75, 30, 40,
        )

        self.assertEqual(ix.name, "withdraw")
        self.assertEqual(ix.data, struct.pack("<BQQQ", 3, 75, 30, 40))
        self.assertEqual(_flags(ix), [
            (pool, False, False),
            (authority, False, False),
            (mint, False, True),
            (source, False, True),
            (pool_a, False, True),
            (pool_b, False, True),
            (user_a, False, True),
            (user_b, False, True),
            (token_program, False, False),
        ])


class TestInitializeInstruction(unittest.TestCase):

    def test_payload_and_accounts(self):
        pool, token_a, token_b, mint, destination, program_id = _keys(6)
        authority, nonce = find_authority(pool, program_id)

        ix = initialize_instruction(
            pool, authority, token_a, token_b, mint, destination,
            program_id, nonce, 100, 4, 10_000,
        )

        self.assertEqual(ix.data, struct.pack("<BBQQQ", 0, nonce, 100, 4, 10_000))
        self.assertEqual(len(ix.data), 26)
        self.assertEqual(_flags(ix), [
            (pool, False, True),
            (authority, False, False),
            (token_a, False, False),
            (token_b, False, False),
            (mint, False, True),
            (destination, False, True),
            (Pubkey.from_string(TOKEN_PROGRAM_ID), False, False),
        ])

    def test_nonce_must_fit_in_byte(self):
        keys = _keys(7)
        with self.assertRaises(ValueOutOfRangeError):
            initialize_instruction(*keys[:7], 256, 1, 1, 1)
        with self.assertRaises(ValueOutOfRangeError):
            initialize_instruction(*keys[:7], -1, 1, 1, 1)


def test_create_pool_account_instruction():
    payer, new_account, program_id = _keys(3)

    ix = create_pool_account_instruction(payer, new_account, 1_000_000, 217, program_id)

    assert ix.program_id == Pubkey.from_string(SYSTEM_PROGRAM_ID)
    assert ix.accounts == (
        AccountRef(payer, is_signer=True, is_writable=True),
        AccountRef(new_account, is_signer=True, is_writable=True),
    )
    # SystemInstruction::CreateAccount: u32 index, u64 lamports, u64 space, owner
    assert ix.data[:4] == (0).to_bytes(4, "little")
    assert ix.data[4:12] == (1_000_000).to_bytes(8, "little")
    assert ix.data[12:20] == (217).to_bytes(8, "little")
    assert ix.data[20:] == bytes(program_id)


def test_authority_is_deterministic():
    pool, program_id = _keys(2)

    authority, bump = find_authority(pool, program_id)

    assert derive_authority(pool, program_id) == authority
    assert derive_authority(str(pool), str(program_id)) == authority
    assert 0 <= bump <= 255
    assert authority != derive_authority(pool, Pubkey.new_unique())


def test_authority_rejects_invalid_address():
    with pytest.raises(InvalidAddressError) as exc_info:
        find_authority("pool-address", Pubkey.new_unique())

    assert exc_info.value.name == "pool"
    # Still a ValueError for callers that catch the builtin
    assert isinstance(exc_info.value, ValueError)
