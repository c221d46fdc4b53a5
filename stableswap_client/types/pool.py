"""
Pool descriptor type
"""

from dataclasses import dataclass
from decimal import Decimal

from solders.pubkey import Pubkey

from .u64 import U64


@dataclass(frozen=True)
class PoolDescriptor:
    """
    Point-in-time snapshot of a StableSwap pool account

    The authority must be the program-derived address of (address, program_id);
    construction fails with InvalidAuthorityError otherwise. Callers reload the
    pool to observe state written by later transactions.

    Attributes:
        program_id: StableSwap program
        address: Pool (swap info) account
        authority: PDA that owns the pool token accounts
        token_program_id: SPL token program used by the pool
        pool_token_mint: Liquidity token mint
        token_account_a: Pool reserve account for token A
        token_account_b: Pool reserve account for token B
        mint_a: Mint of token A
        mint_b: Mint of token B
        amp_factor: Amplification coefficient (A)
        fee_numerator: Trading fee numerator
        fee_denominator: Trading fee denominator
        is_initialized: Initialization flag stored on chain
    """
    program_id: Pubkey
    address: Pubkey
    authority: Pubkey
    token_program_id: Pubkey
    pool_token_mint: Pubkey
    token_account_a: Pubkey
    token_account_b: Pubkey
    mint_a: Pubkey
    mint_b: Pubkey
    amp_factor: U64
    fee_numerator: U64
    fee_denominator: U64
    is_initialized: bool = True

    def __post_init__(self):
        # Import here to avoid circular import
        from ..program.instructions import derive_authority
        from ..errors import InvalidAuthorityError

        expected = derive_authority(self.address, self.program_id)
        if self.authority != expected:
            raise InvalidAuthorityError.mismatch(str(self.address), str(self.authority), str(expected))

    @property
    def fee_rate(self) -> Decimal:
        """Trading fee as a ratio (e.g. 0.0004 for 4 bps)"""
        if self.fee_denominator == 0:
            return Decimal(0)
        return Decimal(int(self.fee_numerator)) / Decimal(int(self.fee_denominator))

    def __repr__(self) -> str:
        return f"PoolDescriptor({str(self.address)[:8]}..., amp={int(self.amp_factor)})"
