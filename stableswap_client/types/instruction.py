"""
Instruction request types
"""

from dataclasses import dataclass
from typing import List, Tuple

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey


@dataclass(frozen=True)
class AccountRef:
    """One entry of an instruction's ordered account list"""
    pubkey: Pubkey
    is_signer: bool = False
    is_writable: bool = False

    def to_meta(self) -> AccountMeta:
        return AccountMeta(self.pubkey, is_signer=self.is_signer, is_writable=self.is_writable)


@dataclass(frozen=True)
class InstructionRequest:
    """
    A program instruction ready to be placed in a transaction

    Attributes:
        name: Logical operation name ("initialize", "swap", ...)
        program_id: Program that dispatches the instruction
        accounts: Ordered account references (order is part of the wire format)
        data: Tag byte followed by the encoded arguments
    """
    name: str
    program_id: Pubkey
    accounts: Tuple[AccountRef, ...]
    data: bytes

    @property
    def tag(self) -> int:
        return self.data[0]

    def addresses(self) -> List[str]:
        """Account addresses in order (base58), for diagnostics"""
        return [str(acc.pubkey) for acc in self.accounts]

    @classmethod
    def from_instruction(cls, name: str, instruction: Instruction) -> "InstructionRequest":
        """Wrap an instruction built elsewhere (e.g. system program)"""
        return cls(
            name=name,
            program_id=instruction.program_id,
            accounts=tuple(
                AccountRef(meta.pubkey, meta.is_signer, meta.is_writable)
                for meta in instruction.accounts
            ),
            data=bytes(instruction.data),
        )

    def to_instruction(self) -> Instruction:
        return Instruction(
            self.program_id,
            self.data,
            [acc.to_meta() for acc in self.accounts],
        )
