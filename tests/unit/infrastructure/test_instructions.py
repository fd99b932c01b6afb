"""
Unit tests for escrow instruction builders.

Usage:
    pytest tests/unit/infrastructure/test_instructions.py
"""

import pytest
from solders.pubkey import Pubkey  # type: ignore
from spl.token.constants import TOKEN_PROGRAM_ID  # type: ignore

from sequestre.domain.exceptions import EncodingError
from sequestre.infrastructure.blockchain import (
    EscrowOpcode,
    build_cancel,
    build_exchange,
    build_initialize,
)

PROGRAM_ID = Pubkey.from_string("FZoqAsnuaq832FezFs7bNeuNtHHg7c8QsnJqmKM9JpCm")


def _flags(instruction):
    return [(role.is_signer, role.is_writable) for role in instruction.accounts]


def _keys(instruction):
    return [role.pubkey for role in instruction.accounts]


class TestBuildInitialize:
    """Tests for build_initialize."""

    def _build(self, amount=10_000_000):
        self.keys = [Pubkey.new_unique() for _ in range(4)]
        return build_initialize(*self.keys, expected_amount=amount)

    def test_payload(self):
        """Opcode 0 followed by the little-endian amount."""
        instruction = self._build()

        assert instruction.opcode == EscrowOpcode.INITIALIZE
        assert len(instruction.data) == 9
        assert instruction.data[0] == 0
        assert instruction.data[1:] == (10_000_000).to_bytes(8, "little")

    def test_account_roles(self):
        """Five accounts; only the initiator signs."""
        instruction = self._build()

        assert _keys(instruction) == self.keys + [TOKEN_PROGRAM_ID]
        assert _flags(instruction) == [
            (True, False),
            (False, True),
            (False, False),
            (False, True),
            (False, False),
        ]

    def test_custom_token_program(self):
        """Token program can be overridden."""
        token_program = Pubkey.new_unique()
        keys = [Pubkey.new_unique() for _ in range(4)]
        instruction = build_initialize(
            *keys, expected_amount=1, token_program=token_program
        )
        assert instruction.accounts[4].pubkey == token_program

    @pytest.mark.parametrize("amount", [-1, 2**64, 1.5, "10", True])
    def test_rejects_unencodable_amount(self, amount):
        """Amounts outside u64 raise EncodingError."""
        with pytest.raises(EncodingError):
            self._build(amount=amount)

    def test_accepts_u64_bounds(self):
        """0 and 2^64 - 1 are valid."""
        assert self._build(amount=0).data[1:] == bytes(8)
        assert self._build(amount=2**64 - 1).data[1:] == b"\xff" * 8

    def test_to_instruction(self):
        """Converted instruction keeps data, order and flags."""
        escrow_instruction = self._build()
        instruction = escrow_instruction.to_instruction(PROGRAM_ID)

        assert instruction.program_id == PROGRAM_ID
        assert bytes(instruction.data) == escrow_instruction.data
        assert [meta.pubkey for meta in instruction.accounts] == _keys(
            escrow_instruction
        )
        assert [
            (meta.is_signer, meta.is_writable) for meta in instruction.accounts
        ] == _flags(escrow_instruction)


class TestBuildExchange:
    """Tests for build_exchange."""

    def _build(self, amount=5_000_000):
        self.keys = [Pubkey.new_unique() for _ in range(7)]
        self.pda = Pubkey.new_unique()
        return build_exchange(
            *self.keys, counter_amount=amount, program_derived_address=self.pda
        )

    def test_payload(self):
        """Opcode 1 followed by the little-endian amount."""
        instruction = self._build()

        assert instruction.opcode == EscrowOpcode.EXCHANGE
        assert len(instruction.data) == 9
        assert instruction.data[0] == 1
        assert instruction.data[1:] == (5_000_000).to_bytes(8, "little")

    def test_account_roles(self):
        """Nine accounts in ABI order; the PDA never signs."""
        instruction = self._build()

        assert _keys(instruction) == self.keys + [TOKEN_PROGRAM_ID, self.pda]
        assert _flags(instruction) == [
            (True, False),
            (False, True),
            (False, True),
            (False, True),
            (False, True),
            (False, True),
            (False, True),
            (False, False),
            (False, False),
        ]

    def test_rejects_unencodable_amount(self):
        """Amount of 2^64 raises EncodingError."""
        with pytest.raises(EncodingError):
            self._build(amount=2**64)


class TestBuildCancel:
    """Tests for build_cancel."""

    def _build(self):
        self.keys = [Pubkey.new_unique() for _ in range(4)]
        self.pda = Pubkey.new_unique()
        return build_cancel(*self.keys, program_derived_address=self.pda)

    def test_payload(self):
        """Opcode 2 with no amount."""
        instruction = self._build()

        assert instruction.opcode == EscrowOpcode.CANCEL
        assert instruction.data == b"\x02"

    def test_account_roles(self):
        """Six accounts in ABI order."""
        instruction = self._build()

        assert _keys(instruction) == self.keys + [TOKEN_PROGRAM_ID, self.pda]
        assert _flags(instruction) == [
            (True, False),
            (False, True),
            (False, True),
            (False, True),
            (False, False),
            (False, False),
        ]
