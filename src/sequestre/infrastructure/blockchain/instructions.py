"""
Escrow program instruction builder.

The program reads its accounts by position and dispatches on the first
data byte, so payload layout and account order are fixed by its ABI:

    Initialize  [0x00] ++ u64 expected amount   5 accounts
    Exchange    [0x01] ++ u64 expected amount   9 accounts
    Cancel      [0x02]                          6 accounts

Builders are pure: they take resolved addresses and never touch the
network.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Tuple

from borsh_construct import U8, U64, CStruct
from solders.instruction import AccountMeta, Instruction  # type: ignore
from solders.pubkey import Pubkey  # type: ignore
from spl.token.constants import TOKEN_PROGRAM_ID  # type: ignore

from sequestre.utils.amounts import check_u64
from sequestre.utils.validation import validate_account_roles

AMOUNT_INSTRUCTION_LAYOUT = CStruct("opcode" / U8, "amount" / U64)
TAG_INSTRUCTION_LAYOUT = CStruct("opcode" / U8)


class EscrowOpcode(IntEnum):
    """Escrow instruction discriminators."""

    INITIALIZE = 0
    EXCHANGE = 1
    CANCEL = 2


ACCOUNT_COUNTS = {
    EscrowOpcode.INITIALIZE: 5,
    EscrowOpcode.EXCHANGE: 9,
    EscrowOpcode.CANCEL: 6,
}


@dataclass(frozen=True)
class AccountRole:
    """One positional account of an instruction."""

    pubkey: Pubkey
    is_signer: bool
    is_writable: bool

    def to_account_meta(self) -> AccountMeta:
        """Convert to solders AccountMeta."""
        return AccountMeta(self.pubkey, self.is_signer, self.is_writable)


@dataclass(frozen=True)
class EscrowInstruction:
    """Opcode, payload bytes and ordered account roles of one call."""

    opcode: EscrowOpcode
    data: bytes
    accounts: Tuple[AccountRole, ...]

    def to_instruction(self, program_id: Pubkey) -> Instruction:
        """Build the solders Instruction addressed to program_id."""
        return Instruction(
            program_id,
            self.data,
            [role.to_account_meta() for role in self.accounts],
        )


def _signer(pubkey: Pubkey) -> AccountRole:
    return AccountRole(pubkey, is_signer=True, is_writable=False)


def _writable(pubkey: Pubkey) -> AccountRole:
    return AccountRole(pubkey, is_signer=False, is_writable=True)


def _readonly(pubkey: Pubkey) -> AccountRole:
    return AccountRole(pubkey, is_signer=False, is_writable=False)


def _encode_with_amount(opcode: EscrowOpcode, amount: int) -> bytes:
    return AMOUNT_INSTRUCTION_LAYOUT.build(
        {"opcode": int(opcode), "amount": check_u64(amount)}
    )


def _finish(opcode: EscrowOpcode, data: bytes, roles: list) -> EscrowInstruction:
    validate_account_roles(roles, ACCOUNT_COUNTS[opcode], opcode.name.lower())
    return EscrowInstruction(opcode=opcode, data=data, accounts=tuple(roles))


def build_initialize(
    initiator: Pubkey,
    initiator_temp_token_account: Pubkey,
    initiator_receiving_token_account: Pubkey,
    escrow_account: Pubkey,
    expected_amount: int,
    token_program: Pubkey = TOKEN_PROGRAM_ID,
) -> EscrowInstruction:
    """
    Build the instruction that opens an escrow.

    Args:
        initiator: Wallet starting the trade (signs)
        initiator_temp_token_account: Token account holding the deposit;
            the program moves its ownership to the escrow PDA
        initiator_receiving_token_account: Where the counter payment lands
        escrow_account: Freshly created escrow state account
        expected_amount: Counter amount the initiator expects, base units
        token_program: SPL Token program id

    Returns:
        EscrowInstruction with opcode 0 and 5 accounts

    Raises:
        EncodingError: If expected_amount is not a u64
    """
    data = _encode_with_amount(EscrowOpcode.INITIALIZE, expected_amount)
    roles = [
        _signer(initiator),
        _writable(initiator_temp_token_account),
        _readonly(initiator_receiving_token_account),
        _writable(escrow_account),
        _readonly(token_program),
    ]
    return _finish(EscrowOpcode.INITIALIZE, data, roles)


def build_exchange(
    counterparty: Pubkey,
    counterparty_send_token_account: Pubkey,
    counterparty_receive_token_account: Pubkey,
    initiator_temp_token_account: Pubkey,
    initiator: Pubkey,
    initiator_receiving_token_account: Pubkey,
    escrow_account: Pubkey,
    counter_amount: int,
    program_derived_address: Pubkey,
    token_program: Pubkey = TOKEN_PROGRAM_ID,
) -> EscrowInstruction:
    """
    Build the instruction that settles an escrow.

    The initiator account is writable because it receives the lamports of
    the closed temp token and escrow accounts. The PDA is read-only and
    never a transaction signer; the program signs for it internally.

    Args:
        counterparty: Wallet taking the trade (signs)
        counterparty_send_token_account: Counterparty's paying token account
        counterparty_receive_token_account: Counterparty's receiving token account
        initiator_temp_token_account: Temp account holding the deposit
        initiator: Initiator wallet
        initiator_receiving_token_account: Initiator's receiving token account
        escrow_account: Escrow state account
        counter_amount: Amount the counterparty expects to receive
        program_derived_address: Escrow PDA
        token_program: SPL Token program id

    Returns:
        EscrowInstruction with opcode 1 and 9 accounts

    Raises:
        EncodingError: If counter_amount is not a u64
    """
    data = _encode_with_amount(EscrowOpcode.EXCHANGE, counter_amount)
    roles = [
        _signer(counterparty),
        _writable(counterparty_send_token_account),
        _writable(counterparty_receive_token_account),
        _writable(initiator_temp_token_account),
        _writable(initiator),
        _writable(initiator_receiving_token_account),
        _writable(escrow_account),
        _readonly(token_program),
        _readonly(program_derived_address),
    ]
    return _finish(EscrowOpcode.EXCHANGE, data, roles)


def build_cancel(
    initiator: Pubkey,
    escrow_account: Pubkey,
    initiator_temp_token_account: Pubkey,
    initiator_refund_token_account: Pubkey,
    program_derived_address: Pubkey,
    token_program: Pubkey = TOKEN_PROGRAM_ID,
) -> EscrowInstruction:
    """
    Build the instruction that cancels an open escrow.

    Returns:
        EscrowInstruction with opcode 2, a 1-byte payload and 6 accounts
    """
    data = TAG_INSTRUCTION_LAYOUT.build({"opcode": int(EscrowOpcode.CANCEL)})
    roles = [
        _signer(initiator),
        _writable(escrow_account),
        _writable(initiator_temp_token_account),
        _writable(initiator_refund_token_account),
        _readonly(token_program),
        _readonly(program_derived_address),
    ]
    return _finish(EscrowOpcode.CANCEL, data, roles)
