"""
Checks shared by the escrow flows.
"""

from typing import Dict, Optional

from solders.pubkey import Pubkey  # type: ignore

from sequestre.domain.entities import EscrowAccountRecord
from sequestre.domain.exceptions import AccountsNotClosed, InvariantViolation


def verify_accounts_closed(transport, accounts: Dict[str, Pubkey]) -> None:
    """
    Assert that the program closed every given account.

    Args:
        transport: SolanaTransport
        accounts: Nickname -> address of accounts expected to be gone

    Raises:
        AccountsNotClosed: Naming every account still present
    """
    still_open = [
        nickname
        for nickname, pubkey in accounts.items()
        if transport.account_exists(pubkey)
    ]
    if still_open:
        raise AccountsNotClosed(still_open)


def verify_record_matches(
    record: EscrowAccountRecord,
    initiator: Pubkey,
    temp_token_account: Pubkey,
    receiving_token_account: Optional[Pubkey] = None,
) -> None:
    """
    Reject records that are uninitialized or belong to another escrow.

    receiving_token_account, when given, must be the account the record
    pays the initiator into.

    Raises:
        InvariantViolation: If the record does not describe this escrow
    """
    if not record.is_initialized:
        raise InvariantViolation("Escrow account is not initialized")

    if record.initiator_pubkey != initiator:
        raise InvariantViolation(
            "Escrow initiator does not match stored initiator",
            details={
                "expected": str(initiator),
                "actual": str(record.initiator_pubkey),
            },
        )

    if record.initiator_temp_token_pubkey != temp_token_account:
        raise InvariantViolation(
            "Escrow temp token account does not match stored account",
            details={
                "expected": str(temp_token_account),
                "actual": str(record.initiator_temp_token_pubkey),
            },
        )

    if (
        receiving_token_account is not None
        and record.initiator_receiving_token_pubkey != receiving_token_account
    ):
        raise InvariantViolation(
            "Escrow receiving token account does not match stored account",
            details={
                "expected": str(receiving_token_account),
                "actual": str(record.initiator_receiving_token_pubkey),
            },
        )
