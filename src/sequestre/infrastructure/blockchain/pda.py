"""
Escrow program-derived address helpers.

Seeds: [b"escrow", initiator_pubkey_bytes] (+ bump byte)
"""

from typing import Tuple

from solders.pubkey import Pubkey  # type: ignore

from sequestre.domain.exceptions import InvariantViolation

ESCROW_PDA_SEED = b"escrow"


def find_escrow_pda(initiator: Pubkey, program_id: Pubkey) -> Tuple[Pubkey, int]:
    """
    Find escrow PDA and its canonical bump.

    Mirrors the derivation the program performs on Initialize.

    Args:
        initiator: Initiator wallet
        program_id: Escrow program id

    Returns:
        Tuple of (pda, bump)
    """
    return Pubkey.find_program_address(
        [ESCROW_PDA_SEED, bytes(initiator)], program_id
    )


def derive_escrow_pda(initiator: Pubkey, bump: int, program_id: Pubkey) -> Pubkey:
    """
    Recompute escrow PDA from the bump stored in the escrow record.

    Args:
        initiator: Initiator wallet from the escrow record
        bump: Bump seed from the escrow record
        program_id: Escrow program id

    Returns:
        Escrow PDA

    Raises:
        InvariantViolation: If the seeds do not produce an off-curve address
    """
    try:
        return Pubkey.create_program_address(
            [ESCROW_PDA_SEED, bytes(initiator), bytes([bump])], program_id
        )
    except Exception as e:
        raise InvariantViolation(
            f"Failed to derive escrow PDA with bump {bump}: {e}",
            details={"initiator": str(initiator), "bump": bump},
        ) from e
