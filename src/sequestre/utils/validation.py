"""
Validation utility functions for Sequestre.

Checks the account role lists handed to the escrow program.
"""

from typing import Sequence

from sequestre.domain.exceptions import InvariantViolation


def validate_account_roles(
    roles: Sequence,
    expected_count: int,
    operation: str,
) -> None:
    """
    Check an escrow account role list against the program ABI.

    The program reads accounts by position, so the list must have the
    exact cardinality, and only the human wallet at index 0 may sign.

    Args:
        roles: Sequence of AccountRole
        expected_count: Number of accounts the instruction takes
        operation: Operation name for error messages

    Raises:
        InvariantViolation: If the list breaks any rule
    """
    if len(roles) != expected_count:
        raise InvariantViolation(
            f"{operation} takes {expected_count} accounts, got {len(roles)}",
            details={"operation": operation, "count": len(roles)},
        )

    if not roles[0].is_signer:
        raise InvariantViolation(
            f"{operation}: first account must be the signing wallet",
            details={"operation": operation},
        )

    extra_signers = [i for i, role in enumerate(roles) if i and role.is_signer]
    if extra_signers:
        raise InvariantViolation(
            f"{operation}: only the wallet may sign, "
            f"found signers at {extra_signers}",
            details={"operation": operation, "signers": extra_signers},
        )
