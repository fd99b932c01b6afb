"""Domain entities."""

from sequestre.domain.entities.escrow_account import (
    EscrowAccountRecord,
    EscrowLifecycle,
    EscrowState,
)

__all__ = [
    "EscrowAccountRecord",
    "EscrowLifecycle",
    "EscrowState",
]
