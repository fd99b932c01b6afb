"""Blockchain adapters for the escrow program."""

from sequestre.infrastructure.blockchain.escrow_layout import (
    ESCROW_ACCOUNT_SIZE,
    decode_escrow_state,
    encode_escrow_state,
)
from sequestre.infrastructure.blockchain.instructions import (
    AccountRole,
    EscrowInstruction,
    EscrowOpcode,
    build_cancel,
    build_exchange,
    build_initialize,
)
from sequestre.infrastructure.blockchain.pda import (
    derive_escrow_pda,
    find_escrow_pda,
)
from sequestre.infrastructure.blockchain.solana_transport import SolanaTransport

__all__ = [
    "ESCROW_ACCOUNT_SIZE",
    "decode_escrow_state",
    "encode_escrow_state",
    "AccountRole",
    "EscrowInstruction",
    "EscrowOpcode",
    "build_initialize",
    "build_exchange",
    "build_cancel",
    "derive_escrow_pda",
    "find_escrow_pda",
    "SolanaTransport",
]
