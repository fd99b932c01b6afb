"""
Escrow state account codec.

Layout (106 bytes, no padding, borsh field order):

    is_initialized                    u8
    initiator_pubkey                  [u8; 32]
    initiator_temp_token_pubkey       [u8; 32]
    initiator_receiving_token_pubkey  [u8; 32]
    expected_counter_amount           u64 (little-endian)
    pda_bump                          u8
"""

from borsh_construct import U8, U64, CStruct
from solders.pubkey import Pubkey  # type: ignore

from sequestre.domain.entities import EscrowAccountRecord
from sequestre.domain.exceptions import LayoutError
from sequestre.utils.amounts import check_u64

ESCROW_STATE_LAYOUT = CStruct(
    "is_initialized" / U8,
    "initiator_pubkey" / U8[32],
    "initiator_temp_token_pubkey" / U8[32],
    "initiator_receiving_token_pubkey" / U8[32],
    "expected_counter_amount" / U64,
    "pda_bump" / U8,
)

ESCROW_ACCOUNT_SIZE = 1 + 32 + 32 + 32 + 8 + 1


def decode_escrow_state(data: bytes) -> EscrowAccountRecord:
    """
    Decode escrow state account data.

    Args:
        data: Raw account data

    Returns:
        Decoded EscrowAccountRecord

    Raises:
        LayoutError: If data is not exactly 106 bytes or the
            initialized flag is not 0/1
    """
    if len(data) != ESCROW_ACCOUNT_SIZE:
        raise LayoutError(
            f"Escrow state must be {ESCROW_ACCOUNT_SIZE} bytes, got {len(data)}",
            details={"length": len(data)},
        )

    parsed = ESCROW_STATE_LAYOUT.parse(bytes(data))

    if parsed.is_initialized not in (0, 1):
        raise LayoutError(
            f"Invalid is_initialized flag: {parsed.is_initialized}",
            details={"is_initialized": parsed.is_initialized},
        )

    return EscrowAccountRecord(
        is_initialized=parsed.is_initialized == 1,
        initiator_pubkey=Pubkey.from_bytes(bytes(parsed.initiator_pubkey)),
        initiator_temp_token_pubkey=Pubkey.from_bytes(
            bytes(parsed.initiator_temp_token_pubkey)
        ),
        initiator_receiving_token_pubkey=Pubkey.from_bytes(
            bytes(parsed.initiator_receiving_token_pubkey)
        ),
        expected_counter_amount=parsed.expected_counter_amount,
        pda_bump=parsed.pda_bump,
    )


def encode_escrow_state(record: EscrowAccountRecord) -> bytes:
    """
    Encode an escrow record into account data.

    Inverse of decode_escrow_state; the program writes this account, so
    the client only needs it for fixtures and tests.
    """
    return ESCROW_STATE_LAYOUT.build(
        {
            "is_initialized": 1 if record.is_initialized else 0,
            "initiator_pubkey": list(bytes(record.initiator_pubkey)),
            "initiator_temp_token_pubkey": list(
                bytes(record.initiator_temp_token_pubkey)
            ),
            "initiator_receiving_token_pubkey": list(
                bytes(record.initiator_receiving_token_pubkey)
            ),
            "expected_counter_amount": check_u64(record.expected_counter_amount),
            "pda_bump": record.pda_bump,
        }
    )
