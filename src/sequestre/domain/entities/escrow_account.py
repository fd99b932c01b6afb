"""
Escrow account entities.

EscrowAccountRecord mirrors the record the escrow program writes on-chain.
EscrowState models the program's lifecycle as observed by this client.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from solders.pubkey import Pubkey  # type: ignore

from sequestre.domain.exceptions import InvalidLifecycleTransition

U64_MAX = 2**64 - 1


@dataclass(frozen=True)
class EscrowAccountRecord:
    """
    Decoded escrow state account.

    Business rules:
    - Bump seed is a single byte
    - Expected amount fits in an unsigned 64-bit integer
    """

    is_initialized: bool
    initiator_pubkey: Pubkey
    initiator_temp_token_pubkey: Pubkey
    initiator_receiving_token_pubkey: Pubkey
    expected_counter_amount: int
    pda_bump: int

    def __post_init__(self):
        """Validate record fields after initialization."""
        if not 0 <= self.pda_bump <= 255:
            raise ValueError(f"PDA bump must fit in one byte: {self.pda_bump}")

        if not 0 <= self.expected_counter_amount <= U64_MAX:
            raise ValueError(
                "Expected counter amount must fit in u64: "
                f"{self.expected_counter_amount}"
            )

    def to_dict(self) -> dict:
        """Convert record to dictionary representation."""
        return {
            "is_initialized": self.is_initialized,
            "initiator_pubkey": str(self.initiator_pubkey),
            "initiator_temp_token_pubkey": str(self.initiator_temp_token_pubkey),
            "initiator_receiving_token_pubkey": str(
                self.initiator_receiving_token_pubkey
            ),
            "expected_counter_amount": self.expected_counter_amount,
            "pda_bump": self.pda_bump,
        }


class EscrowLifecycle(str, Enum):
    """Escrow program states."""

    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    SETTLED = "settled"
    CANCELLED = "cancelled"


@dataclass
class EscrowState:
    """
    Escrow account as tracked by the client.

    Status transitions: UNINITIALIZED → INITIALIZED → SETTLED or CANCELLED.
    Transitions only record what was observed on-chain; the program
    performs them.
    """

    escrow_account: Pubkey
    lifecycle: EscrowLifecycle = field(default=EscrowLifecycle.UNINITIALIZED)
    record: Optional[EscrowAccountRecord] = field(default=None)
    signature: Optional[str] = field(default=None)
    updated_at: datetime = field(default_factory=datetime.now)

    def initialize(
        self, record: EscrowAccountRecord, signature: Optional[str] = None
    ) -> None:
        """
        Mark escrow as initialized with the decoded on-chain record.

        signature is None when the record was observed rather than created
        by this client.

        Raises:
            InvalidLifecycleTransition: If not UNINITIALIZED or the record
                is not initialized
        """
        if self.lifecycle != EscrowLifecycle.UNINITIALIZED:
            raise InvalidLifecycleTransition(
                f"Cannot initialize escrow in {self.lifecycle.value} state"
            )
        if not record.is_initialized:
            raise InvalidLifecycleTransition(
                "Cannot initialize escrow from an uninitialized record"
            )

        self.record = record
        self._move_to(EscrowLifecycle.INITIALIZED, signature)

    def settle(self, signature: str) -> None:
        """Mark escrow as settled by a completed exchange."""
        self._require_initialized("settle")
        self._move_to(EscrowLifecycle.SETTLED, signature)

    def cancel(self, signature: str) -> None:
        """Mark escrow as cancelled by its initiator."""
        self._require_initialized("cancel")
        self._move_to(EscrowLifecycle.CANCELLED, signature)

    @property
    def is_open(self) -> bool:
        """True while funds are held by the escrow."""
        return self.lifecycle == EscrowLifecycle.INITIALIZED

    def _require_initialized(self, action: str) -> None:
        if self.lifecycle != EscrowLifecycle.INITIALIZED:
            raise InvalidLifecycleTransition(
                f"Cannot {action} escrow in {self.lifecycle.value} state"
            )

    def _move_to(self, lifecycle: EscrowLifecycle, signature: Optional[str]) -> None:
        self.lifecycle = lifecycle
        self.signature = signature
        self.updated_at = datetime.now()
