"""
Unit tests for ExchangeEscrow use case.

Usage:
    pytest tests/unit/application/test_exchange_escrow.py
"""

import pytest
from solders.pubkey import Pubkey  # type: ignore
from spl.token.constants import TOKEN_PROGRAM_ID  # type: ignore

from sequestre.application.use_cases import ExchangeEscrow
from sequestre.domain.entities import EscrowLifecycle
from sequestre.domain.exceptions import (
    AccountsNotClosed,
    InvariantViolation,
    LayoutError,
    MissingAddress,
)
from sequestre.infrastructure.blockchain import (
    derive_escrow_pda,
    encode_escrow_state,
)
from sequestre.infrastructure.monitoring import SystemReporter


class TestExchangeEscrow:
    """Unit tests for ExchangeEscrow use case."""

    # ================================================================
    # Success
    # ================================================================

    def test_exchange_success(
        self, config, key_store, transport, reporter, open_escrow, close_escrow
    ):
        """Both accounts closed: escrow settles and local records go."""
        transport.on_send = close_escrow

        state = ExchangeEscrow(config, key_store, transport, reporter).execute()

        assert state.lifecycle == EscrowLifecycle.SETTLED
        assert state.signature == str(transport.confirmed[0])
        assert key_store.get_public_key("aliceTempToken") is None
        assert key_store.get_public_key("escrowAccount") is None

        _, signers = transport.sent[0]
        assert [s.pubkey() for s in signers] == [open_escrow.bob.pubkey()]

    def test_exchange_instruction(
        self, config, key_store, transport, reporter, open_escrow, close_escrow
    ):
        """Payload carries the deposit amount; accounts in ABI order."""
        transport.on_send = close_escrow

        ExchangeEscrow(config, key_store, transport, reporter).execute()

        (instruction,), _ = transport.sent[0]
        record = open_escrow.record(config.escrow_program)
        pda = derive_escrow_pda(
            record.initiator_pubkey, record.pda_bump, config.escrow_program
        )

        assert instruction.program_id == config.escrow_program
        assert bytes(instruction.data) == b"\x01" + (5_000_000).to_bytes(8, "little")
        assert [meta.pubkey for meta in instruction.accounts] == [
            open_escrow.bob.pubkey(),
            open_escrow.bob_usdt,
            open_escrow.bob_usdc,
            open_escrow.temp_token.pubkey(),
            open_escrow.alice.pubkey(),
            open_escrow.alice_usdt,
            open_escrow.escrow_account.pubkey(),
            TOKEN_PROGRAM_ID,
            pda,
        ]
        assert not instruction.accounts[8].is_signer

    def test_exchange_amount_override(
        self, config, key_store, transport, reporter, open_escrow, close_escrow
    ):
        """Explicit amount replaces the configured one."""
        transport.on_send = close_escrow

        ExchangeEscrow(config, key_store, transport, reporter).execute(amount=42)

        (instruction,), _ = transport.sent[0]
        assert bytes(instruction.data)[1:] == (42).to_bytes(8, "little")

    def test_expected_amount_reported_in_token_units(
        self, config, key_store, transport, open_escrow, close_escrow, capsys
    ):
        """Amount bob expects is logged as whole tokens."""
        reporter = SystemReporter(name="exchange-amounts", verbose=1)
        transport.on_send = close_escrow

        ExchangeEscrow(config, key_store, transport, reporter).execute(
            amount=2_500_000
        )

        assert "bob expects 2.5 USDC" in capsys.readouterr().out

    # ================================================================
    # Post-condition failures
    # ================================================================

    def test_accounts_left_open(
        self, config, key_store, transport, reporter, open_escrow
    ):
        """Program left both accounts: InvariantViolation, records kept."""
        with pytest.raises(AccountsNotClosed) as exc_info:
            ExchangeEscrow(config, key_store, transport, reporter).execute()

        assert exc_info.value.open_accounts == ["aliceTempToken", "escrowAccount"]
        assert isinstance(exc_info.value, InvariantViolation)
        assert key_store.get_public_key("escrowAccount") is not None

    def test_temp_account_left_open(
        self, config, key_store, transport, reporter, open_escrow
    ):
        """Error names only the account still open."""

        def close_escrow_only(instructions, signers):
            transport.accounts.pop(open_escrow.escrow_account.pubkey())

        transport.on_send = close_escrow_only

        with pytest.raises(AccountsNotClosed) as exc_info:
            ExchangeEscrow(config, key_store, transport, reporter).execute()

        assert exc_info.value.open_accounts == ["aliceTempToken"]
        assert "aliceTempToken" in exc_info.value.message

    # ================================================================
    # Skips and rejections
    # ================================================================

    def test_escrow_absent_skips(
        self, config, key_store, transport, reporter, open_escrow
    ):
        """Already closed escrow: nothing is sent."""
        del transport.accounts[open_escrow.escrow_account.pubkey()]

        result = ExchangeEscrow(config, key_store, transport, reporter).execute()

        assert result is None
        assert transport.sent == []

    def test_temp_account_absent_skips(
        self, config, key_store, transport, reporter, open_escrow
    ):
        """Missing temp token account: nothing is sent."""
        del transport.accounts[open_escrow.temp_token.pubkey()]

        result = ExchangeEscrow(config, key_store, transport, reporter).execute()

        assert result is None
        assert transport.sent == []

    def test_uninitialized_record_rejected(
        self, config, key_store, transport, reporter, open_escrow
    ):
        """Record never observed as initialized is not acted on."""
        transport.accounts[open_escrow.escrow_account.pubkey()] = encode_escrow_state(
            open_escrow.record(config.escrow_program, is_initialized=False)
        )

        with pytest.raises(InvariantViolation, match="not initialized"):
            ExchangeEscrow(config, key_store, transport, reporter).execute()
        assert transport.sent == []

    def test_foreign_record_rejected(
        self, config, key_store, transport, reporter, open_escrow
    ):
        """Record pointing at another temp account is rejected."""
        transport.accounts[open_escrow.escrow_account.pubkey()] = encode_escrow_state(
            open_escrow.record(config.escrow_program, temp_token=Pubkey.new_unique())
        )

        with pytest.raises(InvariantViolation, match="temp token"):
            ExchangeEscrow(config, key_store, transport, reporter).execute()
        assert transport.sent == []

    def test_foreign_receiving_account_rejected(
        self, config, key_store, transport, reporter, open_escrow
    ):
        """Record paying another account than aliceUSDTToken is rejected."""
        transport.accounts[open_escrow.escrow_account.pubkey()] = encode_escrow_state(
            open_escrow.record(
                config.escrow_program, receiving_token=Pubkey.new_unique()
            )
        )

        with pytest.raises(InvariantViolation, match="receiving token"):
            ExchangeEscrow(config, key_store, transport, reporter).execute()
        assert transport.sent == []

    def test_malformed_record(
        self, config, key_store, transport, reporter, open_escrow
    ):
        """Escrow data of the wrong size raises LayoutError."""
        transport.accounts[open_escrow.escrow_account.pubkey()] = bytes(100)

        with pytest.raises(LayoutError):
            ExchangeEscrow(config, key_store, transport, reporter).execute()

    def test_missing_bob(self, config, key_store, transport, reporter, open_escrow):
        """Absent counterparty keypair raises MissingAddress."""
        key_store.remove("bob")

        with pytest.raises(MissingAddress) as exc_info:
            ExchangeEscrow(config, key_store, transport, reporter).execute()

        assert exc_info.value.nickname == "bob"
        assert transport.sent == []
