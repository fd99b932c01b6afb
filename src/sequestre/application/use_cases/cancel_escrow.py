"""
Cancel Escrow use case.

Alice reclaims her deposit; the program closes the temp token and escrow
accounts.
"""

from typing import Optional

from sequestre.application.services import (
    report_token_balances,
    verify_accounts_closed,
    verify_record_matches,
)
from sequestre.config import SequestreConfig
from sequestre.domain.entities import EscrowState
from sequestre.domain.value_objects.nicknames import (
    ALICE,
    ALICE_TEMP_TOKEN,
    ESCROW_ACCOUNT,
    token_account_nickname,
)
from sequestre.infrastructure.blockchain import (
    build_cancel,
    decode_escrow_state,
    derive_escrow_pda,
)
from sequestre.infrastructure.persistence import KeyStore


class CancelEscrow:
    """
    Cancel alice's escrow and refund the deposit.

    Business rules:
    - No transaction is sent if the escrow account is gone
    - Record must be initialized and belong to alice
    - Local records are removed only once both accounts are closed
    """

    def __init__(
        self,
        config: SequestreConfig,
        key_store: KeyStore,
        transport,
        reporter,
    ):
        """
        Initialize use case with dependencies.

        Args:
            config: Sequestre configuration
            key_store: Store of keys and addresses
            transport: SolanaTransport
            reporter: SystemReporter
        """
        self.config = config
        self.key_store = key_store
        self.transport = transport
        self.reporter = reporter

    def execute(self) -> Optional[EscrowState]:
        """
        Execute escrow cancellation.

        Returns:
            EscrowState in CANCELLED lifecycle, or None if skipped

        Raises:
            MissingAddress: If a required key or address is not stored
            LayoutError: If the escrow account data is malformed
            RpcFailure: If submission or confirmation fails
            InvariantViolation: If the record or final state is unexpected
        """
        refund_nickname = token_account_nickname(
            ALICE, self.config.trade.deposit_mint
        )

        # 1. Resolve stored addresses
        alice = self.key_store.require_keypair(ALICE)
        refund_token = self.key_store.require_public_key(refund_nickname)
        temp_token = self.key_store.require_public_key(ALICE_TEMP_TOKEN)
        escrow_account = self.key_store.require_public_key(ESCROW_ACCOUNT)

        # 2. Fetch escrow state
        escrow_data = self.transport.get_account_data(escrow_account)
        if escrow_data is None:
            self.reporter.warning(
                "Escrow account not found, nothing to cancel",
                context="CancelEscrow",
            )
            return None

        record = decode_escrow_state(escrow_data)
        verify_record_matches(record, alice.pubkey(), temp_token)

        state = EscrowState(escrow_account=escrow_account)
        state.initialize(record)

        pda = derive_escrow_pda(
            record.initiator_pubkey, record.pda_bump, self.config.escrow_program
        )
        self.reporter.debug(f"Escrow PDA: {pda}", context="CancelEscrow")

        report_token_balances(
            self.transport,
            self.reporter,
            {refund_nickname: refund_token},
            context="CancelEscrow",
        )

        # 3. Submit and confirm
        instruction = build_cancel(
            initiator=alice.pubkey(),
            escrow_account=escrow_account,
            initiator_temp_token_account=temp_token,
            initiator_refund_token_account=refund_token,
            program_derived_address=pda,
            token_program=self.config.token_program,
        )

        self.reporter.info("Sending cancel transaction", context="CancelEscrow")
        signature = self.transport.send_transaction(
            [instruction.to_instruction(self.config.escrow_program)], [alice]
        )
        self.transport.confirm_transaction(signature)
        self.reporter.info(f"Cancel confirmed: {signature}", context="CancelEscrow")

        # 4. Verify both accounts were closed
        verify_accounts_closed(
            self.transport,
            {ALICE_TEMP_TOKEN: temp_token, ESCROW_ACCOUNT: escrow_account},
        )
        state.cancel(str(signature))

        self.key_store.remove(ALICE_TEMP_TOKEN)
        self.key_store.remove(ESCROW_ACCOUNT)

        report_token_balances(
            self.transport,
            self.reporter,
            {refund_nickname: refund_token},
            context="CancelEscrow",
        )

        return state
