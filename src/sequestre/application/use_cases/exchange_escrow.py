"""
Exchange Escrow use case.

Bob pays alice's expected amount and takes the escrowed deposit; the
program closes the temp token and escrow accounts in the same transaction.
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
    BOB,
    ESCROW_ACCOUNT,
    token_account_nickname,
)
from sequestre.infrastructure.blockchain import (
    build_exchange,
    decode_escrow_state,
    derive_escrow_pda,
)
from sequestre.infrastructure.persistence import KeyStore
from sequestre.utils.amounts import to_ui_amount


class ExchangeEscrow:
    """
    Settle alice's escrow as bob.

    Business rules:
    - No transaction is sent if the escrow or temp account is gone
    - Record must be initialized and belong to the stored escrow
    - Both escrow and temp token accounts must be closed afterwards
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

    def execute(self, amount: Optional[int] = None) -> Optional[EscrowState]:
        """
        Execute escrow exchange.

        Args:
            amount: Deposit amount bob expects to receive in base units
                (configured deposit amount if None)

        Returns:
            EscrowState in SETTLED lifecycle, or None if skipped

        Raises:
            MissingAddress: If a required key or address is not stored
            LayoutError: If the escrow account data is malformed
            RpcFailure: If submission or confirmation fails
            InvariantViolation: If the record or final state is unexpected
        """
        trade = self.config.trade
        if amount is None:
            amount = trade.deposit_amount

        bob_send_nickname = token_account_nickname(BOB, trade.counter_mint)
        bob_receive_nickname = token_account_nickname(BOB, trade.deposit_mint)
        alice_receive_nickname = token_account_nickname(ALICE, trade.counter_mint)

        # 1. Resolve stored addresses
        alice = self.key_store.require_public_key(ALICE)
        bob = self.key_store.require_keypair(BOB)
        bob_send_token = self.key_store.require_public_key(bob_send_nickname)
        bob_receive_token = self.key_store.require_public_key(bob_receive_nickname)
        temp_token = self.key_store.require_public_key(ALICE_TEMP_TOKEN)
        alice_receive_token = self.key_store.require_public_key(
            alice_receive_nickname
        )
        escrow_account = self.key_store.require_public_key(ESCROW_ACCOUNT)

        # 2. Fetch escrow state
        escrow_data = self.transport.get_account_data(escrow_account)
        if escrow_data is None or not self.transport.account_exists(temp_token):
            self.reporter.warning(
                "Escrow or temp token account not found, nothing to exchange",
                context="ExchangeEscrow",
            )
            return None

        record = decode_escrow_state(escrow_data)
        verify_record_matches(record, alice, temp_token, alice_receive_token)

        state = EscrowState(escrow_account=escrow_account)
        state.initialize(record)

        pda = derive_escrow_pda(
            record.initiator_pubkey, record.pda_bump, self.config.escrow_program
        )
        self.reporter.debug(f"Escrow PDA: {pda}", context="ExchangeEscrow")

        balance_accounts = {
            bob_send_nickname: bob_send_token,
            bob_receive_nickname: bob_receive_token,
            alice_receive_nickname: alice_receive_token,
        }
        report_token_balances(
            self.transport,
            self.reporter,
            {**balance_accounts, ALICE_TEMP_TOKEN: temp_token},
            context="ExchangeEscrow",
        )

        # 3. Submit and confirm
        instruction = build_exchange(
            counterparty=bob.pubkey(),
            counterparty_send_token_account=bob_send_token,
            counterparty_receive_token_account=bob_receive_token,
            initiator_temp_token_account=temp_token,
            initiator=record.initiator_pubkey,
            initiator_receiving_token_account=alice_receive_token,
            escrow_account=escrow_account,
            counter_amount=amount,
            program_derived_address=pda,
            token_program=self.config.token_program,
        )

        self.reporter.info(
            f"Sending exchange transaction, bob expects "
            f"{to_ui_amount(amount, trade.decimals)} {trade.deposit_mint.upper()}",
            context="ExchangeEscrow",
        )
        signature = self.transport.send_transaction(
            [instruction.to_instruction(self.config.escrow_program)], [bob]
        )
        self.transport.confirm_transaction(signature)
        self.reporter.info(
            f"Exchange confirmed: {signature}", context="ExchangeEscrow"
        )

        # 4. Verify both accounts were closed
        verify_accounts_closed(
            self.transport,
            {ALICE_TEMP_TOKEN: temp_token, ESCROW_ACCOUNT: escrow_account},
        )
        state.settle(str(signature))

        report_token_balances(
            self.transport,
            self.reporter,
            balance_accounts,
            context="ExchangeEscrow",
        )

        self.key_store.remove(ALICE_TEMP_TOKEN)
        self.key_store.remove(ESCROW_ACCOUNT)
        self.reporter.info(
            "Escrow settled, local records removed", context="ExchangeEscrow"
        )

        return state
