"""
Initialize Escrow use case.

Locks the initiator's deposit in a fresh temp token account and creates
the escrow state account in one atomic transaction.
"""

from solders.keypair import Keypair  # type: ignore

from sequestre.application.services import (
    report_token_balances,
    verify_record_matches,
)
from sequestre.config import SequestreConfig
from sequestre.domain.entities import EscrowState
from sequestre.domain.exceptions import InvariantViolation
from sequestre.domain.value_objects.nicknames import (
    ALICE,
    ALICE_TEMP_TOKEN,
    ESCROW_ACCOUNT,
    token_account_nickname,
)
from sequestre.infrastructure.blockchain import (
    ESCROW_ACCOUNT_SIZE,
    build_initialize,
    decode_escrow_state,
)
from sequestre.infrastructure.blockchain.spl_token import (
    TOKEN_ACCOUNT_SIZE,
    create_program_account,
    create_token_account,
    transfer_tokens_checked,
)
from sequestre.infrastructure.persistence import KeyStore
from sequestre.utils.amounts import check_u64, to_ui_amount


class InitializeEscrow:
    """
    Initialize a new escrow owned by alice.

    Business rules:
    - Every stored address must exist before anything is sent
    - Temp token and escrow accounts are persisted only after confirmation
    - Resulting record must be initialized and name alice as initiator
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

    def execute(self) -> EscrowState:
        """
        Execute escrow initialization.

        Returns:
            EscrowState in INITIALIZED lifecycle

        Raises:
            MissingAddress: If a required key or address is not stored
            EncodingError: If a configured amount does not fit in u64
            RpcFailure: If submission or confirmation fails
            InvariantViolation: If the escrow record is not as expected
        """
        trade = self.config.trade
        deposit_token_nickname = token_account_nickname(ALICE, trade.deposit_mint)
        receive_token_nickname = token_account_nickname(ALICE, trade.counter_mint)

        # 1. Resolve stored addresses (no RPC before this point)
        alice = self.key_store.require_keypair(ALICE)
        deposit_token = self.key_store.require_public_key(deposit_token_nickname)
        receive_token = self.key_store.require_public_key(receive_token_nickname)
        deposit_mint = self.key_store.require_mint(trade.deposit_mint)
        check_u64(trade.deposit_amount)

        temp_token = Keypair()
        escrow_account = Keypair()
        token_program = self.config.token_program
        escrow_program = self.config.escrow_program

        initialize_ix = build_initialize(
            initiator=alice.pubkey(),
            initiator_temp_token_account=temp_token.pubkey(),
            initiator_receiving_token_account=receive_token,
            escrow_account=escrow_account.pubkey(),
            expected_amount=trade.counter_amount,
            token_program=token_program,
        )

        self.reporter.info(
            f"Depositing {to_ui_amount(trade.deposit_amount, trade.decimals)} "
            f"{trade.deposit_mint.upper()} for "
            f"{to_ui_amount(trade.counter_amount, trade.decimals)} "
            f"{trade.counter_mint.upper()}",
            context="InitializeEscrow",
        )
        report_token_balances(
            self.transport,
            self.reporter,
            {deposit_token_nickname: deposit_token},
            context="InitializeEscrow",
        )

        # 2. Build atomic transaction
        token_rent = self.transport.get_minimum_balance_for_rent_exemption(
            TOKEN_ACCOUNT_SIZE
        )
        escrow_rent = self.transport.get_minimum_balance_for_rent_exemption(
            ESCROW_ACCOUNT_SIZE
        )

        instructions = [
            *create_token_account(
                payer=alice.pubkey(),
                account=temp_token.pubkey(),
                mint=deposit_mint,
                owner=alice.pubkey(),
                lamports=token_rent,
                token_program=token_program,
            ),
            transfer_tokens_checked(
                owner=alice.pubkey(),
                source=deposit_token,
                destination=temp_token.pubkey(),
                mint=deposit_mint,
                amount=trade.deposit_amount,
                decimals=trade.decimals,
                token_program=token_program,
            ),
            create_program_account(
                payer=alice.pubkey(),
                new_account=escrow_account.pubkey(),
                lamports=escrow_rent,
                space=ESCROW_ACCOUNT_SIZE,
                owner=escrow_program,
            ),
            initialize_ix.to_instruction(escrow_program),
        ]

        # 3. Submit and confirm
        self.reporter.info(
            f"Sending initialize transaction (escrow {escrow_account.pubkey()})",
            context="InitializeEscrow",
        )
        signature = self.transport.send_transaction(
            instructions, [alice, temp_token, escrow_account]
        )
        self.transport.confirm_transaction(signature)
        self.reporter.info(
            f"Initialize confirmed: {signature}", context="InitializeEscrow"
        )

        # 4. Persist new accounts
        self.key_store.put_public_key(ALICE_TEMP_TOKEN, temp_token.pubkey())
        self.key_store.put_public_key(ESCROW_ACCOUNT, escrow_account.pubkey())

        # 5. Verify on-chain record
        data = self.transport.get_account_data(escrow_account.pubkey())
        if data is None:
            raise InvariantViolation(
                "Escrow account missing after initialize",
                details={"escrow_account": str(escrow_account.pubkey())},
            )

        record = decode_escrow_state(data)
        verify_record_matches(
            record, alice.pubkey(), temp_token.pubkey(), receive_token
        )

        if record.expected_counter_amount != trade.counter_amount:
            raise InvariantViolation(
                "Escrow expected amount does not match request",
                details={
                    "expected": trade.counter_amount,
                    "actual": record.expected_counter_amount,
                },
            )

        state = EscrowState(escrow_account=escrow_account.pubkey())
        state.initialize(record, str(signature))

        for name, value in record.to_dict().items():
            self.reporter.info(f"{name}: {value}", context="InitializeEscrow")

        report_token_balances(
            self.transport,
            self.reporter,
            {
                deposit_token_nickname: deposit_token,
                ALICE_TEMP_TOKEN: temp_token.pubkey(),
            },
            context="InitializeEscrow",
        )

        return state
