"""
Show Escrow use case.

Read-only view of the stored escrow and the parties' token balances.
"""

from typing import Dict, Optional

from sequestre.application.services import report_token_balances
from sequestre.config import SequestreConfig
from sequestre.domain.entities import EscrowAccountRecord
from sequestre.domain.value_objects.nicknames import (
    ESCROW_ACCOUNT,
    PARTIES,
    token_account_nickname,
)
from sequestre.infrastructure.blockchain import (
    decode_escrow_state,
    derive_escrow_pda,
)
from sequestre.infrastructure.persistence import KeyStore


class ShowEscrow:
    """Display the decoded escrow record, its PDA and token balances."""

    def __init__(
        self,
        config: SequestreConfig,
        key_store: KeyStore,
        transport,
        reporter,
    ):
        self.config = config
        self.key_store = key_store
        self.transport = transport
        self.reporter = reporter

    def execute(self) -> Optional[EscrowAccountRecord]:
        """
        Execute escrow display.

        Returns:
            Decoded record, or None if the escrow account does not exist

        Raises:
            MissingAddress: If no escrow account is stored
            LayoutError: If the escrow account data is malformed
        """
        escrow_account = self.key_store.require_public_key(ESCROW_ACCOUNT)
        self._report_balances()

        data = self.transport.get_account_data(escrow_account)
        if data is None:
            self.reporter.warning(
                f"Escrow account {escrow_account} not found", context="ShowEscrow"
            )
            return None

        record = decode_escrow_state(data)
        self.reporter.info(f"Escrow account: {escrow_account}", context="ShowEscrow")
        for name, value in record.to_dict().items():
            self.reporter.info(f"{name}: {value}", context="ShowEscrow")

        if record.is_initialized:
            pda = derive_escrow_pda(
                record.initiator_pubkey,
                record.pda_bump,
                self.config.escrow_program,
            )
            self.reporter.info(f"PDA: {pda}", context="ShowEscrow")

        return record

    def _report_balances(self) -> Dict[str, Optional[str]]:
        accounts = {}
        trade = self.config.trade
        for owner in PARTIES:
            for mint_name in (trade.deposit_mint, trade.counter_mint):
                nickname = token_account_nickname(owner, mint_name)
                pubkey = self.key_store.get_public_key(nickname)
                if pubkey is None:
                    self.reporter.debug(
                        f"{nickname} not stored, skipping", context="ShowEscrow"
                    )
                    continue
                accounts[nickname] = pubkey

        return report_token_balances(
            self.transport, self.reporter, accounts, context="ShowEscrow"
        )
