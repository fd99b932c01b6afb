"""
Setup Test Tokens use case.

Prepares a local cluster for the escrow flows: funds the wallets, creates
the two test mints and each party's token accounts, and mints balances.
"""

from typing import Dict, Optional

from solders.keypair import Keypair  # type: ignore
from solders.pubkey import Pubkey  # type: ignore

from sequestre.application.services import report_token_balances
from sequestre.config import SequestreConfig
from sequestre.domain.value_objects.nicknames import (
    ALICE,
    BOB,
    MASTER_ACCOUNT,
    PARTIES,
    token_account_nickname,
)
from sequestre.infrastructure.blockchain.solana_transport import LAMPORTS_PER_SOL
from sequestre.infrastructure.blockchain.spl_token import (
    MINT_ACCOUNT_SIZE,
    associated_token_address,
    create_associated_token,
    create_mint,
    mint_tokens,
)
from sequestre.infrastructure.persistence import KeyStore
from sequestre.utils.amounts import to_base_units


class SetupTestTokens:
    """
    Fund wallets and create test mints and token accounts.

    Business rules:
    - Wallets are airdropped only when their SOL balance is zero
    - Mints and token accounts that already exist on-chain are reused
    - masterAccount pays for and is authority of both mints
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

    def execute(self) -> Dict[str, Optional[str]]:
        """
        Execute test token setup.

        Returns:
            Token account nickname -> final UI balance

        Raises:
            MissingAddress: If alice, bob or masterAccount is not stored
            RpcFailure: If any RPC call fails
        """
        trade = self.config.trade

        # 1. Resolve wallets
        alice = self.key_store.require_keypair(ALICE)
        bob = self.key_store.require_keypair(BOB)
        master = self.key_store.require_keypair(MASTER_ACCOUNT)
        owners = {ALICE: alice.pubkey(), BOB: bob.pubkey()}

        # 2. Fund wallets
        for nickname, keypair in (
            (ALICE, alice),
            (BOB, bob),
            (MASTER_ACCOUNT, master),
        ):
            self._airdrop_if_empty(nickname, keypair.pubkey())

        # 3. Mints
        mints = {
            name: self._ensure_mint(name, master)
            for name in (trade.deposit_mint, trade.counter_mint)
        }

        # 4. Token accounts
        token_accounts: Dict[str, Pubkey] = {}
        for owner_nickname in PARTIES:
            for mint_name, mint in mints.items():
                nickname = token_account_nickname(owner_nickname, mint_name)
                token_accounts[nickname] = self._ensure_token_account(
                    nickname, owners[owner_nickname], mint, master
                )

        # 5. Mint balances
        if trade.mint_amount > 0:
            amount = to_base_units(trade.mint_amount, trade.decimals)
            instructions = []
            for owner_nickname in PARTIES:
                for mint_name, mint in mints.items():
                    nickname = token_account_nickname(owner_nickname, mint_name)
                    instructions.append(
                        mint_tokens(
                            mint=mint,
                            destination=token_accounts[nickname],
                            authority=master.pubkey(),
                            amount=amount,
                            token_program=self.config.token_program,
                        )
                    )

            self.reporter.info(
                f"Minting {trade.mint_amount} of each token to alice and bob",
                context="SetupTestTokens",
            )
            signature = self.transport.send_transaction(instructions, [master])
            self.transport.confirm_transaction(signature)

        return report_token_balances(
            self.transport,
            self.reporter,
            token_accounts,
            context="SetupTestTokens",
        )

    def _airdrop_if_empty(self, nickname: str, pubkey: Pubkey) -> None:
        if self.transport.get_balance(pubkey) > 0:
            self.reporter.debug(
                f"{nickname} already funded", context="SetupTestTokens"
            )
            return

        lamports = self.config.trade.airdrop_sol * LAMPORTS_PER_SOL
        self.reporter.info(
            f"Airdropping {self.config.trade.airdrop_sol} SOL to {nickname}",
            context="SetupTestTokens",
        )
        signature = self.transport.request_airdrop(pubkey, lamports)
        self.transport.confirm_transaction(signature)

    def _ensure_mint(self, name: str, master: Keypair) -> Pubkey:
        existing = self.key_store.get_mint(name)
        if existing is not None and self.transport.account_exists(existing):
            self.reporter.info(
                f"Reusing {name} mint: {existing}", context="SetupTestTokens"
            )
            return existing

        mint = Keypair()
        rent = self.transport.get_minimum_balance_for_rent_exemption(
            MINT_ACCOUNT_SIZE
        )
        instructions = create_mint(
            payer=master.pubkey(),
            mint=mint.pubkey(),
            authority=master.pubkey(),
            decimals=self.config.trade.decimals,
            lamports=rent,
            token_program=self.config.token_program,
        )
        signature = self.transport.send_transaction(instructions, [master, mint])
        self.transport.confirm_transaction(signature)

        self.key_store.put_mint(name, mint.pubkey())
        self.reporter.info(
            f"Created {name} mint: {mint.pubkey()}", context="SetupTestTokens"
        )
        return mint.pubkey()

    def _ensure_token_account(
        self,
        nickname: str,
        owner: Pubkey,
        mint: Pubkey,
        master: Keypair,
    ) -> Pubkey:
        address = associated_token_address(owner, mint)

        if self.transport.account_exists(address):
            self.reporter.debug(
                f"Reusing {nickname}: {address}", context="SetupTestTokens"
            )
        else:
            signature = self.transport.send_transaction(
                [create_associated_token(master.pubkey(), owner, mint)], [master]
            )
            self.transport.confirm_transaction(signature)
            self.reporter.info(
                f"Created {nickname}: {address}", context="SetupTestTokens"
            )

        self.key_store.put_public_key(nickname, address)
        return address
