"""
Test fixtures and configuration.

No test talks to a cluster: flows run against FakeTransport, an in-memory
stand-in for SolanaTransport.
"""

from types import SimpleNamespace
from typing import Callable, Dict, List, Optional

import pytest
from solders.keypair import Keypair  # type: ignore
from solders.pubkey import Pubkey  # type: ignore
from solders.signature import Signature  # type: ignore

from sequestre.config import SequestreConfig
from sequestre.domain.entities import EscrowAccountRecord
from sequestre.infrastructure.blockchain import encode_escrow_state, find_escrow_pda
from sequestre.infrastructure.monitoring import SystemReporter
from sequestre.infrastructure.persistence import KeyStore

TOKEN_ACCOUNT_DATA = bytes(165)


class FakeTransport:
    """
    In-memory transport.

    accounts maps address -> data; on_send, when set, is called with
    (instructions, signers) so a test can apply the program's effects.
    """

    def __init__(self):
        self.accounts: Dict[Pubkey, bytes] = {}
        self.lamports: Dict[Pubkey, int] = {}
        self.token_balances: Dict[Pubkey, str] = {}
        self.sent: List[tuple] = []
        self.confirmed: List[Signature] = []
        self.airdrops: List[tuple] = []
        self.on_send: Optional[Callable] = None

    def get_account_data(self, pubkey: Pubkey) -> Optional[bytes]:
        return self.accounts.get(pubkey)

    def account_exists(self, pubkey: Pubkey) -> bool:
        return pubkey in self.accounts

    def get_balance(self, pubkey: Pubkey) -> int:
        return self.lamports.get(pubkey, 0)

    def get_token_account_balance(self, pubkey: Pubkey):
        return SimpleNamespace(
            ui_amount_string=self.token_balances.get(pubkey, "0"),
            decimals=6,
        )

    def get_minimum_balance_for_rent_exemption(self, size: int) -> int:
        return 890_880 + size * 6_960

    def request_airdrop(self, pubkey: Pubkey, lamports: int) -> Signature:
        self.airdrops.append((pubkey, lamports))
        self.lamports[pubkey] = lamports
        return Signature.new_unique()

    def send_transaction(self, instructions, signers, payer=None) -> Signature:
        self.sent.append((list(instructions), list(signers)))
        if self.on_send is not None:
            self.on_send(list(instructions), list(signers))
        return Signature.new_unique()

    def confirm_transaction(self, signature, timeout=None) -> bool:
        self.confirmed.append(signature)
        return True


# ================================================================
# Core fixtures
# ================================================================


@pytest.fixture
def config(tmp_path) -> SequestreConfig:
    """Configuration with keys under a temporary directory."""
    return SequestreConfig(keys_dir=str(tmp_path / "keys"))


@pytest.fixture
def key_store(config) -> KeyStore:
    """Empty key store."""
    return KeyStore(config.keys_dir)


@pytest.fixture
def reporter() -> SystemReporter:
    """Console reporter at full verbosity (output captured by pytest)."""
    return SystemReporter(name="sequestre-test", verbose=3)


@pytest.fixture
def transport() -> FakeTransport:
    """Empty in-memory transport."""
    return FakeTransport()


# ================================================================
# Escrow scenario
# ================================================================


class EscrowParties:
    """Keys and token accounts of a fully set up alice/bob trade."""

    def __init__(self):
        self.alice = Keypair()
        self.bob = Keypair()
        self.master = Keypair()
        self.usdc_mint = Pubkey.new_unique()
        self.usdt_mint = Pubkey.new_unique()
        self.alice_usdc = Pubkey.new_unique()
        self.alice_usdt = Pubkey.new_unique()
        self.bob_usdc = Pubkey.new_unique()
        self.bob_usdt = Pubkey.new_unique()
        self.temp_token = Keypair()
        self.escrow_account = Keypair()

    def token_accounts(self) -> Dict[str, Pubkey]:
        return {
            "aliceUSDCToken": self.alice_usdc,
            "aliceUSDTToken": self.alice_usdt,
            "bobUSDCToken": self.bob_usdc,
            "bobUSDTToken": self.bob_usdt,
        }

    def record(
        self,
        program_id: Pubkey,
        temp_token: Optional[Pubkey] = None,
        receiving_token: Optional[Pubkey] = None,
        expected_amount: int = 10_000_000,
        is_initialized: bool = True,
    ) -> EscrowAccountRecord:
        """Escrow record as the program writes it for alice."""
        _, bump = find_escrow_pda(self.alice.pubkey(), program_id)
        return EscrowAccountRecord(
            is_initialized=is_initialized,
            initiator_pubkey=self.alice.pubkey(),
            initiator_temp_token_pubkey=temp_token or self.temp_token.pubkey(),
            initiator_receiving_token_pubkey=receiving_token or self.alice_usdt,
            expected_counter_amount=expected_amount,
            pda_bump=bump,
        )


@pytest.fixture
def parties() -> EscrowParties:
    """Fresh set of parties."""
    return EscrowParties()


@pytest.fixture
def stored_parties(key_store, transport, parties) -> EscrowParties:
    """Parties persisted in the key store with token accounts on-chain."""
    key_store.put_keypair("alice", parties.alice)
    key_store.put_keypair("bob", parties.bob)
    key_store.put_keypair("masterAccount", parties.master)
    key_store.put_mint("usdc", parties.usdc_mint)
    key_store.put_mint("usdt", parties.usdt_mint)

    for nickname, pubkey in parties.token_accounts().items():
        key_store.put_public_key(nickname, pubkey)
        transport.accounts[pubkey] = TOKEN_ACCOUNT_DATA
        transport.token_balances[pubkey] = "1000"

    return parties


@pytest.fixture
def open_escrow(config, key_store, transport, stored_parties) -> EscrowParties:
    """Stored parties plus an initialized escrow on-chain."""
    parties = stored_parties
    key_store.put_public_key("aliceTempToken", parties.temp_token.pubkey())
    key_store.put_public_key("escrowAccount", parties.escrow_account.pubkey())

    transport.accounts[parties.temp_token.pubkey()] = TOKEN_ACCOUNT_DATA
    transport.token_balances[parties.temp_token.pubkey()] = "5"
    transport.accounts[parties.escrow_account.pubkey()] = encode_escrow_state(
        parties.record(config.escrow_program)
    )
    return parties


@pytest.fixture
def close_escrow(transport, open_escrow) -> Callable:
    """on_send hook applying a successful exchange or cancel."""

    def apply(instructions, signers):
        transport.accounts.pop(open_escrow.temp_token.pubkey(), None)
        transport.accounts.pop(open_escrow.escrow_account.pubkey(), None)

    return apply
