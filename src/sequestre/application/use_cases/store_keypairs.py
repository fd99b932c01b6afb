"""
Store Keypairs use case.

Generates the wallets the other flows sign with.
"""

from typing import Dict

from solders.keypair import Keypair  # type: ignore
from solders.pubkey import Pubkey  # type: ignore

from sequestre.domain.value_objects.nicknames import GENERATED_KEYPAIRS
from sequestre.infrastructure.persistence import KeyStore


class StoreKeypairs:
    """
    Generate and persist alice, bob and masterAccount keypairs.

    Existing keypairs are kept unless force is set.
    """

    def __init__(self, key_store: KeyStore, reporter):
        """
        Initialize use case with dependencies.

        Args:
            key_store: Store of keys and addresses
            reporter: SystemReporter
        """
        self.key_store = key_store
        self.reporter = reporter

    def execute(self, force: bool = False) -> Dict[str, Pubkey]:
        """
        Execute keypair generation.

        Args:
            force: Replace keypairs that already exist

        Returns:
            Nickname -> public key of every stored keypair
        """
        stored: Dict[str, Pubkey] = {}

        for nickname in GENERATED_KEYPAIRS:
            existing = self.key_store.get_keypair(nickname)
            if existing is not None and not force:
                self.reporter.info(
                    f"Keeping existing {nickname}: {existing.pubkey()}",
                    context="StoreKeypairs",
                )
                stored[nickname] = existing.pubkey()
                continue

            keypair = Keypair()
            self.key_store.put_keypair(nickname, keypair)
            self.reporter.info(
                f"Stored {nickname}: {keypair.pubkey()}", context="StoreKeypairs"
            )
            stored[nickname] = keypair.pubkey()

        return stored
