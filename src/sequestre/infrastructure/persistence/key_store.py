"""
File-backed key/address store.

Layout under keys_dir:
- <nickname>/publicKey.json: base58 address as a JSON string
- <nickname>/privateKey.json: 64-byte secret key as a JSON array of ints
- mints/<name>_pub.json: mint address as a JSON string
"""

import json
import shutil
from pathlib import Path
from typing import Optional, Union

from solders.keypair import Keypair  # type: ignore
from solders.pubkey import Pubkey  # type: ignore

from sequestre.domain.exceptions import MissingAddress

PUBLIC_KEY_FILE = "publicKey.json"
PRIVATE_KEY_FILE = "privateKey.json"
MINTS_DIR = "mints"


class KeyStore:
    """
    Named keypairs and addresses persisted as JSON files.

    Lookups return None for absent or unreadable entries; the require_*
    variants raise MissingAddress instead.
    """

    def __init__(self, keys_dir: Union[str, Path]):
        """
        Initialize key store.

        Args:
            keys_dir: Root directory of the store
        """
        self.keys_dir = Path(keys_dir).expanduser()

    # ================================================================
    # Public keys
    # ================================================================

    def get_public_key(self, nickname: str) -> Optional[Pubkey]:
        """Load public key stored under nickname."""
        address = self._read_json(self.keys_dir / nickname / PUBLIC_KEY_FILE)
        return self._to_pubkey(address)

    def require_public_key(self, nickname: str) -> Pubkey:
        """
        Load public key stored under nickname.

        Raises:
            MissingAddress: If nothing is stored
        """
        pubkey = self.get_public_key(nickname)
        if pubkey is None:
            raise MissingAddress(nickname)
        return pubkey

    def put_public_key(self, nickname: str, pubkey: Pubkey) -> None:
        """Store public key under nickname."""
        self._write_json(self.keys_dir / nickname / PUBLIC_KEY_FILE, str(pubkey))

    # ================================================================
    # Keypairs
    # ================================================================

    def get_keypair(self, nickname: str) -> Optional[Keypair]:
        """
        Load keypair stored under nickname.

        Returns None if either half is missing or they do not match.
        """
        pubkey = self.get_public_key(nickname)
        secret = self._read_json(self.keys_dir / nickname / PRIVATE_KEY_FILE)

        if pubkey is None or not isinstance(secret, list):
            return None

        try:
            keypair = Keypair.from_bytes(bytes(secret))
        except (ValueError, TypeError):
            return None

        if keypair.pubkey() != pubkey:
            return None
        return keypair

    def require_keypair(self, nickname: str) -> Keypair:
        """
        Load keypair stored under nickname.

        Raises:
            MissingAddress: If no usable keypair is stored
        """
        keypair = self.get_keypair(nickname)
        if keypair is None:
            raise MissingAddress(nickname, kind="keypair")
        return keypair

    def put_keypair(self, nickname: str, keypair: Keypair) -> None:
        """Store both halves of keypair under nickname."""
        self.put_public_key(nickname, keypair.pubkey())
        self._write_json(
            self.keys_dir / nickname / PRIVATE_KEY_FILE, list(bytes(keypair))
        )

    # ================================================================
    # Mints
    # ================================================================

    def get_mint(self, name: str) -> Optional[Pubkey]:
        """Load mint address stored under name (case-insensitive)."""
        address = self._read_json(self._mint_path(name))
        return self._to_pubkey(address)

    def require_mint(self, name: str) -> Pubkey:
        """
        Load mint address stored under name.

        Raises:
            MissingAddress: If nothing is stored
        """
        mint = self.get_mint(name)
        if mint is None:
            raise MissingAddress(name, kind="mint address")
        return mint

    def put_mint(self, name: str, mint: Pubkey) -> None:
        """Store mint address under name."""
        self._write_json(self._mint_path(name), str(mint))

    # ================================================================
    # Housekeeping
    # ================================================================

    def exists(self, nickname: str) -> bool:
        """Check if anything is stored under nickname."""
        return (self.keys_dir / nickname / PUBLIC_KEY_FILE).exists()

    def remove(self, nickname: str) -> None:
        """Delete everything stored under nickname (no-op if absent)."""
        shutil.rmtree(self.keys_dir / nickname, ignore_errors=True)

    # ================================================================
    # Helpers
    # ================================================================

    def _mint_path(self, name: str) -> Path:
        return self.keys_dir / MINTS_DIR / f"{name.lower()}_pub.json"

    @staticmethod
    def _read_json(path: Path):
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError):
            return None

    @staticmethod
    def _write_json(path: Path, value) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(value, f)

    @staticmethod
    def _to_pubkey(address) -> Optional[Pubkey]:
        if not isinstance(address, str):
            return None
        try:
            return Pubkey.from_string(address)
        except ValueError:
            return None
