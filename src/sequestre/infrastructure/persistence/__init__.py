"""Key/address persistence."""

from sequestre.infrastructure.persistence.key_store import KeyStore

__all__ = ["KeyStore"]
