"""
Escrow client exceptions.

Every error is surfaced to the caller; the CLI is the only layer that turns
them into operator messages.
"""

from typing import Iterable, Optional


class SequestreException(Exception):
    """Base exception for escrow client operations."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class MissingAddress(SequestreException):
    """A required nickname was never persisted in the key store."""

    def __init__(self, nickname: str, kind: str = "public key"):
        super().__init__(
            f"No {kind} stored for '{nickname}'",
            details={"nickname": nickname, "kind": kind},
        )
        self.nickname = nickname


class LayoutError(SequestreException):
    """Account bytes do not match the escrow record layout."""


class EncodingError(SequestreException):
    """Value cannot be encoded in its wire representation."""


class RpcFailure(SequestreException):
    """RPC transport call failed."""


class TransactionTimeout(RpcFailure):
    """Transaction did not reach the requested commitment in time."""

    def __init__(self, signature: str, timeout: float):
        super().__init__(
            f"Transaction confirmation timeout: {signature}",
            details={"signature": signature, "timeout": timeout},
        )
        self.signature = signature


class InvariantViolation(SequestreException):
    """On-chain state does not match the expected atomic outcome."""


class AccountsNotClosed(InvariantViolation):
    """Accounts expected to be closed by the program still exist."""

    def __init__(self, nicknames: Iterable[str]):
        names = list(nicknames)
        super().__init__(
            "Accounts are not closed correctly: "
            f"{', '.join(names)} still open. Please check the escrow program",
            details={"open_accounts": names},
        )
        self.open_accounts = names


class InvalidLifecycleTransition(SequestreException):
    """Escrow lifecycle transition is not allowed."""
