"""
Domain exceptions.
"""

from sequestre.domain.exceptions.escrow_exceptions import (
    AccountsNotClosed,
    EncodingError,
    InvalidLifecycleTransition,
    InvariantViolation,
    LayoutError,
    MissingAddress,
    RpcFailure,
    SequestreException,
    TransactionTimeout,
)

__all__ = [
    "SequestreException",
    "MissingAddress",
    "LayoutError",
    "EncodingError",
    "RpcFailure",
    "TransactionTimeout",
    "InvariantViolation",
    "AccountsNotClosed",
    "InvalidLifecycleTransition",
]
