"""Escrow use cases."""

from sequestre.application.use_cases.cancel_escrow import CancelEscrow
from sequestre.application.use_cases.exchange_escrow import ExchangeEscrow
from sequestre.application.use_cases.initialize_escrow import InitializeEscrow
from sequestre.application.use_cases.setup_test_tokens import SetupTestTokens
from sequestre.application.use_cases.show_escrow import ShowEscrow
from sequestre.application.use_cases.store_keypairs import StoreKeypairs

__all__ = [
    "CancelEscrow",
    "ExchangeEscrow",
    "InitializeEscrow",
    "SetupTestTokens",
    "ShowEscrow",
    "StoreKeypairs",
]
