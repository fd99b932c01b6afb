"""Helpers shared by the use cases."""

from sequestre.application.services.balances import report_token_balances
from sequestre.application.services.escrow_checks import (
    verify_accounts_closed,
    verify_record_matches,
)

__all__ = [
    "report_token_balances",
    "verify_accounts_closed",
    "verify_record_matches",
]
