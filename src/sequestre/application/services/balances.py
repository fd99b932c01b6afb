"""
Token balance reporting.
"""

from typing import Dict, Optional

from solders.pubkey import Pubkey  # type: ignore


def report_token_balances(
    transport,
    reporter,
    accounts: Dict[str, Pubkey],
    context: str = "Balances",
) -> Dict[str, Optional[str]]:
    """
    Log the token balance of each account.

    Accounts that do not exist are logged as absent and mapped to None.

    Args:
        transport: SolanaTransport
        reporter: SystemReporter
        accounts: Nickname -> token account address
        context: Log context tag

    Returns:
        Nickname -> UI amount string (None if the account is absent)
    """
    balances: Dict[str, Optional[str]] = {}

    for nickname, pubkey in accounts.items():
        if not transport.account_exists(pubkey):
            reporter.info(f"{nickname}: account not found", context=context)
            balances[nickname] = None
            continue

        balance = transport.get_token_account_balance(pubkey)
        balances[nickname] = balance.ui_amount_string
        reporter.info(f"{nickname}: {balance.ui_amount_string}", context=context)

    return balances
