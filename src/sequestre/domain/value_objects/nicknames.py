"""
Nicknames under which keys and addresses are persisted.

The initiator deposits tokens of the deposit mint and receives tokens of
the counter mint; the counterparty does the reverse.
"""

ALICE = "alice"
BOB = "bob"
MASTER_ACCOUNT = "masterAccount"

ALICE_TEMP_TOKEN = "aliceTempToken"
ESCROW_ACCOUNT = "escrowAccount"

PARTIES = (ALICE, BOB)
GENERATED_KEYPAIRS = (ALICE, BOB, MASTER_ACCOUNT)


def token_account_nickname(owner: str, mint_name: str) -> str:
    """
    Nickname of owner's token account for a mint.

    Examples:
        >>> token_account_nickname("alice", "usdc")
        'aliceUSDCToken'
    """
    return f"{owner}{mint_name.upper()}Token"
