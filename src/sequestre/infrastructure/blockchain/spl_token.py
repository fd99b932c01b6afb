"""
System and SPL Token instruction helpers.

Wraps the solders / spl.token builders used by the setup and initialize
flows so those flows deal only in pubkeys and amounts.
"""

from typing import List

from solders.instruction import Instruction  # type: ignore
from solders.pubkey import Pubkey  # type: ignore
from solders.system_program import CreateAccountParams, create_account  # type: ignore
from spl.token.constants import ACCOUNT_LEN, MINT_LEN, TOKEN_PROGRAM_ID  # type: ignore
from spl.token.instructions import (  # type: ignore
    InitializeAccountParams,
    InitializeMintParams,
    MintToParams,
    TransferCheckedParams,
    create_associated_token_account,
    get_associated_token_address,
    initialize_account,
    initialize_mint,
    mint_to,
    transfer_checked,
)

TOKEN_ACCOUNT_SIZE = ACCOUNT_LEN
MINT_ACCOUNT_SIZE = MINT_LEN


def create_program_account(
    payer: Pubkey,
    new_account: Pubkey,
    lamports: int,
    space: int,
    owner: Pubkey,
) -> Instruction:
    """System program instruction allocating an account owned by owner."""
    return create_account(
        CreateAccountParams(
            from_pubkey=payer,
            to_pubkey=new_account,
            lamports=lamports,
            space=space,
            owner=owner,
        )
    )


def create_token_account(
    payer: Pubkey,
    account: Pubkey,
    mint: Pubkey,
    owner: Pubkey,
    lamports: int,
    token_program: Pubkey = TOKEN_PROGRAM_ID,
) -> List[Instruction]:
    """
    Create and initialize a (non-associated) token account.

    Returns:
        [create_account, initialize_account]
    """
    return [
        create_program_account(
            payer, account, lamports, TOKEN_ACCOUNT_SIZE, token_program
        ),
        initialize_account(
            InitializeAccountParams(
                program_id=token_program,
                account=account,
                mint=mint,
                owner=owner,
            )
        ),
    ]


def create_mint(
    payer: Pubkey,
    mint: Pubkey,
    authority: Pubkey,
    decimals: int,
    lamports: int,
    token_program: Pubkey = TOKEN_PROGRAM_ID,
) -> List[Instruction]:
    """
    Create and initialize a mint without freeze authority.

    Returns:
        [create_account, initialize_mint]
    """
    return [
        create_program_account(payer, mint, lamports, MINT_ACCOUNT_SIZE, token_program),
        initialize_mint(
            InitializeMintParams(
                decimals=decimals,
                program_id=token_program,
                mint=mint,
                mint_authority=authority,
                freeze_authority=None,
            )
        ),
    ]


def transfer_tokens_checked(
    owner: Pubkey,
    source: Pubkey,
    destination: Pubkey,
    mint: Pubkey,
    amount: int,
    decimals: int,
    token_program: Pubkey = TOKEN_PROGRAM_ID,
) -> Instruction:
    """TransferChecked of amount base units from source to destination."""
    return transfer_checked(
        TransferCheckedParams(
            program_id=token_program,
            source=source,
            mint=mint,
            dest=destination,
            owner=owner,
            amount=amount,
            decimals=decimals,
        )
    )


def mint_tokens(
    mint: Pubkey,
    destination: Pubkey,
    authority: Pubkey,
    amount: int,
    token_program: Pubkey = TOKEN_PROGRAM_ID,
) -> Instruction:
    """MintTo amount base units into destination."""
    return mint_to(
        MintToParams(
            program_id=token_program,
            mint=mint,
            dest=destination,
            mint_authority=authority,
            amount=amount,
        )
    )


def associated_token_address(owner: Pubkey, mint: Pubkey) -> Pubkey:
    """Derive the associated token account of owner for mint."""
    return get_associated_token_address(owner, mint)


def create_associated_token(payer: Pubkey, owner: Pubkey, mint: Pubkey) -> Instruction:
    """Instruction creating the associated token account of owner for mint."""
    return create_associated_token_account(payer, owner, mint)
