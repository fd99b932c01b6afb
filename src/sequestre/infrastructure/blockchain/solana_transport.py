"""
Solana RPC transport.

Thin blocking wrapper over solana.rpc.api.Client. Every call is a single
request; failures are wrapped in RpcFailure and never retried.
"""

import time
from typing import List, Optional, Sequence

from solana.exceptions import SolanaRpcException  # type: ignore
from solana.rpc.api import Client  # type: ignore
from solana.rpc.core import RPCException  # type: ignore
from solana.rpc.types import TxOpts  # type: ignore
from solders.instruction import Instruction  # type: ignore
from solders.keypair import Keypair  # type: ignore
from solders.message import Message  # type: ignore
from solders.pubkey import Pubkey  # type: ignore
from solders.signature import Signature  # type: ignore
from solders.transaction import Transaction  # type: ignore
from solders.transaction_status import TransactionConfirmationStatus  # type: ignore

from sequestre.config import ConfirmationConfig, SequestreConfig
from sequestre.domain.exceptions import RpcFailure, TransactionTimeout

LAMPORTS_PER_SOL = 1_000_000_000

_CONFIRMATION_ORDER = [
    TransactionConfirmationStatus.Processed,
    TransactionConfirmationStatus.Confirmed,
    TransactionConfirmationStatus.Finalized,
]
_COMMITMENT_INDEX = {"processed": 0, "confirmed": 1, "finalized": 2}

_RPC_ERRORS = (SolanaRpcException, RPCException)


class SolanaTransport:
    """
    Blocking Solana RPC transport.

    Provides account reads, transaction submission and bounded
    confirmation polling at a fixed commitment level.
    """

    def __init__(
        self,
        rpc_url: str,
        commitment: str = "confirmed",
        confirmation: Optional[ConfirmationConfig] = None,
        client: Optional[Client] = None,
    ):
        """
        Initialize transport.

        Args:
            rpc_url: Solana RPC endpoint URL
            commitment: Commitment used for reads and confirmation
            confirmation: Polling bounds (defaults if None)
            client: Optional preconfigured RPC client
        """
        self.rpc_url = rpc_url
        self.commitment = commitment
        self.confirmation = confirmation or ConfirmationConfig()
        self.client = client or Client(rpc_url, commitment=commitment)

    @classmethod
    def from_config(cls, config: SequestreConfig) -> "SolanaTransport":
        """Create transport from configuration."""
        return cls(
            rpc_url=config.rpc_url,
            commitment=config.commitment,
            confirmation=config.confirmation,
        )

    # ================================================================
    # Reads
    # ================================================================

    def get_account_data(self, pubkey: Pubkey) -> Optional[bytes]:
        """
        Fetch raw account data.

        Returns:
            Account data, or None if the account does not exist
        """
        try:
            response = self.client.get_account_info(
                pubkey, commitment=self.commitment
            )
        except _RPC_ERRORS as e:
            raise self._failure("getAccountInfo", e, account=str(pubkey)) from e

        if response.value is None:
            return None
        return bytes(response.value.data)

    def account_exists(self, pubkey: Pubkey) -> bool:
        """Check if account exists on-chain."""
        return self.get_account_data(pubkey) is not None

    def get_balance(self, pubkey: Pubkey) -> int:
        """Get SOL balance in lamports."""
        try:
            response = self.client.get_balance(pubkey, commitment=self.commitment)
        except _RPC_ERRORS as e:
            raise self._failure("getBalance", e, account=str(pubkey)) from e
        return response.value

    def get_token_account_balance(self, pubkey: Pubkey):
        """
        Get SPL token account balance.

        Returns:
            UiTokenAmount with amount (base units string), decimals and
            ui_amount_string
        """
        try:
            response = self.client.get_token_account_balance(
                pubkey, commitment=self.commitment
            )
        except _RPC_ERRORS as e:
            raise self._failure(
                "getTokenAccountBalance", e, account=str(pubkey)
            ) from e
        return response.value

    def get_minimum_balance_for_rent_exemption(self, size: int) -> int:
        """Get lamports needed to keep an account of size bytes rent-exempt."""
        try:
            response = self.client.get_minimum_balance_for_rent_exemption(
                size, commitment=self.commitment
            )
        except _RPC_ERRORS as e:
            raise self._failure(
                "getMinimumBalanceForRentExemption", e, size=size
            ) from e
        return response.value

    # ================================================================
    # Writes
    # ================================================================

    def request_airdrop(self, pubkey: Pubkey, lamports: int) -> Signature:
        """Request lamports from the cluster faucet."""
        try:
            response = self.client.request_airdrop(
                pubkey, lamports, commitment=self.commitment
            )
        except _RPC_ERRORS as e:
            raise self._failure("requestAirdrop", e, account=str(pubkey)) from e
        return response.value

    def send_transaction(
        self,
        instructions: Sequence[Instruction],
        signers: Sequence[Keypair],
        payer: Optional[Pubkey] = None,
    ) -> Signature:
        """
        Sign and send one atomic transaction.

        Args:
            instructions: Instructions in execution order
            signers: Every keypair the instructions require
            payer: Fee payer (first signer if None)

        Returns:
            Transaction signature
        """
        fee_payer = payer or signers[0].pubkey()

        try:
            blockhash = self.client.get_latest_blockhash(
                commitment=self.commitment
            ).value.blockhash
            message = Message.new_with_blockhash(
                list(instructions), fee_payer, blockhash
            )
            transaction = Transaction(list(signers), message, blockhash)
            response = self.client.send_raw_transaction(
                bytes(transaction),
                opts=TxOpts(
                    skip_preflight=False,
                    preflight_commitment=self.commitment,
                ),
            )
        except _RPC_ERRORS as e:
            raise self._failure("sendTransaction", e, payer=str(fee_payer)) from e

        return response.value

    def confirm_transaction(
        self,
        signature: Signature,
        timeout: Optional[float] = None,
    ) -> bool:
        """
        Wait until signature reaches the configured commitment.

        Polls getSignatureStatuses with a growing interval until the
        deadline.

        Args:
            signature: Transaction signature
            timeout: Override for the configured timeout

        Returns:
            True once confirmed

        Raises:
            RpcFailure: If the transaction landed with an error
            TransactionTimeout: If confirmation times out
        """
        timeout = timeout if timeout is not None else self.confirmation.timeout
        deadline = time.monotonic() + timeout
        interval = self.confirmation.poll_interval
        target = _COMMITMENT_INDEX[self.commitment]

        while True:
            status = self._signature_status(signature)

            if status is not None:
                if status.err is not None:
                    raise RpcFailure(
                        f"Transaction failed: {status.err}",
                        details={
                            "signature": str(signature),
                            "error": str(status.err),
                        },
                    )
                if self._reached(status.confirmation_status, target):
                    return True

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise TransactionTimeout(str(signature), timeout)

            time.sleep(min(interval, remaining))
            interval = min(
                interval * self.confirmation.backoff_factor,
                self.confirmation.max_poll_interval,
            )

    # ================================================================
    # Helpers
    # ================================================================

    def _signature_status(self, signature: Signature):
        try:
            response = self.client.get_signature_statuses([signature])
        except _RPC_ERRORS as e:
            raise self._failure(
                "getSignatureStatuses", e, signature=str(signature)
            ) from e

        statuses: List = list(response.value)
        return statuses[0] if statuses else None

    @staticmethod
    def _reached(confirmation_status, target: int) -> bool:
        if confirmation_status is None:
            # Older nodes omit the field for landed transactions
            return True
        return _CONFIRMATION_ORDER.index(confirmation_status) >= target

    @staticmethod
    def _failure(method: str, error: Exception, **details) -> RpcFailure:
        return RpcFailure(
            f"RPC {method} failed: {error}",
            details={"method": method, **details},
        )
