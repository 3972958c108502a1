"""
Solana ledger query and submission protocol
"""
from typing import Protocol, Sequence

from solders.keypair import Keypair

from auctionpack.solana.client.model import Address, Committed, Request


class Ledger(Protocol):
    async def get_account_bytes(self, address: Address) -> bytes | None:
        """
        :return: the account's raw data, or None if the account does not exist
        """
        ...

    async def submit(self, request: Request, signers: Sequence[Keypair]) -> Committed:
        """
        Submits the request and waits until it is committed.

        The request's new accounts are allocated and signed for as part of the submission.
        The first signer pays the fees.

        :raises SubmissionRejected: if the ledger declined the request
        """
        ...

    async def get_fungible_balance(self, token_account: Address) -> int:
        """
        :raises NotATokenAccount: if the address is not a token account
        """
        ...
