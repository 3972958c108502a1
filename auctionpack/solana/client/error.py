"""
Solana ledger related errors
"""
from dataclasses import dataclass

from auctionpack.solana.client.model import Address


@dataclass
class SubmissionRejected(Exception):
    """
    The ledger declined the request.

    The reason is supplied by the ledger and is treated as opaque.
    """

    reason: str
    # set when re-submitting the request against freshly read state may succeed
    retryable: bool = False

    def __str__(self) -> str:
        return self.reason


@dataclass
class NotATokenAccount(Exception):
    """
    Balance was requested for an address that is not a token account
    """

    address: Address
