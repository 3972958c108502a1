"""
Command used to read the auction from the ledger
"""

from auctionpack.apps.auction_app.program.state import Auction, decode_auction
from auctionpack.core.command import AsyncCommand
from auctionpack.solana.client.ledger import Ledger
from auctionpack.solana.client.model import Address


class LookupAuction(AsyncCommand[Address, Auction | None]):
    """
    Reads and decodes the auction record stored at the escrow address.

    Notes
    -----
    - Returns None if the escrow account does not exist, has no data, or has not been initialized by an exhibit.
    - Nothing is mutated. It is safe to call repeatedly and concurrently.

    :raises DecodeError: if account data is present but is not an auction record
    """

    def __init__(self, ledger: Ledger):
        self._ledger = ledger
        self._logger = super().get_logger()

    async def __call__(self, escrow: Address) -> Auction | None:
        data = await self._ledger.get_account_bytes(escrow)
        if not data:
            return None

        auction = decode_auction(data)
        if not auction.is_initialized:
            return None

        self._logger.debug("%s: %s", escrow, auction)
        return auction
