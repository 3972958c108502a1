"""
Auction lifecycle commands.

Each lifecycle command builds exactly one request from the current auction state plus caller supplied addresses.
Client side checks are advisory: they only avoid submitting requests that the auction program would reject.
The auction program remains the authority.
"""
from dataclasses import dataclass
from datetime import datetime, UTC
from typing import Callable, TypeAlias

from auctionpack.apps.auction_app.errors import AbsentAccount
from auctionpack.apps.auction_app.program.instruction import AuctionInstruction
from auctionpack.apps.auction_app.program.state import Auction
from auctionpack.solana.client.model import Address, Request

# returns the current unix timestamp in seconds
Clock: TypeAlias = Callable[[], int]


def wall_clock() -> int:
    return int(datetime.now(UTC).timestamp())


@dataclass(slots=True)
class AuctionRequest:
    """
    Request for one auction instruction, along with the post-condition that is expected to be observed
    once the request is committed.
    """

    escrow: Address
    instruction: AuctionInstruction
    request: Request
    # `None` means no auction record exists at the escrow address
    is_applied: Callable[[Auction | None], bool]


def require_auction(escrow: Address, auction: Auction | None) -> Auction:
    """
    :raises AbsentAccount: if no initialized auction record exists
    """
    if auction is None or not auction.is_initialized:
        raise AbsentAccount(escrow)
    return auction
