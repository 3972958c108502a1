"""
Provides the command that prepares the request to close, i.e., settle, an ended auction
"""
from dataclasses import dataclass

from auctionpack.apps.auction_app.commands import (
    AuctionRequest,
    Clock,
    require_auction,
    wall_clock,
)
from auctionpack.apps.auction_app.errors import PreconditionFailed
from auctionpack.apps.auction_app.program.authority import derive_authority
from auctionpack.apps.auction_app.program.instruction import (
    CloseInstruction,
    encode_instruction,
)
from auctionpack.apps.auction_app.program.state import Auction, Bidder
from auctionpack.core.command import Command
from auctionpack.solana.client.model import (
    Address,
    Request,
    SYSVAR_CLOCK,
    TOKEN_PROGRAM,
    readonly,
    signer,
    writable,
)


@dataclass(slots=True)
class CloseArgs:
    escrow: Address
    auction: Auction | None
    bidder: Address
    # bidder's token account that receives the NFT
    bidder_nft_receiving_account: Address


class PrepareClose(Command[CloseArgs, AuctionRequest]):
    """
    Prepares the request to close the auction once its bidding session is over.
    Once committed, the NFT has moved to the highest bidder, the locked payment has moved to the exhibitor, and the
    escrow record is closed.

    Notes
    -----
    - The end time check uses the local clock, which is advisory. The auction program checks against the ledger's
      clock.

    Asserts
    -------
    1. auction exists
    2. auction has ended
    3. if the auction has a bid, then the sender is the highest bidder
    """

    def __init__(self, program_id: Address, clock: Clock = wall_clock):
        self._program_id = program_id
        self._clock = clock

    def __call__(self, args: CloseArgs) -> AuctionRequest:
        instruction = CloseInstruction()

        auction = require_auction(args.escrow, args.auction)
        now = self._clock()
        if not auction.is_ended(now):
            raise PreconditionFailed(
                f"auction will be finished in {auction.end_at - now} seconds"
            )
        match auction.highest_bidder:
            case Bidder(address) if address != args.bidder:
                raise PreconditionFailed("only the highest bidder can close the auction")

        authority, _bump_seed = derive_authority(self._program_id)

        request = Request(
            program_id=self._program_id,
            accounts=[
                signer(args.bidder),
                writable(auction.exhibitor_pubkey),
                writable(auction.exhibiting_nft_temp_pubkey),
                writable(auction.exhibitor_ft_receiving_pubkey),
                writable(auction.highest_bidder_ft_temp_pubkey),
                writable(args.bidder_nft_receiving_account),
                writable(args.escrow),
                readonly(SYSVAR_CLOCK),
                readonly(TOKEN_PROGRAM),
                readonly(authority),
            ],
            data=encode_instruction(instruction),
        )

        return AuctionRequest(
            escrow=args.escrow,
            instruction=instruction,
            request=request,
            is_applied=lambda observed: observed is None,
        )
