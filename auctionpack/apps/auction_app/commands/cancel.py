"""
Provides the command that prepares the request to cancel an auction
"""
from dataclasses import dataclass

from auctionpack.apps.auction_app.commands import AuctionRequest, require_auction
from auctionpack.apps.auction_app.errors import PreconditionFailed
from auctionpack.apps.auction_app.program.authority import derive_authority
from auctionpack.apps.auction_app.program.instruction import (
    CancelInstruction,
    encode_instruction,
)
from auctionpack.apps.auction_app.program.state import Auction
from auctionpack.core.command import Command
from auctionpack.solana.client.model import (
    Address,
    Request,
    TOKEN_PROGRAM,
    readonly,
    signer,
    writable,
)


@dataclass(slots=True)
class CancelArgs:
    escrow: Address
    auction: Auction | None
    exhibitor: Address
    # exhibitor's token account that the NFT is returned to
    exhibitor_nft_account: Address


class PrepareCancel(Command[CancelArgs, AuctionRequest]):
    """
    Prepares the request to cancel the auction.
    Once committed, the NFT is returned to the exhibitor and the escrow record is closed.

    Asserts
    -------
    1. auction exists
    2. sender is the exhibitor
    3. auction has no bid
    """

    def __init__(self, program_id: Address):
        self._program_id = program_id

    def __call__(self, args: CancelArgs) -> AuctionRequest:
        instruction = CancelInstruction()

        auction = require_auction(args.escrow, args.auction)
        if auction.exhibitor_pubkey != args.exhibitor:
            raise PreconditionFailed("only the exhibitor can cancel the auction")
        if auction.has_bid():
            raise PreconditionFailed("auction cannot be cancelled because it has a bid")

        authority, _bump_seed = derive_authority(self._program_id)

        request = Request(
            program_id=self._program_id,
            accounts=[
                signer(args.exhibitor),
                writable(auction.exhibiting_nft_temp_pubkey),
                writable(args.exhibitor_nft_account),
                writable(args.escrow),
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
