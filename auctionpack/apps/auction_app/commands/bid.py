"""
Provides the command that prepares a bid request
"""
from dataclasses import dataclass

from solders.keypair import Keypair

from auctionpack.apps.auction_app.commands import (
    AuctionRequest,
    Clock,
    require_auction,
    wall_clock,
)
from auctionpack.apps.auction_app.errors import PreconditionFailed
from auctionpack.apps.auction_app.program.authority import derive_authority
from auctionpack.apps.auction_app.program.instruction import (
    BidInstruction,
    encode_instruction,
)
from auctionpack.apps.auction_app.program.state import Auction, Bidder
from auctionpack.core.command import Command
from auctionpack.solana.client.model import (
    Address,
    NewAccount,
    Request,
    SYSVAR_CLOCK,
    TOKEN_PROGRAM,
    readonly,
    signer,
    writable,
)


@dataclass(slots=True)
class BidArgs:
    """
    Bid request args
    """

    # pylint: disable=too-many-instance-attributes

    escrow: Address
    # current auction state read from the ledger
    auction: Auction | None
    bidder: Address
    # bidder's token account that pays for the bid and is refunded if outbid
    bidder_ft_account: Address
    ft_mint: Address
    price: int

    # if not specified, then a new keypair is generated
    bidder_ft_custody_keypair: Keypair | None = None


class PrepareBid(Command[BidArgs, AuctionRequest]):
    """
    Prepares a bid request.

    The request allocates a payment custody token account for the bidder. Once committed, the previous highest
    bidder's payment has been refunded, the bid amount has moved into the new custody account, and the auction
    records the bidder as the highest bidder.

    Asserts
    -------
    1. auction exists
    2. auction bidding session is open
    3. price > current price
    4. bidder is not already the highest bidder
    """

    def __init__(self, program_id: Address, clock: Clock = wall_clock):
        self._program_id = program_id
        self._clock = clock

    def __call__(self, args: BidArgs) -> AuctionRequest:
        instruction = BidInstruction(price=args.price)
        data = encode_instruction(instruction)

        auction = require_auction(args.escrow, args.auction)
        if not auction.is_bidding_open(self._clock()):
            raise PreconditionFailed("auction is not open for bidding")
        if args.price <= auction.price:
            raise PreconditionFailed(
                f"bid is too low - current highest bid is: {auction.price}"
            )
        if auction.highest_bidder == Bidder(args.bidder):
            raise PreconditionFailed("bidder is already the highest bidder")

        ft_custody = NewAccount.token_account(
            mint=args.ft_mint,
            token_owner=args.bidder,
            keypair=args.bidder_ft_custody_keypair,
        )
        authority, _bump_seed = derive_authority(self._program_id)

        request = Request(
            program_id=self._program_id,
            accounts=[
                signer(args.bidder),
                # the zero address is passed through when there is no bid yet
                writable(auction.highest_bidder_pubkey),
                writable(auction.highest_bidder_ft_temp_pubkey),
                writable(auction.highest_bidder_ft_returning_pubkey),
                writable(ft_custody.address),
                writable(args.bidder_ft_account),
                writable(args.escrow),
                readonly(SYSVAR_CLOCK),
                readonly(TOKEN_PROGRAM),
                readonly(authority),
            ],
            data=data,
            new_accounts=[ft_custody],
        )

        def is_applied(observed: Auction | None) -> bool:
            return (
                observed is not None
                and observed.highest_bidder == Bidder(args.bidder)
                and observed.highest_bidder_ft_temp_pubkey == ft_custody.address
                and observed.price == args.price
            )

        return AuctionRequest(
            escrow=args.escrow,
            instruction=instruction,
            request=request,
            is_applied=is_applied,
        )
