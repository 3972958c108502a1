"""
Provides the command that prepares the request to exhibit an NFT for auction
"""
from dataclasses import dataclass

from solders.keypair import Keypair

from auctionpack.apps.auction_app.commands import AuctionRequest
from auctionpack.apps.auction_app.errors import PreconditionFailed
from auctionpack.apps.auction_app.program.instruction import (
    ExhibitInstruction,
    encode_instruction,
)
from auctionpack.apps.auction_app.program.state import AUCTION_LEN, Auction
from auctionpack.core.command import Command
from auctionpack.solana.client.model import (
    Address,
    NewAccount,
    Request,
    SYSVAR_CLOCK,
    SYSVAR_RENT,
    TOKEN_PROGRAM,
    readonly,
    signer,
    writable,
)


@dataclass(slots=True)
class ExhibitArgs:
    """
    Exhibit request args
    """

    # pylint: disable=too-many-instance-attributes

    exhibitor: Address
    # exhibitor's token account that currently holds the NFT
    exhibitor_nft_account: Address
    # exhibitor's token account that receives the final payment
    exhibitor_ft_receiving_account: Address
    nft_mint: Address
    # initial price
    price: int
    duration_seconds: int

    # if not specified, then new keypairs are generated
    escrow_keypair: Keypair | None = None
    nft_custody_keypair: Keypair | None = None


class PrepareExhibit(Command[ExhibitArgs, AuctionRequest]):
    """
    Prepares the request that creates a new auction.

    The request allocates the escrow record and the NFT custody token account. Once committed, the auction record is
    initialized at the new escrow address and the NFT has moved into the custody account.

    Asserts
    -------
    1. price > 0
    2. duration_seconds > 0
    """

    def __init__(self, program_id: Address):
        self._program_id = program_id

    def __call__(self, args: ExhibitArgs) -> AuctionRequest:
        instruction = ExhibitInstruction(
            price=args.price,
            duration_seconds=args.duration_seconds,
        )
        data = encode_instruction(instruction)

        if args.price <= 0:
            raise PreconditionFailed("price must be > 0")
        if args.duration_seconds <= 0:
            raise PreconditionFailed("duration must be > 0")

        nft_custody = NewAccount.token_account(
            mint=args.nft_mint,
            token_owner=args.exhibitor,
            keypair=args.nft_custody_keypair,
        )
        escrow = NewAccount(
            keypair=args.escrow_keypair if args.escrow_keypair else Keypair(),
            space=AUCTION_LEN,
            owner=self._program_id,
        )

        request = Request(
            program_id=self._program_id,
            accounts=[
                signer(args.exhibitor),
                writable(args.exhibitor_nft_account),
                writable(nft_custody.address),
                writable(args.exhibitor_ft_receiving_account),
                writable(escrow.address),
                readonly(SYSVAR_RENT),
                readonly(SYSVAR_CLOCK),
                readonly(TOKEN_PROGRAM),
            ],
            data=data,
            new_accounts=[nft_custody, escrow],
        )

        def is_applied(auction: Auction | None) -> bool:
            return (
                auction is not None
                and auction.is_initialized
                and auction.exhibitor_pubkey == args.exhibitor
                and auction.exhibiting_nft_temp_pubkey == nft_custody.address
            )

        return AuctionRequest(
            escrow=escrow.address,
            instruction=instruction,
            request=request,
            is_applied=is_applied,
        )
