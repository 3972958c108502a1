"""
Auction application client.

Each operation is a single read-decide-build-submit unit of work:
1. read the current auction state from the ledger
2. check the operation's preconditions against it
3. build one request
4. submit the request and wait until it is committed
5. poll the ledger until the request's post-condition is observed, bounded by the visibility timeout

No retries are performed. Callers decide the retry policy, e.g., based on `SubmissionRejected.retryable`.
"""

import asyncio
from datetime import timedelta

from solders.keypair import Keypair

from auctionpack.apps.auction_app.commands import AuctionRequest, Clock, wall_clock
from auctionpack.apps.auction_app.commands.bid import BidArgs, PrepareBid
from auctionpack.apps.auction_app.commands.cancel import CancelArgs, PrepareCancel
from auctionpack.apps.auction_app.commands.close import CloseArgs, PrepareClose
from auctionpack.apps.auction_app.commands.exhibit import ExhibitArgs, PrepareExhibit
from auctionpack.apps.auction_app.commands.lookup_auction import LookupAuction
from auctionpack.apps.auction_app.errors import (
    AbsentAccount,
    AlreadyApplied,
    SubmissionRejected,
)
from auctionpack.apps.auction_app.program.auction_status import AuctionStatus
from auctionpack.apps.auction_app.program.authority import derive_authority
from auctionpack.apps.auction_app.program.instruction import opcode
from auctionpack.apps.auction_app.program.state import Auction
from auctionpack.core.logging import get_logger
from auctionpack.solana.client.accounts import get_token_balance
from auctionpack.solana.client.ledger import Ledger
from auctionpack.solana.client.model import Address


def _bidding_moved_on(built_against: Auction | None, observed: Auction | None) -> bool:
    """
    :return: True if the auction still exists and a competing bid changed the price or the highest bidder
             since the request was built
    """
    if built_against is None or observed is None:
        return False
    return (observed.price, observed.highest_bidder) != (
        built_against.price,
        built_against.highest_bidder,
    )


class _AuctionClientSupport:
    def __init__(
        self,
        ledger: Ledger,
        program_id: Address,
        signer: Keypair,
        clock: Clock = wall_clock,
        poll_interval: timedelta = timedelta(milliseconds=500),
        visibility_timeout: timedelta = timedelta(seconds=10),
    ):
        """
        :param signer: signs and pays for the requests
        :param clock: local clock used for advisory time checks
        :param poll_interval: how often to re-read the auction while waiting for a committed request to become visible
        :param visibility_timeout: how long to wait for a committed request to become visible
        """
        self._ledger = ledger
        self._program_id = program_id
        self._signer = signer
        self._clock = clock
        self._poll_interval = poll_interval
        self._visibility_timeout = visibility_timeout

        self._lookup_auction = LookupAuction(ledger)
        self._logger = get_logger(self)

    @property
    def sender(self) -> Address:
        return self._signer.pubkey()

    @property
    def program_id(self) -> Address:
        return self._program_id

    @property
    def escrow_authority(self) -> Address:
        return derive_authority(self._program_id)[0]

    async def get_auction(self, escrow: Address) -> Auction | None:
        """
        :return: None if no auction exists at the escrow address
        """
        return await self._lookup_auction(escrow)

    async def get_auction_status(self, escrow: Address) -> AuctionStatus:
        auction = await self.get_auction(escrow)
        if auction is None:
            return AuctionStatus.ABSENT
        return auction.status(self._clock())

    async def get_token_balance(self, address: Address) -> int | None:
        """
        :return: None if the address is not a token account
        """
        return await get_token_balance(self._ledger, address)

    async def _require_auction(self, escrow: Address) -> Auction:
        auction = await self.get_auction(escrow)
        if auction is None:
            raise AbsentAccount(escrow)
        return auction

    async def submit(
        self,
        auction_request: AuctionRequest,
        built_against: Auction | None = None,
    ) -> Auction | None:
        """
        Submits a prepared auction request signed by the client's signer.

        :param built_against: auction state that the request was built against.
                              If specified and the request is rejected after the state has changed,
                              then the rejection is marked as retryable.
        :return: auction state observed after the request was committed
        :raises AlreadyApplied: if the request was rejected, but its post-condition holds
        :raises SubmissionRejected: if the request was rejected
        """
        request = auction_request.request
        self._logger.info(
            "submitting %s request: %s",
            opcode(auction_request.instruction).name,
            request.id,
        )
        try:
            await self._ledger.submit(request, [self._signer])
        except SubmissionRejected as err:
            observed = await self.get_auction(auction_request.escrow)
            if auction_request.is_applied(observed):
                raise AlreadyApplied(reason=err.reason) from err
            if _bidding_moved_on(built_against, observed):
                self._logger.warning(
                    "request was rejected against stale state: %s", request.id
                )
                raise SubmissionRejected(reason=err.reason, retryable=True) from err
            self._logger.warning("request was rejected: %s : %s", request.id, err)
            raise

        return await self._await_applied(auction_request)

    async def _await_applied(self, auction_request: AuctionRequest) -> Auction | None:
        """
        Committed state is eventually visible. Polls the auction until the request's post-condition is observed.
        If the post-condition is not observed before the visibility timeout, then the last observed state is returned.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._visibility_timeout.total_seconds()
        while True:
            observed = await self.get_auction(auction_request.escrow)
            if auction_request.is_applied(observed):
                self._logger.info("request applied: %s", auction_request.request.id)
                return observed
            if loop.time() >= deadline:
                self._logger.warning(
                    "committed request is not yet visible: %s",
                    auction_request.request.id,
                )
                return observed
            await asyncio.sleep(self._poll_interval.total_seconds())


class AuctionExhibitor(_AuctionClientSupport):
    """
    Auction client used by the exhibitor to start and cancel auctions.
    """

    async def exhibit(
        self,
        exhibitor_nft_account: Address,
        exhibitor_ft_receiving_account: Address,
        nft_mint: Address,
        price: int,
        duration_seconds: int,
        escrow_keypair: Keypair | None = None,
    ) -> Address:
        """
        Starts a new auction.

        NOTE: the escrow address is not persisted by the client. The caller is responsible for storing it to be able to
        locate the auction later.

        :param escrow_keypair: if not specified, then a new escrow account keypair is generated
        :return: escrow address
        """
        prepare = PrepareExhibit(self._program_id)
        auction_request = prepare(
            ExhibitArgs(
                exhibitor=self.sender,
                exhibitor_nft_account=exhibitor_nft_account,
                exhibitor_ft_receiving_account=exhibitor_ft_receiving_account,
                nft_mint=nft_mint,
                price=price,
                duration_seconds=duration_seconds,
                escrow_keypair=escrow_keypair,
            )
        )
        await self.submit(auction_request)
        return auction_request.escrow

    async def cancel(self, escrow: Address, exhibitor_nft_account: Address):
        """
        Cancels an auction that has no bid. The NFT is returned to the exhibitor's NFT account.
        """
        auction = await self._require_auction(escrow)
        prepare = PrepareCancel(self._program_id)
        auction_request = prepare(
            CancelArgs(
                escrow=escrow,
                auction=auction,
                exhibitor=self.sender,
                exhibitor_nft_account=exhibitor_nft_account,
            )
        )
        await self.submit(auction_request)


class AuctionBidder(_AuctionClientSupport):
    """
    Auction client used for placing bids and closing auctions that were won.
    """

    async def bid(
        self,
        escrow: Address,
        price: int,
        bidder_ft_account: Address,
        ft_mint: Address,
    ) -> Auction | None:
        """
        Used to submit a bid.

        Notes
        -----
        - Auction bidding session must be open
        - The bid must be higher than the current highest bid.
        - If the bid is rejected because a competing bid was committed first, then the raised SubmissionRejected is
          marked as retryable.

        :param bidder_ft_account: pays for the bid and is refunded if the bid is outbid
        :return: auction state observed after the bid was committed
        """
        auction = await self._require_auction(escrow)
        prepare = PrepareBid(self._program_id, self._clock)
        auction_request = prepare(
            BidArgs(
                escrow=escrow,
                auction=auction,
                bidder=self.sender,
                bidder_ft_account=bidder_ft_account,
                ft_mint=ft_mint,
                price=price,
            )
        )
        return await self.submit(auction_request, built_against=auction)

    async def close(self, escrow: Address, bidder_nft_receiving_account: Address):
        """
        Settles the auction once the bidding session is over.
        The NFT is transferred to the highest bidder and the payment is transferred to the exhibitor.
        """
        auction = await self._require_auction(escrow)
        prepare = PrepareClose(self._program_id, self._clock)
        auction_request = prepare(
            CloseArgs(
                escrow=escrow,
                auction=auction,
                bidder=self.sender,
                bidder_nft_receiving_account=bidder_nft_receiving_account,
            )
        )
        await self.submit(auction_request)
