import unittest

from solders.keypair import Keypair

from auctionpack.apps.auction_app.commands.bid import BidArgs, PrepareBid
from auctionpack.apps.auction_app.errors import (
    AbsentAccount,
    EncodingError,
    PreconditionFailed,
)
from auctionpack.apps.auction_app.program.authority import derive_authority
from auctionpack.apps.auction_app.program.state import Bidder
from auctionpack.solana.client.model import (
    SYSVAR_CLOCK,
    TOKEN_PROGRAM,
    ZERO_ADDRESS,
)
from tests.support.auctions import auction_with_bid, new_address, open_auction
from tests.test_support import AuctionPackTestCase

NOW = 1_700_000_000


class PrepareBidTestCase(AuctionPackTestCase):
    program_id = new_address()

    def prepare(self, now: int = NOW) -> PrepareBid:
        return PrepareBid(self.program_id, clock=lambda: now)

    @staticmethod
    def bid_args(auction, price: int, **kwargs) -> BidArgs:
        args = {
            "escrow": new_address(),
            "auction": auction,
            "bidder": new_address(),
            "bidder_ft_account": new_address(),
            "ft_mint": new_address(),
            "price": price,
        }
        args.update(kwargs)
        return BidArgs(**args)

    def test_first_bid(self):
        # SETUP
        auction = open_auction(price=200, end_at=NOW + 3600)
        custody_keypair = Keypair()
        args = self.bid_args(auction, 250, bidder_ft_custody_keypair=custody_keypair)

        # ACT
        auction_request = self.prepare()(args)

        # ASSERT
        request = auction_request.request
        self.assertEqual(args.escrow, auction_request.escrow)
        self.assertEqual(bytes([1, 0xFA, 0, 0, 0, 0, 0, 0, 0]), request.data)
        self.assertEqual(
            [
                (args.bidder, True, False),
                (ZERO_ADDRESS, False, True),
                (ZERO_ADDRESS, False, True),
                (ZERO_ADDRESS, False, True),
                (custody_keypair.pubkey(), False, True),
                (args.bidder_ft_account, False, True),
                (args.escrow, False, True),
                (SYSVAR_CLOCK, False, False),
                (TOKEN_PROGRAM, False, False),
                (derive_authority(self.program_id)[0], False, False),
            ],
            [
                (meta.pubkey, meta.is_signer, meta.is_writable)
                for meta in request.accounts
            ],
        )

        (custody,) = request.new_accounts
        self.assertEqual(custody_keypair.pubkey(), custody.address)
        self.assertEqual(args.ft_mint, custody.mint)
        self.assertEqual(args.bidder, custody.token_owner)

        with self.subTest("post-condition"):
            self.assertFalse(auction_request.is_applied(None))
            self.assertFalse(auction_request.is_applied(auction))
            self.assertTrue(
                auction_request.is_applied(
                    auction_with_bid(
                        bidder=args.bidder,
                        price=250,
                        highest_bidder_ft_temp_pubkey=custody_keypair.pubkey(),
                    )
                )
            )

    def test_outbid(self):
        auction = auction_with_bid(price=250, end_at=NOW + 3600)
        args = self.bid_args(auction, 300)

        request = self.prepare()(args).request

        self.assertEqual(
            [
                auction.highest_bidder_pubkey,
                auction.highest_bidder_ft_temp_pubkey,
                auction.highest_bidder_ft_returning_pubkey,
            ],
            [meta.pubkey for meta in request.accounts[1:4]],
        )

    def test_bid_price(self):
        auction = open_auction(price=200, end_at=NOW + 3600)

        for price in (0, 199, 200):
            with self.subTest(price=price):
                with self.assertRaises(PreconditionFailed):
                    self.prepare()(self.bid_args(auction, price))

        with self.subTest("bid must be strictly greater"):
            self.prepare()(self.bid_args(auction, 201))

        with self.subTest("bid must fit in u64"):
            with self.assertRaises(EncodingError):
                self.prepare()(self.bid_args(auction, 2**64))

    def test_bidding_session(self):
        auction = open_auction(price=200, end_at=NOW)

        with self.subTest("open until end time"):
            self.prepare(now=NOW - 1)(self.bid_args(auction, 250))

        with self.subTest("closed at end time"):
            with self.assertRaises(PreconditionFailed):
                self.prepare(now=NOW)(self.bid_args(auction, 250))

    def test_already_highest_bidder(self):
        bidder = new_address()
        auction = auction_with_bid(bidder=bidder, price=250, end_at=NOW + 3600)
        self.assertEqual(Bidder(bidder), auction.highest_bidder)

        with self.assertRaises(PreconditionFailed):
            self.prepare()(self.bid_args(auction, 300, bidder=bidder))

    def test_absent_auction(self):
        with self.assertRaises(AbsentAccount):
            self.prepare()(self.bid_args(None, 250))


if __name__ == "__main__":
    unittest.main()
