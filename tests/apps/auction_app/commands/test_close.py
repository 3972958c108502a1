import unittest

from auctionpack.apps.auction_app.commands.close import CloseArgs, PrepareClose
from auctionpack.apps.auction_app.errors import PreconditionFailed
from auctionpack.apps.auction_app.program.authority import derive_authority
from auctionpack.solana.client.model import SYSVAR_CLOCK, TOKEN_PROGRAM
from tests.support.auctions import auction_with_bid, new_address, open_auction
from tests.test_support import AuctionPackTestCase

END_AT = 1_700_003_600


class PrepareCloseTestCase(AuctionPackTestCase):
    program_id = new_address()

    def prepare(self, now: int) -> PrepareClose:
        return PrepareClose(self.program_id, clock=lambda: now)

    def test_prepare_close(self):
        # SETUP
        auction = auction_with_bid(end_at=END_AT)
        args = CloseArgs(
            escrow=new_address(),
            auction=auction,
            bidder=auction.highest_bidder_pubkey,
            bidder_nft_receiving_account=new_address(),
        )

        # ACT
        auction_request = self.prepare(END_AT)(args)

        # ASSERT
        request = auction_request.request
        self.assertEqual(bytes([3]), request.data)
        self.assertEqual(
            [
                (args.bidder, True, False),
                (auction.exhibitor_pubkey, False, True),
                (auction.exhibiting_nft_temp_pubkey, False, True),
                (auction.exhibitor_ft_receiving_pubkey, False, True),
                (auction.highest_bidder_ft_temp_pubkey, False, True),
                (args.bidder_nft_receiving_account, False, True),
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

        with self.subTest("post-condition: escrow record is closed"):
            self.assertTrue(auction_request.is_applied(None))
            self.assertFalse(auction_request.is_applied(auction))

    def test_end_time(self):
        for auction in (open_auction(end_at=END_AT), auction_with_bid(end_at=END_AT)):
            args = CloseArgs(
                escrow=new_address(),
                auction=auction,
                bidder=auction.highest_bidder_pubkey,
                bidder_nft_receiving_account=new_address(),
            )
            with self.subTest("auction is still open", auction=auction):
                with self.assertRaises(PreconditionFailed) as err:
                    self.prepare(END_AT - 10)(args)
                self.assertIn("10 seconds", str(err.exception))

            with self.subTest("auction has ended", auction=auction):
                self.prepare(END_AT)(args)
                self.prepare(END_AT + 1)(args)

    def test_sender_is_not_the_highest_bidder(self):
        auction = auction_with_bid(end_at=END_AT)
        with self.assertRaises(PreconditionFailed):
            self.prepare(END_AT)(
                CloseArgs(
                    escrow=new_address(),
                    auction=auction,
                    bidder=new_address(),
                    bidder_nft_receiving_account=new_address(),
                )
            )


if __name__ == "__main__":
    unittest.main()
