import unittest

from auctionpack.apps.auction_app.commands.cancel import CancelArgs, PrepareCancel
from auctionpack.apps.auction_app.errors import AbsentAccount, PreconditionFailed
from auctionpack.apps.auction_app.program.authority import derive_authority
from auctionpack.apps.auction_app.program.instruction import CancelInstruction
from auctionpack.solana.client.model import TOKEN_PROGRAM
from tests.support.auctions import auction_with_bid, new_address, open_auction
from tests.test_support import AuctionPackTestCase


class PrepareCancelTestCase(AuctionPackTestCase):
    program_id = new_address()

    def test_prepare_cancel(self):
        # SETUP
        auction = open_auction()
        args = CancelArgs(
            escrow=new_address(),
            auction=auction,
            exhibitor=auction.exhibitor_pubkey,
            exhibitor_nft_account=new_address(),
        )

        # ACT
        auction_request = PrepareCancel(self.program_id)(args)

        # ASSERT
        request = auction_request.request
        self.assertEqual(CancelInstruction(), auction_request.instruction)
        self.assertEqual(bytes([2]), request.data)
        self.assertEqual([], request.new_accounts)
        self.assertEqual(
            [
                (args.exhibitor, True, False),
                (auction.exhibiting_nft_temp_pubkey, False, True),
                (args.exhibitor_nft_account, False, True),
                (args.escrow, False, True),
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

    def test_preconditions(self):
        prepare = PrepareCancel(self.program_id)

        with self.subTest("auction has a bid"):
            auction = auction_with_bid()
            with self.assertRaises(PreconditionFailed):
                prepare(
                    CancelArgs(
                        escrow=new_address(),
                        auction=auction,
                        exhibitor=auction.exhibitor_pubkey,
                        exhibitor_nft_account=new_address(),
                    )
                )

        with self.subTest("sender is not the exhibitor"):
            with self.assertRaises(PreconditionFailed):
                prepare(
                    CancelArgs(
                        escrow=new_address(),
                        auction=open_auction(),
                        exhibitor=new_address(),
                        exhibitor_nft_account=new_address(),
                    )
                )

        with self.subTest("auction does not exist"):
            escrow = new_address()
            with self.assertRaises(AbsentAccount) as err:
                prepare(
                    CancelArgs(
                        escrow=escrow,
                        auction=None,
                        exhibitor=new_address(),
                        exhibitor_nft_account=new_address(),
                    )
                )
            self.assertEqual(escrow, err.exception.address)


if __name__ == "__main__":
    unittest.main()
