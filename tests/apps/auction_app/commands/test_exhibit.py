import unittest

from solders.keypair import Keypair

from auctionpack.apps.auction_app.commands.exhibit import ExhibitArgs, PrepareExhibit
from auctionpack.apps.auction_app.errors import EncodingError, PreconditionFailed
from auctionpack.apps.auction_app.program.instruction import ExhibitInstruction
from auctionpack.apps.auction_app.program.state import AUCTION_LEN
from auctionpack.solana.client.model import (
    SYSVAR_CLOCK,
    SYSVAR_RENT,
    TOKEN_ACCOUNT_LEN,
    TOKEN_PROGRAM,
)
from tests.support.auctions import new_address, open_auction
from tests.test_support import AuctionPackTestCase


class PrepareExhibitTestCase(AuctionPackTestCase):
    program_id = new_address()

    def exhibit_args(self, **kwargs) -> ExhibitArgs:
        args = {
            "exhibitor": new_address(),
            "exhibitor_nft_account": new_address(),
            "exhibitor_ft_receiving_account": new_address(),
            "nft_mint": new_address(),
            "price": 200,
            "duration_seconds": 3600,
        }
        args.update(kwargs)
        return ExhibitArgs(**args)

    def test_prepare_exhibit(self):
        # SETUP
        prepare = PrepareExhibit(self.program_id)
        escrow_keypair = Keypair()
        nft_custody_keypair = Keypair()
        args = self.exhibit_args(
            escrow_keypair=escrow_keypair,
            nft_custody_keypair=nft_custody_keypair,
        )

        # ACT
        auction_request = prepare(args)

        # ASSERT
        request = auction_request.request
        self.assertEqual(escrow_keypair.pubkey(), auction_request.escrow)
        self.assertEqual(
            ExhibitInstruction(price=200, duration_seconds=3600),
            auction_request.instruction,
        )
        self.assertEqual(self.program_id, request.program_id)
        self.assertEqual(
            bytes([0, 0xC8, 0, 0, 0, 0, 0, 0, 0, 0x10, 0x0E, 0, 0, 0, 0, 0, 0]),
            request.data,
        )

        with self.subTest("account order and flags"):
            self.assertEqual(
                [
                    (args.exhibitor, True, False),
                    (args.exhibitor_nft_account, False, True),
                    (nft_custody_keypair.pubkey(), False, True),
                    (args.exhibitor_ft_receiving_account, False, True),
                    (escrow_keypair.pubkey(), False, True),
                    (SYSVAR_RENT, False, False),
                    (SYSVAR_CLOCK, False, False),
                    (TOKEN_PROGRAM, False, False),
                ],
                [
                    (meta.pubkey, meta.is_signer, meta.is_writable)
                    for meta in request.accounts
                ],
            )
            self.assertEqual([args.exhibitor], request.signers)

        with self.subTest("fresh accounts are allocated"):
            nft_custody, escrow = request.new_accounts
            self.assertEqual(nft_custody_keypair.pubkey(), nft_custody.address)
            self.assertTrue(nft_custody.is_token_account)
            self.assertEqual(TOKEN_ACCOUNT_LEN, nft_custody.space)
            self.assertEqual(TOKEN_PROGRAM, nft_custody.owner)
            self.assertEqual(args.nft_mint, nft_custody.mint)
            self.assertEqual(args.exhibitor, nft_custody.token_owner)

            self.assertEqual(escrow_keypair.pubkey(), escrow.address)
            self.assertFalse(escrow.is_token_account)
            self.assertEqual(AUCTION_LEN, escrow.space)
            self.assertEqual(self.program_id, escrow.owner)

        with self.subTest("post-condition"):
            self.assertFalse(auction_request.is_applied(None))
            self.assertFalse(auction_request.is_applied(open_auction()))
            self.assertTrue(
                auction_request.is_applied(
                    open_auction(
                        exhibitor_pubkey=args.exhibitor,
                        exhibiting_nft_temp_pubkey=nft_custody_keypair.pubkey(),
                    )
                )
            )

    def test_fresh_keypairs_are_generated(self):
        prepare = PrepareExhibit(self.program_id)
        request_1 = prepare(self.exhibit_args())
        request_2 = prepare(self.exhibit_args())
        self.assertNotEqual(request_1.escrow, request_2.escrow)
        self.assertNotEqual(request_1.request.id, request_2.request.id)

    def test_invalid_args(self):
        prepare = PrepareExhibit(self.program_id)

        with self.subTest("price and duration must be positive"):
            for kwargs in ({"price": 0}, {"duration_seconds": 0}):
                with self.assertRaises(PreconditionFailed):
                    prepare(self.exhibit_args(**kwargs))

        with self.subTest("values must fit in u64"):
            for kwargs in (
                {"price": -1},
                {"duration_seconds": 2**64},
            ):
                with self.assertRaises(EncodingError):
                    prepare(self.exhibit_args(**kwargs))


if __name__ == "__main__":
    unittest.main()
