"""
Escrow authority derivation.

The escrow authority is a program derived address. It owns the custody token accounts and is used by the auction
program to sign custody account transfers. Because it is guaranteed not to lie on the ed25519 curve, no private key
exists for it.
"""
from functools import cache
from typing import Final

from solders.pubkey import Pubkey

from auctionpack.solana.client.model import Address

ESCROW_SEED: Final[bytes] = b"escrow"


@cache
def derive_authority(program_id: Address) -> tuple[Address, int]:
    """
    :return: (escrow authority address, bump seed)
    """
    return Pubkey.find_program_address([ESCROW_SEED], program_id)
