"""
Solana account related utility functions
"""
import logging

from auctionpack.solana.client.error import NotATokenAccount
from auctionpack.solana.client.ledger import Ledger
from auctionpack.solana.client.model import Address

_logger = logging.getLogger(__name__)


async def get_token_balance(ledger: Ledger, address: Address) -> int | None:
    """
    Returns the token balance for the specified token account.

    :return : None if the address is not a token account
    """
    try:
        return await ledger.get_fungible_balance(address)
    except NotATokenAccount:
        _logger.warning("Not a token account: %s", address)
        return None


async def get_token_balances(
    ledger: Ledger, addresses: dict[str, Address]
) -> dict[str, int | None]:
    """
    :param addresses: token accounts keyed by a display name
    :return: balances keyed by the same names - None means the balance is unknown
    """
    return {
        name: await get_token_balance(ledger, address)
        for name, address in addresses.items()
    }
