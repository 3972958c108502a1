"""
Auction command line interface

Keys and addresses are looked up by name in the configured key store:

- exhibitor: exhibitor keypair
- exhibitor_nft_x: exhibitor's NFT token account
- exhibitor_ft_nao: exhibitor's payment token account
- mint_nft_x: NFT mint
- mint_ft_nao: payment token mint
- bidder<N>: bidder keypair
- bidder<N>_ft_nao: bidder's payment token account
- bidder<N>_nft_x: bidder's NFT token account
- escrow: current auction escrow address
"""
import asyncio
from pathlib import Path

import click

from auctionpack.apps.auction_app.client.auction_client import (
    AuctionBidder,
    AuctionExhibitor,
)
from auctionpack.apps.auction_app.commands.lookup_auction import LookupAuction
from auctionpack.apps.auction_app.config import AuctionAppConfig, ConfigError
from auctionpack.apps.auction_app.errors import AuctionError, SubmissionRejected
from auctionpack.core.logging import configure_logging
from auctionpack.solana.client.accounts import get_token_balances
from auctionpack.solana.client.accounts.error import KeyStoreError
from auctionpack.solana.client.accounts.keystore import FileKeyStore
from auctionpack.solana.client.rpc_ledger import SolanaRpcLedger

ESCROW = "escrow"


class _App:
    def __init__(self, config: AuctionAppConfig):
        self.config = config
        self.keys = FileKeyStore(config.keys_dir)

    def ledger(self) -> SolanaRpcLedger:
        return SolanaRpcLedger.from_url(self.config.url, self.config.commitment)

    def run(self, coroutine):
        """
        Runs the coroutine and reports auction errors as click errors
        """
        try:
            return asyncio.run(coroutine)
        except (AuctionError, SubmissionRejected, KeyStoreError) as err:
            raise click.ClickException(repr(err)) from err


@click.group()
@click.option(
    "--config-file",
    required=True,
    type=click.Path(exists=True, resolve_path=True, readable=True, path_type=Path),
)
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
)
@click.pass_context
def auction(ctx: click.Context, config_file: Path, log_level: str):
    configure_logging(level=log_level)
    try:
        ctx.obj = _App(AuctionAppConfig.from_config_file(config_file))
    except ConfigError as err:
        raise click.ClickException(str(err)) from err


@auction.command
@click.argument("price", type=int)
@click.argument("duration", type=int)
@click.pass_obj
def exhibit(app: _App, price: int, duration: int):
    """
    Exhibits the NFT for auction for DURATION seconds starting at PRICE.

    The new escrow address is stored in the key store under "escrow".
    """

    async def _exhibit():
        async with app.ledger() as ledger:
            exhibitor = AuctionExhibitor(
                ledger=ledger,
                program_id=app.config.program_id,
                signer=app.keys.get_keypair("exhibitor"),
            )
            return await exhibitor.exhibit(
                exhibitor_nft_account=app.keys.get_address("exhibitor_nft_x"),
                exhibitor_ft_receiving_account=app.keys.get_address(
                    "exhibitor_ft_nao"
                ),
                nft_mint=app.keys.get_address("mint_nft_x"),
                price=price,
                duration_seconds=duration,
            )

    escrow = app.run(_exhibit())
    app.keys.write_address(ESCROW, escrow)
    click.echo(f"escrow: {escrow}")


@auction.command
@click.argument("price", type=int)
@click.option("--bidder", required=True, type=int, help="Bidder number")
@click.pass_obj
def bid(app: _App, price: int, bidder: int):
    """
    Bids PRICE on the current auction
    """

    async def _bid():
        async with app.ledger() as ledger:
            auction_bidder = AuctionBidder(
                ledger=ledger,
                program_id=app.config.program_id,
                signer=app.keys.get_keypair(f"bidder{bidder}"),
            )
            return await auction_bidder.bid(
                escrow=app.keys.get_address(ESCROW),
                price=price,
                bidder_ft_account=app.keys.get_address(f"bidder{bidder}_ft_nao"),
                ft_mint=app.keys.get_address("mint_ft_nao"),
            )

    click.echo(app.run(_bid()))


@auction.command
@click.pass_obj
def cancel(app: _App):
    """
    Cancels the current auction. The NFT is returned to the exhibitor.
    """

    async def _cancel():
        async with app.ledger() as ledger:
            exhibitor = AuctionExhibitor(
                ledger=ledger,
                program_id=app.config.program_id,
                signer=app.keys.get_keypair("exhibitor"),
            )
            await exhibitor.cancel(
                escrow=app.keys.get_address(ESCROW),
                exhibitor_nft_account=app.keys.get_address("exhibitor_nft_x"),
            )

    app.run(_cancel())
    click.echo("auction cancelled")


@auction.command
@click.option("--bidder", required=True, type=int, help="Bidder number")
@click.pass_obj
def close(app: _App, bidder: int):
    """
    Closes the current auction once it has ended
    """

    async def _close():
        async with app.ledger() as ledger:
            auction_bidder = AuctionBidder(
                ledger=ledger,
                program_id=app.config.program_id,
                signer=app.keys.get_keypair(f"bidder{bidder}"),
            )
            await auction_bidder.close(
                escrow=app.keys.get_address(ESCROW),
                bidder_nft_receiving_account=app.keys.get_address(
                    f"bidder{bidder}_nft_x"
                ),
            )

    app.run(_close())
    click.echo("auction closed")


@auction.command
@click.pass_obj
def show(app: _App):
    """
    Displays the current auction and its token account balances
    """

    async def _show():
        async with app.ledger() as ledger:
            escrow = app.keys.get_address(ESCROW)
            current = await LookupAuction(ledger)(escrow)
            if current is None:
                return None, {}
            balances = await get_token_balances(
                ledger,
                {
                    "NFT escrow": current.exhibiting_nft_temp_pubkey,
                    "exhibitor FT": current.exhibitor_ft_receiving_pubkey,
                    "highest bidder FT escrow": current.highest_bidder_ft_temp_pubkey,
                    "highest bidder FT": current.highest_bidder_ft_returning_pubkey,
                },
            )
            return current, balances

    current, balances = app.run(_show())
    if current is None:
        click.echo("no auction")
        return

    click.echo(f"exhibitor: {current.exhibitor_pubkey}")
    click.echo(f"price: {current.price}")
    click.echo(f"end time: {current.end_time.isoformat()}")
    click.echo(f"highest bidder: {current.highest_bidder!r}")
    for name, balance in balances.items():
        click.echo(f"{name}: {'unknown' if balance is None else balance}")


if __name__ == "__main__":
    auction()  # pylint: disable=no-value-for-parameter
