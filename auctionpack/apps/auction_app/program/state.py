"""
Auction escrow account record and its fixed-width binary codec.

Layout (209 bytes, little-endian, no padding):

    offset  size  field
         0     1  is_initialized
         1    32  exhibitor_pubkey
        33    32  exhibiting_nft_temp_pubkey
        65    32  exhibitor_ft_receiving_pubkey
        97     8  price
       105     8  end_at
       113    32  highest_bidder_pubkey
       145    32  highest_bidder_ft_temp_pubkey
       177    32  highest_bidder_ft_returning_pubkey

Any layout change is a breaking protocol version change.
"""

from dataclasses import dataclass
from datetime import datetime, UTC
from typing import Final, TypeAlias

from borsh_construct import CStruct, U8, U64
from construct import ConstructError
from solders.pubkey import Pubkey

from auctionpack.apps.auction_app.errors import DecodeError, EncodingError
from auctionpack.apps.auction_app.program.auction_status import AuctionStatus
from auctionpack.solana.client.model import Address, ZERO_ADDRESS

AuctionLayout = CStruct(
    "is_initialized" / U8,
    "exhibitor_pubkey" / U8[32],
    "exhibiting_nft_temp_pubkey" / U8[32],
    "exhibitor_ft_receiving_pubkey" / U8[32],
    "price" / U64,
    "end_at" / U64,
    "highest_bidder_pubkey" / U8[32],
    "highest_bidder_ft_temp_pubkey" / U8[32],
    "highest_bidder_ft_returning_pubkey" / U8[32],
)

AUCTION_LEN: Final[int] = AuctionLayout.sizeof()

U64_MAX: Final[int] = 2**64 - 1


@dataclass(frozen=True, slots=True)
class NoBidderYet:
    """
    No bid has been placed.

    Stored on the ledger as the all-zero address.
    """

    def __repr__(self) -> str:
        return "NoBidderYet"


@dataclass(frozen=True, slots=True)
class Bidder:
    """
    Current highest bidder
    """

    address: Address


HighestBidder: TypeAlias = NoBidderYet | Bidder

NO_BIDDER_YET: Final[NoBidderYet] = NoBidderYet()


@dataclass(frozen=True, slots=True)
class Auction:
    """
    Auction escrow account record
    """

    # pylint: disable=too-many-instance-attributes

    is_initialized: bool
    # exhibitor's wallet
    exhibitor_pubkey: Address
    # escrow held token account that holds the NFT under auction
    exhibiting_nft_temp_pubkey: Address
    # exhibitor's token account that receives the final payment
    exhibitor_ft_receiving_pubkey: Address
    # current highest bid
    price: int
    # unix timestamp (seconds)
    end_at: int
    highest_bidder: HighestBidder
    # escrow held token account that holds the highest bidder's payment
    highest_bidder_ft_temp_pubkey: Address
    # highest bidder's token account that is refunded when outbid
    highest_bidder_ft_returning_pubkey: Address

    @property
    def end_time(self) -> datetime:
        return datetime.fromtimestamp(self.end_at, UTC)

    @property
    def highest_bidder_pubkey(self) -> Address:
        """
        :return: highest bidder address as stored on the ledger, i.e., the zero address if there is no bid
        """
        match self.highest_bidder:
            case Bidder(address):
                return address
            case _:
                return ZERO_ADDRESS

    def has_bid(self) -> bool:
        return isinstance(self.highest_bidder, Bidder)

    def is_bidding_open(self, now: int) -> bool:
        """
        :param now: unix timestamp (seconds)
        """
        return self.is_initialized and now < self.end_at

    def is_ended(self, now: int) -> bool:
        """
        :return: True if the bidding session is over and the auction can be closed
        """
        return self.is_initialized and now >= self.end_at

    def status(self, now: int) -> AuctionStatus:
        if not self.is_initialized:
            return AuctionStatus.ABSENT
        if self.is_ended(now):
            return AuctionStatus.ENDED
        return AuctionStatus.OPEN


def to_highest_bidder(address: Address) -> HighestBidder:
    if address == ZERO_ADDRESS:
        return NO_BIDDER_YET
    return Bidder(address)


def decode_auction(data: bytes) -> Auction:
    """
    :raises DecodeError: if the data length is not AUCTION_LEN or the initialized flag is not 0 or 1
    """
    if len(data) != AUCTION_LEN:
        raise DecodeError(
            f"auction record must be {AUCTION_LEN} bytes, but was {len(data)} bytes"
        )

    try:
        record = AuctionLayout.parse(data)
    except ConstructError as err:
        raise DecodeError(f"invalid auction record: {err}") from err

    if record.is_initialized not in (0, 1):
        raise DecodeError(f"invalid is_initialized flag: {record.is_initialized}")

    def address(field: str) -> Address:
        return Pubkey.from_bytes(bytes(record[field]))

    return Auction(
        is_initialized=record.is_initialized == 1,
        exhibitor_pubkey=address("exhibitor_pubkey"),
        exhibiting_nft_temp_pubkey=address("exhibiting_nft_temp_pubkey"),
        exhibitor_ft_receiving_pubkey=address("exhibitor_ft_receiving_pubkey"),
        price=record.price,
        end_at=record.end_at,
        highest_bidder=to_highest_bidder(address("highest_bidder_pubkey")),
        highest_bidder_ft_temp_pubkey=address("highest_bidder_ft_temp_pubkey"),
        highest_bidder_ft_returning_pubkey=address(
            "highest_bidder_ft_returning_pubkey"
        ),
    )


def encode_auction(auction: Auction) -> bytes:
    """
    :raises EncodingError: if price or end_at cannot be represented as u64
    """
    try:
        return AuctionLayout.build(
            {
                "is_initialized": 1 if auction.is_initialized else 0,
                "exhibitor_pubkey": list(bytes(auction.exhibitor_pubkey)),
                "exhibiting_nft_temp_pubkey": list(
                    bytes(auction.exhibiting_nft_temp_pubkey)
                ),
                "exhibitor_ft_receiving_pubkey": list(
                    bytes(auction.exhibitor_ft_receiving_pubkey)
                ),
                "price": check_u64("price", auction.price),
                "end_at": check_u64("end_at", auction.end_at),
                "highest_bidder_pubkey": list(bytes(auction.highest_bidder_pubkey)),
                "highest_bidder_ft_temp_pubkey": list(
                    bytes(auction.highest_bidder_ft_temp_pubkey)
                ),
                "highest_bidder_ft_returning_pubkey": list(
                    bytes(auction.highest_bidder_ft_returning_pubkey)
                ),
            }
        )
    except ConstructError as err:
        raise EncodingError(f"auction cannot be encoded: {err}") from err


def check_u64(name: str, value: int) -> int:
    """
    :raises EncodingError: if the value is not an int in the u64 range
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise EncodingError(f"{name} must be an int: {value!r}")
    if not 0 <= value <= U64_MAX:
        raise EncodingError(f"{name} is out of the u64 range: {value}")
    return value
