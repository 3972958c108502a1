"""
Auction program instructions.

Each instruction is encoded as a single opcode byte followed by its opcode specific payload:

- Exhibit: [0, price: u64, duration_seconds: u64]
- Bid: [1, price: u64]
- Cancel: [2]
- Close: [3]

All integers are little-endian.
"""
from dataclasses import dataclass
from enum import IntEnum
from typing import TypeAlias

from borsh_construct import CStruct, U8, U64
from construct import ConstructError

from auctionpack.apps.auction_app.errors import (
    DecodeError,
    EncodingError,
    UnrecognizedOpcode,
)
from auctionpack.apps.auction_app.program.state import check_u64

ExhibitLayout = CStruct("opcode" / U8, "price" / U64, "duration_seconds" / U64)
BidLayout = CStruct("opcode" / U8, "price" / U64)
OpcodeLayout = CStruct("opcode" / U8)


class Opcode(IntEnum):
    EXHIBIT = 0
    BID = 1
    CANCEL = 2
    CLOSE = 3


@dataclass(frozen=True, slots=True)
class ExhibitInstruction:
    """
    Starts the auction
    """

    price: int
    duration_seconds: int


@dataclass(frozen=True, slots=True)
class BidInstruction:
    price: int


@dataclass(frozen=True, slots=True)
class CancelInstruction:
    """
    Cancels an auction that has no bids
    """


@dataclass(frozen=True, slots=True)
class CloseInstruction:
    """
    Settles an ended auction
    """


AuctionInstruction: TypeAlias = (
    ExhibitInstruction | BidInstruction | CancelInstruction | CloseInstruction
)


def opcode(instruction: AuctionInstruction) -> Opcode:
    match instruction:
        case ExhibitInstruction():
            return Opcode.EXHIBIT
        case BidInstruction():
            return Opcode.BID
        case CancelInstruction():
            return Opcode.CANCEL
        case CloseInstruction():
            return Opcode.CLOSE
    raise TypeError(f"not an auction instruction: {instruction!r}")


def encode_instruction(instruction: AuctionInstruction) -> bytes:
    """
    :raises EncodingError: if an integer field cannot be represented as u64
    """
    match instruction:
        case ExhibitInstruction(price, duration_seconds):
            layout = ExhibitLayout
            fields = {
                "price": check_u64("price", price),
                "duration_seconds": check_u64("duration_seconds", duration_seconds),
            }
        case BidInstruction(price):
            layout = BidLayout
            fields = {"price": check_u64("price", price)}
        case CancelInstruction() | CloseInstruction():
            layout = OpcodeLayout
            fields = {}
        case _:
            raise TypeError(f"not an auction instruction: {instruction!r}")

    try:
        return layout.build({"opcode": opcode(instruction), **fields})
    except ConstructError as err:
        raise EncodingError(f"instruction cannot be encoded: {err}") from err


def decode_instruction(data: bytes) -> AuctionInstruction:
    """
    Trailing bytes after the payload are ignored.

    :raises UnrecognizedOpcode: if the opcode is not part of the protocol
    :raises DecodeError: if the data is empty or the payload is too short
    """
    if len(data) == 0:
        raise DecodeError("instruction data is empty")

    code = data[0]
    if code not in Opcode._value2member_map_:
        raise UnrecognizedOpcode(code)

    try:
        match Opcode(code):
            case Opcode.EXHIBIT:
                payload = ExhibitLayout.parse(data)
                return ExhibitInstruction(
                    price=payload.price,
                    duration_seconds=payload.duration_seconds,
                )
            case Opcode.BID:
                return BidInstruction(price=BidLayout.parse(data).price)
            case Opcode.CANCEL:
                return CancelInstruction()
            case _:
                return CloseInstruction()
    except ConstructError as err:
        raise DecodeError(f"instruction payload is too short: {err}") from err
