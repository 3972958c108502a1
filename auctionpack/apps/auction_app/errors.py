"""
Auction client errors

- AbsentAccount: no auction exists at the escrow address
- DecodeError: account or instruction bytes do not match the auction program's binary layout
- EncodingError: value cannot be represented in the auction program's binary layout
- PreconditionFailed: client side check determined the operation would be rejected
- SubmissionRejected: the ledger declined the request
- AlreadyApplied: the request was rejected because its effect has already been applied
- NotATokenAccount: balance query for an address that is not a token account
"""
from dataclasses import dataclass

from auctionpack.apps.auction_app.program.errors import AuctionProgramError
from auctionpack.solana.client.error import NotATokenAccount, SubmissionRejected
from auctionpack.solana.client.model import Address

__all__ = [
    "AuctionError",
    "AbsentAccount",
    "DecodeError",
    "UnrecognizedOpcode",
    "EncodingError",
    "PreconditionFailed",
    "SubmissionRejected",
    "AlreadyApplied",
    "NotATokenAccount",
    "program_error",
]


class AuctionError(Exception):
    """
    Auction client base exception
    """


@dataclass
class AbsentAccount(AuctionError):
    """
    Auction does not exist at the escrow address
    """

    address: Address


class DecodeError(AuctionError):
    """
    Bytes are not a valid auction record or instruction, i.e., protocol version mismatch
    """


@dataclass
class UnrecognizedOpcode(DecodeError):
    """
    Instruction opcode is not part of the auction protocol
    """

    opcode: int


class EncodingError(AuctionError):
    """
    Value cannot be encoded, e.g., negative or overflows 64 bits
    """


class PreconditionFailed(AuctionError):
    """
    Operation is not legal given the observed auction state
    """


class AlreadyApplied(SubmissionRejected, AuctionError):
    """
    The request was rejected, but its post-condition is observed on the ledger.
    """


def program_error(err: SubmissionRejected) -> AuctionProgramError | None:
    """
    :return: auction program error referenced by the rejection reason
    """
    return AuctionProgramError.parse(err.reason)
