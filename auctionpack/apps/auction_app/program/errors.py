"""
Auction program custom error codes
"""
import re
from enum import IntEnum

_CUSTOM_PROGRAM_ERROR = re.compile(r"custom program error: 0x([0-9a-fA-F]+)")


class AuctionProgramError(IntEnum):
    """
    Custom errors returned by the auction program.

    The ledger reports them as `custom program error: 0x<code>`.
    """

    INVALID_INSTRUCTION = 0
    NOT_RENT_EXEMPT = 1
    EXPECTED_AMOUNT_MISMATCH = 2
    AMOUNT_OVERFLOW = 3
    INSUFFICIENT_BID_PRICE = 4
    ALREADY_BID = 5
    INACTIVE_AUCTION = 6
    ACTIVE_AUCTION = 7
    NO_BIDDER_FOUND = 8

    def __repr__(self) -> str:
        return f"{self.name}({self.value})"

    @classmethod
    def parse(cls, reason: str) -> "AuctionProgramError | None":
        """
        :param reason: ledger supplied rejection reason
        :return: None if the reason does not reference an auction program error
        """
        match = _CUSTOM_PROGRAM_ERROR.search(reason)
        if match is None:
            return None
        code = int(match.group(1), 16)
        if code in cls._value2member_map_:
            return cls(code)
        return None
