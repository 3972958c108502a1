"""
Auction model classes
"""

from enum import IntEnum, auto


class AuctionStatus(IntEnum):
    """
    The auction status is not stored on the ledger. It is derived from the escrow record and the current time.

    - An auction is `Absent` until it is exhibited, which creates the escrow record.
    - Once exhibited, the auction is `Open` for bidding until its end time. Bids do not change the status.
    - After the end time, the auction is `Ended` and waits to be closed.
    - Cancelling an auction without bids or closing an ended auction destroys the escrow record,
      i.e., the auction is observed as `Absent` again.
    """

    ABSENT = auto()
    OPEN = auto()
    ENDED = auto()

    def __repr__(self) -> str:
        return f"{self.name}({self.value})"
