"""
Solana domain model

https://solana.com/docs/core/accounts
"""

from dataclasses import dataclass, field
from typing import Final, TypeAlias

from solders.instruction import AccountMeta, Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.sysvar import CLOCK, RENT
from spl.token.constants import ACCOUNT_LEN, TOKEN_PROGRAM_ID
from ulid import ULID

# 32-byte ledger address. Addresses are compared by their raw bytes, never by their base58 display form.
Address: TypeAlias = Pubkey

# all-zero address, which the auction program uses to mean "not set"
ZERO_ADDRESS: Final[Address] = Pubkey.default()

SYSVAR_RENT: Final[Address] = RENT
SYSVAR_CLOCK: Final[Address] = CLOCK
TOKEN_PROGRAM: Final[Address] = TOKEN_PROGRAM_ID

TOKEN_ACCOUNT_LEN: Final[int] = ACCOUNT_LEN


def signer(address: Address) -> AccountMeta:
    return AccountMeta(pubkey=address, is_signer=True, is_writable=False)


def writable(address: Address) -> AccountMeta:
    return AccountMeta(pubkey=address, is_signer=False, is_writable=True)


def readonly(address: Address) -> AccountMeta:
    return AccountMeta(pubkey=address, is_signer=False, is_writable=False)


@dataclass(slots=True)
class NewAccount:
    """
    Account that must be allocated on the ledger before the request's instruction runs.

    - If `mint` is set, then the account is a token account that is initialized for the mint with `token_owner`
      as its owner.
    - Otherwise, the account is a data account of `space` bytes owned by `owner`.
    """

    keypair: Keypair
    space: int
    owner: Address
    mint: Address | None = None
    token_owner: Address | None = None

    @classmethod
    def token_account(
        cls, mint: Address, token_owner: Address, keypair: Keypair | None = None
    ) -> "NewAccount":
        """
        :param keypair: if not specified, then a new keypair is generated
        """
        return cls(
            keypair=keypair if keypair else Keypair(),
            space=TOKEN_ACCOUNT_LEN,
            owner=TOKEN_PROGRAM,
            mint=mint,
            token_owner=token_owner,
        )

    @property
    def address(self) -> Address:
        return self.keypair.pubkey()

    @property
    def is_token_account(self) -> bool:
        return self.mint is not None


@dataclass(slots=True)
class Request:
    """
    Outbound program instruction.

    The request's account list is ordered and each account is tagged as signer and/or writable.
    """

    program_id: Address
    accounts: list[AccountMeta]
    data: bytes
    new_accounts: list[NewAccount] = field(default_factory=list)
    # used to correlate log messages for the request
    id: ULID = field(default_factory=ULID)  # pylint: disable=invalid-name

    @property
    def signers(self) -> list[Address]:
        """
        :return: accounts that must sign the request, excluding new accounts
        """
        return [meta.pubkey for meta in self.accounts if meta.is_signer]

    def to_instruction(self) -> Instruction:
        return Instruction(
            program_id=self.program_id,
            data=self.data,
            accounts=self.accounts,
        )


@dataclass(slots=True)
class Committed:
    """
    Request was committed on the ledger
    """

    request_id: ULID
    signature: str
