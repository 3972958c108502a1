"""
Ledger implementation backed by a Solana JSON RPC node
"""
from typing import Sequence

from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment, Confirmed
from solana.rpc.core import RPCException, UnconfirmedTxError
from solana.rpc.types import TxOpts
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.system_program import CreateAccountParams, create_account
from solders.transaction import Transaction
from solders.transaction_status import (
    InstructionErrorCustom,
    TransactionErrorInstructionError,
)
from spl.token.instructions import InitializeAccountParams, initialize_account

from auctionpack.core.logging import get_logger
from auctionpack.solana.client.error import NotATokenAccount, SubmissionRejected
from auctionpack.solana.client.model import (
    Address,
    Committed,
    NewAccount,
    Request,
    TOKEN_PROGRAM,
)


class SolanaRpcLedger:
    """
    Submits requests as single transactions and reads account state using the node's JSON RPC API.
    """

    def __init__(self, client: AsyncClient, commitment: Commitment = Confirmed):
        self._client = client
        self._commitment = commitment
        self._logger = get_logger(self)

    @classmethod
    def from_url(cls, url: str, commitment: Commitment = Confirmed) -> "SolanaRpcLedger":
        return cls(AsyncClient(url, commitment=commitment), commitment)

    async def __aenter__(self) -> "SolanaRpcLedger":
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()

    async def close(self):
        await self._client.close()

    async def get_account_bytes(self, address: Address) -> bytes | None:
        account = (await self._client.get_account_info(address)).value
        if account is None:
            return None
        return bytes(account.data)

    async def get_fungible_balance(self, token_account: Address) -> int:
        try:
            result = await self._client.get_token_account_balance(token_account)
        except RPCException as err:
            raise NotATokenAccount(token_account) from err
        return int(result.value.amount)

    async def submit(self, request: Request, signers: Sequence[Keypair]) -> Committed:
        if len(signers) == 0:
            raise ValueError("at least 1 signer is required to pay the fees")
        payer = signers[0].pubkey()

        instructions: list[Instruction] = []
        for new_account in request.new_accounts:
            instructions += await self._allocate(payer, new_account)
        instructions.append(request.to_instruction())

        blockhash = (await self._client.get_latest_blockhash()).value.blockhash
        txn = Transaction(
            [*signers, *(new_account.keypair for new_account in request.new_accounts)],
            Message(instructions, payer),
            blockhash,
        )

        try:
            signature = (
                await self._client.send_raw_transaction(
                    bytes(txn),
                    opts=TxOpts(preflight_commitment=self._commitment),
                )
            ).value
            statuses = (
                await self._client.confirm_transaction(
                    signature, commitment=self._commitment
                )
            ).value
        except (RPCException, UnconfirmedTxError) as err:
            self._logger.warning("request was rejected: %s : %s", request.id, err)
            raise SubmissionRejected(reason=str(err)) from err

        # the node does not raise when the transaction fails on-chain
        status = statuses[0] if statuses else None
        if status is None:
            self._logger.warning("request status is unknown: %s", request.id)
            raise SubmissionRejected(reason=f"transaction status is unknown: {signature}")
        if status.err is not None:
            reason = _rejection_reason(status.err)
            self._logger.warning("request failed: %s : %s", request.id, reason)
            raise SubmissionRejected(reason=reason)

        return Committed(request_id=request.id, signature=str(signature))

    async def _allocate(
        self, payer: Address, new_account: NewAccount
    ) -> list[Instruction]:
        lamports = (
            await self._client.get_minimum_balance_for_rent_exemption(new_account.space)
        ).value
        instructions = [
            create_account(
                CreateAccountParams(
                    from_pubkey=payer,
                    to_pubkey=new_account.address,
                    lamports=lamports,
                    space=new_account.space,
                    owner=new_account.owner,
                )
            )
        ]
        if new_account.is_token_account:
            instructions.append(
                initialize_account(
                    InitializeAccountParams(
                        program_id=TOKEN_PROGRAM,
                        account=new_account.address,
                        mint=new_account.mint,  # type: ignore
                        owner=new_account.token_owner,  # type: ignore
                    )
                )
            )
        return instructions


def _rejection_reason(err) -> str:
    """
    Custom instruction errors are reported in the same form as preflight simulation failures,
    i.e., `custom program error: 0x<code>`.
    """
    if isinstance(err, TransactionErrorInstructionError) and isinstance(
        err.err, InstructionErrorCustom
    ):
        return f"Error processing Instruction {err.index}: custom program error: {hex(err.err.code)}"
    return str(err)
