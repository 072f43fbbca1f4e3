from typing import Any, Protocol, Self

from eth_account import Account
from eth_account.messages import encode_typed_data
from eth_account.signers.local import LocalAccount
from eth_typing import ChecksumAddress
from hexbytes import HexBytes
from web3 import AsyncBaseProvider, AsyncWeb3
from web3.types import TxParams, TxReceipt

from tickswap.checksum_cache import get_checksum_address
from tickswap.logging import logger

DEFAULT_RECEIPT_TIMEOUT_SECONDS = 180


class Signer(Protocol):
    """
    The account that authorizes and pays for a swap.
    """

    @property
    def address(self) -> ChecksumAddress: ...

    async def sign_typed_data(
        self,
        domain: dict[str, Any],
        types: dict[str, list[dict[str, str]]],
        message: dict[str, Any],
    ) -> HexBytes: ...

    async def send_transaction(self, tx_params: TxParams) -> HexBytes: ...

    async def wait_for_receipt(
        self,
        tx_hash: HexBytes,
        timeout: float = DEFAULT_RECEIPT_TIMEOUT_SECONDS,
    ) -> TxReceipt: ...


class LocalAccountSigner:
    """
    A signer holding a private key in memory. Transactions are signed locally and sent as raw
    transactions through the connected node.
    """

    def __init__(self, w3: AsyncWeb3[AsyncBaseProvider], account: LocalAccount) -> None:
        self.w3 = w3
        self.account = account

    def __repr__(self) -> str:  # pragma: no cover
        return f"{self.__class__.__name__}(address={self.address})"

    @classmethod
    def from_private_key(cls, w3: AsyncWeb3[AsyncBaseProvider], private_key: str) -> Self:
        return cls(w3=w3, account=Account.from_key(private_key))

    @property
    def address(self) -> ChecksumAddress:
        return get_checksum_address(self.account.address)

    async def sign_typed_data(
        self,
        domain: dict[str, Any],
        types: dict[str, list[dict[str, str]]],
        message: dict[str, Any],
    ) -> HexBytes:
        signed_message = self.account.sign_message(
            encode_typed_data(
                domain_data=domain,
                message_types=types,
                message_data=message,
            )
        )
        return HexBytes(signed_message.signature)

    async def _add_fee_params(self, tx_params: TxParams) -> None:
        latest_block = await self.w3.eth.get_block("latest")
        if (base_fee := latest_block.get("baseFeePerGas")) is not None:
            priority_fee = await self.w3.eth.max_priority_fee
            tx_params["maxPriorityFeePerGas"] = priority_fee
            tx_params["maxFeePerGas"] = base_fee * 2 + priority_fee
        else:
            tx_params["gasPrice"] = await self.w3.eth.gas_price

    async def send_transaction(self, tx_params: TxParams) -> HexBytes:
        tx_params = TxParams(**tx_params)
        tx_params.setdefault("from", self.address)
        if "chainId" not in tx_params:
            tx_params["chainId"] = await self.w3.eth.chain_id
        if "nonce" not in tx_params:
            tx_params["nonce"] = await self.w3.eth.get_transaction_count(self.address, "pending")
        if not {"gasPrice", "maxFeePerGas"} & tx_params.keys():
            await self._add_fee_params(tx_params)

        signed_transaction = self.account.sign_transaction(dict(tx_params))
        tx_hash = await self.w3.eth.send_raw_transaction(signed_transaction.raw_transaction)
        logger.debug(f"Sent transaction {HexBytes(tx_hash).to_0x_hex()}")
        return HexBytes(tx_hash)

    async def wait_for_receipt(
        self,
        tx_hash: HexBytes,
        timeout: float = DEFAULT_RECEIPT_TIMEOUT_SECONDS,
    ) -> TxReceipt:
        return await self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)
