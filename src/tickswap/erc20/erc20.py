import dataclasses

from eth_abi.exceptions import DecodingError
from eth_typing import ChecksumAddress
from web3 import AsyncBaseProvider, AsyncWeb3
from web3.exceptions import Web3Exception

from tickswap.checksum_cache import get_checksum_address
from tickswap.constants import DEFAULT_CHAIN_ID, NATIVE_CURRENCY_ADDRESS, NATIVE_DECIMALS
from tickswap.exceptions import TickswapValueError
from tickswap.functions import encode_function_calldata, raw_call_async
from tickswap.logging import logger
from tickswap.types.aliases import ChainId

UNKNOWN_NAME = "Unknown"
UNKNOWN_SYMBOL = "UNKN"
UNKNOWN_DECIMALS = 18


@dataclasses.dataclass(frozen=True)
class Erc20Token:
    """
    An ERC-20 token contract, identified by its address and decimal precision.
    """

    address: ChecksumAddress
    decimals: int = UNKNOWN_DECIMALS
    symbol: str = UNKNOWN_SYMBOL
    name: str = UNKNOWN_NAME
    chain_id: ChainId = DEFAULT_CHAIN_ID

    def __post_init__(self) -> None:
        object.__setattr__(self, "address", get_checksum_address(self.address))
        if self.decimals < 0:
            raise TickswapValueError(message=f"Invalid decimals {self.decimals}")

    def __str__(self) -> str:
        return self.symbol

    @property
    def is_native(self) -> bool:
        return self.address == NATIVE_CURRENCY_ADDRESS

    @classmethod
    async def from_chain(
        cls,
        w3: AsyncWeb3[AsyncBaseProvider],
        address: str,
        *,
        chain_id: ChainId | None = None,
    ) -> "Erc20Token":
        """
        Build a token by reading its metadata from the contract. Optional metadata functions that
        are missing or return malformed data leave the default values in place.

        The zero address returns the native currency placeholder without any network access.
        """

        address = get_checksum_address(address)
        if chain_id is None:
            chain_id = await w3.eth.chain_id

        if address == NATIVE_CURRENCY_ADDRESS:
            return EtherPlaceholder(chain_id=chain_id)

        if not await w3.eth.get_code(address):
            raise TickswapValueError(message=f"No contract deployed at {address}")

        metadata: dict[str, str | int] = {}
        for field_name, return_type, func_prototypes in (
            ("name", "string", ("name()", "NAME()")),
            ("symbol", "string", ("symbol()", "SYMBOL()")),
            ("decimals", "uint8", ("decimals()", "DECIMALS()")),
        ):
            for func_prototype in func_prototypes:
                try:
                    (metadata[field_name],) = await raw_call_async(
                        w3=w3,
                        address=address,
                        calldata=encode_function_calldata(
                            function_prototype=func_prototype,
                            function_arguments=None,
                        ),
                        return_types=[return_type],
                    )
                except (Web3Exception, DecodingError):
                    continue
                else:
                    break

        token = cls(address=address, chain_id=chain_id, **metadata)  # type: ignore[arg-type]
        logger.debug(f"Loaded token {token.symbol} ({token.name}) at {token.address}")
        return token


@dataclasses.dataclass(frozen=True)
class EtherPlaceholder(Erc20Token):
    """
    An Erc20Token-like placeholder for the native currency, which Uniswap V4 pools identify by the
    zero address.
    """

    address: ChecksumAddress = NATIVE_CURRENCY_ADDRESS
    decimals: int = NATIVE_DECIMALS
    symbol: str = "ETH"
    name: str = "Ether"
