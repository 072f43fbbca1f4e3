from typing import Protocol, cast

from eth_typing import ChecksumAddress
from hexbytes import HexBytes
from web3 import AsyncBaseProvider, AsyncWeb3
from web3.types import BlockIdentifier

from tickswap.checksum_cache import get_checksum_address
from tickswap.functions import encode_function_calldata, raw_call_async
from tickswap.types.aliases import Tick
from tickswap.uniswap.v4_types import ProtocolFee, Slot0, TickInfo


class PoolStateReader(Protocol):
    """
    Read access to the state of a Uniswap V4 pool by its ID.
    """

    async def get_slot0(self, pool_id: bytes) -> Slot0: ...

    async def get_tick_info(self, pool_id: bytes, tick: Tick) -> TickInfo: ...


class UniswapV4StateView:
    """
    Reads pool state through the periphery StateView contract, which exposes the PoolManager's
    storage through view functions.

    ref: https://github.com/Uniswap/v4-periphery/blob/main/src/lens/StateView.sol
    """

    SLOT0_STRUCT_TYPES = [
        "uint160",  # sqrtPriceX96
        "int24",  # tick
        "uint24",  # protocolFee
        "uint24",  # lpFee
    ]
    TICK_INFO_STRUCT_TYPES = [
        "uint128",  # liquidityGross
        "int128",  # liquidityNet
        "uint256",  # feeGrowthOutside0X128
        "uint256",  # feeGrowthOutside1X128
    ]

    def __init__(
        self,
        w3: AsyncWeb3[AsyncBaseProvider],
        address: str,
        block_identifier: BlockIdentifier | None = None,
    ) -> None:
        self.w3 = w3
        self.address: ChecksumAddress = get_checksum_address(address)
        self.block_identifier = block_identifier

    def __repr__(self) -> str:  # pragma: no cover
        return f"{self.__class__.__name__}(address={self.address})"

    async def get_slot0(self, pool_id: bytes) -> Slot0:
        sqrt_price_x96, tick, protocol_fee, lp_fee = cast(
            "tuple[int, int, int, int]",
            await raw_call_async(
                w3=self.w3,
                address=self.address,
                calldata=encode_function_calldata(
                    function_prototype="getSlot0(bytes32)",
                    function_arguments=[HexBytes(pool_id)],
                ),
                return_types=self.SLOT0_STRUCT_TYPES,
                block_identifier=self.block_identifier,
            ),
        )
        return Slot0(
            sqrt_price_x96=sqrt_price_x96,
            tick=tick,
            protocol_fee=ProtocolFee.from_packed(protocol_fee),
            lp_fee=lp_fee,
        )

    async def get_tick_info(self, pool_id: bytes, tick: Tick) -> TickInfo:
        # Ticks that have never been initialized are returned as all zero values
        liquidity_gross, liquidity_net, fee_growth_outside0_x128, fee_growth_outside1_x128 = cast(
            "tuple[int, int, int, int]",
            await raw_call_async(
                w3=self.w3,
                address=self.address,
                calldata=encode_function_calldata(
                    function_prototype="getTickInfo(bytes32,int24)",
                    function_arguments=[HexBytes(pool_id), tick],
                ),
                return_types=self.TICK_INFO_STRUCT_TYPES,
                block_identifier=self.block_identifier,
            ),
        )
        return TickInfo(
            liquidity_gross=liquidity_gross,
            liquidity_net=liquidity_net,
            fee_growth_outside0_x128=fee_growth_outside0_x128,
            fee_growth_outside1_x128=fee_growth_outside1_x128,
        )
