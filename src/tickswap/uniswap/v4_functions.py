from fractions import Fraction

import eth_abi.abi
from eth_typing import ChecksumAddress
from hexbytes import HexBytes
from web3 import Web3

from tickswap.checksum_cache import get_checksum_address
from tickswap.constants import TICK_WINDOW_RADIUS
from tickswap.exceptions import TickswapValueError
from tickswap.types.aliases import Tick
from tickswap.uniswap.v4_libraries.tick_math import max_usable_tick, min_usable_tick
from tickswap.uniswap.v4_types import UniswapV4PoolKey


def exchange_rate_from_sqrt_price_x96(sqrt_price_x96: int) -> Fraction:
    # ref: https://blog.uniswap.org/uniswap-v3-math-primer
    return Fraction(sqrt_price_x96**2, 2**192)


def sort_currencies(
    currency_a: str,
    currency_b: str,
) -> tuple[ChecksumAddress, ChecksumAddress]:
    """
    Order two currency addresses by numeric value, which is the order used in a pool key.
    """

    currency_a, currency_b = get_checksum_address(currency_a), get_checksum_address(currency_b)
    if currency_a == currency_b:
        raise TickswapValueError(message=f"Currencies must be different, got {currency_a} twice.")

    return (
        (currency_a, currency_b)
        if int(currency_a, 16) < int(currency_b, 16)
        else (currency_b, currency_a)
    )


def build_pool_key(
    currency_a: str,
    currency_b: str,
    fee: int,
    tick_spacing: int,
    hooks: str,
) -> UniswapV4PoolKey:
    currency0, currency1 = sort_currencies(currency_a, currency_b)
    return UniswapV4PoolKey(
        currency0=currency0,
        currency1=currency1,
        fee=fee,
        tick_spacing=tick_spacing,
        hooks=get_checksum_address(hooks),
    )


def generate_v4_pool_id(pool_key: UniswapV4PoolKey) -> HexBytes:
    """
    Generate the pool ID, the keccak hash of the ABI-encoded pool key.

    ref: https://github.com/Uniswap/v4-core/blob/main/src/types/PoolId.sol
    """

    return HexBytes(
        Web3.keccak(
            eth_abi.abi.encode(
                types=("address", "address", "uint24", "int24", "address"),
                args=(
                    pool_key.currency0,
                    pool_key.currency1,
                    pool_key.fee,
                    pool_key.tick_spacing,
                    pool_key.hooks,
                ),
            )
        )
    )


def align_tick(tick: Tick, tick_spacing: int) -> Tick:
    """
    Round the tick to the nearest multiple of the tick spacing. Halfway values round towards
    positive infinity.
    """

    if tick_spacing <= 0:
        raise TickswapValueError(message=f"Invalid tick spacing {tick_spacing}")

    return ((2 * tick + tick_spacing) // (2 * tick_spacing)) * tick_spacing


def tick_window(
    tick: Tick,
    tick_spacing: int,
    radius: int = TICK_WINDOW_RADIUS,
) -> tuple[Tick, ...]:
    """
    Get the ascending ticks within `radius` tick spacings of the aligned tick, inclusive. Ticks
    beyond the usable range of the tick spacing are left out.
    """

    if radius < 0:
        raise TickswapValueError(message=f"Invalid window radius {radius}")

    aligned_tick = align_tick(tick, tick_spacing)
    lowest, highest = min_usable_tick(tick_spacing), max_usable_tick(tick_spacing)
    return tuple(
        window_tick
        for k in range(-radius, radius + 1)
        if lowest <= (window_tick := aligned_tick + k * tick_spacing) <= highest
    )
