# This module is adapted from the Uniswap V4 SqrtPriceMath.sol library, limited to the functions
# needed for exact input swaps.
# Reference: https://github.com/Uniswap/v4-core/blob/main/src/libraries/SqrtPriceMath.sol

import functools

from tickswap.constants import MAX_UINT160, MAX_UINT256
from tickswap.exceptions.evm import EVMRevertError
from tickswap.uniswap.v4_libraries._config import V4_LIB_CACHE_SIZE
from tickswap.uniswap.v4_libraries.fixed_point_96 import Q96, RESOLUTION
from tickswap.uniswap.v4_libraries.full_math import (
    div_rounding_up,
    muldiv,
    muldiv_rounding_up,
    mulmod,
)


@functools.lru_cache(maxsize=V4_LIB_CACHE_SIZE)
def get_amount0_delta(
    *,
    sqrt_price_a_x96: int,
    sqrt_price_b_x96: int,
    liquidity: int,
    round_up: bool,
) -> int:
    """
    Gets the amount0 delta between two prices, liquidity / sqrt(lower) - liquidity / sqrt(upper)
    """

    if sqrt_price_a_x96 > sqrt_price_b_x96:
        sqrt_price_a_x96, sqrt_price_b_x96 = sqrt_price_b_x96, sqrt_price_a_x96

    if sqrt_price_a_x96 == 0:
        msg = "InvalidPrice"
        raise EVMRevertError(msg)

    numerator1 = liquidity << RESOLUTION
    numerator2 = sqrt_price_b_x96 - sqrt_price_a_x96

    if round_up:
        return div_rounding_up(
            muldiv_rounding_up(numerator1, numerator2, sqrt_price_b_x96),
            sqrt_price_a_x96,
        )
    return muldiv(numerator1, numerator2, sqrt_price_b_x96) // sqrt_price_a_x96


@functools.lru_cache(maxsize=V4_LIB_CACHE_SIZE)
def get_amount1_delta(
    *,
    sqrt_price_a_x96: int,
    sqrt_price_b_x96: int,
    liquidity: int,
    round_up: bool,
) -> int:
    """
    Gets the amount1 delta between two prices, liquidity * (sqrt(upper) - sqrt(lower))
    """

    numerator = abs(sqrt_price_a_x96 - sqrt_price_b_x96)
    return muldiv(liquidity, numerator, Q96) + int(
        round_up and mulmod(liquidity, numerator, Q96) > 0
    )


def _next_sqrt_price_from_amount0_in(sqrt_price_x96: int, liquidity: int, amount: int) -> int:
    # Short circuit because the result is otherwise not guaranteed to equal the input price
    if amount == 0:
        return sqrt_price_x96

    numerator1 = liquidity << RESOLUTION
    product = amount * sqrt_price_x96

    # The contract detects overflow of the product in an unchecked block. Python integers cannot
    # overflow, so compare against the uint256 bound instead.
    if product <= MAX_UINT256:
        return muldiv_rounding_up(numerator1, sqrt_price_x96, numerator1 + product)

    return div_rounding_up(numerator1, (numerator1 // sqrt_price_x96) + amount)


def _next_sqrt_price_from_amount1_in(sqrt_price_x96: int, liquidity: int, amount: int) -> int:
    quotient = (
        (amount << RESOLUTION) // liquidity
        if amount <= MAX_UINT160
        else muldiv(amount, Q96, liquidity)
    )

    result = sqrt_price_x96 + quotient
    if result > MAX_UINT160:
        msg = "SafeCastOverflow"
        raise EVMRevertError(msg)

    return result


@functools.lru_cache(maxsize=V4_LIB_CACHE_SIZE)
def get_next_sqrt_price_from_input(
    *,
    sqrt_price_x96: int,
    liquidity: int,
    amount_in: int,
    zero_for_one: bool,
) -> int:
    """
    Gets the next sqrt price given an input amount of currency0 or currency1, rounding to ensure
    that the target price is not passed.
    """

    if sqrt_price_x96 == 0 or liquidity == 0:
        msg = "InvalidPriceOrLiquidity"
        raise EVMRevertError(msg)

    if zero_for_one:
        return _next_sqrt_price_from_amount0_in(sqrt_price_x96, liquidity, amount_in)
    return _next_sqrt_price_from_amount1_in(sqrt_price_x96, liquidity, amount_in)
