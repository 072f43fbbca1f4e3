# This module is adapted from the Uniswap V4 SwapMath.sol library. Only exact input steps are
# supported.
# Reference: https://github.com/Uniswap/v4-core/blob/main/src/libraries/SwapMath.sol

from pydantic import validate_call

from tickswap.uniswap.v4_libraries import full_math, sqrt_price_math
from tickswap.validation.evm_values import (
    ValidatedUint24,
    ValidatedUint128,
    ValidatedUint160,
    ValidatedUint256,
    ValidatedUint256NonZero,
)

MAX_SWAP_FEE = 1 * 10**6


@validate_call(validate_return=True)
def get_sqrt_price_target(
    zero_for_one: bool,
    sqrt_price_next_x96: ValidatedUint160,
    sqrt_price_limit_x96: ValidatedUint160,
) -> ValidatedUint160:
    """
    Computes the price target for the next swap step: the next tick price, unless the price limit
    is reached first.
    """

    return (
        max(sqrt_price_next_x96, sqrt_price_limit_x96)
        if zero_for_one
        else min(sqrt_price_next_x96, sqrt_price_limit_x96)
    )


@validate_call(validate_return=True)
def compute_swap_step(
    sqrt_price_current_x96: ValidatedUint160,
    sqrt_price_target_x96: ValidatedUint160,
    liquidity: ValidatedUint128,
    amount_remaining: ValidatedUint256NonZero,
    fee_pips: ValidatedUint24,
) -> tuple[ValidatedUint160, ValidatedUint256, ValidatedUint256, ValidatedUint256]:
    """
    Computes the result of swapping `amount_remaining` of the input currency, moving the price from
    the current price towards the target price.

    Returns the price after the step, the amount of input consumed, the amount of output produced,
    and the fee taken from the input.
    """

    zero_for_one = sqrt_price_current_x96 >= sqrt_price_target_x96

    amount_remaining_less_fee = full_math.muldiv(
        amount_remaining, MAX_SWAP_FEE - fee_pips, MAX_SWAP_FEE
    )
    amount_in = (
        sqrt_price_math.get_amount0_delta(
            sqrt_price_a_x96=sqrt_price_target_x96,
            sqrt_price_b_x96=sqrt_price_current_x96,
            liquidity=liquidity,
            round_up=True,
        )
        if zero_for_one
        else sqrt_price_math.get_amount1_delta(
            sqrt_price_a_x96=sqrt_price_current_x96,
            sqrt_price_b_x96=sqrt_price_target_x96,
            liquidity=liquidity,
            round_up=True,
        )
    )

    if amount_remaining_less_fee >= amount_in:
        # the input is capped by the target price
        sqrt_price_next_x96 = sqrt_price_target_x96
        fee_amount = (
            amount_in
            if fee_pips == MAX_SWAP_FEE
            else full_math.muldiv_rounding_up(amount_in, fee_pips, MAX_SWAP_FEE - fee_pips)
        )
    else:
        # the target is not reached, so the remaining input is consumed and the balance is fee
        amount_in = amount_remaining_less_fee
        sqrt_price_next_x96 = sqrt_price_math.get_next_sqrt_price_from_input(
            sqrt_price_x96=sqrt_price_current_x96,
            liquidity=liquidity,
            amount_in=amount_remaining_less_fee,
            zero_for_one=zero_for_one,
        )
        fee_amount = amount_remaining - amount_in

    amount_out = (
        sqrt_price_math.get_amount1_delta(
            sqrt_price_a_x96=sqrt_price_next_x96,
            sqrt_price_b_x96=sqrt_price_current_x96,
            liquidity=liquidity,
            round_up=False,
        )
        if zero_for_one
        else sqrt_price_math.get_amount0_delta(
            sqrt_price_a_x96=sqrt_price_current_x96,
            sqrt_price_b_x96=sqrt_price_next_x96,
            liquidity=liquidity,
            round_up=False,
        )
    )

    return sqrt_price_next_x96, amount_in, amount_out, fee_amount
