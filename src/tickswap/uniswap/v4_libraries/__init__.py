from . import (
    bit_math,
    full_math,
    liquidity_math,
    sqrt_price_math,
    swap_math,
    tick_math,
)

__all__ = (
    "bit_math",
    "full_math",
    "liquidity_math",
    "sqrt_price_math",
    "swap_math",
    "tick_math",
)
