# This module is adapted from the Uniswap V4 TickMath.sol library.
# Reference: https://github.com/Uniswap/v4-core/blob/main/src/libraries/TickMath.sol

import functools

from tickswap.constants import MAX_INT16, MAX_UINT256
from tickswap.exceptions.evm import EVMRevertError
from tickswap.functions import evm_divide
from tickswap.uniswap.v4_libraries import bit_math
from tickswap.uniswap.v4_libraries._config import V4_LIB_CACHE_SIZE

MIN_TICK = -887272
MAX_TICK = 887272
MIN_TICK_SPACING = 1
MAX_TICK_SPACING = MAX_INT16
MIN_SQRT_PRICE = 4295128739
MAX_SQRT_PRICE = 1461446703485210103287273052203988822378723970342

# Bounds on the error of the log_sqrt10001 approximation, valid for prices in (2^-64, 2^64)
MIN_ERROR = 291339464771989622907027621153398088495
MAX_ERROR = 3402992956809132418596140100660247210

# Q128.128 values of 1/sqrt(1.0001^(2^i)), keyed by the tick bit that selects them
_RATIO_MULTIPLIERS = (
    (0x2, 340248342086729790484326174814286782778),
    (0x4, 340214320654664324051920982716015181260),
    (0x8, 340146287995602323631171512101879684304),
    (0x10, 340010263488231146823593991679159461444),
    (0x20, 339738377640345403697157401104375502016),
    (0x40, 339195258003219555707034227454543997025),
    (0x80, 338111622100601834656805679988414885971),
    (0x100, 335954724994790223023589805789778977700),
    (0x200, 331682121138379247127172139078559817300),
    (0x400, 323299236684853023288211250268160618739),
    (0x800, 307163716377032989948697243942600083929),
    (0x1000, 277268403626896220162999269216087595045),
    (0x2000, 225923453940442621947126027127485391333),
    (0x4000, 149997214084966997727330242082538205943),
    (0x8000, 66119101136024775622716233608466517926),
    (0x10000, 12847376061809297530290974190478138313),
    (0x20000, 485053260817066172746253684029974020),
    (0x40000, 691415978906521570653435304214168),
    (0x80000, 1404880482679654955896180642),
)


def max_usable_tick(tick_spacing: int) -> int:
    """
    Given a tick spacing, compute the maximum usable tick
    """

    return (MAX_TICK // tick_spacing) * tick_spacing


def min_usable_tick(tick_spacing: int) -> int:
    """
    Given a tick spacing, compute the minimum usable tick
    """

    return evm_divide(MIN_TICK, tick_spacing) * tick_spacing


@functools.lru_cache(maxsize=V4_LIB_CACHE_SIZE)
def get_sqrt_price_at_tick(tick: int) -> int:
    """
    Calculates sqrt(1.0001^tick) * 2^96, a fixed point Q64.96 number representing the sqrt of the
    price of the two assets (currency1/currency0) at the given tick.

    Reverts if |tick| > max tick.
    """

    abs_tick = abs(tick)
    if abs_tick > MAX_TICK:
        msg = "InvalidTick"
        raise EVMRevertError(msg)

    price = 340265354078544963557816517032075149313 if abs_tick & 0x1 else 1 << 128
    for tick_mask, ratio_multiplier in _RATIO_MULTIPLIERS:
        if abs_tick & tick_mask:
            price = (price * ratio_multiplier) >> 128

    if tick > 0:
        price = MAX_UINT256 // price

    # Q128.128 -> Q128.96, rounding up so that get_tick_at_sqrt_price of the result is consistent
    return (price + ((1 << 32) - 1)) >> 32


@functools.lru_cache(maxsize=V4_LIB_CACHE_SIZE)
def get_tick_at_sqrt_price(sqrt_price_x96: int) -> int:
    """
    Calculates the greatest tick value such that get_sqrt_price_at_tick(tick) <= sqrt_price_x96.

    Reverts if sqrt_price_x96 is outside [MIN_SQRT_PRICE, MAX_SQRT_PRICE).
    """

    if not MIN_SQRT_PRICE <= sqrt_price_x96 < MAX_SQRT_PRICE:
        msg = "InvalidSqrtPrice"
        raise EVMRevertError(msg)

    price = sqrt_price_x96 << 32
    msb = bit_math.most_significant_bit(price)
    r = price >> msb - 127 if msb >= 128 else price << 127 - msb  # noqa: PLR2004
    log_2 = (msb - 128) << 64

    for factor in range(63, 49, -1):
        r = (r * r) >> 127
        f = r >> 128
        log_2 |= f << factor
        r >>= f

    log_sqrt10001 = log_2 * 255738958999603826347141  # Q22.128 number

    tick_low = (log_sqrt10001 - MAX_ERROR) >> 128
    tick_high = (log_sqrt10001 + MIN_ERROR) >> 128

    if tick_low == tick_high:
        return tick_low
    return tick_high if get_sqrt_price_at_tick(tick_high) <= sqrt_price_x96 else tick_low
