from tickswap.constants import MAX_UINT128, MIN_UINT128
from tickswap.exceptions.evm import EVMRevertError


def add_delta(x: int, y: int) -> int:
    """
    Add a signed liquidity delta to a liquidity value, reverting if the result leaves the uint128
    range.

    ref: https://github.com/Uniswap/v4-core/blob/main/src/libraries/LiquidityMath.sol
    """

    result = x + y
    if not MIN_UINT128 <= result <= MAX_UINT128:
        msg = "SafeCastOverflow"
        raise EVMRevertError(msg)

    return result
