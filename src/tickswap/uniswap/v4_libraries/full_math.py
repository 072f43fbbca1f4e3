from tickswap.constants import MAX_UINT256
from tickswap.exceptions.evm import EVMRevertError


def mulmod(x: int, y: int, k: int) -> int:
    """
    Returns (x*y)%k, as implemented by Yul. A zero modulus gives zero instead of reverting.
    """

    return 0 if k == 0 else (x * y) % k


def div_rounding_up(x: int, y: int) -> int:
    """
    Calculates ceil(x/y). Division by zero returns 0, and must be checked by the caller.
    """

    return 0 if y == 0 else x // y + int(x % y > 0)


def muldiv(a: int, b: int, denominator: int) -> int:
    """
    Calculates floor(a*b/denominator) with full precision. Reverts if the result overflows a uint256
    or the denominator is zero.

    ref: https://github.com/Uniswap/v4-core/blob/main/src/libraries/FullMath.sol

    Python integers do not overflow, so the intermediate 512-bit product used by the contract is
    unnecessary and only the result is checked.
    """

    if denominator <= 0:
        msg = "required: denominator > 0"
        raise EVMRevertError(msg)

    result = (a * b) // denominator
    if result > MAX_UINT256:
        msg = "product > MAX_UINT256"
        raise EVMRevertError(msg)

    return result


def muldiv_rounding_up(a: int, b: int, denominator: int) -> int:
    """
    Calculates ceil(a*b/denominator) with full precision.
    """

    result = muldiv(a, b, denominator) + int(mulmod(a, b, denominator) > 0)
    if result > MAX_UINT256:
        msg = "product > MAX_UINT256"
        raise EVMRevertError(msg)

    return result
