# This module is adapted from the Uniswap V4 BitMath.sol library.
# Reference: https://github.com/Uniswap/v4-core/blob/main/src/libraries/BitMath.sol


def most_significant_bit(number: int) -> int:
    """
    Find the index of the most significant bit for the given number.
    """

    if number <= 0:
        msg = "Number must be >0"
        raise ValueError(msg)

    return number.bit_length() - 1
