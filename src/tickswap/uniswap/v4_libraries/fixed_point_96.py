# ref: https://github.com/Uniswap/v4-core/blob/main/src/libraries/FixedPoint96.sol

RESOLUTION = 96
Q96 = 2**RESOLUTION
