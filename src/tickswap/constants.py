__all__ = (
    "DEFAULT_CHAIN_ID",
    "DEFAULT_FEE",
    "DEFAULT_SLIPPAGE_BPS",
    "DEFAULT_TICK_SPACING",
    "MAX_INT16",
    "MAX_INT24",
    "MAX_INT128",
    "MAX_UINT24",
    "MAX_UINT48",
    "MAX_UINT128",
    "MAX_UINT160",
    "MAX_UINT256",
    "MIN_INT16",
    "MIN_INT24",
    "MIN_INT128",
    "MIN_UINT24",
    "MIN_UINT48",
    "MIN_UINT128",
    "MIN_UINT160",
    "MIN_UINT256",
    "NATIVE_CURRENCY_ADDRESS",
    "NATIVE_DECIMALS",
    "NATIVE_VALUE_BUFFER",
    "PERMIT_DEADLINE_SECONDS",
    "SWAP_GAS_LIMIT",
    "TICK_WINDOW_RADIUS",
    "ZERO_ADDRESS",
)

import typing

from eth_typing import ChainId, ChecksumAddress

from tickswap.checksum_cache import get_checksum_address


def _min_uint(_: int) -> int:
    return 0


def _max_uint(bits: int) -> int:
    return typing.cast("int", 2**bits - 1)


def _min_int(bits: int) -> int:
    return typing.cast("int", -(2 ** (bits - 1)))


def _max_int(bits: int) -> int:
    return typing.cast("int", (2 ** (bits - 1)) - 1)


MIN_INT16 = _min_int(16)
MAX_INT16 = _max_int(16)

MIN_INT24 = _min_int(24)
MAX_INT24 = _max_int(24)

MIN_INT128 = _min_int(128)
MAX_INT128 = _max_int(128)

MIN_UINT24 = _min_uint(24)
MAX_UINT24 = _max_uint(24)

MIN_UINT48 = _min_uint(48)
MAX_UINT48 = _max_uint(48)

MIN_UINT128 = _min_uint(128)
MAX_UINT128 = _max_uint(128)

MIN_UINT160 = _min_uint(160)
MAX_UINT160 = _max_uint(160)

MIN_UINT256 = _min_uint(256)
MAX_UINT256 = _max_uint(256)

ZERO_ADDRESS: ChecksumAddress = get_checksum_address("0x0000000000000000000000000000000000000000")

# Uniswap V4 identifies the native currency of the chain by the zero address
NATIVE_CURRENCY_ADDRESS: ChecksumAddress = ZERO_ADDRESS
NATIVE_DECIMALS = 18


# Swap defaults ------------------------------------------------------------------------------------
DEFAULT_CHAIN_ID: int = ChainId.ETH

# 0.3% fee tier, in pips
DEFAULT_FEE = 3_000
DEFAULT_TICK_SPACING = 60

# Number of tick spacings scanned on each side of the aligned current tick. A radius of 3 inspects
# 7 ticks. Liquidity that begins outside of the window is not discovered.
TICK_WINDOW_RADIUS = 3

DEFAULT_SLIPPAGE_BPS = 50

# Permit2 signature deadline and allowance expiration, and the router execution deadline
PERMIT_DEADLINE_SECONDS = 3_600

# Extra native currency attached to the transaction value for native input swaps. This is a fixed
# allowance for protocol overhead, not derived from the trade. The unused amount is swept back to
# the sender by the router.
NATIVE_VALUE_BUFFER = 1 * 10**NATIVE_DECIMALS

# Gas limit used for every swap transaction instead of an estimate. Complex hooks may exceed it.
SWAP_GAS_LIMIT = 1_000_000
