"""
Encoding of Universal Router commands and the Uniswap V4 actions executed by its V4_SWAP command.

refs:
    - https://github.com/Uniswap/universal-router/blob/main/contracts/libraries/Commands.sol
    - https://github.com/Uniswap/v4-periphery/blob/main/src/libraries/Actions.sol
"""

from collections.abc import Sequence
from enum import IntEnum

import eth_abi.abi
from eth_typing import ChecksumAddress
from hexbytes import HexBytes

from tickswap.checksum_cache import get_checksum_address
from tickswap.exceptions import TickswapValueError
from tickswap.functions import encode_function_calldata
from tickswap.uniswap.v4_types import UniswapV4PoolKey

# Special recipients resolved by the router
MSG_SENDER = get_checksum_address("0x0000000000000000000000000000000000000001")
ADDRESS_THIS = get_checksum_address("0x0000000000000000000000000000000000000002")

# An amount of zero for TAKE transfers the full open delta of the currency
OPEN_DELTA = 0

POOL_KEY_ABI_TYPE = "(address,address,uint24,int24,address)"
EXACT_INPUT_SINGLE_PARAMS_ABI_TYPE = f"({POOL_KEY_ABI_TYPE},bool,uint128,uint128,bytes)"


class RouterCommand(IntEnum):
    V3_SWAP_EXACT_IN = 0x00
    V3_SWAP_EXACT_OUT = 0x01
    PERMIT2_TRANSFER_FROM = 0x02
    PERMIT2_PERMIT_BATCH = 0x03
    SWEEP = 0x04
    TRANSFER = 0x05
    PAY_PORTION = 0x06
    V2_SWAP_EXACT_IN = 0x08
    V2_SWAP_EXACT_OUT = 0x09
    PERMIT2_PERMIT = 0x0A
    WRAP_ETH = 0x0B
    UNWRAP_WETH = 0x0C
    PERMIT2_TRANSFER_FROM_BATCH = 0x0D
    BALANCE_CHECK_ERC20 = 0x0E
    V4_SWAP = 0x10
    V3_POSITION_MANAGER_PERMIT = 0x11
    V3_POSITION_MANAGER_CALL = 0x12
    V4_INITIALIZE_POOL = 0x13
    V4_POSITION_MANAGER_CALL = 0x14
    EXECUTE_SUB_PLAN = 0x21


class V4Action(IntEnum):
    INCREASE_LIQUIDITY = 0x00
    DECREASE_LIQUIDITY = 0x01
    MINT_POSITION = 0x02
    BURN_POSITION = 0x03
    INCREASE_LIQUIDITY_FROM_DELTAS = 0x04
    MINT_POSITION_FROM_DELTAS = 0x05
    SWAP_EXACT_IN_SINGLE = 0x06
    SWAP_EXACT_IN = 0x07
    SWAP_EXACT_OUT_SINGLE = 0x08
    SWAP_EXACT_OUT = 0x09
    DONATE = 0x0A
    SETTLE = 0x0B
    SETTLE_ALL = 0x0C
    SETTLE_PAIR = 0x0D
    TAKE = 0x0E
    TAKE_ALL = 0x0F
    TAKE_PORTION = 0x10
    TAKE_PAIR = 0x11
    CLOSE_CURRENCY = 0x12
    CLEAR_OR_TAKE = 0x13
    SWEEP = 0x14
    WRAP = 0x15
    UNWRAP = 0x16


def _pool_key_tuple(
    pool_key: UniswapV4PoolKey,
) -> tuple[ChecksumAddress, ChecksumAddress, int, int, ChecksumAddress]:
    return (
        pool_key.currency0,
        pool_key.currency1,
        pool_key.fee,
        pool_key.tick_spacing,
        pool_key.hooks,
    )


def encode_exact_input_single_params(
    pool_key: UniswapV4PoolKey,
    *,
    zero_for_one: bool,
    amount_in: int,
    amount_out_minimum: int,
    hook_data: bytes = b"",
) -> bytes:
    return eth_abi.abi.encode(
        types=[EXACT_INPUT_SINGLE_PARAMS_ABI_TYPE],
        args=[
            (
                _pool_key_tuple(pool_key),
                zero_for_one,
                amount_in,
                amount_out_minimum,
                hook_data,
            )
        ],
    )


def encode_v4_actions(actions: Sequence[tuple[V4Action, bytes]]) -> bytes:
    """
    Encode a sequence of V4 actions and their parameters as the input of the V4_SWAP command.
    """

    return eth_abi.abi.encode(
        types=["bytes", "bytes[]"],
        args=[
            bytes(action for action, _ in actions),
            [params for _, params in actions],
        ],
    )


def encode_v4_swap_exact_in_single(
    pool_key: UniswapV4PoolKey,
    *,
    zero_for_one: bool,
    amount_in: int,
    amount_out_minimum: int,
    recipient: str | None = None,
    hook_data: bytes = b"",
) -> bytes:
    """
    Encode a single pool exact input swap. The input currency is paid by the caller of the router,
    and the output is sent to `recipient`, or to the caller if not given.
    """

    currency_in, currency_out = (
        (pool_key.currency0, pool_key.currency1)
        if zero_for_one
        else (pool_key.currency1, pool_key.currency0)
    )

    take_action = (
        (
            V4Action.TAKE_ALL,
            eth_abi.abi.encode(
                types=["address", "uint256"],
                args=[currency_out, amount_out_minimum],
            ),
        )
        if recipient is None
        else (
            V4Action.TAKE,
            eth_abi.abi.encode(
                types=["address", "address", "uint256"],
                args=[currency_out, get_checksum_address(recipient), OPEN_DELTA],
            ),
        )
    )

    return encode_v4_actions(
        [
            (
                V4Action.SWAP_EXACT_IN_SINGLE,
                encode_exact_input_single_params(
                    pool_key,
                    zero_for_one=zero_for_one,
                    amount_in=amount_in,
                    amount_out_minimum=amount_out_minimum,
                    hook_data=hook_data,
                ),
            ),
            (
                V4Action.SETTLE_ALL,
                eth_abi.abi.encode(
                    types=["address", "uint256"],
                    args=[currency_in, amount_in],
                ),
            ),
            take_action,
        ]
    )


def encode_sweep(token: str, recipient: str, amount_minimum: int = 0) -> bytes:
    return eth_abi.abi.encode(
        types=["address", "address", "uint256"],
        args=[get_checksum_address(token), get_checksum_address(recipient), amount_minimum],
    )


def encode_execute(
    commands: Sequence[RouterCommand],
    inputs: Sequence[bytes],
    deadline: int,
) -> HexBytes:
    """
    Encode a call to `execute(bytes,bytes[],uint256)` on the Universal Router, with one input per
    command.
    """

    if len(commands) != len(inputs):
        raise TickswapValueError(
            message=f"Got {len(commands)} commands for {len(inputs)} inputs."
        )

    return HexBytes(
        encode_function_calldata(
            function_prototype="execute(bytes,bytes[],uint256)",
            function_arguments=[bytes(commands), list(inputs), deadline],
        )
    )
