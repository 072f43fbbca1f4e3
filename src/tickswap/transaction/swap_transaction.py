import dataclasses

from eth_typing import ChecksumAddress
from hexbytes import HexBytes
from web3.types import TxParams

from tickswap.checksum_cache import get_checksum_address
from tickswap.constants import (
    DEFAULT_SLIPPAGE_BPS,
    NATIVE_CURRENCY_ADDRESS,
    NATIVE_VALUE_BUFFER,
    SWAP_GAS_LIMIT,
)
from tickswap.exceptions import TickswapValueError
from tickswap.logging import logger
from tickswap.permit2 import EncodedPermit
from tickswap.transaction.universal_router import (
    MSG_SENDER,
    RouterCommand,
    encode_execute,
    encode_sweep,
    encode_v4_swap_exact_in_single,
)
from tickswap.uniswap.v4_trade import Trade


@dataclasses.dataclass(slots=True, frozen=True)
class SwapTransaction:
    to: ChecksumAddress
    sender: ChecksumAddress
    data: HexBytes
    gas: int
    value: int | None = None

    def as_tx_params(self) -> TxParams:
        tx_params = TxParams(
            {
                "from": self.sender,
                "to": self.to,
                "data": self.data,
                "gas": self.gas,
            }
        )
        if self.value is not None:
            tx_params["value"] = self.value
        return tx_params


def build_swap_calldata(
    trade: Trade,
    *,
    sender: str,
    deadline: int,
    recipient: str | None = None,
    slippage_bps: int = DEFAULT_SLIPPAGE_BPS,
    permit: EncodedPermit | None = None,
) -> HexBytes:
    """
    Build the Universal Router calldata for the trade. The commands are, in order:
        - PERMIT2_PERMIT, if a permit is given
        - V4_SWAP, an exact input swap through the trade's pool
        - SWEEP of the native currency back to the caller, for native input, so that any value in
        excess of the input is refunded
    """

    sender = get_checksum_address(sender)
    pool_key = trade.pool.key
    zero_for_one = trade.token_in.address == pool_key.currency0

    commands: list[RouterCommand] = []
    inputs: list[bytes] = []

    if permit is not None:
        commands.append(RouterCommand.PERMIT2_PERMIT)
        inputs.append(bytes(permit.data))

    commands.append(RouterCommand.V4_SWAP)
    inputs.append(
        encode_v4_swap_exact_in_single(
            pool_key,
            zero_for_one=zero_for_one,
            amount_in=trade.amount_in,
            amount_out_minimum=trade.minimum_amount_out(slippage_bps),
            recipient=(
                None
                if recipient is None or get_checksum_address(recipient) == sender
                else recipient
            ),
        )
    )

    if trade.token_in.is_native:
        commands.append(RouterCommand.SWEEP)
        inputs.append(encode_sweep(token=NATIVE_CURRENCY_ADDRESS, recipient=MSG_SENDER))

    return encode_execute(commands=commands, inputs=inputs, deadline=deadline)


def assemble_swap_transaction(
    trade: Trade,
    *,
    router: str,
    sender: str,
    deadline: int,
    recipient: str | None = None,
    slippage_bps: int = DEFAULT_SLIPPAGE_BPS,
    permit: EncodedPermit | None = None,
    gas_limit: int = SWAP_GAS_LIMIT,
    native_value_buffer: int = NATIVE_VALUE_BUFFER,
) -> SwapTransaction:
    """
    Build the transaction executing the trade through the Universal Router.

    Native input attaches a value of the input amount plus `native_value_buffer`. This is a fixed
    allowance, not derived from the trade, and the excess is swept back to the sender. Token input
    attaches no value and is paid through Permit2. The gas limit is fixed and not estimated.
    """

    if trade.token_in.is_native and permit is not None:
        raise TickswapValueError(message="A native currency input cannot be paid with a permit.")

    transaction = SwapTransaction(
        to=get_checksum_address(router),
        sender=get_checksum_address(sender),
        data=build_swap_calldata(
            trade,
            sender=sender,
            deadline=deadline,
            recipient=recipient,
            slippage_bps=slippage_bps,
            permit=permit,
        ),
        gas=gas_limit,
        value=trade.amount_in + native_value_buffer if trade.token_in.is_native else None,
    )
    logger.debug(
        f"Assembled swap transaction to {transaction.to}, value {transaction.value}, "
        f"gas {transaction.gas}"
    )
    return transaction
