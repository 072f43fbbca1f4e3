import eth_abi.abi
import pytest

from tickswap.constants import ZERO_ADDRESS
from tickswap.erc20 import Erc20Token, EtherPlaceholder
from tickswap.exceptions import TickswapValueError
from tickswap.permit2 import EncodedPermit, build_permit, encode_permit
from tickswap.transaction import RouterCommand, V4Action, assemble_swap_transaction
from tickswap.transaction.swap_transaction import build_swap_calldata
from tickswap.uniswap.deployments import EthereumMainnetUniswapV4
from tickswap.uniswap.v4_functions import build_pool_key
from tickswap.uniswap.v4_libraries.tick_math import get_sqrt_price_at_tick
from tickswap.uniswap.v4_pool_model import build_pool_model
from tickswap.uniswap.v4_trade import Trade, build_exact_input_trade
from tickswap.uniswap.v4_types import ProtocolFee, SelectedTick, Slot0, TickInfo

ETHER = EtherPlaceholder()
DAI = Erc20Token(address="0x6B175474E89094C44Da98b954EedeAC495271d0F", symbol="DAI")
ROUTER = EthereumMainnetUniswapV4.universal_router.address
SENDER = "0x2222222222222222222222222222222222222222"
RECIPIENT = "0x3333333333333333333333333333333333333333"


def _trade(token_in: Erc20Token, amount_in: int = 1_000) -> Trade:
    pool = build_pool_model(
        slot0=Slot0(
            sqrt_price_x96=get_sqrt_price_at_tick(0),
            tick=0,
            protocol_fee=ProtocolFee(zero_for_one=0, one_for_zero=0),
            lp_fee=3000,
        ),
        selected=SelectedTick(
            tick=0,
            info=TickInfo(
                liquidity_gross=10**24,
                liquidity_net=0,
                fee_growth_outside0_x128=0,
                fee_growth_outside1_x128=0,
            ),
        ),
        key=build_pool_key(
            ZERO_ADDRESS, DAI.address, fee=3000, tick_spacing=60, hooks=ZERO_ADDRESS
        ),
        tokens=(ETHER, DAI),
    )
    return build_exact_input_trade(pool, token_in, amount_in)


def _permit(amount: int) -> EncodedPermit:
    permit = build_permit(token=DAI.address, amount=amount, spender=ROUTER, nonce=0, now=0)
    signature = bytes(65)
    return EncodedPermit(
        permit=permit,
        owner=SENDER,  # type: ignore[arg-type]
        signature=signature,  # type: ignore[arg-type]
        data=encode_permit(permit, signature),
    )


def _decode_execute(calldata: bytes) -> tuple[bytes, list[bytes], int]:
    commands, inputs, deadline = eth_abi.abi.decode(["bytes", "bytes[]", "uint256"], calldata[4:])
    return commands, list(inputs), deadline


def test_native_input_attaches_value_and_sweeps():
    trade = _trade(ETHER, 1_000)
    transaction = assemble_swap_transaction(
        trade,
        router=ROUTER,
        sender=SENDER,
        deadline=1_234,
        native_value_buffer=10**18,
    )

    assert transaction.value == 1_000 + 10**18
    assert transaction.to == ROUTER
    assert transaction.gas == 1_000_000

    commands, inputs, deadline = _decode_execute(transaction.data)
    assert commands == bytes([RouterCommand.V4_SWAP, RouterCommand.SWEEP])
    assert deadline == 1_234

    token, recipient, _ = eth_abi.abi.decode(["address", "address", "uint256"], inputs[1])
    assert token.lower() == ZERO_ADDRESS.lower()
    assert int(recipient, 16) == 1

    tx_params = transaction.as_tx_params()
    assert tx_params["value"] == 1_000 + 10**18
    assert tx_params["from"] == transaction.sender
    assert tx_params["data"] == transaction.data


def test_token_input_attaches_no_value():
    permit = _permit(10**18)
    trade = _trade(DAI, 10**18)
    transaction = assemble_swap_transaction(
        trade,
        router=ROUTER,
        sender=SENDER,
        deadline=1_234,
        permit=permit,
        gas_limit=500_000,
    )

    assert transaction.value is None
    assert "value" not in transaction.as_tx_params()
    assert transaction.gas == 500_000

    commands, inputs, _ = _decode_execute(transaction.data)
    assert commands == bytes([RouterCommand.PERMIT2_PERMIT, RouterCommand.V4_SWAP])
    assert inputs[0] == permit.data


def test_swap_uses_slippage_adjusted_minimum():
    trade = _trade(DAI, 10**18)
    _, inputs, _ = _decode_execute(
        build_swap_calldata(trade, sender=SENDER, deadline=0, slippage_bps=100)
    )
    actions, params = eth_abi.abi.decode(["bytes", "bytes[]"], inputs[0])
    assert actions[-1] == V4Action.TAKE_ALL

    _, take_minimum = eth_abi.abi.decode(["address", "uint256"], params[-1])
    assert take_minimum == trade.minimum_amount_out(100)
    assert take_minimum == trade.amount_out * 99 // 100


def test_swap_to_other_recipient():
    trade = _trade(DAI, 10**18)
    _, inputs, _ = _decode_execute(
        build_swap_calldata(trade, sender=SENDER, deadline=0, recipient=RECIPIENT)
    )
    actions, params = eth_abi.abi.decode(["bytes", "bytes[]"], inputs[0])
    assert actions[-1] == V4Action.TAKE

    _, recipient, _ = eth_abi.abi.decode(["address", "address", "uint256"], params[-1])
    assert recipient.lower() == RECIPIENT.lower()


def test_swap_to_sender_as_recipient_uses_take_all():
    trade = _trade(DAI, 10**18)
    _, inputs, _ = _decode_execute(
        build_swap_calldata(trade, sender=SENDER, deadline=0, recipient=SENDER.lower())
    )
    actions, _ = eth_abi.abi.decode(["bytes", "bytes[]"], inputs[0])
    assert actions[-1] == V4Action.TAKE_ALL


def test_native_input_cannot_use_permit():
    with pytest.raises(TickswapValueError):
        assemble_swap_transaction(
            _trade(ETHER),
            router=ROUTER,
            sender=SENDER,
            deadline=0,
            permit=_permit(1_000),
        )
