import logging
from typing import Any

import eth_abi.abi
import pytest
from eth_account import Account
from eth_account.messages import encode_typed_data
from eth_account.signers.local import LocalAccount
from eth_typing import ChecksumAddress
from hexbytes import HexBytes
from web3.types import TxParams, TxReceipt

from tickswap.checksum_cache import get_checksum_address
from tickswap.connection import async_connection_manager
from tickswap.erc20 import Erc20Token, EtherPlaceholder
from tickswap.logging import logger
from tickswap.types.aliases import Tick
from tickswap.uniswap.v4_libraries.tick_math import get_sqrt_price_at_tick
from tickswap.uniswap.v4_types import ProtocolFee, Slot0, TickInfo

TOKEN_ADDRESS = get_checksum_address("0x6B175474E89094C44Da98b954EedeAC495271d0F")
OTHER_TOKEN_ADDRESS = get_checksum_address("0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48")


@pytest.fixture(autouse=True)
def _initialize_and_reset_after_each_test():
    """
    Before each test, clear/reset global values and singletons
    """
    async_connection_manager.connections.clear()
    async_connection_manager._default_chain_id = None


@pytest.fixture(scope="session", autouse=True)
def _set_tickswap_logging():
    """
    Set the logging level to DEBUG for the test run
    """
    logger.setLevel(logging.DEBUG)


def tick_info(liquidity_gross: int, liquidity_net: int = 0) -> TickInfo:
    return TickInfo(
        liquidity_gross=liquidity_gross,
        liquidity_net=liquidity_net,
        fee_growth_outside0_x128=0,
        fee_growth_outside1_x128=0,
    )


class FakeStateView:
    """
    A pool state reader serving a fixed slot0 and tick map. Ticks missing from the map are returned
    uninitialized, and ticks in `failing_ticks` raise on read.
    """

    def __init__(
        self,
        slot0: Slot0,
        ticks: dict[Tick, TickInfo] | None = None,
        failing_ticks: set[Tick] | None = None,
        slot0_error: Exception | None = None,
    ) -> None:
        self.slot0 = slot0
        self.ticks = ticks or {}
        self.failing_ticks = failing_ticks or set()
        self.slot0_error = slot0_error
        self.tick_reads: list[Tick] = []

    async def get_slot0(self, pool_id: bytes) -> Slot0:
        if self.slot0_error is not None:
            raise self.slot0_error
        return self.slot0

    async def get_tick_info(self, pool_id: bytes, tick: Tick) -> TickInfo:
        self.tick_reads.append(tick)
        if tick in self.failing_ticks:
            msg = f"execution reverted reading tick {tick}"
            raise ValueError(msg)
        return self.ticks.get(tick, tick_info(0))


class FakeSigner:
    """
    A signer backed by a throwaway local account. Signatures are real, while transactions are
    recorded instead of sent.
    """

    def __init__(
        self,
        *,
        reject_signature: bool = False,
        send_error: Exception | None = None,
        receipt_status: int = 1,
        receipt_error: Exception | None = None,
    ) -> None:
        self.account: LocalAccount = Account.create()
        self.reject_signature = reject_signature
        self.send_error = send_error
        self.receipt_status = receipt_status
        self.receipt_error = receipt_error
        self.signature_requests: list[dict[str, Any]] = []
        self.sent_transactions: list[TxParams] = []

    @property
    def address(self) -> ChecksumAddress:
        return get_checksum_address(self.account.address)

    async def sign_typed_data(
        self,
        domain: dict[str, Any],
        types: dict[str, list[dict[str, str]]],
        message: dict[str, Any],
    ) -> HexBytes:
        self.signature_requests.append({"domain": domain, "types": types, "message": message})
        if self.reject_signature:
            msg = "User rejected the request."
            raise RuntimeError(msg)
        signed_message = self.account.sign_message(
            encode_typed_data(domain_data=domain, message_types=types, message_data=message)
        )
        return HexBytes(signed_message.signature)

    async def send_transaction(self, tx_params: TxParams) -> HexBytes:
        if self.send_error is not None:
            raise self.send_error
        self.sent_transactions.append(tx_params)
        return HexBytes(len(self.sent_transactions).to_bytes(32, "big"))

    async def wait_for_receipt(self, tx_hash: HexBytes, timeout: float = 180) -> TxReceipt:
        if self.receipt_error is not None:
            raise self.receipt_error
        return TxReceipt(
            {  # type: ignore[typeddict-item]
                "transactionHash": tx_hash,
                "status": self.receipt_status,
                "blockNumber": 1,
            }
        )


class FakeEth:
    def __init__(self, permit2_nonce: int, call_error: Exception | None) -> None:
        self.permit2_nonce = permit2_nonce
        self.call_error = call_error
        self.calls: list[TxParams] = []

    async def call(self, transaction: TxParams, block_identifier: Any = None) -> bytes:
        self.calls.append(transaction)
        if self.call_error is not None:
            raise self.call_error
        # Permit2 allowance(owner, token, spender) -> (amount, expiration, nonce)
        return eth_abi.abi.encode(
            types=["uint160", "uint48", "uint48"],
            args=[0, 0, self.permit2_nonce],
        )


class FakeWeb3:
    """
    Answers every eth_call with a Permit2 allowance holding the configured nonce.
    """

    def __init__(self, permit2_nonce: int = 0, call_error: Exception | None = None) -> None:
        self.eth = FakeEth(permit2_nonce=permit2_nonce, call_error=call_error)


@pytest.fixture
def ether() -> EtherPlaceholder:
    return EtherPlaceholder()


@pytest.fixture
def token() -> Erc20Token:
    return Erc20Token(address=TOKEN_ADDRESS, decimals=18, symbol="DAI", name="Dai Stablecoin")


@pytest.fixture
def other_token() -> Erc20Token:
    return Erc20Token(address=OTHER_TOKEN_ADDRESS, decimals=6, symbol="USDC", name="USD Coin")


@pytest.fixture
def slot0_at_tick_zero() -> Slot0:
    return Slot0(
        sqrt_price_x96=get_sqrt_price_at_tick(0),
        tick=0,
        protocol_fee=ProtocolFee(zero_for_one=0, one_for_zero=0),
        lp_fee=3_000,
    )


@pytest.fixture
def liquid_state_view(slot0_at_tick_zero: Slot0) -> FakeStateView:
    """
    A pool at tick 0 with spacing 60. Tick 0 holds the most liquidity, with a zero net liquidity.
    """
    return FakeStateView(
        slot0=slot0_at_tick_zero,
        ticks={
            -60: tick_info(5 * 10**23, 5 * 10**23),
            0: tick_info(9 * 10**23, 0),
            60: tick_info(3 * 10**23, -3 * 10**23),
        },
    )


@pytest.fixture
def empty_state_view(slot0_at_tick_zero: Slot0) -> FakeStateView:
    return FakeStateView(slot0=slot0_at_tick_zero)


@pytest.fixture
def signer() -> FakeSigner:
    return FakeSigner()


@pytest.fixture
def fake_w3() -> FakeWeb3:
    return FakeWeb3(permit2_nonce=7)


@pytest.fixture
def state_view_factory() -> type[FakeStateView]:
    return FakeStateView


@pytest.fixture
def signer_factory() -> type[FakeSigner]:
    return FakeSigner


@pytest.fixture
def w3_factory() -> type[FakeWeb3]:
    return FakeWeb3
