import dataclasses
from bisect import bisect_left, bisect_right
from collections.abc import Sequence
from fractions import Fraction
from typing import Final

from hexbytes import HexBytes

from tickswap.erc20 import Erc20Token
from tickswap.exceptions import EVMRevertError, PoolConstructionError, TradeSimulationError
from tickswap.logging import logger
from tickswap.types.aliases import Tick
from tickswap.uniswap.v4_functions import (
    exchange_rate_from_sqrt_price_x96,
    generate_v4_pool_id,
)
from tickswap.uniswap.v4_libraries.liquidity_math import add_delta
from tickswap.uniswap.v4_libraries.swap_math import compute_swap_step, get_sqrt_price_target
from tickswap.uniswap.v4_libraries.tick_math import (
    MAX_SQRT_PRICE,
    MAX_TICK,
    MAX_TICK_SPACING,
    MIN_SQRT_PRICE,
    MIN_TICK,
    MIN_TICK_SPACING,
    get_sqrt_price_at_tick,
    get_tick_at_sqrt_price,
    max_usable_tick,
)
from tickswap.uniswap.v4_types import (
    Hooks,
    Liquidity,
    Pip,
    ProtocolFee,
    SelectedTick,
    Slot0,
    SqrtPriceX96,
    SwapDelta,
    TickDelta,
    UniswapV4PoolKey,
    active_hooks,
)

PIPS_DENOMINATOR = 1_000_000
MAX_LP_FEE = 1_000_000

# Pools with this fee value in their key take the LP fee from slot0, which a hook may update
DYNAMIC_FEE_FLAG = 0x800000


def build_tick_deltas(selected: SelectedTick, tick_spacing: int) -> tuple[TickDelta, ...]:
    """
    Build the liquidity deltas for the selected tick. When the tick has a non-zero net liquidity, an
    offsetting delta is placed at the next tick boundary so that the net liquidity of all deltas is
    zero.
    """

    deltas = [TickDelta(tick=selected.tick, liquidity_net=selected.info.liquidity_net)]
    if selected.info.liquidity_net != 0:
        offset_tick = selected.tick + tick_spacing
        if offset_tick > max_usable_tick(tick_spacing):
            raise PoolConstructionError(
                reason=(
                    f"tick {selected.tick} is the highest usable tick for spacing {tick_spacing}, "
                    "so its liquidity has no upper bound"
                )
            )
        deltas.append(TickDelta(tick=offset_tick, liquidity_net=-selected.info.liquidity_net))
    return tuple(deltas)


def _calculate_swap_fee(protocol_fee: int, lp_fee: int) -> Pip:
    # ref: https://github.com/Uniswap/v4-core/blob/main/src/libraries/ProtocolFeeLibrary.sol
    protocol_fee &= 0xFFF
    lp_fee &= 0xFFFFFF
    numerator = protocol_fee * lp_fee
    return (protocol_fee + lp_fee) - (numerator // PIPS_DENOMINATOR)


@dataclasses.dataclass(slots=True, frozen=True)
class UniswapV4PoolModel:
    """
    An in-memory Uniswap V4 pool built from a snapshot of its state. The liquidity map holds only
    the supplied tick deltas, so the model prices trades within that range.
    """

    key: UniswapV4PoolKey
    token0: Erc20Token
    token1: Erc20Token
    sqrt_price_x96: SqrtPriceX96
    liquidity: Liquidity
    tick: Tick
    lp_fee: Pip
    protocol_fee: ProtocolFee
    tick_deltas: tuple[TickDelta, ...]

    @dataclasses.dataclass(slots=True)
    class SwapState:
        amount_remaining: int
        amount_calculated: int
        sqrt_price_x96: int
        tick: int
        liquidity: int

    @dataclasses.dataclass(slots=True)
    class StepComputations:
        sqrt_price_start_x96: int = 0
        sqrt_price_next_x96: int = 0
        tick_next: int = 0
        initialized: bool = False
        amount_in: int = 0
        amount_out: int = 0
        fee_amount: int = 0

    def __post_init__(self) -> None:
        self._validate()

    def __str__(self) -> str:
        return f"{self.token0}-{self.token1} ({self.key.fee}, {self.key.tick_spacing})"

    def _validate(self) -> None:
        key = self.key

        if key.fee != DYNAMIC_FEE_FLAG and not 0 <= key.fee < MAX_LP_FEE:
            raise PoolConstructionError(reason=f"fee {key.fee} is not a valid LP fee")
        if not 0 <= self.lp_fee < MAX_LP_FEE:
            raise PoolConstructionError(reason=f"LP fee {self.lp_fee} is not valid")
        if not MIN_TICK_SPACING <= key.tick_spacing <= MAX_TICK_SPACING:
            raise PoolConstructionError(reason=f"tick spacing {key.tick_spacing} is out of range")
        if (self.token0.address, self.token1.address) != (key.currency0, key.currency1):
            raise PoolConstructionError(reason="tokens do not match the pool key")

        if not MIN_TICK <= self.tick <= MAX_TICK:
            raise PoolConstructionError(reason=f"tick {self.tick} is out of range")
        if not MIN_SQRT_PRICE <= self.sqrt_price_x96 < MAX_SQRT_PRICE:
            raise PoolConstructionError(reason=f"price {self.sqrt_price_x96} is out of range")

        # The tick is one less than the price's tick after a swap that ends on a tick boundary
        upper_price = (
            get_sqrt_price_at_tick(self.tick + 1) if self.tick < MAX_TICK else MAX_SQRT_PRICE
        )
        if not get_sqrt_price_at_tick(self.tick) <= self.sqrt_price_x96 <= upper_price:
            raise PoolConstructionError(
                reason=f"price {self.sqrt_price_x96} is not within the bounds of tick {self.tick}"
            )

        if self.liquidity < 0:
            raise PoolConstructionError(reason=f"liquidity {self.liquidity} is negative")

        previous_tick: Tick | None = None
        for delta in self.tick_deltas:
            if delta.tick % key.tick_spacing != 0:
                raise PoolConstructionError(
                    reason=f"tick {delta.tick} is not a multiple of tick spacing {key.tick_spacing}"
                )
            if not MIN_TICK <= delta.tick <= MAX_TICK:
                raise PoolConstructionError(reason=f"tick {delta.tick} is out of range")
            if previous_tick is not None and delta.tick <= previous_tick:
                raise PoolConstructionError(reason="tick deltas are not sorted")
            previous_tick = delta.tick

        if sum(delta.liquidity_net for delta in self.tick_deltas) != 0:
            raise PoolConstructionError(reason="net liquidity of the tick deltas is not zero")

    @property
    def pool_id(self) -> HexBytes:
        return generate_v4_pool_id(self.key)

    @property
    def tokens(self) -> tuple[Erc20Token, Erc20Token]:
        return self.token0, self.token1

    @property
    def tick_spacing(self) -> int:
        return self.key.tick_spacing

    @property
    def active_hooks(self) -> frozenset[Hooks]:
        return active_hooks(self.key.hooks)

    @property
    def _initialized_ticks(self) -> tuple[Tick, ...]:
        return tuple(delta.tick for delta in self.tick_deltas)

    def get_absolute_exchange_rate(self, token: Erc20Token) -> Fraction:
        """
        Get the absolute exchange rate (ratio of raw token amounts) for `token` in terms of the
        other token, at the current price.
        """

        if token.address == self.token0.address:
            return exchange_rate_from_sqrt_price_x96(self.sqrt_price_x96)
        if token.address == self.token1.address:
            return 1 / exchange_rate_from_sqrt_price_x96(self.sqrt_price_x96)
        raise TradeSimulationError(reason=f"token {token.address} is not in pool {self}")

    def _next_initialized_tick(self, tick: Tick, *, less_than_or_equal: bool) -> tuple[Tick, bool]:
        ticks = self._initialized_ticks
        index = bisect_right(ticks, tick)
        if less_than_or_equal:
            return (ticks[index - 1], True) if index > 0 else (MIN_TICK, False)
        return (ticks[index], True) if index < len(ticks) else (MAX_TICK, False)

    def _liquidity_net_at(self, tick: Tick) -> int:
        index = bisect_left(self._initialized_ticks, tick)
        return self.tick_deltas[index].liquidity_net

    def _calculate_swap(
        self,
        *,
        zero_for_one: bool,
        amount_in: int,
        sqrt_price_x96_limit: int,
    ) -> tuple[SwapDelta, SwapState]:
        """
        Simulate an exact input swap across the liquidity deltas of the model.

        This function is adapted from the swap() function implemented by the Pool.sol library
        contract, for exact input only.

        ref: https://github.com/Uniswap/v4-core/blob/main/src/libraries/Pool.sol
        """

        protocol_fee = (
            self.protocol_fee.zero_for_one if zero_for_one else self.protocol_fee.one_for_zero
        )
        swap_fee = (
            self.lp_fee if protocol_fee == 0 else _calculate_swap_fee(protocol_fee, self.lp_fee)
        )

        state: Final = self.SwapState(
            amount_remaining=amount_in,
            amount_calculated=0,
            sqrt_price_x96=self.sqrt_price_x96,
            tick=self.tick,
            liquidity=self.liquidity,
        )

        if zero_for_one:
            if sqrt_price_x96_limit >= self.sqrt_price_x96:
                raise EVMRevertError(error="PriceLimitAlreadyExceeded")
            if sqrt_price_x96_limit <= MIN_SQRT_PRICE:
                raise EVMRevertError(error="PriceLimitOutOfBounds")
        else:
            if sqrt_price_x96_limit <= self.sqrt_price_x96:
                raise EVMRevertError(error="PriceLimitAlreadyExceeded")
            if sqrt_price_x96_limit >= MAX_SQRT_PRICE:
                raise EVMRevertError(error="PriceLimitOutOfBounds")

        step = self.StepComputations()

        while not (state.amount_remaining == 0 or state.sqrt_price_x96 == sqrt_price_x96_limit):
            step.sqrt_price_start_x96 = state.sqrt_price_x96
            step.tick_next, step.initialized = self._next_initialized_tick(
                state.tick, less_than_or_equal=zero_for_one
            )
            step.sqrt_price_next_x96 = get_sqrt_price_at_tick(step.tick_next)

            state.sqrt_price_x96, step.amount_in, step.amount_out, step.fee_amount = (
                compute_swap_step(
                    sqrt_price_current_x96=state.sqrt_price_x96,
                    sqrt_price_target_x96=get_sqrt_price_target(
                        zero_for_one=zero_for_one,
                        sqrt_price_next_x96=step.sqrt_price_next_x96,
                        sqrt_price_limit_x96=sqrt_price_x96_limit,
                    ),
                    liquidity=state.liquidity,
                    amount_remaining=state.amount_remaining,
                    fee_pips=swap_fee,
                )
            )

            state.amount_remaining -= step.amount_in + step.fee_amount
            state.amount_calculated += step.amount_out

            if state.sqrt_price_x96 == step.sqrt_price_next_x96:
                # The price reached the next tick, so cross it and preemptively decrement the tick
                # for zero_for_one swaps
                if step.initialized:
                    liquidity_net = self._liquidity_net_at(step.tick_next)
                    state.liquidity = add_delta(
                        state.liquidity, -liquidity_net if zero_for_one else liquidity_net
                    )
                state.tick = step.tick_next - 1 if zero_for_one else step.tick_next
            elif state.sqrt_price_x96 != step.sqrt_price_start_x96:
                state.tick = get_tick_at_sqrt_price(state.sqrt_price_x96)

        amount_paid = amount_in - state.amount_remaining
        swap_delta = (
            SwapDelta(currency0=-amount_paid, currency1=state.amount_calculated)
            if zero_for_one
            else SwapDelta(currency0=state.amount_calculated, currency1=-amount_paid)
        )
        return swap_delta, state

    def calculate_tokens_out_from_tokens_in(
        self,
        token_in: Erc20Token,
        token_in_quantity: int,
    ) -> int:
        """
        Calculate the amount of the other token received for an exact input of `token_in`.
        """

        if token_in.address not in (self.token0.address, self.token1.address):
            raise TradeSimulationError(reason=f"token {token_in.address} is not in pool {self}")
        if token_in_quantity <= 0:
            raise TradeSimulationError(reason=f"input amount {token_in_quantity} is not positive")

        zero_for_one = token_in.address == self.token0.address

        try:
            swap_delta, final_state = self._calculate_swap(
                zero_for_one=zero_for_one,
                amount_in=token_in_quantity,
                sqrt_price_x96_limit=MIN_SQRT_PRICE + 1 if zero_for_one else MAX_SQRT_PRICE - 1,
            )
        except EVMRevertError as exc:
            raise TradeSimulationError(reason=f"simulated execution reverted: {exc}") from exc

        if swap_delta.amount_in < token_in_quantity:
            raise TradeSimulationError(
                reason=(
                    f"insufficient liquidity, only {swap_delta.amount_in} of {token_in_quantity} "
                    "could be swapped"
                )
            )
        if swap_delta.amount_out == 0:
            raise TradeSimulationError(reason="the swap produces no output")

        logger.debug(
            f"Simulated {token_in_quantity} {token_in} -> {swap_delta.amount_out} "
            f"(final tick {final_state.tick})"
        )
        return swap_delta.amount_out


def build_pool_model(
    slot0: Slot0,
    selected: SelectedTick,
    key: UniswapV4PoolKey,
    tokens: Sequence[Erc20Token],
) -> UniswapV4PoolModel:
    """
    Build a pool model from the pool state and the selected tick. The active liquidity of the model
    is the gross liquidity of the selected tick.
    """

    try:
        token0, token1 = sorted(tokens, key=lambda token: int(token.address, 16))
    except ValueError:
        raise PoolConstructionError(reason="a pool model requires exactly two tokens") from None

    return UniswapV4PoolModel(
        key=key,
        token0=token0,
        token1=token1,
        sqrt_price_x96=slot0.sqrt_price_x96,
        liquidity=selected.info.liquidity_gross,
        tick=slot0.tick,
        lp_fee=slot0.lp_fee,
        protocol_fee=slot0.protocol_fee,
        tick_deltas=build_tick_deltas(selected, key.tick_spacing),
    )
