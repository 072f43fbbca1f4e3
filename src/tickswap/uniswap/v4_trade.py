import dataclasses
from fractions import Fraction

from tickswap.erc20 import Erc20Token
from tickswap.exceptions import TickswapValueError, TradeSimulationError
from tickswap.logging import logger
from tickswap.uniswap.v4_pool_model import UniswapV4PoolModel
from tickswap.uniswap.v4_types import SWAP_HOOKS

BPS_DENOMINATOR = 10_000


@dataclasses.dataclass(slots=True, frozen=True)
class Route:
    pools: tuple[UniswapV4PoolModel, ...]
    input: Erc20Token
    output: Erc20Token


@dataclasses.dataclass(slots=True, frozen=True)
class Trade:
    """
    An exact input trade through a route. Prices are ratios of raw token amounts, expressed as the
    output token per input token.
    """

    route: Route
    amount_in: int
    amount_out: int
    execution_price: Fraction
    mid_price: Fraction
    price_impact: Fraction

    @property
    def pool(self) -> UniswapV4PoolModel:
        (pool,) = self.route.pools
        return pool

    @property
    def token_in(self) -> Erc20Token:
        return self.route.input

    @property
    def token_out(self) -> Erc20Token:
        return self.route.output

    def _nominal(self, price: Fraction) -> Fraction:
        return price * Fraction(10**self.token_in.decimals, 10**self.token_out.decimals)

    @property
    def nominal_execution_price(self) -> Fraction:
        "The execution price, corrected for the decimal places of both tokens."
        return self._nominal(self.execution_price)

    @property
    def nominal_mid_price(self) -> Fraction:
        "The mid price, corrected for the decimal places of both tokens."
        return self._nominal(self.mid_price)

    def minimum_amount_out(self, slippage_bps: int) -> int:
        """
        The smallest output accepted for the given slippage tolerance, in basis points.
        """

        if not 0 <= slippage_bps <= BPS_DENOMINATOR:
            raise TickswapValueError(message=f"Invalid slippage tolerance {slippage_bps} bps")
        return self.amount_out * (BPS_DENOMINATOR - slippage_bps) // BPS_DENOMINATOR


def build_exact_input_trade(
    pool: UniswapV4PoolModel,
    token_in: Erc20Token,
    amount_in: int,
) -> Trade:
    """
    Simulate an exact input trade of `amount_in` of `token_in` through a single pool.
    """

    if amount_in <= 0:
        raise TradeSimulationError(reason=f"input amount {amount_in} is not positive")

    match token_in.address:
        case pool.token0.address:
            token_in, token_out = pool.token0, pool.token1
        case pool.token1.address:
            token_in, token_out = pool.token1, pool.token0
        case _:
            raise TradeSimulationError(reason=f"token {token_in.address} is not in pool {pool}")

    if conflicting_hooks := SWAP_HOOKS & pool.active_hooks:
        logger.warning(
            f"Pool {pool} has swap hooks enabled "
            f"({', '.join(sorted(hook.name for hook in conflicting_hooks))}), the simulated "
            "output may be inaccurate."
        )

    amount_out = pool.calculate_tokens_out_from_tokens_in(
        token_in=token_in,
        token_in_quantity=amount_in,
    )

    execution_price = Fraction(amount_out, amount_in)
    mid_price = pool.get_absolute_exchange_rate(token_in)
    trade = Trade(
        route=Route(pools=(pool,), input=token_in, output=token_out),
        amount_in=amount_in,
        amount_out=amount_out,
        execution_price=execution_price,
        mid_price=mid_price,
        price_impact=(mid_price - execution_price) / mid_price,
    )
    logger.info(
        f"Trade {amount_in} {token_in} -> {amount_out} {token_out}, "
        f"price impact {float(trade.price_impact):.4%}"
    )
    return trade
