import asyncio

import click

from tickswap.cli import cli
from tickswap.cli.utils import (
    disconnect_web3,
    get_async_web3_from_config,
    parse_currency_address,
)
from tickswap.config import settings
from tickswap.exceptions import TickswapError
from tickswap.uniswap.deployments import get_v4_deployment
from tickswap.uniswap.v4_functions import build_pool_key, generate_v4_pool_id
from tickswap.uniswap.v4_state_view import UniswapV4StateView
from tickswap.uniswap.v4_tick_scanner import scan_tick_liquidity


@cli.command("pool-id")
@click.argument("currency_a")
@click.argument("currency_b")
@click.option("--fee", type=int, default=settings.swap.fee, show_default=True, help="Fee in pips")
@click.option("--tick-spacing", type=int, default=settings.swap.tick_spacing, show_default=True)
@click.option("--hooks", default=settings.swap.hook_address, show_default=True)
def pool_id(currency_a: str, currency_b: str, fee: int, tick_spacing: int, hooks: str) -> None:
    """
    Print the ID of the Uniswap V4 pool for two currencies. Use "ETH" for the native currency.
    """

    pool_key = build_pool_key(
        parse_currency_address(currency_a),
        parse_currency_address(currency_b),
        fee=fee,
        tick_spacing=tick_spacing,
        hooks=hooks,
    )
    click.echo(generate_v4_pool_id(pool_key).to_0x_hex())


@cli.command()
@click.argument("currency_a")
@click.argument("currency_b")
@click.option("--fee", type=int, default=settings.swap.fee, show_default=True, help="Fee in pips")
@click.option("--tick-spacing", type=int, default=settings.swap.tick_spacing, show_default=True)
@click.option("--hooks", default=settings.swap.hook_address, show_default=True)
@click.option("--chain-id", type=int, default=settings.swap.chain_id, show_default=True)
@click.option(
    "--radius",
    type=click.IntRange(1, 64),
    default=settings.swap.tick_window_radius,
    show_default=True,
    help="Number of tick spacings scanned on each side of the current tick",
)
def scan(
    currency_a: str,
    currency_b: str,
    fee: int,
    tick_spacing: int,
    hooks: str,
    chain_id: int,
    radius: int,
) -> None:
    """
    Scan the ticks around the current price of a Uniswap V4 pool for liquidity.
    """

    pool_key = build_pool_key(
        parse_currency_address(currency_a),
        parse_currency_address(currency_b),
        fee=fee,
        tick_spacing=tick_spacing,
        hooks=hooks,
    )
    v4_pool_id = generate_v4_pool_id(pool_key)

    async def _scan() -> None:
        deployment = get_v4_deployment(chain_id)
        w3 = await get_async_web3_from_config(chain_id)
        try:
            state_view = UniswapV4StateView(w3=w3, address=deployment.state_view.address)
            result = await scan_tick_liquidity(
                state_view, v4_pool_id, pool_key.tick_spacing, radius
            )
        finally:
            await disconnect_web3(w3)

        click.echo(f"Pool {v4_pool_id.to_0x_hex()}")
        click.echo(
            f"Current tick {result.slot0.tick}, sqrt price {result.slot0.sqrt_price_x96}, "
            f"LP fee {result.slot0.lp_fee}"
        )
        failed_reads = {error.tick: error.error for error in result.errors}
        for tick in result.window:
            if tick in failed_reads:
                click.echo(f"{tick:>10}: read failed ({failed_reads[tick]})")
            else:
                click.echo(f"{tick:>10}: {result.liquidity[tick]}")

        if result.selected is None:
            click.echo("No liquidity found in the specified tick range.")
        else:
            click.echo(f"Selected tick {result.selected.tick}")

    try:
        asyncio.run(_scan())
    except TickswapError as exc:
        raise click.ClickException(exc.message or str(exc)) from exc
