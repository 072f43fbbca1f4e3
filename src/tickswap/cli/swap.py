import asyncio

import click

from tickswap.cli import cli
from tickswap.cli.utils import disconnect_web3, get_async_web3_from_config, load_token
from tickswap.config import settings
from tickswap.exceptions import TickswapError
from tickswap.signer import LocalAccountSigner
from tickswap.swap import execute_swap
from tickswap.uniswap.deployments import get_v4_deployment


@cli.command()
@click.argument("token_in")
@click.argument("token_out")
@click.argument("amount")
@click.option("--recipient", default=None, help="Address receiving the output [default: sender]")
@click.option("--chain-id", type=int, default=settings.swap.chain_id, show_default=True)
@click.option(
    "--slippage-bps",
    type=click.IntRange(0, 10_000),
    default=settings.swap.slippage_bps,
    show_default=True,
)
@click.option(
    "--private-key",
    envvar="TICKSWAP_PRIVATE_KEY",
    required=True,
    help="Key of the account paying for the swap, read from TICKSWAP_PRIVATE_KEY if not given",
)
def swap(
    token_in: str,
    token_out: str,
    amount: str,
    recipient: str | None,
    chain_id: int,
    slippage_bps: int,
    private_key: str,
) -> None:
    """
    Swap AMOUNT of TOKEN_IN for TOKEN_OUT through a Uniswap V4 pool. Use "ETH" for the native
    currency.
    """

    async def _swap() -> bool:
        deployment = get_v4_deployment(chain_id)
        w3 = await get_async_web3_from_config(chain_id)
        try:
            swap_settings = settings.swap.model_copy(
                update={"chain_id": chain_id, "slippage_bps": slippage_bps}
            )
            result = await execute_swap(
                w3=w3,
                signer=LocalAccountSigner.from_private_key(w3=w3, private_key=private_key),
                deployment=deployment,
                token_in=await load_token(w3, token_in, chain_id),
                token_out=await load_token(w3, token_out, chain_id),
                amount=amount,
                recipient=recipient,
                settings=swap_settings,
                on_status=click.echo,
            )
        finally:
            await disconnect_web3(w3)
        return result.succeeded or result.pending

    try:
        completed = asyncio.run(_swap())
    except TickswapError as exc:
        raise click.ClickException(exc.message or str(exc)) from exc

    if not completed:
        raise SystemExit(1)
