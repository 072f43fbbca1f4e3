from pathlib import Path

import click
from pydantic import HttpUrl, WebsocketUrl
from web3 import (
    AsyncBaseProvider,
    AsyncHTTPProvider,
    AsyncIPCProvider,
    AsyncWeb3,
    PersistentConnectionProvider,
    WebSocketProvider,
)

from tickswap.checksum_cache import get_checksum_address
from tickswap.config import CONFIG_FILE, settings
from tickswap.connection import set_async_web3
from tickswap.constants import NATIVE_CURRENCY_ADDRESS
from tickswap.erc20 import Erc20Token, EtherPlaceholder
from tickswap.types.aliases import ChainId

NATIVE_CURRENCY_SYMBOL = "ETH"


def parse_currency_address(currency: str) -> str:
    """
    Get the address for a currency given on the command line, where "ETH" is the native currency.
    """

    if currency.upper() == NATIVE_CURRENCY_SYMBOL:
        return NATIVE_CURRENCY_ADDRESS
    try:
        return get_checksum_address(currency)
    except ValueError:
        msg = f"{currency!r} is not an address or {NATIVE_CURRENCY_SYMBOL!r}"
        raise click.BadParameter(msg) from None


async def get_async_web3_from_config(chain_id: ChainId) -> AsyncWeb3[AsyncBaseProvider]:
    w3: AsyncWeb3[AsyncBaseProvider]
    match endpoint := settings.rpc.get(chain_id):
        case HttpUrl():
            w3 = AsyncWeb3(AsyncHTTPProvider(str(endpoint)))
        case WebsocketUrl():
            w3 = AsyncWeb3(WebSocketProvider(str(endpoint)))
        case Path():
            w3 = AsyncWeb3(AsyncIPCProvider(str(endpoint)))
        case None:
            msg = f"Chain ID {chain_id} does not have an RPC defined in config file {CONFIG_FILE}"
            raise click.ClickException(msg)

    if isinstance(w3.provider, PersistentConnectionProvider):
        await w3.provider.connect()

    if (endpoint_chain_id := await w3.eth.chain_id) != chain_id:
        await disconnect_web3(w3)
        msg = (
            f"The chain ID ({endpoint_chain_id}) at endpoint {endpoint} does not match "
            f"the chain ID ({chain_id}) requested."
        )
        raise click.ClickException(msg)

    try:
        await set_async_web3(w3)
    except Exception:
        await disconnect_web3(w3)
        raise
    return w3


async def disconnect_web3(w3: AsyncWeb3[AsyncBaseProvider]) -> None:
    if isinstance(w3.provider, PersistentConnectionProvider):
        await w3.provider.disconnect()


async def load_token(
    w3: AsyncWeb3[AsyncBaseProvider], currency: str, chain_id: ChainId
) -> Erc20Token:
    address = parse_currency_address(currency)
    if address == NATIVE_CURRENCY_ADDRESS:
        return EtherPlaceholder(chain_id=chain_id)
    return await Erc20Token.from_chain(w3=w3, address=address, chain_id=chain_id)
