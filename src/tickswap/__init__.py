from .checksum_cache import get_checksum_address
from .config import settings
from .connection import async_connection_manager, get_async_web3, set_async_web3
from .version import __version__

# isort: split

from .amounts import format_units, parse_units
from .erc20 import Erc20Token, EtherPlaceholder
from .logging import logger
from .signer import LocalAccountSigner, Signer
from .swap import SwapResult, SwapSession, SwapStage, execute_swap
from .uniswap import (
    Trade,
    UniswapV4PoolKey,
    UniswapV4PoolModel,
    UniswapV4StateView,
    build_pool_key,
    generate_v4_pool_id,
    get_v4_deployment,
    scan_tick_liquidity,
)

__all__ = (
    "Erc20Token",
    "EtherPlaceholder",
    "LocalAccountSigner",
    "Signer",
    "SwapResult",
    "SwapSession",
    "SwapStage",
    "Trade",
    "UniswapV4PoolKey",
    "UniswapV4PoolModel",
    "UniswapV4StateView",
    "__version__",
    "async_connection_manager",
    "build_pool_key",
    "execute_swap",
    "format_units",
    "generate_v4_pool_id",
    "get_async_web3",
    "get_checksum_address",
    "get_v4_deployment",
    "logger",
    "parse_units",
    "scan_tick_liquidity",
    "set_async_web3",
    "settings",
)
