from .deployments import UniswapV4ExchangeDeployment, get_v4_deployment
from .v4_functions import build_pool_key, generate_v4_pool_id, tick_window
from .v4_pool_model import UniswapV4PoolModel, build_pool_model
from .v4_state_view import PoolStateReader, UniswapV4StateView
from .v4_tick_scanner import scan_tick_liquidity
from .v4_trade import Route, Trade, build_exact_input_trade
from .v4_types import Slot0, TickInfo, TickScanResult, UniswapV4PoolKey

__all__ = (
    "PoolStateReader",
    "Route",
    "Slot0",
    "TickInfo",
    "TickScanResult",
    "Trade",
    "UniswapV4ExchangeDeployment",
    "UniswapV4PoolKey",
    "UniswapV4PoolModel",
    "UniswapV4StateView",
    "build_exact_input_trade",
    "build_pool_key",
    "build_pool_model",
    "generate_v4_pool_id",
    "get_v4_deployment",
    "scan_tick_liquidity",
    "tick_window",
)
