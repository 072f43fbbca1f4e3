from tickswap.exceptions.amount import AmountError, InvalidAmount
from tickswap.exceptions.base import TickswapError, TickswapTypeError, TickswapValueError
from tickswap.exceptions.connection import TickswapConnectionError, Web3ConnectionTimeout
from tickswap.exceptions.evm import EVMRevertError
from tickswap.exceptions.swap import (
    InvalidStageTransition,
    MissingSigningProvider,
    NoLiquidityFound,
    PermitSigningRejected,
    PoolConstructionError,
    PoolStateUnavailable,
    SubmissionError,
    SwapAlreadyRunning,
    SwapError,
    TradeSimulationError,
)

from . import (
    amount,
    base,
    connection,
    evm,
    swap,
)

__all__ = (
    "AmountError",
    "EVMRevertError",
    "InvalidAmount",
    "InvalidStageTransition",
    "MissingSigningProvider",
    "NoLiquidityFound",
    "PermitSigningRejected",
    "PoolConstructionError",
    "PoolStateUnavailable",
    "SubmissionError",
    "SwapAlreadyRunning",
    "SwapError",
    "TickswapConnectionError",
    "TickswapError",
    "TickswapTypeError",
    "TickswapValueError",
    "TradeSimulationError",
    "Web3ConnectionTimeout",
    "amount",
    "base",
    "connection",
    "evm",
    "swap",
)
