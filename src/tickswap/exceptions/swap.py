"""
Exceptions defined here are raised by the swap pipeline. Each message is suitable for display as the
final status of a swap attempt.
"""

from typing import TYPE_CHECKING, Any

from hexbytes import HexBytes

from tickswap.exceptions.base import TickswapError

if TYPE_CHECKING:
    from tickswap.swap import SwapStage


class SwapError(TickswapError):
    """
    Exception raised inside the swap pipeline.
    """


class MissingSigningProvider(SwapError):
    def __init__(self) -> None:
        """
        Raised when a swap is requested without a signer.
        """

        super().__init__(message="No signing provider is available. Connect a wallet to continue.")


class PoolStateUnavailable(SwapError):
    """
    Raised when the slot0 state of the pool cannot be read.
    """

    def __init__(self, pool_id: bytes | str) -> None:
        self.pool_id = HexBytes(pool_id).to_0x_hex()
        super().__init__(message=f"Could not read the state of pool {self.pool_id}.")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.pool_id,)


class NoLiquidityFound(SwapError):
    def __init__(self) -> None:
        """
        Raised when no tick inside the scanned window holds liquidity.
        """

        super().__init__(message="No liquidity found in the specified tick range.")


class PoolConstructionError(SwapError):
    """
    Raised when the pool state cannot be assembled into a valid pool model.
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(message=f"Could not construct the pool model: {reason}")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.reason,)


class TradeSimulationError(SwapError):
    """
    Raised when the pool model cannot price the requested trade.
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(message=f"Trade simulation failed: {reason}")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.reason,)


class PermitSigningRejected(SwapError):
    """
    Raised when the signer declines or fails to sign the Permit2 authorization.
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(message=f"Permit signature was not obtained: {reason}")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.reason,)


class SubmissionError(SwapError):
    """
    Raised when a transaction cannot be sent, or is not confirmed successfully.
    """

    def __init__(self, reason: str, transaction_hash: bytes | str | None = None) -> None:
        self.reason = reason
        self.transaction_hash = (
            HexBytes(transaction_hash).to_0x_hex() if transaction_hash is not None else None
        )
        super().__init__(message=f"Transaction failed: {reason}")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.reason, self.transaction_hash)


class InvalidStageTransition(SwapError):
    """
    Raised when the swap state machine is asked to perform a transition it does not allow.
    """

    def __init__(self, current: "SwapStage", requested: "SwapStage") -> None:
        self.current = current
        self.requested = requested
        super().__init__(
            message=f"Invalid swap stage transition: {current.name} -> {requested.name}"
        )

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.current, self.requested)


class SwapAlreadyRunning(SwapError):
    def __init__(self) -> None:
        """
        Raised when a session is asked to start a swap while another attempt is outstanding.
        """

        super().__init__(message="A swap attempt is already in progress.")
