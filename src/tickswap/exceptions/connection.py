"""
Connection-related exceptions for the tickswap package.
"""

from typing import Any

from tickswap.exceptions.base import TickswapError


class TickswapConnectionError(TickswapError):
    """
    Base exception for connection-related errors.
    """


class Web3ConnectionTimeout(TickswapConnectionError):
    """
    Raised when a Web3 connection times out.
    """

    def __init__(self, timeout_seconds: int | None = None) -> None:
        self.timeout_seconds = timeout_seconds

        message = "Timed out waiting for Web3 connection"
        if timeout_seconds is not None:
            message += f" after {timeout_seconds} seconds"
        message += "."

        super().__init__(message=message)

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.timeout_seconds,)
