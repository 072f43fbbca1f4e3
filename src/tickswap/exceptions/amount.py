from typing import Any

from tickswap.exceptions.base import TickswapError


class AmountError(TickswapError):
    """
    Exception raised when converting between decimal strings and fixed-point amounts.
    """


class InvalidAmount(AmountError):
    """
    The supplied value cannot be represented as a fixed-point amount at the given precision.
    """

    def __init__(self, value: str, reason: str) -> None:
        self.value = value
        self.reason = reason
        super().__init__(message=f"Invalid amount {value!r}: {reason}.")

    def __reduce__(self) -> tuple[Any, ...]:
        # Pickling will raise an exception if a reduction method is not defined
        return self.__class__, (self.value, self.reason)
