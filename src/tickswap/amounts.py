"""
Conversion between user-entered decimal strings and the fixed-point integer amounts used on-chain.

Conversion is done on the string representation, so no precision is lost to binary floating point.
"""

import re

from tickswap.constants import NATIVE_DECIMALS
from tickswap.exceptions import InvalidAmount, TickswapValueError

_DECIMAL_PATTERN = re.compile(r"(?P<whole>[0-9]*)(?:\.(?P<fraction>[0-9]*))?")


def _check_decimals(decimals: int) -> None:
    if decimals < 0:
        raise TickswapValueError(message=f"Decimals must be non-negative, was {decimals}")


def parse_units(value: str, decimals: int = NATIVE_DECIMALS) -> int:
    """
    Convert a decimal string into an integer amount with the given number of decimal places, e.g.
    "1.5" with 18 decimals is 1500000000000000000.

    Accepts "1", "1.5", ".5" and "1.". Trailing zeros after the decimal point do not count against
    the precision.
    """

    _check_decimals(decimals)

    if not isinstance(value, str):
        raise InvalidAmount(value=repr(value), reason="expected a decimal string")

    stripped = value.strip()
    if not stripped:
        raise InvalidAmount(value=value, reason="empty value")

    match = _DECIMAL_PATTERN.fullmatch(stripped)
    if match is None:
        raise InvalidAmount(value=value, reason="not a non-negative decimal number")

    whole = match.group("whole")
    raw_fraction = match.group("fraction") or ""
    if not whole and not raw_fraction:
        raise InvalidAmount(value=value, reason="no digits")

    fraction = raw_fraction.rstrip("0")

    if len(fraction) > decimals:
        raise InvalidAmount(
            value=value, reason=f"more than {decimals} digits after the decimal point"
        )

    return int(whole or "0") * 10**decimals + int(fraction.ljust(decimals, "0") or "0")


def format_units(value: int | str, decimals: int = NATIVE_DECIMALS) -> str:
    """
    Convert an integer amount into a decimal string with the given number of decimal places, e.g.
    1500000000000000000 with 18 decimals is "1.5". At least one fractional digit is kept, so one
    whole unit is "1.0".

    Values that cannot be read as an integer are returned unchanged as a string.
    """

    _check_decimals(decimals)

    try:
        amount = int(value)
    except (TypeError, ValueError):
        return str(value)

    sign = "-" if amount < 0 else ""
    whole, fraction = divmod(abs(amount), 10**decimals)
    fraction_digits = str(fraction).zfill(decimals).rstrip("0") if decimals else ""

    return f"{sign}{whole}.{fraction_digits or '0'}"
