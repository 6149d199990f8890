"""Human-readable ether amounts.

Parses strings such as ``1eth``, ``100gwei``, ``0.5ether`` or ``0x15`` into
integer wei, and renders integer amounts back for display.
"""

import string
from decimal import Decimal, InvalidOperation, localcontext

from .arithmetic import UINT256_MAX
from .exceptions import ValidationError

# 2**256 - 1 has 78 decimal digits
MAX_DIGITS = 78

# Longest suffixes first so that "gwei" is not read as "wei"
UNIT_EXPONENTS: list[tuple[str, int]] = [
    ("ether", 18),
    ("eth", 18),
    ("pwei", 15),
    ("twei", 12),
    ("gwei", 9),
    ("mwei", 6),
    ("kwei", 3),
    ("wei", 0),
]


def parse_amount(text: str, default_exponent: int = 18) -> int:
    """
    Parse an amount string into integer base units.

    Args:
        text: Amount with an optional unit suffix. Without a suffix the
              value is read in whole ether (10**default_exponent units).
        default_exponent: Exponent applied when no suffix is present

    Returns:
        Amount in base units (wei)

    Raises:
        ValidationError: If the string is not a valid non-negative amount
            or resolves to a fractional number of base units.
    """
    raw = text.strip().lower()
    exponent = default_exponent

    for suffix, suffix_exponent in UNIT_EXPONENTS:
        if raw.endswith(suffix):
            raw = raw[: -len(suffix)].strip()
            exponent = suffix_exponent
            break

    if not raw:
        raise ValidationError("amount", text, "no number given")

    if raw.startswith("0x"):
        digits = raw[2:]
        if not digits or any(c not in string.hexdigits for c in digits):
            raise ValidationError("amount", text, "invalid hex number")
        return _check_range(text, int(digits, 16) * 10**exponent)

    with localcontext() as ctx:
        ctx.prec = 100
        try:
            value = Decimal(raw)
        except InvalidOperation:
            raise ValidationError("amount", text, "invalid number") from None

        if not value.is_finite() or value < 0:
            raise ValidationError("amount", text, "amount must be a finite non-negative number")

        if value and value.adjusted() + exponent >= MAX_DIGITS:
            raise ValidationError("amount", text, "amount does not fit in 256 bits")

        scaled = value.scaleb(exponent)
        if scaled != scaled.to_integral_value():
            raise ValidationError("amount", text, "amount is smaller than one base unit")

    return _check_range(text, int(scaled))


def _check_range(text: str, value: int) -> int:
    if value > UINT256_MAX:
        raise ValidationError("amount", text, "amount does not fit in 256 bits")
    return value


def format_amount(amount: int, decimals: int = 18, symbol: str | None = None) -> str:
    """
    Render an integer amount as a decimal string.

    Example:
        format_amount(1_500_000_000_000_000_000, symbol="ETH") -> "1.5 ETH"
    """
    whole, fraction = divmod(amount, 10**decimals)
    text = f"{whole:,}"
    if decimals and fraction:
        text += "." + str(fraction).rjust(decimals, "0").rstrip("0")
    if symbol:
        text += f" {symbol}"
    return text
