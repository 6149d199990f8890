"""Checked unsigned 256-bit arithmetic.

Amounts never wrap: any result outside [0, 2**256 - 1] raises
ArithmeticOverflow instead.
"""

from .exceptions import ArithmeticOverflow, InvalidAmount

UINT256_MAX = 2**256 - 1


def require_amount(amount: object) -> int:
    """Validate that amount is a non-negative int within range and return it."""
    # bool is an int subclass but never a meaningful amount
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmount(amount)
    if amount < 0 or amount > UINT256_MAX:
        raise InvalidAmount(amount)
    return amount


def checked_add(left: int, right: int) -> int:
    result = left + right
    if result > UINT256_MAX:
        raise ArithmeticOverflow("add", left, right)
    return result


def checked_sub(left: int, right: int) -> int:
    result = left - right
    if result < 0:
        raise ArithmeticOverflow("sub", left, right)
    return result


def checked_mul(left: int, right: int) -> int:
    result = left * right
    if result > UINT256_MAX:
        raise ArithmeticOverflow("mul", left, right)
    return result
