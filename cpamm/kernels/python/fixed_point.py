"""
Fixed-point integer primitives.

Every quantity the pool computes goes through these helpers so the rounding
direction and the width checks are identical everywhere:
- amounts are u64 (`MAX_AMOUNT`),
- products of two amounts are u128 (`MAX_WIDE`),
- `mul_div` evaluates `a * b` in a u256 intermediate before dividing.

Rounding is floor unless the function name says otherwise. Floats are never
accepted.
"""

from __future__ import annotations

import math

from ...errors import ArithmeticOverflow, DivisionByZero, InvalidAmount


BPS_DENOM = 10_000

MAX_AMOUNT = (1 << 64) - 1
MAX_WIDE = (1 << 128) - 1
MAX_INTERMEDIATE = (1 << 256) - 1


def require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def require_amount(name: str, value: int) -> int:
    """Validate that `value` is a u64 amount and return it."""
    require_int(name, value)
    if value < 0:
        raise ArithmeticOverflow(f"{name} must be non-negative: {value}")
    if value > MAX_AMOUNT:
        raise ArithmeticOverflow(f"{name} exceeds u64: {value}")
    return value


def require_input_amount(name: str, value: int) -> int:
    """Validate a caller-supplied amount: negative is rejected, above u64 overflows."""
    require_int(name, value)
    if value < 0:
        raise InvalidAmount(f"{name} must be non-negative: {value}")
    return require_amount(name, value)


def _require_wide(name: str, value: int) -> None:
    require_int(name, value)
    if value < 0 or value > MAX_WIDE:
        raise ArithmeticOverflow(f"{name} must be in [0, 2**128): {value}")


def mul_div(a: int, b: int, denominator: int) -> int:
    """
    Compute `floor(a * b / denominator)`.

    Operands and the result must fit in u128; the product is formed in a u256
    intermediate.
    """
    _require_wide("a", a)
    _require_wide("b", b)
    _require_wide("denominator", denominator)
    if denominator == 0:
        raise DivisionByZero("mul_div denominator is zero")

    product = a * b
    if product > MAX_INTERMEDIATE:
        raise ArithmeticOverflow("mul_div intermediate exceeds u256")
    result = product // denominator
    if result > MAX_WIDE:
        raise ArithmeticOverflow(f"mul_div result exceeds u128: {result}")
    return result


def mul_div_up(a: int, b: int, denominator: int) -> int:
    """Compute `ceil(a * b / denominator)` with the same width rules as `mul_div`."""
    result = mul_div(a, b, denominator)
    if (a * b) % denominator:
        result += 1
        if result > MAX_WIDE:
            raise ArithmeticOverflow(f"mul_div_up result exceeds u128: {result}")
    return result


def integer_sqrt(n: int) -> int:
    """Largest `r` such that `r * r <= n` (deterministic, no floating point)."""
    _require_wide("n", n)
    return math.isqrt(n)


def checked_add(a: int, b: int) -> int:
    """u64 addition."""
    total = require_amount("a", a) + require_amount("b", b)
    if total > MAX_AMOUNT:
        raise ArithmeticOverflow(f"amount overflow: {a} + {b} exceeds u64")
    return total


def checked_sub(a: int, b: int) -> int:
    """u64 subtraction."""
    require_amount("a", a)
    require_amount("b", b)
    if b > a:
        raise ArithmeticOverflow(f"amount underflow: {a} - {b} < 0")
    return a - b


def to_amount(name: str, value: int) -> int:
    """Narrow a wide result back to a u64 amount."""
    require_int(name, value)
    if value > MAX_AMOUNT:
        raise ArithmeticOverflow(f"{name} exceeds u64: {value}")
    return value
