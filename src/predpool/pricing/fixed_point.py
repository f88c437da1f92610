"""Integer fixed-point helpers. No floats; every division floors; every result is range-checked."""

from __future__ import annotations

import math

from predpool.core.errors import ArithmeticOverflow, DivisionByZero

ODDS_SCALE = 1_000_000_000  # odds and margin: 1.0 == 1e9
FEE_SCALE = 1_000_000_000  # oracle / DAO fee: 1% == 10_000_000

UINT64_MAX = 2**64 - 1
UINT128_MAX = 2**128 - 1
UINT256_MAX = 2**256 - 1


def checked(value: int, bound: int = UINT256_MAX) -> int:
    """Return value if it lies in [0, bound], else raise ArithmeticOverflow."""
    if value < 0:
        raise ArithmeticOverflow("arithmetic underflow", value=value)
    if value > bound:
        raise ArithmeticOverflow("arithmetic overflow", value=value, bound=bound)
    return value


def add(a: int, b: int, bound: int = UINT256_MAX) -> int:
    return checked(a + b, bound)


def sub(a: int, b: int) -> int:
    return checked(a - b)


def mul(a: int, b: int, bound: int = UINT256_MAX) -> int:
    return checked(a * b, bound)


def div(a: int, b: int) -> int:
    """Floor division of non-negative operands."""
    if b == 0:
        raise DivisionByZero("division by zero", numerator=a)
    return checked(a) // checked(b)


def mul_div(a: int, b: int, denominator: int, bound: int = UINT256_MAX) -> int:
    """floor(a * b / denominator) with the product checked against bound."""
    return div(mul(a, b, bound), denominator)


def ceil_step(a: int, step: int, floor_value: int) -> int:
    """Round a up to a multiple of step; values below floor_value snap to floor_value."""
    if a < floor_value:
        return floor_value
    if step == 0:
        raise DivisionByZero("ceil step is zero")
    return mul(div(add(a, step - 1), step), step)


def isqrt(value: int) -> int:
    """Floor square root."""
    return math.isqrt(checked(value))


def to_u128(value: int) -> int:
    """Narrow a stored amount to the 128-bit domain."""
    return checked(value, UINT128_MAX)
