"""
Fixed-Point Arithmetic for Utilization Pricing

All utilization and price quantities are integers scaled by UNIT, where
UNIT represents 100%. This module is the only place where rounding
direction is decided.

Scales used by the curve engine:
- UNIT**1: utilization, price levels, cost/refund factors
- UNIT**3: areas under the curve (utilization * level * UNIT)

Example Usage:
    from utilization_pricing.core.fixed_point import to_fixed, mul_div, Rounding

    level = to_fixed("0.0525")          # 52_500_000_000_000_000
    half = mul_div(level, 1, 2, Rounding.UP)
"""

import numbers
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from enum import Enum
from typing import Union


# Fixed-point constants
UNIT = 10**18
SECONDS_PER_DAY = 86_400


class Rounding(Enum):
    """Rounding direction for fixed-point division."""
    DOWN = "down"   # Refund paths, state projection
    UP = "up"       # Cost paths


def div_round(numerator: int, denominator: int, rounding: Rounding = Rounding.DOWN) -> int:
    """
    Integer division with an explicit rounding direction.

    Args:
        numerator: Dividend
        denominator: Divisor (non-zero)
        rounding: Rounding.DOWN floors, Rounding.UP takes the ceiling

    Returns:
        Rounded quotient

    Raises:
        ZeroDivisionError: If denominator is zero
    """
    if denominator == 0:
        raise ZeroDivisionError("Fixed-point division by zero")
    if rounding is Rounding.UP:
        return -((-numerator) // denominator)
    return numerator // denominator


def mul_div(a: int, b: int, denominator: int, rounding: Rounding = Rounding.DOWN) -> int:
    """Multiply a by b, then divide by denominator with the given rounding."""
    return div_round(a * b, denominator, rounding)


def rpow(base: int, exponent: int, unit: int = UNIT) -> int:
    """
    Fixed-point exponentiation by squaring, rounding down at every step.

    Args:
        base: Fixed-point base at `unit` scale
        exponent: Non-negative integer exponent

    Returns:
        base**exponent at `unit` scale
    """
    if exponent < 0:
        raise ValueError(f"Exponent must be non-negative, got {exponent}")

    result = unit
    while exponent:
        if exponent & 1:
            result = result * base // unit
        base = base * base // unit
        exponent >>= 1
    return result


def to_fixed(value: Union[str, float, int, Decimal]) -> int:
    """
    Convert a decimal fraction to fixed point (1.0 -> UNIT).

    Strings and Decimals convert exactly; floats go through their shortest
    repr so that 0.1 becomes exactly UNIT // 10.
    """
    if isinstance(value, bool):
        raise TypeError("Fractions must be numeric, got bool")
    if isinstance(value, numbers.Integral):
        value = int(value)
    elif isinstance(value, float):
        value = repr(float(value))
    try:
        scaled = Decimal(value) * UNIT
    except (InvalidOperation, TypeError) as e:
        raise TypeError(f"Cannot convert {value!r} to a fixed-point fraction: {e}")
    if not scaled.is_finite():
        raise ValueError(f"Fraction must be finite, got {value!r}")
    return int(scaled.to_integral_value(rounding=ROUND_HALF_UP))


def to_fraction(value: int) -> float:
    """Convert a fixed-point value to a float fraction for display."""
    return value / UNIT


def percent(value: Union[str, float, int, Decimal]) -> int:
    """Convert a percentage to fixed point (percent(25) == UNIT // 4)."""
    if isinstance(value, float):
        value = repr(float(value))
    return to_fixed(Decimal(value) / 100)


def is_fixed_integer(value) -> bool:
    """True for integral values usable as fixed-point quantities (bool excluded)."""
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def format_fixed(value: int, decimals: int = 6) -> str:
    """Human-readable percentage for log and repr output."""
    return f"{value * 100 / UNIT:.{decimals}f}%"
