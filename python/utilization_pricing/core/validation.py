"""
Error types and input validation for the curve engines

Every failure raised by the engines is a subclass of PricingCurveError and is
raised before any state is touched, so a rejected call never leaves a
partial mutation behind.
"""

import logging
from typing import Optional

from .fixed_point import UNIT, is_fixed_integer, format_fixed

logger = logging.getLogger(__name__)


class PricingCurveError(Exception):
    """Base class for all curve engine errors."""
    pass


class InvalidConfigurationError(PricingCurveError, ValueError):
    """Raised when curve parameters are out of range or mis-ordered"""
    pass


class InvalidUtilizationError(PricingCurveError, ValueError):
    """Raised when a query interval is malformed or outside the domain"""
    pass


class UnauthorizedError(PricingCurveError, PermissionError):
    """Raised when a state update is attempted without the registered token"""
    pass


class SetAlreadyRegisteredError(PricingCurveError):
    """Raised when a second, different caller tries to register"""
    pass


class ClockRegressionError(PricingCurveError, RuntimeError):
    """Raised when the clock reads earlier than the last committed update"""
    pass


# === VALIDATION FUNCTIONS ===

def validate_utilization(value, name: str, ceiling: Optional[int] = UNIT) -> int:
    """
    Validate a fixed-point utilization value.

    Args:
        value: Utilization at UNIT scale
        name: Name for error messages
        ceiling: Inclusive upper bound, or None for an unbounded domain

    Returns:
        Validated value as a plain int

    Raises:
        InvalidUtilizationError: If value is not an integer, negative or above ceiling
    """
    if not is_fixed_integer(value):
        raise InvalidUtilizationError(f"{name} must be a fixed-point integer, got {type(value).__name__}")

    value = int(value)
    if value < 0:
        raise InvalidUtilizationError(f"{name} cannot be negative, got {value}")
    if ceiling is not None and value > ceiling:
        raise InvalidUtilizationError(
            f"{name} {format_fixed(value)} exceeds ceiling {format_fixed(ceiling)}"
        )
    return value


def validate_increasing_interval(from_utilization, to_utilization,
                                 ceiling: Optional[int] = UNIT) -> tuple:
    """Validate an interval priced on the cost path (from <= to)."""
    from_utilization = validate_utilization(from_utilization, "from_utilization", ceiling)
    to_utilization = validate_utilization(to_utilization, "to_utilization", ceiling)
    if to_utilization < from_utilization:
        raise InvalidUtilizationError(
            f"to_utilization {to_utilization} is below from_utilization {from_utilization}"
        )
    return from_utilization, to_utilization


def validate_decreasing_interval(from_utilization, to_utilization,
                                 ceiling: Optional[int] = UNIT) -> tuple:
    """Validate an interval priced on the refund path (to <= from)."""
    from_utilization = validate_utilization(from_utilization, "from_utilization", ceiling)
    to_utilization = validate_utilization(to_utilization, "to_utilization", ceiling)
    if to_utilization > from_utilization:
        raise InvalidUtilizationError(
            f"to_utilization {to_utilization} is above from_utilization {from_utilization}"
        )
    return from_utilization, to_utilization


def check_fixed_parameter(errors: list, value, name: str, low: int = 0, high: int = UNIT) -> None:
    """
    Append an error message if a fixed-point parameter is outside [low, high].

    Used by the parameter dataclasses to collect every violation before raising.
    """
    if not is_fixed_integer(value):
        errors.append(f"{name} must be a fixed-point integer, got {type(value).__name__}")
    elif not (low <= value <= high):
        errors.append(f"{name} must be in [{low}, {high}], got {value}")


def raise_for_errors(errors: list, context: str) -> None:
    """Raise InvalidConfigurationError listing every collected violation."""
    if errors:
        message = f"{context} validation failed:\n" + "\n".join(errors)
        logger.debug(message)
        raise InvalidConfigurationError(message)


# === LOGGING SETUP ===

def setup_logging(level=logging.INFO):
    """Setup logging for the pricing engines and service"""
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
