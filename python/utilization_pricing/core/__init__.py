"""
Core pricing curve components.
"""

from .fixed_point import UNIT, SECONDS_PER_DAY, Rounding, to_fixed, to_fraction, percent
from .validation import (
    PricingCurveError,
    InvalidConfigurationError,
    InvalidUtilizationError,
    UnauthorizedError,
    SetAlreadyRegisteredError,
    ClockRegressionError,
)
from .curve import PiecewiseLinearCurve, linear_segment_area
from .parameters import (
    StaticCurveParameters,
    AdaptiveCurveParameters,
    load_parameters,
    get_preset,
    PRESETS,
)
from .authorization import CallerToken, CallerRegistry
from .clock import ManualClock, system_clock
from .base import PriceQuote, UtilizationCurve
from .static_curve import StaticJumpCurve
from .adaptive_curve import AdaptiveLevelCurve, AdaptiveState
from .factory import build_curve, create_default_static_curve, create_default_adaptive_curve
from .simulation_engine import PricingSimulation

__all__ = [
    "UNIT",
    "SECONDS_PER_DAY",
    "Rounding",
    "to_fixed",
    "to_fraction",
    "percent",
    "PricingCurveError",
    "InvalidConfigurationError",
    "InvalidUtilizationError",
    "UnauthorizedError",
    "SetAlreadyRegisteredError",
    "ClockRegressionError",
    "PiecewiseLinearCurve",
    "linear_segment_area",
    "StaticCurveParameters",
    "AdaptiveCurveParameters",
    "load_parameters",
    "get_preset",
    "PRESETS",
    "CallerToken",
    "CallerRegistry",
    "ManualClock",
    "system_clock",
    "PriceQuote",
    "UtilizationCurve",
    "StaticJumpCurve",
    "AdaptiveLevelCurve",
    "AdaptiveState",
    "build_curve",
    "create_default_static_curve",
    "create_default_adaptive_curve",
    "PricingSimulation",
]
