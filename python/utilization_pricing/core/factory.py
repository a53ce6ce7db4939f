"""Construct curve engines from parameter sets and presets."""

from typing import Optional

from .adaptive_curve import AdaptiveLevelCurve
from .base import UtilizationCurve
from .clock import Clock
from .static_curve import StaticJumpCurve
from .parameters import (
    AdaptiveCurveParameters,
    CurveParameters,
    StaticCurveParameters,
    get_preset,
)


def build_curve(parameters: CurveParameters, clock: Optional[Clock] = None) -> UtilizationCurve:
    """
    Build the engine matching a parameter set.

    Args:
        parameters: Static or adaptive curve parameters
        clock: Time source for adaptive curves (ignored by static curves)
    """
    if isinstance(parameters, AdaptiveCurveParameters):
        return AdaptiveLevelCurve(parameters, clock=clock)
    if isinstance(parameters, StaticCurveParameters):
        return StaticJumpCurve(parameters)
    raise TypeError(f"Unsupported parameter type: {type(parameters).__name__}")


def create_default_static_curve() -> StaticJumpCurve:
    """Create the default jump curve."""
    return build_curve(get_preset("static-default"))


def create_default_adaptive_curve(clock: Optional[Clock] = None) -> AdaptiveLevelCurve:
    """Create the default adaptive curve."""
    return build_curve(get_preset("adaptive-default"), clock=clock)

