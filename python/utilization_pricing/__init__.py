"""
Utilization Pricing Curves

Prices usage of a utilization-bounded resource pool with piecewise-linear
curves:

- StaticJumpCurve: three fixed anchors (zero, kink, full)
- AdaptiveLevelCurve: flat optimal zone whose plateau drifts over time

Both engines answer cost factors (utilization increases, rounded up) and
refund factors (utilization decreases, rounded down) with exact fixed-point
integration of the curve.
"""

__version__ = "1.0.0"

from .core.fixed_point import UNIT, to_fixed, to_fraction
from .core.static_curve import StaticJumpCurve
from .core.adaptive_curve import AdaptiveLevelCurve
from .core.parameters import StaticCurveParameters, AdaptiveCurveParameters
from .core.factory import build_curve
from .core.simulation_engine import PricingSimulation

__all__ = [
    "UNIT",
    "to_fixed",
    "to_fraction",
    "StaticJumpCurve",
    "AdaptiveLevelCurve",
    "StaticCurveParameters",
    "AdaptiveCurveParameters",
    "build_curve",
    "PricingSimulation",
]
