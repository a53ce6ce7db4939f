"""
Static Jump Curve

Three immutable anchors:

    (0, zero_level) → (kink_utilization, kink_level) → (100%, full_level)

The curve has no state: every query is a pure function of the parameters
and the requested interval. Utilization is capped at 100% on every path.
"""

from typing import Any, Dict, Optional, Tuple

from .base import UtilizationCurve
from .curve import PiecewiseLinearCurve
from .fixed_point import UNIT, format_fixed
from .parameters import StaticCurveParameters


class StaticJumpCurve(UtilizationCurve):
    """
    Stateless kinked pricing curve.

    Cheap below the kink, steep between the kink and full utilization.
    """

    domain_ceiling = UNIT
    cost_ceiling = UNIT

    def __init__(self, parameters: StaticCurveParameters):
        """
        Initialize the curve.

        Args:
            parameters: Validated static curve parameters
        """
        if not isinstance(parameters, StaticCurveParameters):
            raise TypeError(f"Expected StaticCurveParameters, got {type(parameters).__name__}")

        super().__init__()
        self.parameters = parameters
        self._curve = PiecewiseLinearCurve([
            (0, parameters.zero_level),
            (parameters.kink_utilization, parameters.kink_level),
            (UNIT, parameters.full_level),
        ])

    def snapshot(self, utilization: Optional[int] = None) -> Tuple[PiecewiseLinearCurve, None]:
        return self._curve, None

    def update(self, token, from_utilization: int, to_utilization: int) -> None:
        """No state to advance."""
        return None

    def describe(self) -> Dict[str, Any]:
        return {
            'kind': self.parameters.kind,
            'parameters': self.parameters.as_dict(),
            'registered_caller': self.registered_caller,
        }

    def __str__(self) -> str:
        p = self.parameters
        return (f"StaticJumpCurve(zero={format_fixed(p.zero_level)}, "
                f"kink={format_fixed(p.kink_utilization)}@{format_fixed(p.kink_level)}, "
                f"full={format_fixed(p.full_level)})")
