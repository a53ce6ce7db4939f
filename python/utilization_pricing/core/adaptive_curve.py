"""
Adaptive Level Curve

Piecewise-linear curve with a flat optimal zone whose price level (the
plateau) drifts over time to find the market-clearing price:

    (0, zero_level) → (low_bound, plateau) → (high_bound, plateau) → (100%, full_level)

Plateau dynamics:

    target  = zero_level   if utilization <  optimal_utilization
              full_level   otherwise
    r       = daily_rate / SECONDS_PER_DAY
    P(t+Δt) = target + (P(t) - target) * (1 - r)^Δt

The remaining distance to the target is rounded down, so the plateau
converges monotonically and never crosses the target edge level.

Reads project the plateau on demand from the committed state; only
`update` (by the registered caller) commits a new plateau and timestamp.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .authorization import CallerToken
from .base import UtilizationCurve
from .clock import Clock, system_clock
from .curve import PiecewiseLinearCurve
from .fixed_point import UNIT, SECONDS_PER_DAY, Rounding, mul_div, rpow, format_fixed
from .parameters import AdaptiveCurveParameters
from .validation import ClockRegressionError, validate_utilization

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdaptiveState:
    """Committed plateau level and the time it was committed."""
    plateau_level: int
    last_update_timestamp: int


class AdaptiveLevelCurve(UtilizationCurve):
    """
    Pricing curve with a time-adjusted plateau across [low_bound, high_bound].

    Over-utilization above 100% is accepted on the refund path by
    extrapolating the last segment; the cost path stays capped at 100%.
    """

    domain_ceiling = None
    cost_ceiling = UNIT

    def __init__(self, parameters: AdaptiveCurveParameters, clock: Optional[Clock] = None):
        """
        Initialize the curve.

        Args:
            parameters: Validated adaptive curve parameters
            clock: Time source in seconds (default: wall clock)
        """
        if not isinstance(parameters, AdaptiveCurveParameters):
            raise TypeError(f"Expected AdaptiveCurveParameters, got {type(parameters).__name__}")

        super().__init__()
        self.parameters = parameters
        self.clock = clock if clock is not None else system_clock
        self.per_second_rate = parameters.daily_rate // SECONDS_PER_DAY

        self._state = AdaptiveState(
            plateau_level=parameters.initial_plateau_level,
            last_update_timestamp=int(self.clock()),
        )
        self._write_lock = threading.Lock()

    @property
    def state(self) -> AdaptiveState:
        """Last committed state."""
        return self._state

    # === PLATEAU DYNAMICS ===

    def _elapsed(self, state: AdaptiveState, now: int) -> int:
        elapsed = now - state.last_update_timestamp
        if elapsed < 0:
            raise ClockRegressionError(
                f"Clock went backwards: now={now}, last update={state.last_update_timestamp}"
            )
        return elapsed

    def drift_target(self, utilization: int) -> int:
        """Edge level the plateau moves toward while the pool sits at `utilization`."""
        p = self.parameters
        return p.zero_level if utilization < p.optimal_utilization else p.full_level

    def _project(self, state: AdaptiveState, utilization: int, elapsed: int) -> int:
        if elapsed == 0 or self.per_second_rate == 0:
            return state.plateau_level
        p = self.parameters
        if p.zero_level == p.full_level:
            return state.plateau_level

        target = self.drift_target(utilization)
        plateau = state.plateau_level
        retention = rpow(UNIT - self.per_second_rate, elapsed)

        if plateau >= target:
            return target + mul_div(plateau - target, retention, UNIT, Rounding.DOWN)
        return target - mul_div(target - plateau, retention, UNIT, Rounding.DOWN)

    def projected_plateau(self, utilization: int) -> int:
        """
        Plateau level as of now for a pool sitting at `utilization`.

        Pure read: the committed state is not modified.

        Raises:
            ClockRegressionError: If the clock reads before the last update
        """
        utilization = validate_utilization(utilization, "utilization", None)
        state = self._state
        return self._project(state, utilization, self._elapsed(state, int(self.clock())))

    # === CURVE SNAPSHOT ===

    def curve_for_plateau(self, plateau_level: int) -> PiecewiseLinearCurve:
        p = self.parameters
        return PiecewiseLinearCurve([
            (0, p.zero_level),
            (p.low_bound, plateau_level),
            (p.high_bound, plateau_level),
            (UNIT, p.full_level),
        ])

    def snapshot(self, utilization: Optional[int] = None) -> Tuple[PiecewiseLinearCurve, int]:
        """
        Curve in effect now for a pool sitting at `utilization`, with its plateau.

        The plateau is projected once, so the returned curve and level agree.
        With no utilization, the committed plateau is used without projection.
        """
        if utilization is None:
            plateau = self._state.plateau_level
        else:
            plateau = self.projected_plateau(utilization)
        return self.curve_for_plateau(plateau), plateau

    # === STATE UPDATE ===

    def update(self, token: CallerToken, from_utilization: int, to_utilization: int) -> AdaptiveState:
        """
        Commit the plateau projected for the period the pool sat at `from_utilization`.

        Args:
            token: Capability returned by register_caller
            from_utilization: Utilization held since the last update
            to_utilization: Utilization after this change

        Returns:
            The newly committed state

        Raises:
            UnauthorizedError: If token is not the registered capability
            InvalidUtilizationError: If either utilization is invalid
            ClockRegressionError: If the clock reads before the last update
        """
        self._registry.authorize(token)
        from_utilization = validate_utilization(from_utilization, "from_utilization", None)
        validate_utilization(to_utilization, "to_utilization", None)

        with self._write_lock:
            previous = self._state
            now = int(self.clock())
            elapsed = self._elapsed(previous, now)
            plateau = self._project(previous, from_utilization, elapsed)
            committed = AdaptiveState(plateau_level=plateau, last_update_timestamp=now)
            self._state = committed

        logger.debug(
            f"Plateau {format_fixed(previous.plateau_level)} -> {format_fixed(plateau)} "
            f"after {elapsed}s at utilization {format_fixed(from_utilization)}"
        )
        return committed

    def describe(self) -> Dict[str, Any]:
        state = self._state
        return {
            'kind': self.parameters.kind,
            'parameters': self.parameters.as_dict(),
            'registered_caller': self.registered_caller,
            'plateau_level': state.plateau_level,
            'last_update_timestamp': state.last_update_timestamp,
            'projected_plateau_level': self.projected_plateau(self.parameters.optimal_utilization),
        }

    def __str__(self) -> str:
        p = self.parameters
        return (f"AdaptiveLevelCurve(zone=[{format_fixed(p.low_bound)}, {format_fixed(p.high_bound)}], "
                f"plateau={format_fixed(self._state.plateau_level)}, "
                f"edges=({format_fixed(p.zero_level)}, {format_fixed(p.full_level)}), "
                f"daily_rate={format_fixed(p.daily_rate)})")
