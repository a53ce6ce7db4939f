"""
Piecewise-Linear Pricing Curve

Implements exact point evaluation and closed-form integration of a
piecewise-linear price curve over the utilization domain.

Area of a sub-interval of length L starting at a segment's left anchor
(level y, segment rise Δy over run Δx):

    A = L * y * UNIT  +  L² * Δy * UNIT / (2 * Δx)

i.e. a rectangle at the anchor level plus the triangle under the slope.
Areas are kept at UNIT³ scale and divided back to UNIT once, so the
average over an interval is exact up to the final rounding step:

    average(a, b) = (A(b) - A(a)) / ((b - a) * UNIT)
    refund(lo, hi) = (A(hi) - A(lo)) * UNIT / A(hi)

Beyond the last anchor (over-utilization) the last segment's slope is
extrapolated from the last anchor point.
"""

from typing import List, Sequence, Tuple

import numpy as np
import pandas as pd

from .fixed_point import UNIT, Rounding, div_round, mul_div, to_fraction
from .validation import InvalidConfigurationError, InvalidUtilizationError


def linear_segment_area(length: int, start_level: int, rise: int, run: int) -> int:
    """
    Area under a linear segment over [left anchor, left anchor + length].

    Args:
        length: Sub-interval length measured from the segment's left anchor
        start_level: Curve level at the left anchor
        rise: Level change across the whole segment
        run: Utilization width of the whole segment (> 0)

    Returns:
        Area at UNIT³ scale, rounded down
    """
    rectangle = length * start_level * UNIT
    triangle = (length * length * rise * UNIT) // (2 * run)
    return rectangle + triangle


class PiecewiseLinearCurve:
    """
    Immutable piecewise-linear curve defined by anchor points.

    Anchors are (utilization, level) pairs at UNIT scale. The first anchor
    sits at 0, the last at UNIT. Zero-width segments are allowed and model
    a jump: they contribute no area.
    """

    def __init__(self, anchors: Sequence[Tuple[int, int]]):
        """
        Initialize the curve.

        Args:
            anchors: Ordered (utilization, level) points

        Raises:
            InvalidConfigurationError: If anchors are out of order or out of range
        """
        anchors = [(int(x), int(y)) for x, y in anchors]
        if len(anchors) < 2:
            raise InvalidConfigurationError(f"A curve needs at least 2 anchors, got {len(anchors)}")
        if anchors[0][0] != 0 or anchors[-1][0] != UNIT:
            raise InvalidConfigurationError(
                f"Anchors must span [0, {UNIT}], got [{anchors[0][0]}, {anchors[-1][0]}]"
            )
        for (x_left, y_left), (x_right, y_right) in zip(anchors, anchors[1:]):
            if x_right < x_left:
                raise InvalidConfigurationError(f"Anchor utilizations out of order: {x_left} > {x_right}")
            if y_right < y_left:
                raise InvalidConfigurationError(f"Anchor levels out of order: {y_left} > {y_right}")
        if anchors[0][1] < 0:
            raise InvalidConfigurationError(f"Levels cannot be negative, got {anchors[0][1]}")

        self.anchors: Tuple[Tuple[int, int], ...] = tuple(anchors)
        self._segments: List[Tuple[int, int, int, int]] = [
            (x_left, y_left, x_right, y_right)
            for (x_left, y_left), (x_right, y_right) in zip(anchors, anchors[1:])
            if x_right > x_left
        ]

        # Extrapolation slope beyond UNIT
        last_x_left, last_y_left = anchors[-2]
        last_x_right, last_y_right = anchors[-1]
        if last_x_right > last_x_left:
            self._tail_rise, self._tail_run = last_y_right - last_y_left, last_x_right - last_x_left
        else:
            self._tail_rise, self._tail_run = 0, 1

    @property
    def end_level(self) -> int:
        """Level at the last anchor (100% utilization)."""
        return self.anchors[-1][1]

    def value_at(self, utilization: int, rounding: Rounding = Rounding.UP) -> int:
        """
        Curve level at an exact utilization.

        Args:
            utilization: Point to evaluate (>= 0)
            rounding: Rounding for the interpolated part

        Returns:
            Level at UNIT scale
        """
        if utilization < 0:
            raise InvalidUtilizationError(f"Utilization cannot be negative, got {utilization}")

        if utilization > UNIT:
            return self.end_level + mul_div(utilization - UNIT, self._tail_rise, self._tail_run, rounding)

        for x_left, y_left, x_right, y_right in self._segments:
            if utilization <= x_right:
                return y_left + mul_div(utilization - x_left, y_right - y_left, x_right - x_left, rounding)

        # Unreachable: the last segment always ends at UNIT
        return self.end_level

    def area_to(self, utilization: int) -> int:
        """
        Area under the curve from 0 to `utilization`, at UNIT³ scale.

        Sums closed sub-intervals aligned to segment boundaries.
        """
        if utilization < 0:
            raise InvalidUtilizationError(f"Utilization cannot be negative, got {utilization}")

        area = 0
        for x_left, y_left, x_right, y_right in self._segments:
            if utilization <= x_left:
                break
            length = min(utilization, x_right) - x_left
            area += linear_segment_area(length, y_left, y_right - y_left, x_right - x_left)

        if utilization > UNIT:
            area += linear_segment_area(utilization - UNIT, self.end_level, self._tail_rise, self._tail_run)

        return area

    def area_between(self, lower: int, upper: int) -> int:
        """Area under the curve over [lower, upper] at UNIT³ scale."""
        if upper < lower:
            raise InvalidUtilizationError(f"Interval upper bound {upper} is below lower bound {lower}")
        return self.area_to(upper) - self.area_to(lower)

    def average_value(self, lower: int, upper: int, rounding: Rounding = Rounding.UP) -> int:
        """
        Average level over [lower, upper].

        A zero-width interval returns the instantaneous level.
        """
        if lower == upper:
            return self.value_at(lower, rounding)
        area = self.area_between(lower, upper)
        return div_round(area, (upper - lower) * UNIT, rounding)

    def refund_share(self, lower: int, upper: int) -> int:
        """
        Share of the total area under [0, upper] that lies within [lower, upper].

        Rounded down. Zero for a zero-width interval or a zero total area.
        """
        if lower == upper:
            return 0
        total = self.area_to(upper)
        if total == 0:
            return 0
        return mul_div(self.area_between(lower, upper), UNIT, total, Rounding.DOWN)

    def sample(self, n_points: int = 200, ceiling: int = UNIT) -> pd.DataFrame:
        """
        Sample the curve for plotting and analysis.

        Returns:
            DataFrame with columns: utilization, price, utilization_fraction, price_fraction
        """
        if n_points < 2:
            raise ValueError(f"n_points must be at least 2, got {n_points}")

        grid = np.linspace(0, ceiling, n_points)
        utilizations = [int(round(u)) for u in grid]
        prices = [self.value_at(u) for u in utilizations]

        return pd.DataFrame({
            'utilization': utilizations,
            'price': prices,
            'utilization_fraction': [to_fraction(u) for u in utilizations],
            'price_fraction': [to_fraction(p) for p in prices],
        })

    def __eq__(self, other) -> bool:
        if not isinstance(other, PiecewiseLinearCurve):
            return NotImplemented
        return self.anchors == other.anchors

    def __hash__(self) -> int:
        return hash(self.anchors)

    def __repr__(self) -> str:
        points = ", ".join(f"({to_fraction(x):g}, {to_fraction(y):g})" for x, y in self.anchors)
        return f"PiecewiseLinearCurve([{points}])"
