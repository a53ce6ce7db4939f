"""
Unit tests for PiecewiseLinearCurve

Tests exact evaluation and integration against closed-form values and
numerical quadrature.
"""

import pytest
import numpy as np
from numpy.testing import assert_allclose
from scipy.integrate import quad

from ..core.curve import PiecewiseLinearCurve, linear_segment_area
from ..core.fixed_point import UNIT, Rounding, to_fixed
from ..core.validation import InvalidConfigurationError, InvalidUtilizationError


def _fractions_curve(points):
    return PiecewiseLinearCurve([(to_fixed(x), to_fixed(y)) for x, y in points])


class TestLinearSegmentArea:
    """Test suite for the generic segment area routine."""

    def test_rectangle(self):
        """Flat segment: length * level at UNIT³ scale."""
        assert linear_segment_area(UNIT // 2, UNIT // 10, 0, UNIT) == (UNIT // 2) * (UNIT // 10) * UNIT

    def test_triangle(self):
        """Ramp from 0 to 1 over [0, 1] has area 1/2."""
        assert linear_segment_area(UNIT, 0, UNIT, UNIT) == UNIT**3 // 2

    def test_partial_segment(self):
        """Half of a 0→1 ramp covers a quarter of the unit square."""
        assert linear_segment_area(UNIT // 2, 0, UNIT, UNIT) == UNIT**3 // 8

    def test_zero_length(self):
        assert linear_segment_area(0, UNIT, UNIT, UNIT) == 0


class TestCurveConstruction:
    """Test suite for anchor validation."""

    def test_valid_curve(self):
        curve = PiecewiseLinearCurve([(0, 0), (UNIT // 2, UNIT // 10), (UNIT, UNIT)])
        assert curve.anchors[0] == (0, 0)
        assert curve.end_level == UNIT

    def test_too_few_anchors(self):
        with pytest.raises(InvalidConfigurationError):
            PiecewiseLinearCurve([(0, 0)])

    def test_anchors_must_span_domain(self):
        with pytest.raises(InvalidConfigurationError):
            PiecewiseLinearCurve([(1, 0), (UNIT, UNIT)])
        with pytest.raises(InvalidConfigurationError):
            PiecewiseLinearCurve([(0, 0), (UNIT - 1, UNIT)])

    def test_anchor_utilizations_ordered(self):
        with pytest.raises(InvalidConfigurationError):
            PiecewiseLinearCurve([(0, 0), (UNIT // 2, 1), (UNIT // 4, 2), (UNIT, 3)])

    def test_anchor_levels_non_decreasing(self):
        with pytest.raises(InvalidConfigurationError):
            PiecewiseLinearCurve([(0, UNIT), (UNIT, 0)])

    def test_equality(self):
        a = PiecewiseLinearCurve([(0, 0), (UNIT, UNIT)])
        b = PiecewiseLinearCurve([(0, 0), (UNIT, UNIT)])
        assert a == b
        assert hash(a) == hash(b)


class TestPointEvaluation:
    """Test suite for value_at."""

    def test_anchor_values(self):
        curve = _fractions_curve([(0, "0.01"), ("0.8", "0.05"), (1, 1)])
        assert curve.value_at(0) == to_fixed("0.01")
        assert curve.value_at(to_fixed("0.8")) == to_fixed("0.05")
        assert curve.value_at(UNIT) == UNIT

    def test_interpolation(self):
        curve = _fractions_curve([(0, 0), ("0.8", "0.04"), (1, 1)])
        assert curve.value_at(to_fixed("0.4")) == to_fixed("0.02")
        assert curve.value_at(to_fixed("0.9")) == to_fixed("0.52")

    def test_rounding_direction(self):
        """Interpolated values honour the requested rounding."""
        curve = _fractions_curve([(0, 0), ("0.8", "0.04"), (1, 1)])
        assert curve.value_at(1, Rounding.UP) == 1
        assert curve.value_at(1, Rounding.DOWN) == 0

    def test_jump_uses_left_segment_at_anchor(self):
        """A zero-width segment is a jump; the anchor keeps the left level."""
        curve = PiecewiseLinearCurve([
            (0, 0), (UNIT // 2, UNIT // 10), (UNIT // 2, UNIT // 2), (UNIT, UNIT)
        ])
        assert curve.value_at(UNIT // 2) == UNIT // 10
        assert curve.value_at(UNIT // 2 + 1) == UNIT // 2 + 1

    def test_extrapolation_beyond_full(self):
        curve = PiecewiseLinearCurve([(0, 0), (UNIT, UNIT)])
        assert curve.value_at(2 * UNIT) == 2 * UNIT

    def test_flat_extrapolation_after_jump(self):
        """A degenerate last segment extrapolates flat at the last level."""
        curve = PiecewiseLinearCurve([(0, 0), (UNIT, UNIT // 2), (UNIT, UNIT)])
        assert curve.value_at(UNIT) == UNIT // 2
        assert curve.value_at(2 * UNIT) == UNIT

    def test_negative_utilization(self):
        curve = PiecewiseLinearCurve([(0, 0), (UNIT, UNIT)])
        with pytest.raises(InvalidUtilizationError):
            curve.value_at(-1)
        with pytest.raises(InvalidUtilizationError):
            curve.area_to(-1)


class TestIntegration:
    """Test suite for exact area and average computation."""

    def test_area_across_jump(self):
        """Jumps contribute no area: 0.025 + 0.375 over [0, 1]."""
        curve = PiecewiseLinearCurve([
            (0, 0), (UNIT // 2, UNIT // 10), (UNIT // 2, UNIT // 2), (UNIT, UNIT)
        ])
        assert curve.area_to(UNIT) == 4 * UNIT**3 // 10
        assert curve.average_value(0, UNIT) == 4 * UNIT // 10

    def test_area_with_extrapolation(self):
        """Ramp extended to 2.0 has area 2 and average 1."""
        curve = PiecewiseLinearCurve([(0, 0), (UNIT, UNIT)])
        assert curve.area_to(2 * UNIT) == 2 * UNIT**3
        assert curve.average_value(0, 2 * UNIT) == UNIT

    def test_area_between_reversed(self):
        curve = PiecewiseLinearCurve([(0, 0), (UNIT, UNIT)])
        with pytest.raises(InvalidUtilizationError):
            curve.area_between(UNIT, 0)

    def test_zero_width_average_is_point_value(self):
        curve = _fractions_curve([(0, "0.005"), ("0.25", "0.1"), ("0.75", "0.1"), (1, 1)])
        x = to_fixed("0.125")
        assert curve.average_value(x, x) == curve.value_at(x) == to_fixed("0.0525")

    def test_average_matches_quadrature(self):
        """Exact integration agrees with numerical quadrature."""
        points = [(0, "0.01"), ("0.3", "0.07"), ("0.65", "0.2"), (1, "0.9")]
        curve = _fractions_curve(points)
        xs = [float(x) for x, _ in points]
        ys = [float(y) for _, y in points]

        def price(u):
            return np.interp(u, xs, ys)

        rng = np.random.default_rng(7)
        for _ in range(25):
            a, b = sorted(rng.uniform(0, 1, size=2))
            if b - a < 1e-3:
                continue
            lower, upper = to_fixed(float(a)), to_fixed(float(b))
            expected, _ = quad(price, lower / UNIT, upper / UNIT, points=xs[1:-1], limit=200)
            expected /= (upper - lower) / UNIT
            assert_allclose(curve.average_value(lower, upper) / UNIT, expected, rtol=1e-9)

    def test_area_is_monotone(self):
        curve = _fractions_curve([(0, "0.005"), ("0.25", "0.1"), ("0.75", "0.1"), (1, 1)])
        grid = [int(u) for u in np.linspace(0, 2 * UNIT, 57)]
        areas = [curve.area_to(u) for u in grid]
        assert all(later >= earlier for earlier, later in zip(areas, areas[1:]))


class TestRefundShare:
    """Test suite for refund_share."""

    def test_zero_width_interval(self):
        curve = PiecewiseLinearCurve([(0, 0), (UNIT, UNIT)])
        assert curve.refund_share(UNIT // 2, UNIT // 2) == 0

    def test_whole_area(self):
        curve = PiecewiseLinearCurve([(0, 0), (UNIT, UNIT)])
        assert curve.refund_share(0, UNIT) == UNIT

    def test_upper_half_of_ramp(self):
        """[0.5, 1] holds 3/4 of the area under a 0→1 ramp."""
        curve = PiecewiseLinearCurve([(0, 0), (UNIT, UNIT)])
        assert curve.refund_share(UNIT // 2, UNIT) == 3 * UNIT // 4

    def test_zero_total_area(self):
        curve = PiecewiseLinearCurve([(0, 0), (UNIT, 0)])
        assert curve.refund_share(0, UNIT) == 0


class TestSampling:
    """Test suite for curve sampling."""

    def test_sample_shape(self):
        curve = _fractions_curve([(0, 0), ("0.8", "0.04"), (1, 1)])
        df = curve.sample(n_points=11)

        assert len(df) == 11
        assert list(df.columns) == ['utilization', 'price', 'utilization_fraction', 'price_fraction']
        assert df['utilization'].iloc[0] == 0
        assert df['utilization'].iloc[-1] == UNIT
        assert df['price_fraction'].is_monotonic_increasing
        assert_allclose(df['price_fraction'].iloc[-1], 1.0)

    def test_sample_needs_two_points(self):
        curve = PiecewiseLinearCurve([(0, 0), (UNIT, UNIT)])
        with pytest.raises(ValueError):
            curve.sample(n_points=1)
