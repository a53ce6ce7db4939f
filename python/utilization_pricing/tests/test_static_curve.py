"""
Unit tests for StaticJumpCurve

Tests cost and refund factors of the three-anchor jump curve, including
rounding direction, domain limits and interval additivity.
"""

import pytest
import numpy as np

from ..core.authorization import CallerToken
from ..core.fixed_point import UNIT, to_fixed
from ..core.parameters import StaticCurveParameters
from ..core.static_curve import StaticJumpCurve
from ..core.validation import InvalidConfigurationError, InvalidUtilizationError


def _jump_curve() -> StaticJumpCurve:
    """0% at empty, 4% at the 80% kink, 100% when full."""
    return StaticJumpCurve(StaticCurveParameters.from_fractions(
        zero_level="0", kink_utilization="0.8", kink_level="0.04", full_level="1",
    ))


class TestStaticCurveConstruction:
    """Test suite for parameter validation."""

    def test_valid_parameters(self):
        curve = _jump_curve()
        assert curve.parameters.kink_utilization == to_fixed("0.8")
        assert curve.parameters.kind == "static"

    def test_levels_out_of_order(self):
        with pytest.raises(InvalidConfigurationError):
            StaticCurveParameters.from_fractions(
                zero_level="0.1", kink_utilization="0.5", kink_level="0.05", full_level="1")
        with pytest.raises(InvalidConfigurationError):
            StaticCurveParameters.from_fractions(
                zero_level="0", kink_utilization="0.5", kink_level="0.6", full_level="0.5")

    def test_values_above_unit(self):
        with pytest.raises(InvalidConfigurationError):
            StaticCurveParameters.from_fractions(
                zero_level="0", kink_utilization="1.01", kink_level="0.05", full_level="1")
        with pytest.raises(InvalidConfigurationError):
            StaticCurveParameters.from_fractions(
                zero_level="0", kink_utilization="0.8", kink_level="0.05", full_level="1.5")

    def test_negative_values(self):
        with pytest.raises(InvalidConfigurationError):
            StaticCurveParameters(zero_level=-1, kink_utilization=0, kink_level=0, full_level=0)

    def test_wrong_parameter_type(self):
        with pytest.raises(TypeError):
            StaticJumpCurve({"zero_level": 0})

    def test_kink_at_edges(self):
        """Kinks at 0% or 100% collapse one segment into a jump."""
        at_zero = StaticJumpCurve(StaticCurveParameters.from_fractions(
            zero_level="0", kink_utilization="0", kink_level="0.1", full_level="0.5"))
        assert at_zero.point_price(0) == to_fixed("0.1")
        assert at_zero.cost_factor(0, UNIT) == to_fixed("0.3")

        at_full = StaticJumpCurve(StaticCurveParameters.from_fractions(
            zero_level="0", kink_utilization="1", kink_level="0.2", full_level="1"))
        assert at_full.point_price(UNIT) == to_fixed("0.2")
        assert at_full.cost_factor(0, UNIT) == to_fixed("0.1")


class TestStaticCostFactor:
    """Test suite for cost_factor."""

    def test_golden_values(self):
        curve = _jump_curve()
        assert curve.cost_factor(0, to_fixed("0.8")) == to_fixed("0.02")
        assert curve.cost_factor(to_fixed("0.8"), UNIT) == to_fixed("0.52")
        assert curve.cost_factor(0, UNIT) == to_fixed("0.12")

    def test_instantaneous_rate(self):
        """A zero-width interval prices at the point value."""
        curve = _jump_curve()
        assert curve.cost_factor(to_fixed("0.4"), to_fixed("0.4")) == to_fixed("0.02")
        assert curve.average_price(UNIT, UNIT) == UNIT

    def test_rounds_up(self):
        """A 1-wei interval near zero costs 0.025 wei, rounded up to 1."""
        curve = _jump_curve()
        assert curve.cost_factor(0, 1) == 1
        assert curve.point_price(1) == 1
        assert curve.point_price(0) == 0

    def test_invalid_intervals(self):
        curve = _jump_curve()
        with pytest.raises(InvalidUtilizationError):
            curve.cost_factor(UNIT // 2, UNIT // 4)
        with pytest.raises(InvalidUtilizationError):
            curve.cost_factor(0, UNIT + 1)
        with pytest.raises(InvalidUtilizationError):
            curve.cost_factor(-1, UNIT)
        with pytest.raises(InvalidUtilizationError):
            curve.cost_factor(0.1, 0.5)
        with pytest.raises(InvalidUtilizationError):
            curve.point_price(UNIT + 1)

    def test_bounded_by_levels(self):
        """Every cost factor lies between the lowest and highest level."""
        curve = _jump_curve()
        p = curve.parameters
        rng = np.random.default_rng(11)
        for _ in range(200):
            a, b = sorted(int(x) for x in rng.integers(0, UNIT, size=2, endpoint=True))
            factor = curve.cost_factor(a, b)
            assert p.zero_level <= factor <= p.full_level + 1

    def test_interval_additivity(self):
        """Pricing [a, b] matches the length-weighted prices of [a, m] and [m, b]."""
        curve = _jump_curve()
        rng = np.random.default_rng(3)
        for _ in range(100):
            a, m, b = sorted(int(x) for x in rng.integers(0, UNIT, size=3, endpoint=True))
            if b == a:
                continue
            whole = curve.cost_factor(a, b) * (b - a)
            parts = curve.cost_factor(a, m) * (m - a) + curve.cost_factor(m, b) * (b - m)
            assert abs(whole - parts) <= 2 * (b - a)


class TestStaticRefundFactor:
    """Test suite for refund_factor."""

    def test_full_refund(self):
        curve = _jump_curve()
        assert curve.refund_factor(UNIT, 0) == UNIT

    def test_zero_width_refunds_nothing(self):
        curve = _jump_curve()
        for x in np.linspace(0, UNIT, 21):
            assert curve.refund_factor(int(x), int(x)) == 0

    def test_golden_value(self):
        """Vacating [0.8, 1] returns 0.104 / 0.12 of the area."""
        curve = _jump_curve()
        assert curve.refund_factor(UNIT, to_fixed("0.8")) == (104 * UNIT) // 120

    def test_rounds_down(self):
        """Everything but the first wei of area, rounded down."""
        curve = _jump_curve()
        assert curve.refund_factor(UNIT, 1) == UNIT - 1

    def test_invalid_intervals(self):
        curve = _jump_curve()
        with pytest.raises(InvalidUtilizationError):
            curve.refund_factor(UNIT // 4, UNIT // 2)
        with pytest.raises(InvalidUtilizationError):
            curve.refund_factor(UNIT + 1, UNIT)

    def test_refund_bounded(self):
        curve = _jump_curve()
        rng = np.random.default_rng(5)
        for _ in range(100):
            low, high = sorted(int(x) for x in rng.integers(0, UNIT, size=2, endpoint=True))
            assert 0 <= curve.refund_factor(high, low) <= UNIT


class TestStaticState:
    """The static curve has nothing to update."""

    def test_quotes_have_no_plateau(self):
        quote = _jump_curve().quote_cost(to_fixed("0.8"), UNIT)
        assert quote.factor == to_fixed("0.52")
        assert quote.plateau_level is None

    def test_update_is_noop(self):
        curve = _jump_curve()
        before = curve.cost_factor(0, UNIT)
        assert curve.update(CallerToken("anyone", "x"), 0, UNIT) is None
        assert curve.cost_factor(0, UNIT) == before

    def test_registration(self):
        curve = _jump_curve()
        token = curve.register_caller("pool")
        assert token.is_capability
        assert curve.register_caller("pool").caller_id == "pool"
        assert curve.registered_caller == "pool"

    def test_describe(self):
        description = _jump_curve().describe()
        assert description['kind'] == "static"
        assert description['parameters']['kink_level'] == to_fixed("0.04")

    def test_rate_curve(self):
        df = _jump_curve().rate_curve(n_points=6)
        assert len(df) == 6
        assert df['price'].iloc[-1] == UNIT
