"""
Common interface for utilization pricing curves.

Both engines answer the same questions for a pricing caller:

- point_price(x): price at exact utilization x
- average_price(from, to): average price over [from, to]
- cost_factor(from, to): fee fraction charged when utilization increases
- refund_factor(from, to): share of collected fees returned when it decreases
- update(token, from, to): advance internal state (adaptive engine only)
- register_caller(caller_id): bind the single state writer

The quote_* variants return the factor together with the plateau level
it was priced at, both taken from one snapshot of the curve.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import pandas as pd

from .authorization import CallerRegistry, CallerToken
from .curve import PiecewiseLinearCurve
from .fixed_point import UNIT, Rounding
from .validation import (
    validate_utilization,
    validate_increasing_interval,
    validate_decreasing_interval,
)


@dataclass(frozen=True)
class PriceQuote:
    """A priced factor and the plateau used to price it (None for static curves)."""
    factor: int
    plateau_level: Optional[int] = None


class UtilizationCurve(ABC):
    """
    Base class for pricing curve engines.

    Subclasses provide the curve snapshot for a given current utilization
    and the domain ceiling; pricing and validation live here.

    Attributes:
        domain_ceiling: Highest utilization accepted by price queries (None = unbounded)
        cost_ceiling: Highest target utilization accepted on the cost path
    """

    domain_ceiling: Optional[int] = UNIT
    cost_ceiling: int = UNIT

    def __init__(self):
        self._registry = CallerRegistry()

    # === CURVE SNAPSHOT ===

    @abstractmethod
    def snapshot(self, utilization: Optional[int] = None) -> Tuple[PiecewiseLinearCurve, Optional[int]]:
        """
        Curve in effect right now for a pool sitting at `utilization`, and its plateau.

        Static curves ignore the utilization and have no plateau.
        """

    def curve(self, utilization: Optional[int] = None) -> PiecewiseLinearCurve:
        return self.snapshot(utilization)[0]

    # === PRICE QUERIES ===

    def quote_point(self, utilization: int) -> PriceQuote:
        """
        Price fraction at an exact utilization, rounded up.

        Raises:
            InvalidUtilizationError: If utilization is negative or above the domain ceiling
        """
        utilization = validate_utilization(utilization, "utilization", self.domain_ceiling)
        curve, plateau = self.snapshot(utilization)
        return PriceQuote(curve.value_at(utilization, Rounding.UP), plateau)

    def quote_average(self, from_utilization: int, to_utilization: int) -> PriceQuote:
        """
        Average price fraction over [from, to], rounded up.

        Equals the point price at `from` when from == to.

        Raises:
            InvalidUtilizationError: If to < from or an endpoint is outside the domain
        """
        from_utilization, to_utilization = validate_increasing_interval(
            from_utilization, to_utilization, self.domain_ceiling
        )
        curve, plateau = self.snapshot(from_utilization)
        return PriceQuote(curve.average_value(from_utilization, to_utilization, Rounding.UP), plateau)

    def quote_cost(self, from_utilization: int, to_utilization: int) -> PriceQuote:
        """
        Fee fraction charged to move utilization from `from` up to `to`.

        Raises:
            InvalidUtilizationError: If to < from or to exceeds the cost ceiling
        """
        validate_utilization(to_utilization, "to_utilization", self.cost_ceiling)
        return self.quote_average(from_utilization, to_utilization)

    def quote_refund(self, from_utilization: int, to_utilization: int) -> PriceQuote:
        """
        Share of accumulated fees refunded when utilization drops from `from` to `to`.

        Implements: area(to, from) / area(0, from), rounded down.

        Raises:
            InvalidUtilizationError: If to > from or from exceeds the domain ceiling
        """
        from_utilization, to_utilization = validate_decreasing_interval(
            from_utilization, to_utilization, self.domain_ceiling
        )
        curve, plateau = self.snapshot(from_utilization)
        return PriceQuote(curve.refund_share(to_utilization, from_utilization), plateau)

    def point_price(self, utilization: int) -> int:
        return self.quote_point(utilization).factor

    def average_price(self, from_utilization: int, to_utilization: int) -> int:
        return self.quote_average(from_utilization, to_utilization).factor

    def cost_factor(self, from_utilization: int, to_utilization: int) -> int:
        return self.quote_cost(from_utilization, to_utilization).factor

    def refund_factor(self, from_utilization: int, to_utilization: int) -> int:
        return self.quote_refund(from_utilization, to_utilization).factor

    # === STATE ===

    def register_caller(self, caller_id: str) -> CallerToken:
        """
        Bind the single caller allowed to call update.

        Only the first registration returns the secret; a repeat registration
        by the bound caller succeeds with a token that cannot authorize updates.

        Raises:
            SetAlreadyRegisteredError: If a different caller is already bound
        """
        return self._registry.register(caller_id)

    @property
    def registered_caller(self) -> Optional[str]:
        return self._registry.registered_caller

    @abstractmethod
    def update(self, token: CallerToken, from_utilization: int, to_utilization: int):
        """Record a utilization change made by the registered caller."""

    # === ANALYSIS ===

    def rate_curve(self, n_points: int = 200, utilization: Optional[int] = None) -> pd.DataFrame:
        """Sample the curve in effect for `utilization` over [0, 100%]."""
        return self.curve(utilization).sample(n_points)

    @abstractmethod
    def describe(self) -> Dict[str, Any]:
        """Parameters and current state as a plain dict."""

    def __repr__(self) -> str:
        return self.__str__()
