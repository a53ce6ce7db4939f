"""
Pricing Replay Simulation

Replays a sequence of utilization changes through a curve engine, acting as
the registered pricing caller:

1. Price the transition (cost factor when utilization rises, refund factor
   when it falls)
2. Commit the change with update()

Provides a unified interface for studying how the adaptive plateau responds
to a utilization path.
"""

import logging
from typing import Any, Dict, Optional, Sequence

import numpy as np
import pandas as pd

from .base import UtilizationCurve
from .clock import ManualClock
from .fixed_point import to_fraction

logger = logging.getLogger(__name__)


class PricingSimulation:
    """
    Replay harness driving one curve engine through utilization events.

    The engine must have been built with the same ManualClock so that the
    simulation controls elapsed time.
    """

    def __init__(self, curve: UtilizationCurve, clock: ManualClock, caller_id: str = "simulation"):
        """
        Initialize the simulation and register as the curve's caller.

        Args:
            curve: Engine to drive
            clock: Clock shared with the engine
            caller_id: Identity to register with
        """
        self.curve = curve
        self.clock = clock
        self.token = curve.register_caller(caller_id)

    def _plateau(self) -> Optional[int]:
        state = getattr(self.curve, 'state', None)
        return state.plateau_level if state is not None else None

    def simulate_step(self, timestamp: int, from_utilization: int, to_utilization: int) -> Dict[str, Any]:
        """
        Price and commit one utilization change.

        Args:
            timestamp: Event time in seconds (must not precede the previous event)
            from_utilization: Utilization held since the previous event
            to_utilization: Utilization after the event

        Returns:
            Dictionary with the priced factor and plateau before/after
        """
        self.clock.set(timestamp)
        plateau_before = self._plateau()

        if to_utilization >= from_utilization:
            direction = 'increase'
            factor = self.curve.cost_factor(from_utilization, to_utilization)
        else:
            direction = 'decrease'
            factor = self.curve.refund_factor(from_utilization, to_utilization)

        self.curve.update(self.token, from_utilization, to_utilization)
        plateau_after = self._plateau()

        return {
            'timestamp': int(timestamp),
            'from_utilization': int(from_utilization),
            'to_utilization': int(to_utilization),
            'direction': direction,
            'factor': factor,
            'factor_fraction': to_fraction(factor),
            'plateau_before': plateau_before,
            'plateau_after': plateau_after,
        }

    def simulate_series(self, timestamps: Sequence[int], utilizations: Sequence[int],
                        initial_utilization: int = 0) -> pd.DataFrame:
        """
        Replay a utilization path.

        Args:
            timestamps: Event times in seconds, non-decreasing
            utilizations: Utilization after each event
            initial_utilization: Utilization before the first event

        Returns:
            DataFrame with one row per event
        """
        if len(timestamps) != len(utilizations):
            raise ValueError("timestamps and utilizations must have same length")
        if len(timestamps) == 0:
            raise ValueError("Utilization path cannot be empty")
        if np.any(np.diff(np.asarray(timestamps, dtype=np.int64)) < 0):
            raise ValueError("timestamps must be non-decreasing")

        results = []
        current = int(initial_utilization)
        for i, (timestamp, utilization) in enumerate(zip(timestamps, utilizations)):
            step_result = self.simulate_step(int(timestamp), current, int(utilization))
            step_result['step'] = i
            results.append(step_result)
            current = int(utilization)

        logger.debug(f"Replayed {len(results)} utilization events through {self.curve}")
        return pd.DataFrame(results)

    def calculate_metrics(self, simulation_df: pd.DataFrame) -> Dict[str, float]:
        """
        Calculate summary metrics from simulation results.

        Args:
            simulation_df: DataFrame from simulate_series()

        Returns:
            Dictionary of calculated metrics (fractions, not fixed point)
        """
        if len(simulation_df) == 0:
            raise ValueError("Simulation DataFrame is empty")

        metrics = {}

        increases = simulation_df[simulation_df['direction'] == 'increase']
        decreases = simulation_df[simulation_df['direction'] == 'decrease']
        metrics['n_increases'] = int(len(increases))
        metrics['n_decreases'] = int(len(decreases))
        metrics['avg_cost_factor'] = float(increases['factor_fraction'].mean()) if len(increases) else 0.0
        metrics['max_cost_factor'] = float(increases['factor_fraction'].max()) if len(increases) else 0.0
        metrics['avg_refund_factor'] = float(decreases['factor_fraction'].mean()) if len(decreases) else 0.0

        plateaus = simulation_df['plateau_after'].dropna()
        if len(plateaus):
            plateau_fractions = plateaus.astype(object).map(to_fraction)
            metrics['min_plateau'] = float(plateau_fractions.min())
            metrics['max_plateau'] = float(plateau_fractions.max())
            metrics['final_plateau'] = float(plateau_fractions.iloc[-1])

        return metrics

    def __str__(self) -> str:
        return f"PricingSimulation(curve={self.curve}, caller={self.token.caller_id!r})"

    def __repr__(self) -> str:
        return self.__str__()
