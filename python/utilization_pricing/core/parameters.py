"""
Curve parameter sets and presets

Parameters are immutable and validated on construction: an invalid set
raises InvalidConfigurationError before any engine or state exists.

All values are fixed-point integers at UNIT scale. Use `from_fractions`
to build a set from human-readable fractions:

    AdaptiveCurveParameters.from_fractions(
        low_bound="0.25", high_bound="0.75",
        zero_level="0.005", full_level="1",
        initial_plateau_level="0.1", daily_rate="0.1",
    )
"""

import hashlib
import json
from dataclasses import dataclass, asdict, fields
from typing import Any, Dict, Mapping, Optional, Union

from .fixed_point import UNIT, to_fixed, is_fixed_integer
from .validation import (
    InvalidConfigurationError,
    check_fixed_parameter,
    raise_for_errors,
)


def _coerce(value):
    """Fixed integers pass through, everything else is read as a fraction."""
    if is_fixed_integer(value):
        return int(value)
    try:
        return to_fixed(value)
    except (TypeError, ValueError) as e:
        raise InvalidConfigurationError(str(e))


class _CurveParameters:
    """Shared helpers for the parameter dataclasses."""

    kind: str = ""

    def as_dict(self) -> Dict[str, Any]:
        """Parameters as a plain dict, including the curve kind."""
        data = asdict(self)
        data['kind'] = self.kind
        return data

    def fingerprint(self, salt: Union[str, int] = 0) -> str:
        """
        Deterministic identity of this parameter set.

        A pure function of the constructor arguments and the salt, so an
        external deployment factory can derive the same id for the same set.
        """
        payload = [self.kind] + [getattr(self, f.name) for f in fields(self)] + [str(salt)]
        encoded = json.dumps(payload, separators=(',', ':')).encode()
        return hashlib.sha256(encoded).hexdigest()

    @classmethod
    def from_fractions(cls, **kwargs):
        """Build parameters from decimal fractions (str, float, Decimal) or fixed ints."""
        return cls(**{name: _coerce(value) if value is not None else None
                      for name, value in kwargs.items()})


@dataclass(frozen=True)
class StaticCurveParameters(_CurveParameters):
    """Three-anchor jump curve: (0, zero_level), (kink, kink_level), (1, full_level)."""

    zero_level: int
    kink_utilization: int
    kink_level: int
    full_level: int

    kind = "static"

    def __post_init__(self):
        """Validate parameter ranges and ordering."""
        errors = []

        check_fixed_parameter(errors, self.zero_level, "zero_level")
        check_fixed_parameter(errors, self.kink_utilization, "kink_utilization")
        check_fixed_parameter(errors, self.kink_level, "kink_level")
        check_fixed_parameter(errors, self.full_level, "full_level")

        if not errors:
            if self.zero_level > self.kink_level:
                errors.append(f"zero_level {self.zero_level} exceeds kink_level {self.kink_level}")
            if self.kink_level > self.full_level:
                errors.append(f"kink_level {self.kink_level} exceeds full_level {self.full_level}")

        raise_for_errors(errors, "Static curve parameter")


@dataclass(frozen=True)
class AdaptiveCurveParameters(_CurveParameters):
    """
    Adaptive plateau curve.

    Levels run linearly from zero_level at 0 to the plateau at low_bound,
    hold the plateau across [low_bound, high_bound], then run linearly to
    full_level at 1. The plateau drifts at daily_rate toward zero_level while
    utilization is below optimal_utilization and toward full_level otherwise.
    """

    low_bound: int
    high_bound: int
    zero_level: int
    full_level: int
    initial_plateau_level: int
    daily_rate: int
    optimal_utilization: Optional[int] = None

    kind = "adaptive"

    def __post_init__(self):
        """Validate parameter ranges and ordering; default the optimum to the zone midpoint."""
        errors = []

        check_fixed_parameter(errors, self.low_bound, "low_bound")
        check_fixed_parameter(errors, self.high_bound, "high_bound")
        check_fixed_parameter(errors, self.zero_level, "zero_level")
        check_fixed_parameter(errors, self.full_level, "full_level")
        check_fixed_parameter(errors, self.initial_plateau_level, "initial_plateau_level")
        check_fixed_parameter(errors, self.daily_rate, "daily_rate")
        if self.optimal_utilization is not None:
            check_fixed_parameter(errors, self.optimal_utilization, "optimal_utilization")

        if not errors:
            if self.low_bound > self.high_bound:
                errors.append(f"low_bound {self.low_bound} exceeds high_bound {self.high_bound}")
            if self.zero_level > self.full_level:
                errors.append(f"zero_level {self.zero_level} exceeds full_level {self.full_level}")
            if not (self.zero_level <= self.initial_plateau_level <= self.full_level):
                errors.append(
                    f"initial_plateau_level {self.initial_plateau_level} outside "
                    f"[{self.zero_level}, {self.full_level}]"
                )
            if self.optimal_utilization is not None and not (
                self.low_bound <= self.optimal_utilization <= self.high_bound
            ):
                errors.append(
                    f"optimal_utilization {self.optimal_utilization} outside "
                    f"[{self.low_bound}, {self.high_bound}]"
                )

        raise_for_errors(errors, "Adaptive curve parameter")

        if self.optimal_utilization is None:
            object.__setattr__(self, 'optimal_utilization', (self.low_bound + self.high_bound) // 2)


CurveParameters = Union[StaticCurveParameters, AdaptiveCurveParameters]

# Configured integers below this are unscaled fractions, not fixed point
UNSCALED_INTEGER_LIMIT = 10**6

_PARAMETER_TYPES = {
    StaticCurveParameters.kind: StaticCurveParameters,
    AdaptiveCurveParameters.kind: AdaptiveCurveParameters,
}


def load_parameters(config: Mapping[str, Any]) -> CurveParameters:
    """
    Build parameters from a plain mapping (e.g. parsed JSON).

    Fractions are strings or floats ("1", 0.25). Integers are read as
    fixed-point values, so a small integer such as 1 is rejected rather
    than taken as 1e-18; write "1" for 100%.

    Args:
        config: {"kind": "static" | "adaptive", <field>: <fraction or fixed int>, ...}

    Returns:
        Validated parameter object

    Raises:
        InvalidConfigurationError: On unknown kind, unknown or missing fields, or bad values
    """
    config = dict(config)
    kind = config.pop('kind', None)
    if kind not in _PARAMETER_TYPES:
        raise InvalidConfigurationError(
            f"Unknown curve kind {kind!r}, expected one of {sorted(_PARAMETER_TYPES)}"
        )

    parameter_type = _PARAMETER_TYPES[kind]
    known = {f.name for f in fields(parameter_type)}
    unknown = sorted(set(config) - known)
    if unknown:
        raise InvalidConfigurationError(f"Unknown {kind} curve fields: {unknown}")

    unscaled = sorted(
        name for name, value in config.items()
        if is_fixed_integer(value) and 0 < value < UNSCALED_INTEGER_LIMIT
    )
    if unscaled:
        raise InvalidConfigurationError(
            f"Integer values for {unscaled} look like unscaled fractions; "
            f"use strings for fractions or fixed-point integers scaled by {UNIT}"
        )

    try:
        return parameter_type.from_fractions(**config)
    except TypeError as e:
        raise InvalidConfigurationError(f"Incomplete {kind} curve configuration: {e}")


# === PRESETS ===

def default_static_parameters() -> StaticCurveParameters:
    """Jump curve: 0% at empty, 4% at the 80% kink, 100% when full."""
    return StaticCurveParameters.from_fractions(
        zero_level="0",
        kink_utilization="0.8",
        kink_level="0.04",
        full_level="1",
    )


def default_adaptive_parameters() -> AdaptiveCurveParameters:
    """Adaptive curve with a 25%-75% optimal zone and 10%/day plateau drift."""
    return AdaptiveCurveParameters.from_fractions(
        low_bound="0.25",
        high_bound="0.75",
        zero_level="0.005",
        full_level="1",
        initial_plateau_level="0.1",
        daily_rate="0.1",
    )


def frozen_adaptive_parameters() -> AdaptiveCurveParameters:
    """Adaptive layout with drift disabled; behaves like a fixed plateau curve."""
    return AdaptiveCurveParameters.from_fractions(
        low_bound="0.25",
        high_bound="0.75",
        zero_level="0.005",
        full_level="1",
        initial_plateau_level="0.1",
        daily_rate="0",
    )


PRESETS = {
    "static-default": default_static_parameters,
    "adaptive-default": default_adaptive_parameters,
    "adaptive-frozen": frozen_adaptive_parameters,
}


def get_preset(name: str) -> CurveParameters:
    """Look up a named parameter preset."""
    if name not in PRESETS:
        raise InvalidConfigurationError(f"Unknown preset {name!r}, expected one of {sorted(PRESETS)}")
    return PRESETS[name]()
