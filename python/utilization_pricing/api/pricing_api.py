"""
Pricing Curve API Endpoints

REST endpoints exposing the curve engines to a remote pricing caller.
Price queries are read-only; registration and update mutate engine state.
Engine errors propagate to the exception handlers installed by the server.
"""

import logging

from fastapi import APIRouter, HTTPException, Query, Request

from ..core.authorization import CallerToken
from ..core.base import PriceQuote, UtilizationCurve
from ..core.fixed_point import to_fraction
from .models import (
    CurveListResponse,
    CurveSampleResponse,
    CurveStateResponse,
    CurveSummary,
    FactorResponse,
    IntervalRequest,
    RegisterRequest,
    RegisterResponse,
    UpdateRequest,
    UpdateResponse,
)

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix="/api/curves", tags=["pricing_curves"])


def _get_curve(request: Request, name: str) -> UtilizationCurve:
    """Look up a served curve by name."""
    curves = request.app.state.curves
    if name not in curves:
        raise HTTPException(status_code=404, detail=f"Unknown curve '{name}'")
    return curves[name]


def _factor_response(name: str, quote: PriceQuote) -> FactorResponse:
    return FactorResponse(
        curve=name,
        factor=quote.factor,
        factor_fraction=to_fraction(quote.factor),
        plateau_level=quote.plateau_level,
    )


@router.get("", response_model=CurveListResponse)
async def list_curves(request: Request) -> CurveListResponse:
    """List served curves."""
    curves = request.app.state.curves
    return CurveListResponse(curves=[
        CurveSummary(name=name, kind=curve.parameters.kind)
        for name, curve in sorted(curves.items())
    ])


@router.get("/{name}", response_model=CurveStateResponse)
async def get_curve_state(name: str, request: Request) -> CurveStateResponse:
    """Get parameters and current state of a curve."""
    curve = _get_curve(request, name)
    return CurveStateResponse(name=name, **curve.describe())


@router.get("/{name}/point", response_model=FactorResponse)
async def point_price(name: str, request: Request,
                      utilization: int = Query(..., ge=0)) -> FactorResponse:
    """Price fraction at an exact utilization."""
    curve = _get_curve(request, name)
    return _factor_response(name, curve.quote_point(utilization))


@router.post("/{name}/cost", response_model=FactorResponse)
async def cost_factor(name: str, interval: IntervalRequest, request: Request) -> FactorResponse:
    """
    Fee fraction for increasing utilization across an interval.

    Rounded up in favour of the pool.
    """
    curve = _get_curve(request, name)
    return _factor_response(name, curve.quote_cost(interval.from_utilization, interval.to_utilization))


@router.post("/{name}/refund", response_model=FactorResponse)
async def refund_factor(name: str, interval: IntervalRequest, request: Request) -> FactorResponse:
    """
    Share of collected fees refunded when utilization decreases.

    Rounded down in favour of the pool.
    """
    curve = _get_curve(request, name)
    return _factor_response(name, curve.quote_refund(interval.from_utilization, interval.to_utilization))


@router.post("/{name}/register", response_model=RegisterResponse)
def register_caller(name: str, registration: RegisterRequest, request: Request) -> RegisterResponse:
    """
    Bind the single caller allowed to update this curve.

    The token is returned only by the first registration.
    """
    curve = _get_curve(request, name)
    token = curve.register_caller(registration.caller_id)
    return RegisterResponse(curve=name, caller_id=token.caller_id, token=token.secret)


@router.post("/{name}/update", response_model=UpdateResponse)
def update_curve(name: str, update: UpdateRequest, request: Request) -> UpdateResponse:
    """Commit a utilization change made by the registered caller."""
    curve = _get_curve(request, name)
    token = CallerToken(caller_id=update.caller_id, secret=update.token)
    state = curve.update(token, update.from_utilization, update.to_utilization)

    if state is None:
        return UpdateResponse(curve=name)

    logger.info(f"Curve '{name}' plateau committed at {to_fraction(state.plateau_level):.6f}")
    return UpdateResponse(
        curve=name,
        plateau_level=state.plateau_level,
        plateau_fraction=to_fraction(state.plateau_level),
        last_update_timestamp=state.last_update_timestamp,
    )


@router.get("/{name}/sample", response_model=CurveSampleResponse)
async def sample_curve(name: str, request: Request,
                       points: int = Query(101, ge=2, le=10_001)) -> CurveSampleResponse:
    """Sample the committed curve over [0, 100%]."""
    curve = _get_curve(request, name)
    samples = curve.rate_curve(n_points=points)
    return CurveSampleResponse(
        curve=name,
        utilization_fraction=samples['utilization_fraction'].tolist(),
        price_fraction=samples['price_fraction'].tolist(),
    )
