"""
API Data Models for the Utilization Pricing Service

Pydantic models for request/response validation and serialization.
Utilizations and price levels travel as fixed-point integers (1.0 == 10**18);
responses also carry float fractions for display.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class CurveKind(str, Enum):
    """Curve engine variants."""
    static = "static"
    adaptive = "adaptive"


class IntervalRequest(BaseModel):
    """Request model for cost and refund queries."""
    from_utilization: int = Field(..., ge=0, description="Current utilization (fixed point)")
    to_utilization: int = Field(..., ge=0, description="Utilization after the change (fixed point)")


class RegisterRequest(BaseModel):
    """Request model for caller registration."""
    caller_id: str = Field(..., min_length=1, max_length=128, description="Pricing caller identity")


class UpdateRequest(BaseModel):
    """Request model for adaptive state updates."""
    caller_id: str = Field(..., min_length=1, max_length=128)
    token: str = Field(..., min_length=1, description="Secret returned by registration")
    from_utilization: int = Field(..., ge=0)
    to_utilization: int = Field(..., ge=0)


# Response Models

class FactorResponse(BaseModel):
    """Response model for price, cost and refund queries."""
    curve: str
    factor: int = Field(..., description="Fixed-point fraction")
    factor_fraction: float = Field(..., description="Fraction as float for display")
    plateau_level: Optional[int] = Field(None, description="Plateau used for pricing (adaptive only)")


class RegisterResponse(BaseModel):
    """Response model for caller registration."""
    curve: str
    caller_id: str
    token: Optional[str] = Field(None, description="Secret, issued only on the first registration")


class UpdateResponse(BaseModel):
    """Response model for state updates."""
    curve: str
    plateau_level: Optional[int] = None
    plateau_fraction: Optional[float] = None
    last_update_timestamp: Optional[int] = None


class CurveSummary(BaseModel):
    """Name and kind of a served curve."""
    name: str
    kind: CurveKind


class CurveListResponse(BaseModel):
    """Response model for listing curves."""
    curves: List[CurveSummary]


class CurveStateResponse(BaseModel):
    """Response model for curve parameters and state."""
    name: str
    kind: CurveKind
    parameters: Dict[str, Any]
    registered_caller: Optional[str] = None
    plateau_level: Optional[int] = None
    last_update_timestamp: Optional[int] = None
    projected_plateau_level: Optional[int] = None


class CurveSampleResponse(BaseModel):
    """Response model for a sampled curve."""
    curve: str
    utilization_fraction: List[float]
    price_fraction: List[float]


class HealthCheckResponse(BaseModel):
    """Response model for health checks."""
    status: str
    uptime_seconds: float
    curves_loaded: int


class ErrorResponse(BaseModel):
    """Response model for API errors."""
    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error description")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error context")
