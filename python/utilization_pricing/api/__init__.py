"""
Utilization Pricing API Package

REST endpoints exposing the curve engines to remote pricing callers.

Modules:
- server: FastAPI application factory and server entry point
- pricing_api: Curve query, registration and update endpoints
- models: Pydantic data models for request/response validation

Usage:
    python -m utilization_pricing.api.server --port 8001
"""

from .models import ErrorResponse, FactorResponse, IntervalRequest
from .pricing_api import router as pricing_router

__all__ = [
    "ErrorResponse",
    "FactorResponse",
    "IntervalRequest",
    "pricing_router",
]
