"""
Utilization Pricing API Server

FastAPI server exposing named curve engines over REST.

Configuration (environment):
- PRICING_CURVE_PRESETS: comma-separated preset names to serve (default: all)
- PRICING_API_HOST / PRICING_API_PORT: bind address (default 127.0.0.1:8001)
- ENVIRONMENT: "production" hides internal error details

Usage:
    # Development
    python -m utilization_pricing.api.server

    # Production with uvicorn
    uvicorn utilization_pricing.api.server:app --host 0.0.0.0 --port 8001
"""

import logging
import os
import sys
import time
import traceback
from typing import Any, Dict, Mapping, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .. import __version__
from ..core.base import UtilizationCurve
from ..core.factory import build_curve
from ..core.parameters import PRESETS, get_preset
from ..core.validation import (
    ClockRegressionError,
    InvalidConfigurationError,
    InvalidUtilizationError,
    PricingCurveError,
    SetAlreadyRegisteredError,
    UnauthorizedError,
    setup_logging,
)
from .models import ErrorResponse, HealthCheckResponse
from .pricing_api import router as pricing_router

logger = logging.getLogger(__name__)

# Engine errors → HTTP status
ERROR_STATUS_CODES = {
    InvalidUtilizationError: 400,
    UnauthorizedError: 403,
    SetAlreadyRegisteredError: 409,
    ClockRegressionError: 409,
    InvalidConfigurationError: 422,
}


def _status_for(exc: PricingCurveError) -> int:
    for error_type, status_code in ERROR_STATUS_CODES.items():
        if isinstance(exc, error_type):
            return status_code
    return 400


def curves_from_environment() -> Dict[str, UtilizationCurve]:
    """Build the served curves from PRICING_CURVE_PRESETS."""
    names = os.getenv("PRICING_CURVE_PRESETS", "")
    selected = [n.strip() for n in names.split(",") if n.strip()] or sorted(PRESETS)
    return {name: build_curve(get_preset(name)) for name in selected}


def create_app(curves: Optional[Mapping[str, UtilizationCurve]] = None) -> FastAPI:
    """
    Create the API application.

    Args:
        curves: Named engines to serve (default: presets from the environment)
    """
    app = FastAPI(
        title="Utilization Pricing API",
        description="REST API for utilization-based cost and refund factors",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    app.state.curves = dict(curves) if curves is not None else curves_from_environment()
    app.state.start_time = time.time()

    @app.exception_handler(PricingCurveError)
    async def pricing_error_handler(request: Request, exc: PricingCurveError) -> JSONResponse:
        """Map engine errors to client error responses."""
        status_code = _status_for(exc)
        logger.warning(f"{request.method} {request.url.path} rejected ({status_code}): {exc}")
        error_response = ErrorResponse(error=type(exc).__name__, message=str(exc))
        return JSONResponse(status_code=status_code, content=error_response.model_dump())

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        """Report unexpected failures as 500s, hiding details in production."""
        trace = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        logger.error(f"{request.method} {request.url.path} failed with {type(exc).__name__}: {exc}\n{trace}")

        if os.getenv("ENVIRONMENT") == "production":
            body = ErrorResponse(error="InternalServerError", message="Internal server error")
        else:
            body = ErrorResponse(error=type(exc).__name__, message=str(exc), details={"traceback": trace})
        return JSONResponse(status_code=500, content=body.model_dump())

    @app.middleware("http")
    async def time_requests(request: Request, call_next):
        """Attach handling time to each response."""
        started = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - started

        logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed * 1000:.1f} ms)")
        response.headers["X-Process-Time"] = f"{elapsed:.6f}"
        return response

    app.include_router(pricing_router)

    @app.get("/", response_model=Dict[str, Any])
    async def root() -> Dict[str, Any]:
        """Root endpoint with API information."""
        return {
            "service": "Utilization Pricing API",
            "version": __version__,
            "status": "operational",
            "uptime_seconds": time.time() - app.state.start_time,
            "endpoints": {
                "curves": "/api/curves",
                "health": "/health",
                "docs": "/docs",
            },
        }

    @app.get("/health", response_model=HealthCheckResponse)
    async def health_check() -> HealthCheckResponse:
        """Health check endpoint."""
        return HealthCheckResponse(
            status="healthy",
            uptime_seconds=time.time() - app.state.start_time,
            curves_loaded=len(app.state.curves),
        )

    return app


def run_server(host: Optional[str] = None, port: Optional[int] = None, reload: bool = False):
    """Run the API server with uvicorn."""
    host = host or os.getenv("PRICING_API_HOST", "127.0.0.1")
    port = port or int(os.getenv("PRICING_API_PORT", "8001"))
    logger.info(f"Starting pricing API on {host}:{port}")

    uvicorn.run(
        "utilization_pricing.api.server:app",
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )


def main():
    """Command-line entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Utilization Pricing API Server")
    parser.add_argument("--host", default=None, help="Host to bind to")
    parser.add_argument("--port", type=int, default=None, help="Port to bind to")
    parser.add_argument("--reload", action="store_true", help="Auto-reload on code changes")
    args = parser.parse_args()

    setup_logging()
    logger.info(f"Python version: {sys.version}")
    run_server(args.host, args.port, args.reload)


app = create_app()


if __name__ == "__main__":
    main()
