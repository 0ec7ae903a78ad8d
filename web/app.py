"""
FastAPI application for the equity engine.

Production deployment configuration via environment variables.
"""

import logging
import os
import uuid
from datetime import date
from typing import Optional, Union

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator

from utils.config import Config
from valuation import (
    BenchmarkCache,
    EquityBridge,
    EquityEstimator,
    EstimationError,
    IndexStore,
    InMemoryIndexStore,
    KNOWN_REGIONS,
    PROPERTY_CATEGORIES,
    calculate_refinance_scenario,
    validate_estimate_request,
)
from valuation.mortgage import VALID_AMORTIZATION_YEARS
from valuation.validation import MAX_INTEREST_RATE


logger = logging.getLogger(__name__)

APP_VERSION = "0.1.0"


# =============================================================================
# Environment Configuration
# =============================================================================

# Production mode detection
IS_PRODUCTION = os.getenv("RAILWAY_ENVIRONMENT") is not None or os.getenv("PRODUCTION", "").lower() == "true"

# Development fallback only; production origins must be configured explicitly
DEV_ORIGINS = ["http://localhost:3000", "http://localhost:8000", "http://127.0.0.1:8000"]


# =============================================================================
# Request Models
# =============================================================================

# Numeric fields accept strings so validate_estimate_request can report
# field-level reasons instead of a schema error.
Number = Union[float, str]


class EstimateRequest(BaseModel):
    """Request body for an equity estimate."""
    region: Optional[str] = None
    property_type: Optional[str] = None
    purchase_year: Optional[Number] = None
    purchase_month: Optional[Number] = None
    purchase_price: Optional[Number] = None
    down_payment_amount: Optional[Number] = None
    down_payment_percent: Optional[Number] = None
    interest_rate: Optional[Number] = None
    amortization_years: Optional[Number] = None


class RefinanceRequest(BaseModel):
    """Request body for a cash-out refinance scenario."""
    current_remaining_balance: float = Field(ge=0)
    additional_loan_amount: float = Field(ge=0)
    interest_rate: float = Field(ge=0, le=MAX_INTEREST_RATE)
    term_years: int

    @field_validator("term_years")
    @classmethod
    def check_term(cls, value: int) -> int:
        if value not in VALID_AMORTIZATION_YEARS:
            allowed = ", ".join(str(y) for y in VALID_AMORTIZATION_YEARS)
            raise ValueError(f"term must be one of {allowed} years")
        return value


def validation_failed(details: dict) -> JSONResponse:
    return JSONResponse({"error": "Validation failed", "details": details}, status_code=400)


# =============================================================================
# Application
# =============================================================================


def create_app(
    config: Config = None,
    index_store: IndexStore = None,
    reference_date: date = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    This is the composition root: it owns the index store, the benchmark
    cache and the engine instances shared by every request.

    Args:
        config: Application configuration (default: from environment)
        index_store: Index data source (default: loaded from config)
        reference_date: Fixed "today" for estimates (default: real date)
    """
    config = config or Config.load()

    app = FastAPI(
        title="GTA Equity Engine",
        description="Home value and equity estimates for GTA purchases",
        version=APP_VERSION,
        # Production settings: disable docs/redoc for private deployment
        docs_url=None if IS_PRODUCTION else "/docs",
        redoc_url=None if IS_PRODUCTION else "/redoc",
        openapi_url=None if IS_PRODUCTION else "/openapi.json",
        debug=config.debug and not IS_PRODUCTION,
    )

    # ==========================================================================
    # Healthcheck endpoints are registered first. They perform no IO.
    # ==========================================================================
    @app.get("/", include_in_schema=False)
    def root():
        """Root healthcheck. No dependencies, no IO."""
        return {"status": "ok"}

    @app.get("/health", include_in_schema=False)
    def health():
        """Secondary health endpoint. No dependencies, no IO."""
        return {"status": "healthy"}

    # CORS middleware - locked down for production
    allowed_origins = config.allowed_origins or ([] if IS_PRODUCTION else DEV_ORIGINS)
    if allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=allowed_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        details = {}
        for error in exc.errors():
            location = error.get("loc") or ("body",)
            details[str(location[-1])] = error.get("msg", "Invalid value")
        return validation_failed(details)

    # Initialize components
    store = index_store if index_store is not None else InMemoryIndexStore.from_file(config.hpi_data_path)
    benchmark_cache = BenchmarkCache()
    bridge = EquityBridge(store, benchmark_cache=benchmark_cache)
    estimator = EquityEstimator(
        bridge,
        reference_date=reference_date,
        default_amortization_years=config.default_amortization_years,
    )

    app.state.index_store = store
    app.state.benchmark_cache = benchmark_cache
    app.state.estimator = estimator

    @app.on_event("startup")
    def on_startup():
        """Deferred startup tasks. Runs after healthcheck is ready."""
        logger.info(
            "GTA Equity Engine started (%s, %d index rows)",
            "production" if IS_PRODUCTION else "development",
            len(store) if isinstance(store, InMemoryIndexStore) else -1,
        )

    @app.get("/api/hpi-options")
    def hpi_options():
        """Selectable regions and property types."""
        return {
            "regions": list(KNOWN_REGIONS),
            "property_types": list(PROPERTY_CATEGORIES),
        }

    @app.post("/api/estimate")
    def estimate(request_data: EstimateRequest):
        """
        Estimate current value, mortgage position and net equity.

        Returns:
            - 200 with estimate_id and result
            - 400 with field-level details on invalid input
            - 404 with code DATA_UNAVAILABLE when no data can value the purchase
        """
        data = request_data.model_dump()
        validation = validate_estimate_request(data, reference_date=reference_date)
        if not validation.valid:
            logger.info("Rejected estimate request: %s", validation.errors)
            return validation_failed(validation.errors)

        try:
            result = estimator.estimate_request(data)
        except Exception:
            logger.exception("Estimate calculation failed")
            return JSONResponse(
                {"error": "Failed to calculate estimate. Please try again."},
                status_code=500,
            )

        if isinstance(result, EstimationError):
            return JSONResponse(
                {"error": result.message, "code": result.code},
                status_code=404,
            )

        return {
            "estimate_id": str(uuid.uuid4()),
            "result": result.to_dict(),
        }

    @app.post("/api/refinance")
    def refinance(request_data: RefinanceRequest):
        """Cash-out refinance scenario on top of the current balance."""
        scenario = calculate_refinance_scenario(
            request_data.current_remaining_balance,
            request_data.additional_loan_amount,
            request_data.interest_rate,
            request_data.term_years,
        )
        return scenario.to_dict()

    @app.get("/api/health")
    def api_health():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": APP_VERSION,
            "environment": "production" if IS_PRODUCTION else "development",
            "index_rows": len(store) if isinstance(store, InMemoryIndexStore) else None,
        }

    return app


# Create app instance for uvicorn
app = create_app()
