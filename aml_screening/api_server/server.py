"""
FastAPI server: address screening API.

POST /screen and GET /screen/{address} screen an address and return the
result with its allow/flag/block decision; /cache routes expose cache
introspection and invalidation for history and refresh views. The service
is built in the lifespan handler (or injected by create_app for tests) and
stored on app.state.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from aml_screening import __version__
from aml_screening.analytics.decision_policy import categorize_flags, decide
from aml_screening.analytics.report import generate_report
from aml_screening.analytics.screening_service import ScreeningService, create_screening_service
from aml_screening.core.exceptions import AMLScreeningError, InvalidAddress
from aml_screening.core.models import ScreeningResult
from aml_screening.screening_logging import get_logger

logger = get_logger(__name__)


# -----------------------------------------------------------------------------
# Request / response models
# -----------------------------------------------------------------------------


class ScreenRequest(BaseModel):
    """POST /screen body."""

    address: str = Field(..., min_length=1, max_length=128, description="EVM address (0x + 40 hex)")


class ScreeningResultModel(BaseModel):
    address: str
    risk_score: int = Field(..., ge=0, le=100)
    risk_level: str = Field(..., description="low | medium | high | extreme")
    flags: list[str] = Field(default_factory=list)
    timestamp: int = Field(..., description="Epoch milliseconds when the address was scored")
    wallet_type: str = Field(..., description="hot | cold")
    provider: str
    confidence: int = Field(..., ge=0, le=100)


class DecisionModel(BaseModel):
    action: str = Field(..., description="allow | flag | block")
    reason: str


class ScreenResponse(BaseModel):
    """Screening result plus decision and flag groups."""

    result: ScreeningResultModel
    decision: DecisionModel
    flag_categories: dict[str, list[str]]


class CacheResponse(BaseModel):
    size: int
    addresses: list[str]


class InvalidateResponse(BaseModel):
    address: str
    removed: bool


class ReportResponse(BaseModel):
    address: str
    report: str


# -----------------------------------------------------------------------------
# Dependency
# -----------------------------------------------------------------------------


def get_service(request: Request) -> ScreeningService:
    """Dependency: the app-scoped ScreeningService."""
    service = getattr(request.app.state, "service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Screening service not initialized")
    return service


def _screen_response(result: ScreeningResult) -> ScreenResponse:
    return ScreenResponse(
        result=ScreeningResultModel(**result.to_dict()),
        decision=DecisionModel(**decide(result).to_dict()),
        flag_categories=categorize_flags(result.flags),
    )


# -----------------------------------------------------------------------------
# App factory
# -----------------------------------------------------------------------------


def create_app(service: ScreeningService | None = None) -> FastAPI:
    """
    Build the API. With service=None the lifespan handler creates one from
    settings and closes it on shutdown; an injected service is left open.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = app.state.service is None
        if owned:
            app.state.service = create_screening_service()
        logger.info("api_started", cache_backend=app.state.service.cache.backend_name)
        yield
        if owned:
            app.state.service.close()
            app.state.service = None
        logger.info("api_stopped")

    app = FastAPI(
        title="AML Screening API",
        description="Address risk screening with cached results and allow/flag/block decisions.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.service = service

    @app.exception_handler(AMLScreeningError)
    def screening_error_handler(request: Request, exc: AMLScreeningError) -> JSONResponse:
        if isinstance(exc, InvalidAddress):
            status_code = 400
        elif exc.retryable:
            status_code = 503
        else:
            status_code = 502
        return JSONResponse(status_code=status_code, content=exc.to_dict())

    @app.exception_handler(HTTPException)
    def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.post("/screen", response_model=ScreenResponse)
    def screen_address(body: ScreenRequest, svc: ScreeningService = Depends(get_service)) -> ScreenResponse:
        """Screen an address (cached for 6 hours) and return result + decision."""
        return _screen_response(svc.screen(body.address.strip()))

    @app.get("/screen/{address}", response_model=ScreenResponse)
    def get_screening(address: str, svc: ScreeningService = Depends(get_service)) -> ScreenResponse:
        return _screen_response(svc.screen(address.strip()))

    @app.get("/screen/{address}/report", response_model=ReportResponse)
    def get_report(address: str, svc: ScreeningService = Depends(get_service)) -> ReportResponse:
        """Plain-text AML report for the address (screens it if not cached)."""
        result = svc.screen(address.strip())
        return ReportResponse(address=result.address, report=generate_report(result))

    @app.get("/cache", response_model=CacheResponse)
    def get_cache(svc: ScreeningService = Depends(get_service)) -> CacheResponse:
        """Cached addresses (may include expired entries not yet evicted)."""
        return CacheResponse(size=svc.cache_size(), addresses=svc.cached_addresses())

    @app.get("/cache/{address}", response_model=ScreenResponse)
    def get_cached(address: str, svc: ScreeningService = Depends(get_service)) -> ScreenResponse:
        """Live cached result without triggering a new screen; 404 when absent."""
        result = svc.get_cached(address.strip())
        if result is None:
            raise HTTPException(status_code=404, detail=f"No cached screening for {address[:10]}...")
        return _screen_response(result)

    @app.delete("/cache/{address}", response_model=InvalidateResponse)
    def invalidate(address: str, svc: ScreeningService = Depends(get_service)) -> InvalidateResponse:
        address = address.strip()
        return InvalidateResponse(address=address, removed=svc.invalidate(address))

    @app.delete("/cache")
    def clear_cache(svc: ScreeningService = Depends(get_service)) -> dict[str, bool]:
        svc.clear_all()
        return {"cleared": True}

    @app.post("/cache/cleanup")
    def cleanup_cache(svc: ScreeningService = Depends(get_service)) -> dict[str, int]:
        """Physically drop expired entries."""
        return {"removed": svc.cleanup_expired()}

    @app.get("/metrics")
    def get_metrics(svc: ScreeningService = Depends(get_service)) -> dict[str, Any]:
        return svc.metrics().to_dict()

    @app.get("/health")
    def health(svc: ScreeningService = Depends(get_service)) -> dict[str, str]:
        """Liveness probe."""
        return {"status": "ok", "cache_backend": svc.cache.backend_name}

    return app
