"""Health check endpoints — System and backend health monitoring."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from typeahead import __version__
from typeahead.api.deps import get_registry
from typeahead.backends.base.adapter import BackendHealth
from typeahead.core.registry import EndpointRegistry

router = APIRouter()


# ── Response models ──────────────────────────────────────────────────────


class HealthResponse(BaseModel):
    """System health check response."""

    status: str = Field(description="Health status (e.g. 'healthy')")
    version: str = Field(description="Typeahead server version")
    service: str = Field(description="Service name ('typeahead')")
    endpoints: list[str] = Field(description="Registered autocomplete endpoint names")
    backends: list[str] = Field(description="Configured backend names")


class BackendHealthResponse(BaseModel):
    """Per-backend health check response."""

    backends: dict[str, BackendHealth] = Field(description="Map of backend name to its health status")


# ── Endpoints ────────────────────────────────────────────────────────────


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="System Health Check",
    description="Returns overall system health, server version, registered endpoints and configured backends.",
)
async def health_check(
    registry: EndpointRegistry = Depends(get_registry),
) -> HealthResponse:
    """Basic health check endpoint."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        service="typeahead",
        endpoints=registry.endpoints,
        backends=list(registry.backends),
    )


@router.get(
    "/health/backends",
    response_model=BackendHealthResponse,
    summary="Backend Health Check",
    description="Run health checks on every configured backend and return per-backend status.",
)
async def backend_health(
    registry: EndpointRegistry = Depends(get_registry),
) -> BackendHealthResponse:
    """Check health of all backends."""
    return BackendHealthResponse(backends=await registry.health_check_all())
