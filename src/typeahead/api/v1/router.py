"""API v1 Router — Autocomplete and health endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from typeahead.api.v1.endpoints.autocomplete import router as autocomplete_router
from typeahead.api.v1.endpoints.health import router as health_router

router = APIRouter(tags=["v1"])
router.include_router(autocomplete_router)
router.include_router(health_router)
