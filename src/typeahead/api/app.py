"""FastAPI application factory and lifecycle management."""

from __future__ import annotations

import importlib
import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from typeahead import __version__
from typeahead.api.deps import set_registry
from typeahead.api.v1.router import router as v1_router
from typeahead.backends.base.adapter import FullTextBackend, PersistenceBackend
from typeahead.backends.base.catalog import SchemaCatalog
from typeahead.config.settings import Settings
from typeahead.core.registry import EndpointRegistry
from typeahead.exceptions import ConfigurationError
from typeahead.observability.logging import setup_logging

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Application settings. If None, loads from environment.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        # TYPEAHEAD_CONFIG names the config file; else auto-detect typeahead-config.yaml
        yaml_path = Path(os.environ.get("TYPEAHEAD_CONFIG", "typeahead-config.yaml"))
        if yaml_path.exists():
            logger.info("Loading configuration from %s", yaml_path)
            settings = Settings.from_yaml(yaml_path)
        else:
            settings = Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Manage application lifecycle (startup/shutdown)."""
        setup_logging(settings.observability)
        logger.info("Starting %s v%s", settings.app_name, __version__)

        registry = build_registry(settings)
        await registry.initialize()
        register_endpoints(registry, settings)

        set_registry(registry)
        app.state.settings = settings
        app.state.registry = registry

        logger.info("Typeahead is ready to serve %d endpoints on port %d", len(registry.endpoints), settings.server.port)
        yield

        logger.info("Shutting down Typeahead...")
        await registry.shutdown()
        set_registry(None)
        logger.info("Typeahead shutdown complete")

    app = FastAPI(
        title=settings.app_name,
        description="Autocomplete query engine serving plain-text suggestions from pluggable search backends.",
        version=__version__,
        debug=settings.debug,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(v1_router, prefix="/v1")

    return app


# ── Backend construction ──

# Maps full-text backend names to (module_path, class_name) for lazy import
_FULL_TEXT_BACKENDS: dict[str, tuple[str, str]] = {
    "meilisearch": ("typeahead.backends.meilisearch.backend", "MeiliSearchBackend"),
}


def build_registry(settings: Settings) -> EndpointRegistry:
    """Create the endpoint registry and the backends declared in settings.

    Backends are constructed here and initialized by ``registry.initialize()``.

    Raises:
        ConfigurationError: If the configured full-text backend is unknown.
    """
    catalog = SchemaCatalog(settings.entities)

    persistence: PersistenceBackend | None = None
    if settings.persistence.url:
        from typeahead.backends.sqlalchemy.backend import SQLAlchemyBackend

        persistence = SQLAlchemyBackend(
            settings.persistence.url,
            catalog=catalog,
            echo=settings.persistence.echo,
        )

    return EndpointRegistry(
        persistence=persistence,
        full_text=_create_full_text_backend(settings),
        catalog=catalog,
        default_limit=settings.defaults.limit,
        default_delimiter=settings.defaults.delimiter,
        max_concurrent_queries=settings.defaults.max_concurrent_queries,
    )


def _create_full_text_backend(settings: Settings) -> FullTextBackend | None:
    cfg = settings.full_text
    if not cfg.backend:
        return None

    entry = _FULL_TEXT_BACKENDS.get(cfg.backend)
    if entry is None:
        raise ConfigurationError(
            f"Unknown full-text backend '{cfg.backend}'. Available backends: {list(_FULL_TEXT_BACKENDS)}"
        )

    module_path, class_name = entry
    backend_class = getattr(importlib.import_module(module_path), class_name)
    return backend_class(
        base_url=cfg.base_url,
        indexes=cfg.indexes,
        api_key=cfg.api_key,
        timeout=cfg.timeout,
    )


def register_endpoints(registry: EndpointRegistry, settings: Settings) -> None:
    """Register every endpoint declared in settings.

    A misconfigured endpoint is logged and skipped; the others still register.
    """
    for cfg in settings.endpoints:
        try:
            registry.register(cfg.entity, cfg.fields, cfg.options)
        except ConfigurationError:
            logger.error("Failed to register endpoint for '%s' %s", cfg.entity, cfg.fields, exc_info=True)
