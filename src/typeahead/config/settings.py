"""Application settings — Pydantic-based configuration with YAML and env var support.

Configuration is loaded from (in order of precedence):
  1. YAML config file (if specified)
  2. Environment variables (TYPEAHEAD_ prefix)
  3. Default values
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

from typeahead.models.schema import EntityConfig


class ServerSettings(BaseModel):
    """HTTP server configuration."""

    host: str = Field(default="0.0.0.0", description="Server bind address")
    port: int = Field(default=8080, description="Server port")
    workers: int = Field(default=1, description="Number of worker processes")
    cors_origins: list[str] = Field(default=["*"], description="Allowed CORS origins")


class DefaultsSettings(BaseModel):
    """Defaults applied to endpoints that do not override them."""

    limit: int = Field(default=10, ge=1, description="Default maximum number of results")
    delimiter: str = Field(default=" ", description="Default separator between rendered values")
    max_concurrent_queries: int = Field(default=5, ge=1, description="Max concurrent per-field full-text queries")


class PersistenceSettings(BaseModel):
    """Relational backend configuration."""

    url: str | None = Field(default=None, description="Async SQLAlchemy database URL; None disables the backend")
    echo: bool = Field(default=False, description="Log emitted SQL")


class FullTextSettings(BaseModel):
    """Full-text backend configuration."""

    backend: str | None = Field(default=None, description="Full-text backend name ('meilisearch') or None")
    base_url: str = Field(default="http://localhost:7700", description="Full-text service URL")
    api_key: str | None = Field(default=None, description="API key authentication")
    indexes: dict[str, str] = Field(default_factory=dict, description="Index name per entity")
    timeout: float = Field(default=10.0, gt=0, description="Request timeout in seconds")


class EndpointConfig(BaseModel):
    """An autocomplete endpoint registered at startup."""

    entity: str = Field(description="Entity type searched")
    fields: list[str] = Field(min_length=1, description="Fields matched and rendered")
    options: dict[str, Any] = Field(default_factory=dict, description="Endpoint options")

    @field_validator("fields", mode="before")
    @classmethod
    def _parse_fields(cls, v: Any) -> list[str]:
        """Accept a single field name as well as a list."""
        if isinstance(v, str):
            return [v]
        return list(v)


class ObservabilitySettings(BaseModel):
    """Observability configuration."""

    log_level: str = Field(default="info", description="Log level: debug, info, warning, error")
    log_format: str = Field(default="json", description="Log format: json, console")


class Settings(BaseSettings):
    """Root application settings.

    Configuration is loaded from environment variables with the TYPEAHEAD_ prefix.
    Nested settings use double underscores: TYPEAHEAD_SERVER__PORT=9090

    Example:
        TYPEAHEAD_SERVER__PORT=9090
        TYPEAHEAD_PERSISTENCE__URL=postgresql+asyncpg://app@localhost/app
        TYPEAHEAD_FULL_TEXT__BACKEND=meilisearch
    """

    model_config = {
        "env_prefix": "TYPEAHEAD_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    # Application metadata
    app_name: str = Field(default="Typeahead", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")

    # Component settings
    server: ServerSettings = Field(default_factory=ServerSettings)
    defaults: DefaultsSettings = Field(default_factory=DefaultsSettings)
    persistence: PersistenceSettings = Field(default_factory=PersistenceSettings)
    full_text: FullTextSettings = Field(default_factory=FullTextSettings)
    entities: dict[str, EntityConfig] = Field(default_factory=dict, description="Schema metadata per entity")
    endpoints: list[EndpointConfig] = Field(default_factory=list, description="Endpoints registered at startup")
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @classmethod
    def from_yaml(cls, path: str | Path) -> Settings:
        """Load settings from a YAML configuration file.

        YAML values are passed as init arguments, so they win over
        environment variables for the keys they set.

        Args:
            path: Path to the YAML config file.

        Returns:
            Populated Settings instance.
        """
        import yaml  # type: ignore[import-untyped]

        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)
