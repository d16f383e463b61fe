"""API dependencies — Dependency injection for FastAPI endpoints."""

from __future__ import annotations

from typeahead.core.registry import EndpointRegistry

# Global registry instance (set during application lifespan)
_registry: EndpointRegistry | None = None


def set_registry(registry: EndpointRegistry | None) -> None:
    """Set the global registry instance (called during app lifespan)."""
    global _registry
    _registry = registry


def get_registry() -> EndpointRegistry:
    """Get the global endpoint registry.

    Raises:
        RuntimeError: If the registry is not initialized.
    """
    if _registry is None:
        raise RuntimeError("Endpoint registry not initialized. Is the server running?")
    return _registry
