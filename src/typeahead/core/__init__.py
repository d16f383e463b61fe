"""Core engine — Plan resolution, strategy dispatch, merging and rendering."""

from typeahead.core.endpoint import Endpoint
from typeahead.core.registry import EndpointRegistry

__all__ = ["Endpoint", "EndpointRegistry"]
