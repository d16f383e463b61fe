"""Typeahead exceptions."""


class TypeaheadError(Exception):
    """Base exception for all typeahead errors."""


class ConfigurationError(TypeaheadError):
    """Raised when an endpoint or backend configuration is invalid."""


class EndpointNotFoundError(TypeaheadError):
    """Raised when no endpoint is registered under the requested name."""


class BackendError(TypeaheadError):
    """Base exception for search backend failures."""


class ConnectionError(BackendError):
    """Raised when a backend cannot be reached."""


class QueryError(BackendError):
    """Raised when a backend rejects or fails to execute a query."""
