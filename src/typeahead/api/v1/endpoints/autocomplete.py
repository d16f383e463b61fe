"""Autocomplete endpoint — Plain-text suggestions for autocomplete widgets.

Each registered endpoint is served at ``GET /v1/autocomplete/{handler_name}``
and reads the partial query from the ``q`` parameter. The body holds one
``value1<delimiter>...|identifier`` line per result.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import PlainTextResponse

from typeahead.api.deps import get_registry
from typeahead.core.registry import EndpointRegistry
from typeahead.exceptions import BackendError, EndpointNotFoundError, TypeaheadError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/autocomplete/{handler_name}",
    response_class=PlainTextResponse,
    summary="Autocomplete",
    description=(
        "Return suggestions for a partial query as plain text, one result per line "
        "in the form `value1<delimiter>value2...|identifier`. An empty `q` matches "
        "every record up to the endpoint's limit."
    ),
    responses={
        200: {"description": "Suggestions (possibly empty)", "content": {"text/plain": {}}},
        404: {"description": "No endpoint registered under this name"},
        500: {"description": "Endpoint misconfigured"},
        502: {"description": "Search backend failed"},
    },
)
async def autocomplete(
    handler_name: str,
    q: str = Query(default="", description="Partial query typed by the user"),
    registry: EndpointRegistry = Depends(get_registry),
) -> PlainTextResponse:
    """Run one autocomplete invocation."""
    try:
        endpoint = registry.get(handler_name)
    except EndpointNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    try:
        body = await endpoint.complete(q)
    except BackendError as e:
        logger.error("Autocomplete backend failure on %s: %s", handler_name, e, exc_info=True)
        raise HTTPException(status_code=502, detail=f"Search backend failed: {e!s}") from e
    except TypeaheadError as e:
        logger.error("Autocomplete failed on %s: %s", handler_name, e, exc_info=True)
        raise HTTPException(status_code=500, detail=f"Autocomplete failed: {e!s}") from e

    return PlainTextResponse(body)
