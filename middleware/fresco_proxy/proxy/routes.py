"""
Proxy Routes - Fresco API Request Forwarding
============================================

This module forwards inbound requests from web clients to the Fresco API
and writes the API's answer back to the client.

Flow:
-----
1. Snapshot the inbound request (body, uploaded files, session)
2. Invalidate the cached session user when the client sent a ``ttl`` header
3. Send the request through ``ApiClient`` (auth header, 401 refresh + retry)
4. Success: upstream body is written back unchanged
5. Failure: the classified error becomes the response status and body

Endpoints:
----------
- /{path}: Forward any GET/POST/PUT/PATCH/DELETE to the same API path
"""

import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse, Response

from ..auth.session import invalidate_user_ttl
from ..errors import ProxyError
from ..models import RequestOptions
from .client import ApiClient
from .uploads import read_inbound_request

logger = logging.getLogger(__name__)

# Create router
proxy_router = APIRouter()

ResponseCallback = Callable[[httpx.Response], Union[Response, Awaitable[Response]]]


# ============================================================================
# Dependencies
# ============================================================================

def get_api_client(request: Request) -> ApiClient:
    """
    Dependency to get the API client from app state.

    Raises:
        HTTPException: If the client has not been initialized (app not started)
    """
    client = getattr(request.app.state, "api_client", None)
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="API client not initialized"
        )

    return client


def get_proxy_prefix(request: Request) -> str:
    settings = getattr(request.app.state, "settings", None)
    return settings.PROXY_PREFIX if settings is not None else ""


# ============================================================================
# Response Writers
# ============================================================================

def passthrough(response: httpx.Response) -> Response:
    """Write the upstream body back unchanged."""
    return Response(
        content=response.content,
        status_code=response.status_code,
        media_type=response.headers.get("content-type"),
    )


def handle_error(error: ProxyError) -> JSONResponse:
    """
    Convert a classified error into the client response.

    Status defaults to 500 when the error does not carry one.
    """
    return JSONResponse(
        status_code=error.status or status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error.body(),
    )


# ============================================================================
# Middleware Adapter
# ============================================================================

async def proxy(
    request: Request,
    api_client: ApiClient,
    callback: Optional[ResponseCallback] = None,
    options: Optional[RequestOptions] = None,
    prefix: str = "",
) -> Response:
    """
    Forward an inbound request to the API and build the client response.

    Args:
        request: Inbound request
        api_client: Client used to reach the API
        callback: Builds the client response from a successful upstream
            response. Defaults to ``passthrough``.
        options: Explicit overrides applied on top of the inbound request
        prefix: Mount prefix stripped from the inbound path

    Returns:
        Response for the client
    """
    if callback is None:
        callback = passthrough

    inbound = await read_inbound_request(request, prefix)

    if inbound.headers.get("ttl"):
        invalidate_user_ttl(inbound.session)

    try:
        upstream = await api_client.request(options or RequestOptions(), inbound)
    except ProxyError as error:
        logger.info(
            f"Proxy request failed: {error.message}",
            extra={"status_code": error.status, "path": inbound.url, "method": inbound.method}
        )
        return handle_error(error)

    result: Any = callback(upstream)
    if inspect.isawaitable(result):
        result = await result

    return result


# ============================================================================
# Proxy Endpoints
# ============================================================================

@proxy_router.api_route("/{path:path}", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
async def forward(
    request: Request,
    path: str,
    api_client: ApiClient = Depends(get_api_client),
    prefix: str = Depends(get_proxy_prefix),
) -> Response:
    """
    Proxy any request under the mount point to the same API path.

    Returns:
        Upstream body unchanged, or the classified error
    """
    return await proxy(request, api_client, prefix=prefix)
