"""
Proxy Package
=============

This package forwards requests from the web server to the Fresco API.

Main Components:
----------------
- builder.py: Resolves request options against the inbound request
- transport.py: Sends one attempt (JSON or multipart) and cleans up uploads
- classifier.py: Turns transport outcomes into responses or ProxyErrors
- client.py: ApiClient with the single 401 refresh-and-retry
- uploads.py: Inbound request snapshot, spools uploaded files to disk
- routes.py: FastAPI router and the proxy adapter

Usage:
------
    from fresco_proxy.proxy import proxy_router
    app.include_router(proxy_router, prefix="/api")
"""

from .client import ApiClient
from .routes import handle_error, passthrough, proxy, proxy_router
from .transport import TransportExecutor, TransportOutcome

__all__ = [
    "ApiClient",
    "TransportExecutor",
    "TransportOutcome",
    "handle_error",
    "passthrough",
    "proxy",
    "proxy_router",
]
