"""
Outbound request building.

Precedence for every field: explicit ``RequestOptions`` value, then the
inbound request, then the default.
"""

from typing import Optional

from ..auth.session import get_session_token, has_authenticated_session
from ..models import InboundRequest, RequestOptions, RequestSpec


def build_request_spec(
    options: RequestOptions,
    inbound: Optional[InboundRequest] = None
) -> RequestSpec:
    """
    Resolve request options against an optional inbound request.

    Args:
        options: Explicit overrides
        inbound: Request received by the web server, if the call proxies one

    Returns:
        RequestSpec ready to be sent
    """
    url = options.url
    body = options.body
    method = options.method
    files = options.files
    token = options.token

    if inbound is not None:
        url = url if url is not None else inbound.url
        body = body if body is not None else inbound.body
        method = method if method is not None else inbound.method
        files = files if files is not None else inbound.files

        if token is None and has_authenticated_session(inbound.session):
            token = get_session_token(inbound.session)

    return RequestSpec(
        method=(method or "GET").upper(),
        url=_normalize_path(url or ""),
        body=body or {},
        files=files or [],
        token=token or "",
    )


def _normalize_path(url: str) -> str:
    if url and not url.startswith("/"):
        return f"/{url}"
    return url
