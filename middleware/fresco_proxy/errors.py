"""
Proxy Error Types
=================

Normalized failures produced while forwarding a request to the Fresco API.

Every failure the proxy can report to a client is a ``ProxyError`` carrying
a message and an HTTP status. The status drives the retry decision (only a
401 is recoverable) and the response the adapter writes back.

Client-facing shape::

    {"msg": "Failed to connect to Fresco!", "status": 503}

Structured errors returned by the API itself are passed through verbatim.
"""

from typing import Any, Dict, Optional


TRANSPORT_UNREACHABLE_MESSAGE = "Failed to connect to Fresco!"
MALFORMED_RESPONSE_MESSAGE = "Your request could not be sent!"


class ProxyError(Exception):
    """Base exception for classified proxy failures"""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status

    def body(self) -> Any:
        """
        Body sent back to the client for this error.

        Returns:
            JSON-serializable error shape
        """
        return {"msg": self.message, "status": self.status}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, status={self.status!r})"


class TransportUnreachable(ProxyError):
    """The upstream API could not be reached at all"""

    def __init__(self):
        super().__init__(TRANSPORT_UNREACHABLE_MESSAGE, 503)


class MalformedUpstreamResponse(ProxyError):
    """The upstream API answered with an error but no structured error body"""

    def __init__(self, status: Optional[int]):
        super().__init__(MALFORMED_RESPONSE_MESSAGE, status)


class UpstreamStructuredError(ProxyError):
    """
    Error object returned by the upstream API, propagated verbatim.

    The payload already follows the API's own error shape, so its
    ``status`` field is used as-is (it may be missing).
    """

    def __init__(self, payload: Any):
        self.payload = payload
        details: Dict[str, Any] = payload if isinstance(payload, dict) else {}

        status = details.get("status")
        message = details.get("msg") or details.get("message") or str(payload)

        super().__init__(message, status if isinstance(status, int) else None)

    def body(self) -> Any:
        return self.payload


class AuthRefreshFailed(ProxyError):
    """The session bearer token could not be refreshed"""

    def __init__(self, message: str = "Failed to refresh session", status: int = 401):
        super().__init__(message, status)
