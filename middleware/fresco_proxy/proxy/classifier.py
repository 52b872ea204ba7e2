"""
Response classification.

Turns a ``TransportOutcome`` into either the upstream response or a
``ProxyError``. First match wins:

1. No error                               -> response
2. Connection refused, or no response     -> TransportUnreachable (503)
3. Response without a structured ``error`` -> MalformedUpstreamResponse
4. Response with a structured ``error``    -> UpstreamStructuredError

Connectivity is checked before the body is inspected because a
transport failure carries no response to read.
"""

from typing import Any

import httpx

from ..errors import MalformedUpstreamResponse, TransportUnreachable, UpstreamStructuredError
from .transport import TransportOutcome


def classify(outcome: TransportOutcome) -> httpx.Response:
    """
    Classify the outcome of one attempt.

    Returns:
        The upstream response when the attempt succeeded

    Raises:
        TransportUnreachable: API unreachable
        MalformedUpstreamResponse: API error without a structured body
        UpstreamStructuredError: API error with a structured body
    """
    if outcome.error is None:
        return outcome.response

    if isinstance(outcome.error, httpx.ConnectError) or outcome.response is None:
        raise TransportUnreachable() from outcome.error

    structured_error = _structured_error(outcome.response)
    # Empty error objects still count as structured
    if structured_error is None or structured_error in ("", 0, False):
        raise MalformedUpstreamResponse(outcome.response.status_code) from outcome.error

    raise UpstreamStructuredError(structured_error) from outcome.error


def _structured_error(response: httpx.Response) -> Any:
    try:
        payload = response.json()
    except ValueError:
        return None

    if not isinstance(payload, dict):
        return None

    return payload.get("error")
