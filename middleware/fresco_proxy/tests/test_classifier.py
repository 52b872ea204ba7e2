"""
Unit Tests for Response Classification
======================================

Tests for fresco_proxy/proxy/classifier.py and fresco_proxy/errors.py
"""

import httpx
import pytest

from fresco_proxy.errors import (
    MALFORMED_RESPONSE_MESSAGE,
    TRANSPORT_UNREACHABLE_MESSAGE,
    MalformedUpstreamResponse,
    TransportUnreachable,
    UpstreamStructuredError,
)
from fresco_proxy.proxy.classifier import classify
from fresco_proxy.proxy.transport import TransportOutcome


def status_outcome(response: httpx.Response) -> TransportOutcome:
    request = httpx.Request("GET", "https://api.fresco.test/v2/gallery/list")
    response.request = request
    error = httpx.HTTPStatusError("error", request=request, response=response)
    return TransportOutcome(error=error, response=response)


def test_success_returns_response():
    response = httpx.Response(200, json={"id": "gallery-1"})

    assert classify(TransportOutcome(response=response)) is response


def test_connect_error_is_unreachable():
    outcome = TransportOutcome(error=httpx.ConnectError("Connection refused"))

    with pytest.raises(TransportUnreachable) as exc_info:
        classify(outcome)

    assert exc_info.value.status == 503
    assert exc_info.value.body() == {"msg": TRANSPORT_UNREACHABLE_MESSAGE, "status": 503}


def test_connect_error_wins_over_attached_response():
    response = httpx.Response(500, json={"error": {"msg": "Boom", "status": 500}})
    outcome = TransportOutcome(error=httpx.ConnectError("Connection refused"), response=response)

    with pytest.raises(TransportUnreachable):
        classify(outcome)


@pytest.mark.parametrize("error", [
    httpx.ReadTimeout("Timed out"),
    httpx.RemoteProtocolError("Server disconnected"),
])
def test_error_without_response_is_unreachable(error):
    with pytest.raises(TransportUnreachable) as exc_info:
        classify(TransportOutcome(error=error))

    assert exc_info.value.message == TRANSPORT_UNREACHABLE_MESSAGE


@pytest.mark.parametrize("response", [
    httpx.Response(502, text="<html>Bad Gateway</html>"),
    httpx.Response(400, json={"message": "no error field"}),
    httpx.Response(400, json={"error": None}),
    httpx.Response(400, json={"error": ""}),
    httpx.Response(401, json=["unexpected"]),
    httpx.Response(500),
])
def test_response_without_structured_error_is_malformed(response):
    with pytest.raises(MalformedUpstreamResponse) as exc_info:
        classify(status_outcome(response))

    assert exc_info.value.status == response.status_code
    assert exc_info.value.message == MALFORMED_RESPONSE_MESSAGE


def test_structured_error_is_propagated_verbatim():
    api_error = {"msg": "Gallery not found", "status": 404, "type": "not_found"}

    with pytest.raises(UpstreamStructuredError) as exc_info:
        classify(status_outcome(httpx.Response(404, json={"error": api_error})))

    assert exc_info.value.body() == api_error
    assert exc_info.value.status == 404
    assert exc_info.value.message == "Gallery not found"


def test_structured_error_status_comes_from_payload():
    api_error = {"msg": "Token expired", "status": 401}

    with pytest.raises(UpstreamStructuredError) as exc_info:
        classify(status_outcome(httpx.Response(400, json={"error": api_error})))

    assert exc_info.value.status == 401


def test_structured_error_without_status():
    with pytest.raises(UpstreamStructuredError) as exc_info:
        classify(status_outcome(httpx.Response(400, json={"error": "invalid_grant"})))

    assert exc_info.value.status is None
    assert exc_info.value.body() == "invalid_grant"


@pytest.mark.parametrize("api_error", [{}, []])
def test_empty_error_object_is_structured(api_error):
    with pytest.raises(UpstreamStructuredError) as exc_info:
        classify(status_outcome(httpx.Response(422, json={"error": api_error})))

    assert exc_info.value.body() == api_error
    assert exc_info.value.status is None
