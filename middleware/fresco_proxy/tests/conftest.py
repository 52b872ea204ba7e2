"""
Shared fixtures for the proxy tests.

The Fresco API is replaced by ``httpx.MockTransport`` backed by
``UpstreamStub``, which replays queued responses and records every
request it receives.
"""

from typing import Callable, List, Union

import httpx
import pytest

from fresco_proxy.config import Settings


TEST_API_URL = "https://api.fresco.test"
TEST_BASE_URL = f"{TEST_API_URL}/v2"

Reply = Union[httpx.Response, Exception, Callable[[httpx.Request], httpx.Response]]


class UpstreamStub:
    """
    Scripted upstream API.

    Replies are consumed in order; the last one repeats once the queue is
    down to a single entry.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self._replies: List[Reply] = []

    def reply(self, *replies: Reply) -> "UpstreamStub":
        self._replies.extend(replies)
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if not self._replies:
            raise AssertionError(f"Unexpected upstream request: {request.method} {request.url}")

        reply = self._replies[0] if len(self._replies) == 1 else self._replies.pop(0)

        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, httpx.Response):
            # Fresh copy so a repeated reply is never shared between requests
            return httpx.Response(reply.status_code, headers=reply.headers, content=reply.content)
        return reply(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def settings():
    """Settings pointing at the stubbed API"""
    return Settings(
        _env_file=None,
        API_URL=TEST_API_URL,
        API_VERSION="v2",
        API_CLIENT_ID="test-client",
        API_CLIENT_SECRET="test-secret",
        SESSION_SECRET="test-session-secret-1234567890123456",
        SESSION_HTTPS_ONLY=False,
    )


@pytest.fixture
def upstream():
    return UpstreamStub()


@pytest.fixture
def http_client(upstream):
    """Async HTTP client wired to the stubbed API"""
    return httpx.AsyncClient(transport=upstream.transport)


@pytest.fixture
def authenticated_session():
    """Session of a logged in user"""
    return {
        "user": {"id": "user-123", "username": "photog", "TTL": 1700000000},
        "token": {"token": "expired-token", "refresh_token": "refresh-abc"},
    }
