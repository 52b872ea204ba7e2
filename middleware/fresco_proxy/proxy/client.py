"""
API Client
==========

Entry point for every request the web server makes to the Fresco API,
whether it proxies an inbound request or calls the API on its own behalf.

Retry policy:
-------------
A request starts in the ``FRESH`` state. If the attempt is classified as a
401 and the inbound request carries a session, the injected bearer
refresher is awaited and one more attempt is made in the ``RETRIED`` state.
``RETRIED`` attempts go straight to the caller, so a request is sent at
most twice.

Uploaded files stay on disk until the request is finished (so the retry
can send them again) and are then removed, whatever the outcome.
"""

import logging
from typing import Optional

import httpx

from ..auth.refresh import BearerRefresher
from ..auth.session import get_session_token, has_authenticated_session
from ..errors import AuthRefreshFailed, ProxyError
from ..models import InboundRequest, RequestOptions, RequestSpec, RetryState
from .builder import build_request_spec
from .classifier import classify
from .transport import TransportExecutor

logger = logging.getLogger(__name__)


class ApiClient:
    """
    Sends requests to the Fresco API with automatic bearer refresh.

    Args:
        transport: Executor used for every attempt
        refresher: Async callable refreshing the bearer token stored in an
            inbound request's session. Without one, 401s are never retried.
    """

    def __init__(
        self,
        transport: TransportExecutor,
        refresher: Optional[BearerRefresher] = None
    ):
        self._transport = transport
        self._refresher = refresher

    async def request(
        self,
        options: RequestOptions,
        inbound: Optional[InboundRequest] = None
    ) -> httpx.Response:
        """
        Send a request to the API.

        Either ``inbound`` must be given, or the options must describe the
        whole request. Explicit options override the inbound request.

        Args:
            options: Explicit request options
            inbound: Inbound request to base the call on. Required for the
                401 retry since the refreshed token lives in its session.

        Returns:
            Successful upstream response

        Raises:
            ProxyError: Classified failure of the final attempt
        """
        spec = build_request_spec(options, inbound)

        try:
            try:
                return await self._attempt(spec, RetryState.FRESH)
            except ProxyError as error:
                return await self._retry(error, spec, inbound)
        finally:
            self._transport.cleanup_files(spec.files)

    async def _attempt(self, spec: RequestSpec, state: RetryState) -> httpx.Response:
        outcome = await self._transport.execute(spec, state)
        return classify(outcome)

    async def _retry(
        self,
        error: ProxyError,
        spec: RequestSpec,
        inbound: Optional[InboundRequest]
    ) -> httpx.Response:
        """
        Recover from an expired bearer token, once.

        Raises:
            ProxyError: ``error`` itself when it is not recoverable, the
                refresher's failure, or the failure of the retried attempt
        """
        # Only 401 means the bearer token is invalid
        if error.status != 401:
            raise error

        # The refreshed token is stored in the session
        if inbound is None or not has_authenticated_session(inbound.session) or self._refresher is None:
            raise error

        logger.info(
            f"API rejected credentials for {spec.method} {spec.url}, refreshing bearer token"
        )

        try:
            await self._refresher(inbound)
        except ProxyError:
            raise
        except Exception as e:
            logger.error(f"Bearer refresh failed: {e}", exc_info=True)
            raise AuthRefreshFailed() from e

        retry_spec = spec.model_copy(update={"token": get_session_token(inbound.session)})
        return await self._attempt(retry_spec, RetryState.RETRIED)
