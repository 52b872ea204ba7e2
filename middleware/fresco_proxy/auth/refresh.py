"""
Bearer token refresh.

Exchanges the refresh token stored in a user's session for a new bearer
token using the API's OAuth token endpoint. The refresher is handed to the
``ApiClient`` as a plain async callable, so the proxy never imports it
directly and any other implementation with the same signature can be
swapped in.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable

import httpx

from ..config import Settings
from ..errors import AuthRefreshFailed, TransportUnreachable
from ..models import InboundRequest
from .credentials import basic_authentication
from .session import get_refresh_token, store_session_token

logger = logging.getLogger(__name__)


BearerRefresher = Callable[[InboundRequest], Awaitable[None]]


class SessionBearerRefresher:
    """
    Refresh the bearer token held in an inbound request's session.

    On success ``session["token"]["token"]`` holds the new bearer token.

    Args:
        client: Shared HTTP client
        settings: Application settings
    """

    def __init__(self, client: httpx.AsyncClient, settings: Settings):
        self._client = client
        self._settings = settings

    @property
    def token_url(self) -> str:
        return f"{self._settings.api_base_url}{self._settings.API_TOKEN_PATH}"

    async def __call__(self, inbound: InboundRequest) -> None:
        """
        Refresh the session bearer token.

        Raises:
            AuthRefreshFailed: If the session has no refresh token or the API rejects it
            TransportUnreachable: If the API cannot be reached
        """
        session = inbound.session
        refresh_token = get_refresh_token(session)
        if session is None or not refresh_token:
            raise AuthRefreshFailed("No refresh token available in session")

        payload = {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        }
        headers = {
            "Authorization": basic_authentication(
                self._settings.API_CLIENT_ID, self._settings.API_CLIENT_SECRET
            ),
        }

        try:
            response = await self._client.post(self.token_url, data=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Bearer refresh request failed: {e}")
            raise TransportUnreachable() from e

        if not response.is_success:
            logger.warning(
                "Bearer refresh rejected by API",
                extra={"status_code": response.status_code}
            )
            raise AuthRefreshFailed(_error_message(response))

        try:
            token_data = response.json()
        except ValueError as e:
            raise AuthRefreshFailed("Token response is not valid JSON") from e

        access_token = token_data.get("access_token") if isinstance(token_data, dict) else None
        if not access_token:
            raise AuthRefreshFailed("Token response missing access_token")

        token = {
            "token": access_token,
            "refresh_token": token_data.get("refresh_token") or refresh_token,
        }

        expires_in = token_data.get("expires_in")
        if isinstance(expires_in, (int, float)):
            expires_at = datetime.now(timezone.utc) + timedelta(seconds=expires_in)
            token["expires_at"] = expires_at.isoformat()

        store_session_token(session, token)
        logger.info("Refreshed session bearer token")


def _error_message(response: httpx.Response) -> str:
    """Pick the most descriptive error message from a token endpoint response."""
    try:
        error_data = response.json()
    except ValueError:
        error_data = None

    if isinstance(error_data, dict):
        error = error_data.get("error")
        if isinstance(error, dict):
            return error.get("msg") or error.get("message") or "Token refresh failed"
        return error_data.get("error_description") or error or "Token refresh failed"

    return "Token refresh failed"
