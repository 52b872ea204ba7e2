"""
Session Helpers
===============

Accessors for the web server session populated at login.

Session layout::

    {
        "user": {"id": "...", "TTL": 1700000000, ...},
        "token": {"token": "<bearer>", "refresh_token": "...", "expires_at": "..."}
    }

The session is the framework's own mapping (Starlette ``request.session``);
writes to it are persisted by ``SessionMiddleware`` when the response is sent.
"""

import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


def has_authenticated_session(session: Optional[Dict[str, Any]]) -> bool:
    """
    Check whether a session belongs to a logged in user with a bearer token.

    Args:
        session: Session mapping (may be None)

    Returns:
        True if both the user and the token entries are present
    """
    if not session:
        return False

    token = session.get("token")
    return bool(session.get("user")) and isinstance(token, dict) and bool(token.get("token"))


def get_session_token(session: Optional[Dict[str, Any]]) -> str:
    """
    Return the bearer token stored in the session.

    Returns:
        The bearer token, or an empty string when the session holds none
    """
    if not session:
        return ""

    token = session.get("token")
    if not isinstance(token, dict):
        return ""

    return token.get("token") or ""


def get_refresh_token(session: Optional[Dict[str, Any]]) -> Optional[str]:
    """Return the refresh token stored in the session, if any."""
    if not session:
        return None

    token = session.get("token")
    if not isinstance(token, dict):
        return None

    return token.get("refresh_token")


def store_session_token(session: Dict[str, Any], token: Dict[str, Any]) -> None:
    """Replace the token entry of the session."""
    session["token"] = token


def invalidate_user_ttl(session: Optional[Dict[str, Any]]) -> bool:
    """
    Mark the cached user in the session as stale.

    Clearing the user's TTL forces the next page load to fetch an updated
    user from the API.

    Args:
        session: Session mapping (may be None)

    Returns:
        True if a user TTL was invalidated
    """
    if not session or not isinstance(session.get("user"), dict):
        return False

    session["user"]["TTL"] = None

    logger.debug("Invalidated session user TTL")
    return True
