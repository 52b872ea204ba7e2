"""
Authentication Package

This package decides how outbound requests to the Fresco API are
authenticated and keeps the user's bearer token fresh.

Modules:
- credentials: Basic/Bearer credential selection and header rendering
- session: Accessors for the token and user stored in the web session
- refresh: Refresh-token exchange for expired bearer tokens

The authentication flow:
1. Requests without a user session use the client credentials (Basic)
2. Requests with a user session use the session's bearer token
3. When the API answers 401, the bearer token is refreshed once and
   the request is sent again
"""

from .credentials import (
    AuthCredential,
    BasicCredential,
    BearerCredential,
    basic_authentication,
    bearer_authentication,
    select_credential,
)
from .refresh import BearerRefresher, SessionBearerRefresher

__all__ = [
    "AuthCredential",
    "BasicCredential",
    "BearerCredential",
    "BearerRefresher",
    "SessionBearerRefresher",
    "basic_authentication",
    "bearer_authentication",
    "select_credential",
]
