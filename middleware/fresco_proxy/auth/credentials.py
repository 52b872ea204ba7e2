"""
Upstream API credentials.

The Fresco API accepts either the web server's own client credentials
(``Authorization: Basic``) or a user's bearer token
(``Authorization: Bearer``). Which one is used depends only on whether a
token is available for the request.
"""

import base64
from dataclasses import dataclass
from typing import Optional, Union

from ..config import Settings


# =============================================================================
# Header Rendering
# =============================================================================

def basic_authentication(client_id: str, client_secret: str) -> str:
    """
    Build a Basic ``Authorization`` header value.

    Args:
        client_id: API client identifier
        client_secret: API client secret

    Returns:
        ``Basic <base64(client_id:client_secret)>``
    """
    raw = f"{client_id}:{client_secret}".encode("utf-8")
    return f"Basic {base64.b64encode(raw).decode('ascii')}"


def bearer_authentication(token: str) -> str:
    """Build a Bearer ``Authorization`` header value."""
    return f"Bearer {token}"


# =============================================================================
# Credential Variants
# =============================================================================

@dataclass(frozen=True)
class BasicCredential:
    client_id: str
    client_secret: str

    def header_value(self) -> str:
        return basic_authentication(self.client_id, self.client_secret)


@dataclass(frozen=True)
class BearerCredential:
    token: str

    def header_value(self) -> str:
        return bearer_authentication(self.token)


AuthCredential = Union[BasicCredential, BearerCredential]


def select_credential(token: Optional[str], settings: Settings) -> AuthCredential:
    """
    Choose the credential for an outbound request.

    Args:
        token: User bearer token, empty or None when there is no user session
        settings: Application settings holding the client credentials

    Returns:
        BasicCredential when no token is available, BearerCredential otherwise
    """
    if not token:
        return BasicCredential(settings.API_CLIENT_ID, settings.API_CLIENT_SECRET)

    return BearerCredential(token)
