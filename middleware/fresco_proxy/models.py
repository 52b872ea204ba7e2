"""
Data Models Module

This module defines the request descriptions passed through the proxy
pipeline.

Models are organized by functional area:
- Inbound models (snapshot of the request received by the web server)
- Outbound models (options and the fully resolved request sent upstream)
- Retry state
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Upload Models
# ============================================================================

class UploadedFile(BaseModel):
    """Temporary file spooled to disk from an inbound multipart upload."""
    model_config = ConfigDict(frozen=True)

    field_name: str = Field(..., description="Form field the file was uploaded under")
    path: str = Field(..., description="Location of the temporary file on disk")
    filename: Optional[str] = Field(None, description="Original client-side filename")
    content_type: Optional[str] = Field(None, description="MIME type reported by the client")


# ============================================================================
# Inbound Models
# ============================================================================

@dataclass
class InboundRequest:
    """
    Snapshot of an inbound web request.

    ``session`` is the live session mapping of the web framework (not a
    copy), so changes made by a bearer refresher are visible to the
    framework when it writes the session cookie.

    Attributes:
        method: HTTP verb of the inbound request
        url: Path (and query string) relative to the proxy mount point
        body: Parsed JSON body or non-file form fields
        files: Uploaded files spooled to disk
        headers: Lower-cased request headers
        session: Session mapping, or None when no session is available
    """

    method: str = "GET"
    url: str = ""
    body: Dict[str, Any] = field(default_factory=dict)
    files: List[UploadedFile] = field(default_factory=list)
    headers: Dict[str, str] = field(default_factory=dict)
    session: Optional[Dict[str, Any]] = None


# ============================================================================
# Outbound Models
# ============================================================================

class RequestOptions(BaseModel):
    """
    Explicit overrides for an outbound API request.

    Any field left as ``None`` falls back to the inbound request (when one
    is given) and then to the default.
    """
    url: Optional[str] = Field(None, description="Path relative to the versioned API base URL")
    body: Optional[Dict[str, Any]] = Field(None, description="Payload to send")
    method: Optional[str] = Field(None, description="HTTP verb to use")
    files: Optional[List[UploadedFile]] = Field(None, description="Files to upload as multipart parts")
    token: Optional[str] = Field(None, description="Bearer token; empty forces Basic authentication")


class RequestSpec(BaseModel):
    """Fully resolved outbound request. Immutable once built."""
    model_config = ConfigDict(frozen=True)

    method: str = Field(default="GET", description="Upper-case HTTP verb")
    url: str = Field(default="", description="Path relative to the versioned API base URL")
    body: Dict[str, Any] = Field(default_factory=dict, description="Payload to send")
    files: List[UploadedFile] = Field(default_factory=list, description="Files to upload")
    token: str = Field(default="", description="Bearer token, empty for Basic authentication")

    @property
    def is_multipart(self) -> bool:
        """True when the request must be sent as multipart/form-data."""
        return self.method == "POST" and len(self.files) > 0


# ============================================================================
# Retry State
# ============================================================================

class RetryState(str, Enum):
    """Attempt state of one logical request. ``RETRIED`` is terminal."""
    FRESH = "fresh"
    RETRIED = "retried"
