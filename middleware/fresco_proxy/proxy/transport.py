"""
Transport Executor
==================

Sends a resolved ``RequestSpec`` to the Fresco API.

Behaviour:
----------
- URL is ``API_URL/API_VERSION`` + the request path
- Authorization header comes from the credential selector (Basic or Bearer)
- POST with files is sent as multipart/form-data: files as file parts,
  body entries as form fields
- Everything else sends the body as JSON
- Transport and HTTP failures are returned, never raised, so the
  classifier sees every outcome
"""

import json
import logging
import os
from contextlib import ExitStack
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

import httpx

from ..auth.credentials import select_credential
from ..config import Settings
from ..models import RequestSpec, RetryState, UploadedFile

logger = logging.getLogger(__name__)


@dataclass
class TransportOutcome:
    """
    Raw result of one HTTP attempt.

    Attributes:
        error: Exception raised by the transport, None on a 2xx response
        response: Upstream response, None when no response was received
    """

    error: Optional[Exception] = None
    response: Optional[httpx.Response] = None


class TransportExecutor:
    """
    Issues outbound API calls over a shared ``httpx.AsyncClient``.

    Args:
        client: HTTP client opened at application startup
        settings: Application settings
    """

    def __init__(self, client: httpx.AsyncClient, settings: Settings):
        self._client = client
        self._settings = settings

    def resolve_url(self, spec: RequestSpec) -> str:
        return f"{self._settings.api_base_url}{spec.url}"

    async def execute(
        self,
        spec: RequestSpec,
        state: RetryState = RetryState.FRESH
    ) -> TransportOutcome:
        """
        Send one attempt of a request.

        Args:
            spec: Request to send
            state: Attempt state, used for logging only

        Returns:
            TransportOutcome with either a successful response or the error
        """
        url = self.resolve_url(spec)
        authorization = select_credential(spec.token, self._settings).header_value()
        headers = {"Authorization": authorization}

        self._log(spec, url, authorization, state)

        with ExitStack() as stack:
            try:
                if spec.is_multipart:
                    request_kwargs: Dict[str, Any] = {
                        "data": _form_fields(spec.body),
                        "files": _file_parts(spec.files, stack),
                    }
                elif spec.body:
                    request_kwargs = {"json": spec.body}
                else:
                    request_kwargs = {}

                response = await self._client.request(
                    spec.method,
                    url,
                    headers=headers,
                    **request_kwargs
                )
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                logger.info(
                    f"API responded {e.response.status_code} to {spec.method} {spec.url}",
                    extra={"attempt": state.value, "status_code": e.response.status_code}
                )
                return TransportOutcome(error=e, response=e.response)
            except httpx.HTTPError as e:
                logger.error(
                    f"API request failed: {e!r}",
                    extra={"attempt": state.value, "method": spec.method, "path": spec.url}
                )
                return TransportOutcome(error=e)
            except OSError as e:
                # Uploaded file vanished or is unreadable, nothing was sent
                logger.error(
                    f"Could not open uploaded file for {spec.method} {spec.url}: {e}",
                    extra={"attempt": state.value, "method": spec.method, "path": spec.url}
                )
                return TransportOutcome(error=e)

        return TransportOutcome(response=response)

    def cleanup_files(self, files: Iterable[UploadedFile]) -> None:
        """
        Remove uploaded temporary files from disk.

        Removal failures are logged and never raised.
        """
        for upload in files:
            try:
                os.remove(upload.path)
            except OSError as e:
                logger.warning(f"Could not remove uploaded file {upload.path}: {e}")

    def _log(self, spec: RequestSpec, url: str, authorization: str, state: RetryState) -> None:
        # Development only, includes credentials
        if not self._settings.DEV:
            return

        logger.debug(
            "API Request\n"
            "---------------\n"
            f"Path: {url}\n"
            f"Method: {spec.method}\n"
            f"Body: {json.dumps(spec.body, default=str)}\n"
            f"Files: {[upload.field_name for upload in spec.files]}\n"
            f"Authorization: {authorization}\n"
            f"Attempt: {state.value}\n"
            "---------------"
        )


# ============================================================================
# Multipart Helpers
# ============================================================================

def _form_fields(body: Dict[str, Any]) -> Dict[str, Any]:
    """Convert body entries to values accepted as multipart form fields."""
    fields = {}
    for name, value in body.items():
        if isinstance(value, dict) or (
            isinstance(value, list) and any(isinstance(item, (dict, list)) for item in value)
        ):
            fields[name] = json.dumps(value)
        elif isinstance(value, bool):
            fields[name] = "true" if value else "false"
        elif value is None:
            fields[name] = ""
        else:
            fields[name] = value
    return fields


def _file_parts(
    files: List[UploadedFile],
    stack: ExitStack
) -> List[Tuple[str, Tuple[str, Any, str]]]:
    """Open every uploaded file as a multipart file part under its field name."""
    parts = []
    for upload in files:
        handle = stack.enter_context(open(upload.path, "rb"))
        filename = upload.filename or os.path.basename(upload.path)
        content_type = upload.content_type or "application/octet-stream"
        parts.append((upload.field_name, (filename, handle, content_type)))
    return parts
