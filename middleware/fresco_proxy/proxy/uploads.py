"""
Inbound request reading.

Converts a Starlette request into an ``InboundRequest`` snapshot:

- multipart and urlencoded forms: files are spooled to temporary files,
  the remaining fields become the body
- JSON bodies are parsed into the body mapping
- anything else leaves the body empty
"""

import logging
import os
import tempfile
from typing import Any, Dict, Iterable, List

from fastapi import Request
from starlette.datastructures import UploadFile

from ..models import InboundRequest, UploadedFile

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


async def read_inbound_request(request: Request, prefix: str = "") -> InboundRequest:
    """
    Snapshot an inbound request for proxying.

    Args:
        request: Starlette/FastAPI request
        prefix: Mount prefix stripped from the path (e.g. ``/api``)

    Returns:
        InboundRequest with the live session attached when one exists
    """
    body: Dict[str, Any] = {}
    files: List[UploadedFile] = []

    content_type = request.headers.get("content-type", "")

    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        try:
            for field_name, value in form.multi_items():
                if isinstance(value, UploadFile):
                    files.append(await spool_upload(field_name, value))
                else:
                    body[field_name] = value
        except Exception:
            # Nothing downstream owns the files spooled so far
            _discard(upload.path for upload in files)
            raise
        finally:
            await form.close()
    else:
        body = await _read_json_body(request)

    return InboundRequest(
        method=request.method,
        url=_relative_url(request, prefix),
        body=body,
        files=files,
        headers={key.lower(): value for key, value in request.headers.items()},
        session=request.session if "session" in request.scope else None,
    )


async def spool_upload(field_name: str, upload: UploadFile) -> UploadedFile:
    """
    Write an uploaded file to a temporary file that outlives the request body.

    The caller owns the returned file and must remove it.
    """
    suffix = os.path.splitext(upload.filename or "")[1]

    with tempfile.NamedTemporaryFile(prefix="fresco-upload-", suffix=suffix, delete=False) as handle:
        try:
            while True:
                chunk = await upload.read(CHUNK_SIZE)
                if not chunk:
                    break
                handle.write(chunk)
        except Exception:
            _discard([handle.name])
            raise

    return UploadedFile(
        field_name=field_name,
        path=handle.name,
        filename=upload.filename,
        content_type=upload.content_type,
    )


async def _read_json_body(request: Request) -> Dict[str, Any]:
    raw = await request.body()
    if not raw:
        return {}

    try:
        payload = await request.json()
    except ValueError:
        logger.warning(f"Ignoring non-JSON body on {request.method} {request.url.path}")
        return {}

    if not isinstance(payload, dict):
        logger.warning(f"Ignoring non-object JSON body on {request.method} {request.url.path}")
        return {}

    return payload


def _relative_url(request: Request, prefix: str) -> str:
    path = request.url.path
    if prefix and path.startswith(prefix):
        path = path[len(prefix):]

    if request.url.query:
        return f"{path}?{request.url.query}"

    return path


def _discard(paths: Iterable[str]) -> None:
    for path in paths:
        try:
            os.remove(path)
        except OSError as e:
            logger.warning(f"Could not remove spooled upload {path}: {e}")
