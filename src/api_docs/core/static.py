"""
Static file serving for the documentation UI.

Request paths are percent-decoded once and resolved against the document
root. Anything that resolves outside the root is refused before the
filesystem is read.
"""

import logging
from pathlib import Path
from typing import Dict
from urllib.parse import unquote

import aiofiles
from fastapi.responses import PlainTextResponse, Response

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"

MIME_TYPES: Dict[str, str] = {
    ".html": "text/html; charset=utf-8",
    ".css": "text/css; charset=utf-8",
    ".js": "application/javascript; charset=utf-8",
    ".json": "application/json; charset=utf-8",
    ".map": "application/json; charset=utf-8",
    ".txt": "text/plain; charset=utf-8",
    ".ico": "image/x-icon",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".woff": "font/woff",
    ".woff2": "font/woff2",
}


class ForbiddenPathError(Exception):
    """Raised when a request path resolves outside the document root."""


def content_type_for(path: Path) -> str:
    return MIME_TYPES.get(path.suffix.lower(), DEFAULT_CONTENT_TYPE)


def resolve_static_path(root: Path, request_path: str, default_document: str = "index.html") -> Path:
    """
    Map a raw request path to a file path under ``root``.

    Raises:
        ForbiddenPathError: If the decoded path escapes the root or names
            no valid file (embedded NUL)
    """
    decoded = unquote(request_path)
    if "\x00" in decoded:
        raise ForbiddenPathError(request_path)
    if decoded == "/":
        decoded = "/" + default_document

    root = root.resolve()
    try:
        resolved = root.joinpath("." + decoded).resolve()
    except (OSError, ValueError) as e:
        raise ForbiddenPathError(request_path) from e

    if resolved != root and not resolved.is_relative_to(root):
        raise ForbiddenPathError(request_path)
    return resolved


class StaticFileServer:
    """Serves files below a document root with a no-cache policy."""

    def __init__(self, root: Path, default_document: str = "index.html"):
        self.root = Path(root).resolve()
        self.default_document = default_document

    async def serve(self, request_path: str) -> Response:
        try:
            path = resolve_static_path(self.root, request_path, self.default_document)
        except ForbiddenPathError:
            logger.warning("Refused static path outside document root", extra={"path": request_path})
            return PlainTextResponse("Forbidden", status_code=403)

        try:
            async with aiofiles.open(path, "rb") as f:
                data = await f.read()
        except OSError:
            return PlainTextResponse(f"Not Found: {unquote(request_path)}", status_code=404)

        return Response(
            content=data,
            media_type=content_type_for(path),
            headers={"Cache-Control": "no-cache"},
        )
