"""CORS middleware for the front door."""

import logging

from fastapi import Request
from fastapi.responses import Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,POST,PUT,PATCH,DELETE,OPTIONS",
    "Access-Control-Allow-Headers": "*",
}


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """
    Answer every OPTIONS request with a bare 204 and stamp the permissive
    CORS headers on every other response.
    """

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS":
            logger.debug("CORS preflight", extra={"path": request.url.path})
            return Response(status_code=204, headers=CORS_HEADERS)

        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response
