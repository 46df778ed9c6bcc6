"""
Local API Docs Routes
HTTP front door: health, proxy relay, endpoint editor persistence and the
static file fallback
"""
import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError

from api_docs.core.config import Settings
from api_docs.core.relay import ProxyRelay, RelayError, RelayErrorKind, RelayResult
from api_docs.core.static import StaticFileServer
from api_docs.models.api import (
    ErrorResponse,
    ProxyRequest,
    SaveApiRequest,
    SaveApiResponse,
    UpdateIndexRequest,
    UpdateIndexResponse,
)
from api_docs.store import EndpointGroup, EndpointStore, InvalidFileNameError, StoreWriteError

logger = logging.getLogger(__name__)

# Create API router
router = APIRouter()


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_relay(request: Request) -> ProxyRelay:
    return request.app.state.relay


def get_store(request: Request) -> EndpointStore:
    return request.app.state.store


def get_static_server(request: Request) -> StaticFileServer:
    return request.app.state.static


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


async def read_json_body(request: Request) -> Any:
    """
    Decode the request body as JSON.

    Raises:
        ValueError: If the body is not valid JSON or nests too deeply to decode
    """
    raw = await request.body()
    try:
        return json.loads(raw)
    except RecursionError as e:
        raise ValueError("JSON nesting too deep") from e


def relay_status_code(result: RelayResult, strict: bool) -> int:
    """Map a relay outcome to the HTTP status of the /proxy response."""
    if not isinstance(result, RelayError):
        return status.HTTP_200_OK
    if result.kind is RelayErrorKind.VALIDATION:
        return status.HTTP_400_BAD_REQUEST
    if not strict:
        # Relay failures travel inside the payload as status "error"
        return status.HTTP_200_OK
    if result.kind is RelayErrorKind.TIMEOUT:
        return status.HTTP_504_GATEWAY_TIMEOUT
    return status.HTTP_502_BAD_GATEWAY


@router.get("/health", tags=["health"])
async def health_check(settings: Settings = Depends(get_app_settings)):
    """Health check used by the UI to detect a running server"""
    return {"status": "ok", "port": settings.PORT}


@router.get("/config", tags=["health"])
async def client_config(settings: Settings = Depends(get_app_settings)):
    """Port and default target host the UI bootstraps from"""
    return {"port": settings.PORT, "host": settings.HOST}


@router.post("/proxy", tags=["proxy"])
async def proxy(
    request: Request,
    relay: ProxyRelay = Depends(get_relay),
    settings: Settings = Depends(get_app_settings)
):
    """Relay a browser-described request to an external API"""
    try:
        payload = await read_json_body(request)
        proxy_request = ProxyRequest.model_validate(payload)
    except (ValueError, ValidationError):
        # ValidationError also covers payloads that are valid JSON but not an object
        return error_response(status.HTTP_400_BAD_REQUEST, "Invalid JSON payload")

    result = await relay.relay(proxy_request)

    if isinstance(result, RelayError) and result.kind is RelayErrorKind.VALIDATION:
        return error_response(status.HTTP_400_BAD_REQUEST, result.message)

    return JSONResponse(
        status_code=relay_status_code(result, settings.PROXY_STRICT_STATUS),
        content=result.to_payload()
    )


@router.post("/save-api", tags=["editor"])
async def save_api(request: Request, store: EndpointStore = Depends(get_store)):
    """Overwrite an endpoint group file with the editor's data"""
    try:
        body = SaveApiRequest.model_validate(await read_json_body(request))
    except ValueError:
        return error_response(status.HTTP_400_BAD_REQUEST, "Invalid JSON")

    if not body.fileName or body.data is None:
        return error_response(status.HTTP_400_BAD_REQUEST, "fileName and data required")

    try:
        EndpointGroup.model_validate(body.data)
    except ValidationError as e:
        logger.warning("Rejected malformed endpoint group", extra={"file": body.fileName, "errors": e.error_count()})
        return error_response(status.HTTP_400_BAD_REQUEST, "data is not a valid endpoint group")

    try:
        # The editor's document is written as sent so unknown fields survive
        file_name = await store.write_group(body.fileName, body.data)
    except InvalidFileNameError as e:
        return error_response(status.HTTP_400_BAD_REQUEST, e.message)
    except StoreWriteError as e:
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, e.message)

    return SaveApiResponse(file=file_name).model_dump()


@router.post("/update-index", tags=["editor"])
async def update_index(request: Request, store: EndpointStore = Depends(get_store)):
    """Register an endpoint group file in the index"""
    try:
        body = UpdateIndexRequest.model_validate(await read_json_body(request))
    except ValueError:
        return error_response(status.HTTP_400_BAD_REQUEST, "Invalid JSON")

    if not body.file:
        return error_response(status.HTTP_400_BAD_REQUEST, "file is required")

    try:
        index = await store.append_index(body.file)
    except InvalidFileNameError as e:
        return error_response(status.HTTP_400_BAD_REQUEST, e.message)
    except StoreWriteError as e:
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, e.message)

    return UpdateIndexResponse(index=index).model_dump()


@router.api_route("/{full_path:path}", methods=["GET", "HEAD"], include_in_schema=False)
async def static_files(
    request: Request,
    static: StaticFileServer = Depends(get_static_server)
) -> Response:
    """Serve UI files; decoding and traversal checks use the raw request path"""
    raw_path = request.scope.get("raw_path") or request.url.path.encode("utf-8")
    response = await static.serve(raw_path.split(b"?", 1)[0].decode("latin-1"))
    if request.method == "HEAD":
        # Same status and headers (Content-Length included) without the body
        return Response(status_code=response.status_code, headers=dict(response.headers))
    return response
