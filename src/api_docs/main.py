"""Main entry point for the Local API Docs server."""

import errno
import logging
import socket
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from api_docs.api.cors import CORS_HEADERS, CORSHeadersMiddleware
from api_docs.api.routes import router
from api_docs.core.config import Settings, get_settings
from api_docs.core.logging import get_logger, setup_logging
from api_docs.core.relay import ProxyRelay
from api_docs.core.static import StaticFileServer
from api_docs.store import EndpointStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan management
    Makes sure the endpoint group directory exists before serving
    """
    settings: Settings = app.state.settings
    app.state.store.ensure_directory()

    logger.info(
        "Server configuration",
        extra={
            "port": settings.PORT,
            "bind_host": settings.BIND_HOST,
            "docs_root": str(settings.docs_root),
            "apis_dir": str(settings.apis_dir),
            "proxy_timeout": settings.PROXY_TIMEOUT,
            "strict_status": settings.PROXY_STRICT_STATUS
        }
    )

    yield

    logger.info("Shutting down Local API Docs server...")


async def general_exception_handler(request: Request, exc: Exception):
    """General exception handler for unhandled errors"""
    logger.error(
        "Unhandled exception",
        extra={
            "url": str(request.url),
            "method": request.method,
            "error": str(exc)
        },
        exc_info=True
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
        # Rendered outside CORSHeadersMiddleware, so the headers are added here
        headers=CORS_HEADERS
    )


def create_app(settings: Optional[Settings] = None, relay: Optional[ProxyRelay] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Local API Docs",
        description="Static documentation UI with a CORS-free request relay",
        version="0.1.0",
        # Disabled so that no framework route shadows a static file
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.relay = relay or ProxyRelay(timeout=settings.PROXY_TIMEOUT)
    app.state.store = EndpointStore(settings.apis_dir, settings.INDEX_FILE)
    app.state.static = StaticFileServer(settings.docs_root, settings.DEFAULT_DOCUMENT)

    app.add_middleware(CORSHeadersMiddleware)
    app.add_exception_handler(Exception, general_exception_handler)
    app.include_router(router)

    return app


# Create app instance for uvicorn to find
app = create_app()


def bind_socket(host: str, port: int) -> socket.socket:
    """Bind the listen socket up front so a busy port is reported clearly."""
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
    except OSError:
        sock.close()
        raise
    sock.set_inheritable(True)
    return sock


def main() -> None:
    """Main entry point for the application."""
    settings = get_settings()
    setup_logging(settings)
    console = get_logger(__name__)

    try:
        sock = bind_socket(settings.BIND_HOST, settings.PORT)
    except OSError as e:
        if e.errno == errno.EADDRINUSE:
            console.error(
                f"Port {settings.PORT} is already in use. "
                "Change PORT in local.env or stop the process holding the port."
            )
        else:
            console.error(f"Could not bind {settings.BIND_HOST}:{settings.PORT}: {e}")
        sys.exit(1)

    console.info(f"Local API Docs server listening on http://localhost:{settings.PORT}")
    console.info("Serving static files and relaying API requests. Stop with Ctrl+C.")

    config = uvicorn.Config(
        create_app(settings),
        log_level=settings.LOG_LEVEL.lower(),
        access_log=True,
        server_header=False,
        date_header=True,
        # uvicorn records go through the root handler installed by setup_logging
        log_config=None,
    )
    uvicorn.Server(config).run(sockets=[sock])


if __name__ == "__main__":
    main()
