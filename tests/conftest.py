"""Shared fixtures for the Local API Docs test suite."""

import socket
from typing import Callable, List

import httpx
import pytest
from fastapi.testclient import TestClient

from api_docs.core.config import Settings
from api_docs.core.relay import ProxyRelay
from api_docs.main import create_app


@pytest.fixture
def docs_root(tmp_path):
    """Document root with a default page, nested asset and apis directory."""
    root = tmp_path / "public"
    (root / "css").mkdir(parents=True)
    (root / "index.html").write_text("<h1>Local API Docs</h1>", encoding="utf-8")
    (root / "css" / "app.css").write_text("body { margin: 0; }", encoding="utf-8")
    return root


@pytest.fixture
def settings(docs_root):
    """Settings isolated from any local.env in the working directory."""
    return Settings(
        _env_file=None,
        PORT=3000,
        HOST="https://api.example.test",
        DOCS_ROOT=str(docs_root),
        APIS_DIR=str(docs_root / "apis"),
        PROXY_TIMEOUT=5.0,
    )


@pytest.fixture
def upstream_calls() -> List[httpx.Request]:
    return []


@pytest.fixture
def mock_upstream(upstream_calls) -> Callable[..., httpx.MockTransport]:
    """Build a mock transport that records every outbound request."""
    def factory(handler):
        def recording_handler(request: httpx.Request):
            upstream_calls.append(request)
            return handler(request)
        return httpx.MockTransport(recording_handler)
    return factory


@pytest.fixture
def ping_transport(mock_upstream):
    """Upstream answering /ping with {"pong": true}."""
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/ping":
            return httpx.Response(200, json={"pong": True})
        return httpx.Response(404, text="no such route")
    return mock_upstream(handler)


@pytest.fixture
def make_client(settings):
    """Create a TestClient for an app wired to the given transport."""
    clients = []

    def factory(transport=None, **overrides):
        app_settings = settings.model_copy(update=overrides) if overrides else settings
        relay = ProxyRelay(timeout=app_settings.PROXY_TIMEOUT, transport=transport)
        client = TestClient(create_app(app_settings, relay=relay))
        client.__enter__()
        clients.append(client)
        return client

    yield factory

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def closed_port() -> int:
    """A local port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]
