"""
Proxy Relay
Performs one outbound HTTP(S) request on behalf of the browser UI and reports
the outcome as a tagged result instead of raising
"""
import asyncio
import json
import logging
import math
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

import httpx

from api_docs.models.api.proxy import ProxyRequest

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

# Always derived from the target URL and outgoing body, never taken from the caller
_COMPUTED_HEADERS = {"host", "content-length"}

# Added by httpx clients on every request; the caller's own values are kept
_CLIENT_DEFAULT_HEADERS = {"accept", "accept-encoding", "connection", "user-agent"}


class RelayErrorKind(str, Enum):
    """Why a relay call did not produce an upstream response."""
    VALIDATION = "validation"
    TRANSPORT = "transport"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class JsonBody:
    """Upstream body that parsed as JSON."""
    value: Any


@dataclass(frozen=True)
class RawBody:
    """Upstream body that is not JSON, kept as decoded text."""
    text: str


ResponseBody = Union[JsonBody, RawBody]


@dataclass
class RelayOk:
    status: int
    headers: Dict[str, Union[str, List[str]]]
    body: ResponseBody

    def to_payload(self) -> Dict[str, Any]:
        body = self.body.value if isinstance(self.body, JsonBody) else self.body.text
        return {"status": self.status, "headers": self.headers, "body": body}


@dataclass
class RelayError:
    kind: RelayErrorKind
    message: str

    def to_payload(self) -> Dict[str, Any]:
        return {"status": "error", "error": self.message}


RelayResult = Union[RelayOk, RelayError]


@dataclass
class OutboundRequest:
    method: str
    url: httpx.URL
    headers: Dict[str, str] = field(default_factory=dict)
    content: Optional[bytes] = None


def encode_body(body: Any) -> Optional[bytes]:
    """UTF-8 bytes of the outgoing body; non-string values are sent as JSON."""
    if body is None or body == "":
        return None
    if not isinstance(body, str):
        body = json.dumps(body, ensure_ascii=False, separators=(",", ":"))
    return body.encode("utf-8")


def build_outbound_request(request: ProxyRequest) -> Union[OutboundRequest, RelayError]:
    """
    Validate a proxy request and turn it into the exact outbound request.

    No I/O happens here, so validation failures are reported before any
    connection is attempted.
    """
    if not request.url:
        return RelayError(RelayErrorKind.VALIDATION, "url is required")

    try:
        url = httpx.URL(request.url)
    except (httpx.InvalidURL, ValueError, TypeError):
        return RelayError(RelayErrorKind.VALIDATION, "Invalid target URL")

    if url.scheme not in ("http", "https") or not url.host:
        return RelayError(RelayErrorKind.VALIDATION, "Invalid target URL")
    if url.port is not None and not 0 < url.port < 65536:
        return RelayError(RelayErrorKind.VALIDATION, "Invalid target URL")

    content = encode_body(request.body)

    headers = {
        key: value for key, value in request.headers.items()
        if key.lower() not in _COMPUTED_HEADERS
    }
    headers["Host"] = url.netloc.decode("ascii")
    if content is not None:
        headers["Content-Length"] = str(len(content))

    return OutboundRequest(
        method=(request.method or "GET").upper(),
        url=url,
        headers=headers,
        content=content,
    )


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def _finite_float(literal: str) -> float:
    value = float(literal)
    if math.isinf(value):
        raise ValueError(f"{literal} overflows a double")
    return value


def decode_body(raw: bytes) -> ResponseBody:
    """Parse as strict JSON when possible, regardless of the declared content type."""
    text = raw.decode("utf-8", errors="replace")
    try:
        return JsonBody(json.loads(text, parse_constant=_reject_constant, parse_float=_finite_float))
    except (ValueError, RecursionError):
        return RawBody(text)


def collect_headers(headers: httpx.Headers) -> Dict[str, Union[str, List[str]]]:
    """Lowercased response headers; repeated set-cookie stays a list."""
    collected: Dict[str, Union[str, List[str]]] = {}
    for key, value in headers.multi_items():
        key = key.lower()
        if key == "set-cookie":
            collected.setdefault(key, [])
            collected[key].append(value)
        elif key in collected:
            collected[key] = f"{collected[key]}, {value}"
        else:
            collected[key] = value
    return collected


class ProxyRelay:
    """
    One-shot relay for browser-issued requests.

    Every call opens its own client and connection and closes it afterwards.
    There are no retries and redirects are returned to the caller untouched.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.timeout = timeout
        self._transport = transport

    async def relay(self, request: ProxyRequest) -> RelayResult:
        """
        Relay a single request.

        Returns:
            RelayOk with the upstream status, headers and body, or RelayError
            tagged with the failure kind. Never raises for outbound failures.
        """
        outbound = build_outbound_request(request)
        if isinstance(outbound, RelayError):
            logger.info(
                "Rejected proxy request",
                extra={"url": request.url, "error": outbound.message}
            )
            return outbound

        started = time.perf_counter()
        try:
            result = await asyncio.wait_for(self._send(outbound), timeout=self.timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException):
            result = RelayError(RelayErrorKind.TIMEOUT, "Request timeout")
        except httpx.HTTPError as e:
            result = RelayError(RelayErrorKind.TRANSPORT, str(e) or e.__class__.__name__)
        except Exception as e:
            logger.error(f"Unexpected proxy error: {e}", exc_info=True)
            result = RelayError(RelayErrorKind.TRANSPORT, str(e) or e.__class__.__name__)

        elapsed = time.perf_counter() - started
        if isinstance(result, RelayOk):
            logger.info(
                "Request relayed",
                extra={
                    "method": outbound.method,
                    "url": str(outbound.url),
                    "status_code": result.status,
                    "elapsed": round(elapsed, 3)
                }
            )
        else:
            logger.warning(
                "Relay failed",
                extra={
                    "method": outbound.method,
                    "url": str(outbound.url),
                    "kind": result.kind.value,
                    "error": result.message,
                    "elapsed": round(elapsed, 3)
                }
            )
        return result

    async def _send(self, outbound: OutboundRequest) -> RelayOk:
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            limits=httpx.Limits(max_connections=1, max_keepalive_connections=0),
            follow_redirects=False,
            transport=self._transport,
        ) as client:
            request = client.build_request(
                method=outbound.method,
                url=outbound.url,
                headers=outbound.headers,
                content=outbound.content,
            )
            supplied = {key.lower() for key in outbound.headers}
            for name in _CLIENT_DEFAULT_HEADERS - supplied:
                if name in request.headers:
                    del request.headers[name]
            # Body is fully buffered by client.send
            response = await client.send(request)
            return RelayOk(
                status=response.status_code,
                headers=collect_headers(response.headers),
                body=decode_body(response.content),
            )
