"""
Request forwarding: rewrite the incoming request against a route's target and
relay the upstream response back to the client.
"""

from __future__ import annotations

import logging
from typing import Optional

import requests
from flask import Response, current_app, request
from urllib3.exceptions import HTTPError as Urllib3HTTPError

from routeproxy.models.route_config import Route

from ..http_session import _SESSION
from .urls import build_upstream_url, get_raw_path, remaining_path, target_host

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192

# Hop-by-hop headers (RFC 7230 section 6.1) describe one connection and are
# never relayed. Framing of both legs is handled by requests and the WSGI server.
HOP_BY_HOP_HEADERS = {
    "connection",
    "keep-alive",
    "proxy-connection",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailer",
    "transfer-encoding",
    "upgrade",
}


def build_upstream_headers(target: str) -> dict:
    """Copy the client's end-to-end headers and point Host at the upstream."""
    headers = {}
    for name, value in request.headers:
        name_lower = name.lower()
        if name_lower in HOP_BY_HOP_HEADERS or name_lower == "host":
            continue
        headers[name] = value
    headers["Host"] = target_host(target)
    return headers


def _has_body() -> bool:
    if request.content_length:
        return True
    transfer_encoding = request.headers.get("Transfer-Encoding", "")
    return "chunked" in transfer_encoding.lower()


def _upstream_timeout() -> Optional[float]:
    return current_app.config.get("PROXY_UPSTREAM_TIMEOUT") or None


def relay_response(upstream: requests.Response) -> Response:
    """Wrap the upstream response for the client, body streamed as received."""
    response_headers = []
    has_content_type = False
    for name, value in upstream.raw.headers.items():
        name_lower = name.lower()
        if name_lower in HOP_BY_HOP_HEADERS:
            continue
        if name_lower == "content-type":
            has_content_type = True
        response_headers.append((name, value))

    def generate():
        try:
            for chunk in upstream.raw.stream(CHUNK_SIZE, decode_content=False):
                if chunk:
                    yield chunk
        except (requests.exceptions.RequestException, Urllib3HTTPError, OSError) as e:
            # Status line is already out; the client sees a truncated body.
            logger.error(f"Error streaming response body from {upstream.url}: {e}")

    response = Response(generate(), status=upstream.status_code, headers=response_headers)
    if not has_content_type:
        response.headers.pop("Content-Type", None)
    # Runs when the body is exhausted or the client disconnects.
    response.call_on_close(upstream.close)
    return response


def forward(route: Route, request_path: Optional[str] = None) -> Response:
    """
    Send the current request to ``route.target`` and relay the answer.

    Failures to build or send the upstream request become a 502; they are
    never raised to the caller.
    """
    if request_path is None:
        request_path = get_raw_path()

    try:
        remaining = remaining_path(route.path, request_path)
        target_url = build_upstream_url(route.target, remaining, request.environ.get("QUERY_STRING", ""))
        headers = build_upstream_headers(route.target)

        upstream_request = requests.Request(
            method=request.method,
            url=target_url,
            headers=headers,
            data=request.stream if _has_body() else None,
        )
        prepared = _SESSION.prepare_request(upstream_request)
        if "Content-Length" in prepared.headers:
            # requests cannot size a WSGI input stream and marks it chunked;
            # the client's Content-Length is authoritative.
            prepared.headers.pop("Transfer-Encoding", None)

        logger.debug(f"Proxy {request.method} {request_path} -> {target_url}")

        upstream = _SESSION.send(prepared, stream=True, allow_redirects=False, timeout=_upstream_timeout())
    except (ValueError, requests.exceptions.RequestException, Urllib3HTTPError) as e:
        logger.error(f"Error proxying {request.method} {request_path} to {route.target}: {e}")
        return Response(f"Proxy Error: {e}", status=502, mimetype="text/plain")
    except Exception as e:
        logger.exception(f"Unexpected error proxying {request.method} {request_path} to {route.target}")
        return Response(f"Proxy Error: {e}", status=502, mimetype="text/plain")

    return relay_response(upstream)
