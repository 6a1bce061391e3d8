"""
URL rewriting helpers for the proxy.
"""

from __future__ import annotations

from urllib.parse import quote, urlsplit, urlunsplit

from flask import request

# Characters left alone when re-quoting a decoded path (RFC 3986 pchar + "/" + "%").
_PATH_SAFE = "/:@!$&'()*+,;=-._~%"


def get_raw_path() -> str:
    """
    Path of the current request as the client sent it (percent-encoded).

    Gunicorn and the Werkzeug server expose the request target through
    RAW_URI / REQUEST_URI; otherwise the decoded path is quoted again.
    """
    raw_uri = request.environ.get("RAW_URI") or request.environ.get("REQUEST_URI")
    if raw_uri:
        path = raw_uri.split("?", 1)[0]
        if path.startswith("/"):
            return path
        # Absolute-form request target (http://host/path)
        parts = urlsplit(path)
        if parts.scheme and parts.netloc:
            return parts.path or "/"
    return quote(request.path, safe=_PATH_SAFE)


def remaining_path(route_path: str, request_path: str) -> str:
    """Strip the matched prefix and make sure the remainder is rooted."""
    remaining = request_path[len(route_path):]
    if not remaining.startswith("/"):
        remaining = "/" + remaining
    return remaining


def build_upstream_url(target: str, remaining: str, query_string: str = "") -> str:
    """
    Resolve ``remaining`` (a rooted path) and ``query_string`` against ``target``.

    Scheme, host and base path of the target are kept; the base path acts as
    a directory and the remainder is appended below it. The incoming query
    string replaces any query on the target.
    """
    parts = urlsplit(target)
    if parts.scheme.lower() not in ("http", "https"):
        raise ValueError(f"Invalid target URL {target!r}: scheme must be http or https")
    if not parts.hostname:
        raise ValueError(f"Invalid target URL {target!r}: missing host")

    base_path = parts.path
    if not base_path.endswith("/"):
        base_path += "/"

    return urlunsplit((parts.scheme, parts.netloc, base_path + remaining[1:], query_string, ""))


def target_host(target: str) -> str:
    """Value for the upstream Host header (host plus explicit port)."""
    netloc = urlsplit(target).netloc
    # Drop userinfo if the target embeds credentials
    return netloc.rsplit("@", 1)[-1]
