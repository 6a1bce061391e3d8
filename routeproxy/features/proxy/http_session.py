"""
HTTP session setup for proxying (connection pooling, no retries, no cookie jar).
"""

from http.cookiejar import DefaultCookiePolicy

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry


def create_proxy_session() -> requests.Session:
    """Create a requests session tuned for transparent relaying."""
    session = requests.Session()

    # Only headers copied from the client request are sent upstream.
    session.headers.clear()
    # Environment proxies and ~/.netrc credentials must not leak into relayed traffic.
    session.trust_env = False
    # Upstream Set-Cookie headers belong to the client, never to the shared session.
    session.cookies.set_policy(DefaultCookiePolicy(allowed_domains=[]))

    retry_strategy = Retry(total=0, read=False, redirect=False)

    adapter = HTTPAdapter(pool_connections=10, pool_maxsize=20, max_retries=retry_strategy)
    session.mount("http://", adapter)
    session.mount("https://", adapter)

    return session


_SESSION = create_proxy_session()
