"""Transport fixing the Livebox session cookie name.

The Livebox names its session cookie ``<context>/sessid``. A slash is not
allowed in a cookie name, so a conformant cookie jar may discard it. The
patcher renames the cookie on the fly: ``/sessid`` becomes ``-sessid`` in
``Set-Cookie`` headers before the jar sees them, and back again in the
``Cookie`` header before a request leaves.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

# Configure module logger
logger = logging.getLogger(__name__)

REAL_COOKIE_NAME = "/sessid"
PATCHED_COOKIE_NAME = "-sessid"


def restore_cookie_name(header: str) -> str:
    """Rewrite the jar-safe cookie name in a ``Cookie`` header to the real one."""
    return header.replace(PATCHED_COOKIE_NAME, REAL_COOKIE_NAME)


def patch_cookie_name(header: str) -> str:
    """Rewrite the real cookie name in a ``Set-Cookie`` header to a jar-safe one."""
    return header.replace(REAL_COOKIE_NAME, PATCHED_COOKIE_NAME)


class CookieNamePatcher(httpx.BaseTransport):
    """Transport wrapper renaming the session cookie in both directions.

    Attributes:
        transport: The wrapped transport doing the actual round trip.

    Example:
        >>> client = httpx.Client(transport=CookieNamePatcher())
    """

    def __init__(self, transport: Optional[httpx.BaseTransport] = None) -> None:
        """Initialize the patcher.

        Args:
            transport: Transport to wrap. Defaults to an HTTP transport that
                skips certificate verification, since the router serves a
                self-signed certificate.
        """
        self.transport = transport or httpx.HTTPTransport(verify=False)

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        cookie = request.headers.get("Cookie")
        if cookie and PATCHED_COOKIE_NAME in cookie:
            request.headers["Cookie"] = restore_cookie_name(cookie)

        response = self.transport.handle_request(request)

        set_cookies = response.headers.get_list("Set-Cookie")
        if any(REAL_COOKIE_NAME in value for value in set_cookies):
            logger.debug("Renaming session cookie in response")
            response.headers = httpx.Headers([
                (key, patch_cookie_name(value) if key.lower() == "set-cookie" else value)
                for key, value in response.headers.multi_items()
            ])

        return response

    def close(self) -> None:
        self.transport.close()
