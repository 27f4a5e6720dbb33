"""Livebox router API client.

The client speaks the JSON web-service API used by the Livebox web
interface. Logging in creates a context on the router whose identifier is
sent back in the ``Authorization`` header of every later call. The router
drops idle contexts after roughly five minutes, so a client is meant for a
short burst of calls, not for long-lived use.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

import httpx

from .cookie_patch import CookieNamePatcher
from .envelope import ApiRequest, ApiResponse
from .exceptions import (
    AuthenticationError,
    DecodeError,
    LiveboxError,
    NotFoundError,
    TransportError,
)
from .port_forwarding import ORIGIN, PortForwardingRule, wire_id

# Configure module logger
logger = logging.getLogger(__name__)

CONTENT_TYPE = "application/x-sah-ws-4-call+json"
LOGIN_AUTHORIZATION = "X-Sah-Login"
AUTHORIZATION_PREFIX = "X-Sah "

APPLICATION_NAME = "webui"
USERNAME = "admin"


@contextmanager
def _operation(name: str) -> Iterator[None]:
    """Prefix any LiveboxError raised in the block with the operation name."""
    try:
        yield
    except LiveboxError as e:
        raise e.wrap(name) from e


class LiveboxClient:
    """Client for the Livebox web-service API.

    Creating the client logs in immediately; a failed login raises and no
    client is returned.

    Attributes:
        host: Base URI of the router, including the scheme.

    Example:
        >>> with LiveboxClient("https://192.168.1.1", "my_password") as client:
        ...     for rule in client.list_port_forwardings():
        ...         print(rule.name, rule.external_port)
    """

    def __init__(
        self,
        host: str,
        password: str,
        *,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """Initialize the client and log in.

        Args:
            host: Router URI with an http or https scheme. https is strongly
                recommended even though the router certificate is
                self-signed and is not verified.
            password: Password of the admin user.
            transport: Transport doing the round trips, wrapped by the
                cookie name patcher. Defaults to a plain HTTP transport.

        Raises:
            LiveboxError: If login fails.
        """
        self.host = host.rstrip("/")
        self._token = ""
        self._http = httpx.Client(transport=CookieNamePatcher(transport))

        try:
            with _operation("login"):
                self._login(password)
        except LiveboxError:
            self._http.close()
            raise

    @property
    def token(self) -> str:
        """Session token obtained at login."""
        return self._token

    @property
    def url(self) -> str:
        """Endpoint receiving every API call."""
        return f"{self.host}/ws"

    def __enter__(self) -> LiveboxClient:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        """Release the HTTP connections. The router context is left to expire."""
        self._http.close()

    def _login(self, password: str) -> None:
        resp = self._login_call(
            "sah.Device.Information",
            "createContext",
            {
                "applicationName": APPLICATION_NAME,
                "username": USERNAME,
                "password": password,
            },
        )

        body = self._decode_json(resp)
        if not isinstance(body, dict):
            raise DecodeError(f"unexpected login response: {body!r}")

        ApiResponse(errors=body.get("errors")).raise_for_errors()

        data = body.get("data")
        context_id = data.get("contextID") if isinstance(data, dict) else None
        if not context_id:
            raise AuthenticationError("no context ID in login response")

        self._token = context_id
        logger.debug("Logged in to %s", self.host)

    def _post(self, request: ApiRequest, authorization: str) -> httpx.Response:
        logger.debug("Calling %s.%s", request.service, request.method)
        try:
            return self._http.post(
                self.url,
                json=request.to_dict(),
                headers={
                    "Authorization": authorization,
                    "Content-Type": CONTENT_TYPE,
                },
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError(str(e) or type(e).__name__) from e

    @staticmethod
    def _decode_json(resp: httpx.Response) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise DecodeError(f"decode response (HTTP {resp.status_code}): {e}") from e

    def _login_call(
        self,
        service: str,
        method: str,
        parameters: Dict[str, Any],
    ) -> httpx.Response:
        """Call a method without a session token.

        Returns:
            The raw response, whose body does not follow the generic envelope.
        """
        return self._post(ApiRequest(service, method, parameters), LOGIN_AUTHORIZATION)

    def call(self, service: str, method: str, parameters: Dict[str, Any]) -> Any:
        """Call a method of a router service with the session token.

        Args:
            service: Service name, e.g. "Firewall".
            method: Method name, e.g. "getPortForwarding".
            parameters: Named parameters of the method.

        Returns:
            The status payload of the response.

        Raises:
            TransportError: If the round trip fails.
            DecodeError: If the response is not a JSON envelope.
            APIError: If the response carries errors, whatever its HTTP status.
        """
        resp = self._post(
            ApiRequest(service, method, parameters),
            AUTHORIZATION_PREFIX + self._token,
        )
        api_resp = ApiResponse.from_dict(self._decode_json(resp))
        api_resp.raise_for_errors()
        return api_resp.status

    def list_port_forwardings(self) -> List[PortForwardingRule]:
        """Return all the port forwarding rules currently configured.

        The order of the rules is not specified.
        """
        with _operation("do request"):
            data = self.call("Firewall", "getPortForwarding", {"origin": ORIGIN})

        # A router without rules answers with a null status
        if data is None:
            data = {}

        if not isinstance(data, dict):
            raise DecodeError(f"unmarshal data: expected an object, got {data!r}")

        return [PortForwardingRule.from_wire(rule_id, raw) for rule_id, raw in data.items()]

    def get_port_forwarding(self, name: str) -> PortForwardingRule:
        """Return the port forwarding rule with the given name.

        The API has no way to fetch a single rule, so this lists them all
        and scans the result.

        Raises:
            NotFoundError: If no rule has this name.
        """
        with _operation("list port forwardings"):
            rules = self.list_port_forwardings()

        for rule in rules:
            if rule.name == name:
                return rule

        raise NotFoundError(f"port forward not found: {name!r}")

    def upsert_port_forwarding(self, rule: PortForwardingRule) -> PortForwardingRule:
        """Create or replace a port forwarding rule.

        Rules are keyed by name, so upserting an existing name overwrites it.

        Returns:
            The given rule, normalized. The router does not echo it back.

        Raises:
            ValidationError: If the rule is invalid. Nothing is sent then.
        """
        with _operation("validate configuration"):
            rule.validate()

        with _operation("do request"):
            self.call("Firewall", "setPortForwarding", rule.to_parameters())

        return rule.normalized()

    def delete_port_forwarding(self, name: str) -> None:
        """Delete the port forwarding rule with the given name."""
        with _operation("do request"):
            self.call(
                "Firewall",
                "deletePortForwarding",
                {"id": wire_id(name), "origin": ORIGIN},
            )
