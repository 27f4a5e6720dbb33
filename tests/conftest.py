"""Shared fixtures: a fake Livebox answering through httpx.MockTransport."""

import json
from typing import Any, Dict, Iterator, List, Tuple

import httpx
import pytest

from mcp_livebox.livebox_client import LiveboxClient

HOST = "http://192.168.1.1"
PASSWORD = "s3cret"
CONTEXT_ID = "ctx-1234"
SESSION_COOKIE = "a1b2c3/sessid=0123abcd"


class FakeLivebox:
    """Minimal stand-in for the router web-service endpoint.

    Answers createContext with a context ID and a session cookie, and any
    other method with the payload registered in ``responses``.
    """

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.responses: Dict[Tuple[str, str], Any] = {}
        self.login_body: Any = {"status": 0, "data": {"contextID": CONTEXT_ID}}
        self.status_code = 200

    def bodies(self) -> List[Dict[str, Any]]:
        """Decoded JSON bodies of every request received."""
        return [json.loads(r.content) for r in self.requests]

    def last_body(self) -> Dict[str, Any]:
        return self.bodies()[-1]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        body = json.loads(request.content)

        if body["method"] == "createContext":
            if isinstance(self.login_body, str):
                return httpx.Response(200, text=self.login_body)
            return httpx.Response(
                200,
                json=self.login_body,
                headers={"Set-Cookie": f"{SESSION_COOKIE}; Path=/; HttpOnly"},
            )

        payload = self.responses.get((body["service"], body["method"]), {"status": True})
        return httpx.Response(self.status_code, json=payload)


@pytest.fixture
def router() -> FakeLivebox:
    return FakeLivebox()


@pytest.fixture
def transport(router: FakeLivebox) -> httpx.MockTransport:
    return httpx.MockTransport(router.handler)


@pytest.fixture
def client(transport: httpx.MockTransport) -> Iterator[LiveboxClient]:
    livebox = LiveboxClient(HOST, PASSWORD, transport=transport)
    yield livebox
    livebox.close()


