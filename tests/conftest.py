"""Shared fixtures: an in-process mock of the smart-me API.

The mock is an ``httpx.MockTransport`` handler, so requests never leave the
process while still going through the real httpx request pipeline.
"""

from collections.abc import Callable, Iterator

import httpx
import pytest

from smartme_client import client, options

BASE_URL = "http://testserver/"
USERNAME = "test-user"
PASSWORD = "test-pass"

Handler = Callable[[httpx.Request], httpx.Response]


class MockServer:
    """Records every request and answers with the handler routed to its path."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.routes: dict[str, Handler] = {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get(request.url.path)
        if handler is None:
            return httpx.Response(404)
        return handler(request)

    def respond(self, path: str, status_code: int = 200, **kwargs) -> None:
        """Route ``path`` to a fixed response."""
        self.routes[path] = lambda request: httpx.Response(status_code, **kwargs)


@pytest.fixture
def server() -> MockServer:
    return MockServer()


@pytest.fixture
def http_client(server: MockServer) -> Iterator[httpx.Client]:
    with httpx.Client(transport=httpx.MockTransport(server)) as c:
        yield c


@pytest.fixture
def api_client(http_client: httpx.Client) -> client.SmartMeClient:
    """SmartMeClient talking to the mock server."""
    return client.SmartMeClient(
        USERNAME,
        PASSWORD,
        options.with_http_client(http_client),
        options.with_base_url(BASE_URL),
    )
