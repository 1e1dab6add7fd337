"""
Test Configuration
==================
Pytest fixtures for the LogicMonitor RPC client tests.
"""

from collections.abc import Generator
from typing import Any, Callable

import httpx
import pytest

from logicmonitor_rpc.client import LogicMonitorClient
from logicmonitor_rpc.config import Credentials, Settings
from logicmonitor_rpc.request import RequestBuilder
from logicmonitor_rpc.transport import Transport


class FakeRPCServer:
    """Records requests and answers each RPC method with a canned response."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.responses: dict[str, Callable[[httpx.Request], httpx.Response]] = {}

    def reply(self, method: str, data: Any = None, status: int = 200, errmsg: str = "OK") -> None:
        """Answer ``method`` with an envelope."""
        body = {"status": status, "errmsg": errmsg, "data": data}
        self.responses[method] = lambda request: httpx.Response(200, json=body)

    def reply_raw(self, method: str, response: httpx.Response) -> None:
        self.responses[method] = lambda request: response

    def fail(self, method: str, exc: Exception) -> None:
        def raise_exc(request: httpx.Request) -> httpx.Response:
            raise exc

        self.responses[method] = raise_exc

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        method = request.url.path.rsplit("/", 1)[-1]
        if method not in self.responses:
            return httpx.Response(404, text="no such method")
        return self.responses[method](request)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(tenant="acme", username="bob", secret="s3cret")


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment and any .env file."""
    return Settings(_env_file=None, company="acme", username="bob", password="s3cret")


@pytest.fixture
def builder(credentials: Credentials) -> RequestBuilder:
    return RequestBuilder(credentials)


@pytest.fixture
def server() -> FakeRPCServer:
    return FakeRPCServer()


@pytest.fixture
def http_client(server: FakeRPCServer) -> Generator[httpx.Client, None, None]:
    with httpx.Client(transport=httpx.MockTransport(server)) as c:
        yield c


@pytest.fixture
def transport(builder: RequestBuilder, http_client: httpx.Client) -> Transport:
    return Transport(builder, http_client=http_client)


@pytest.fixture
def client(
    credentials: Credentials,
    settings: Settings,
    http_client: httpx.Client,
) -> Generator[LogicMonitorClient, None, None]:
    with LogicMonitorClient(credentials, settings=settings, http_client=http_client) as lm:
        yield lm


@pytest.fixture
def sample_data_payload() -> dict:
    """A getData payload with two instances."""
    return {
        "dataPoints": ["cpu", "mem"],
        "values": {
            "web01-cpu": [
                [1000, "t1", 10, 20],
                [1060, "t2", 11, None],
            ],
            "web02-cpu": [
                [1000, "t1", 30, 40],
            ],
        },
        "tzoffset": 3600,
    }
