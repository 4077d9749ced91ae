from collections.abc import Callable

import httpx
import pytest
from fastapi.testclient import TestClient

from app import create_app
from core.config import Config, LimitSettings, UpstreamSettings

UPSTREAM = "https://upstream.example"


class RecordingLogger:
    """RequestLogger that keeps events in memory."""

    def __init__(self):
        self.events: list[tuple] = []

    def log_forward(self, method: str, target_url: str) -> None:
        self.events.append(("forward", method, target_url))

    def log_response(self, method: str, target_url: str, status: int) -> None:
        self.events.append(("response", method, target_url, status))

    def log_error(self, method: str, target_url: str, message: str) -> None:
        self.events.append(("error", method, target_url, message))


class FakeUpstream:
    """MockTransport handler that records every request it receives."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.respond: Callable[[httpx.Request], httpx.Response] = lambda request: upstream_response(
            200, b"ok"
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.respond(request)


def upstream_response(
    status: int,
    body: bytes = b"",
    headers: list[tuple[str, str]] | None = None,
) -> httpx.Response:
    """Build an unread upstream response, the way a real transport hands it over."""
    return httpx.Response(status, headers=headers or [], stream=httpx.ByteStream(body))


@pytest.fixture
def recording_logger():
    return RecordingLogger()


@pytest.fixture
def fake_upstream():
    return FakeUpstream()


@pytest.fixture
def make_client(recording_logger, fake_upstream):
    """Factory for a TestClient wired to the fake upstream."""
    clients: list[TestClient] = []

    def _make(**limits) -> TestClient:
        config = Config(
            upstream=UpstreamSettings(base_url=UPSTREAM),
            limits=LimitSettings(**limits),
        )
        app = create_app(config, recording_logger, transport=httpx.MockTransport(fake_upstream))
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client):
    return make_client()
