import json

import httpx
import pytest

from uberclient.client.api import UberClient
from uberclient.config import ClientConfig
from uberclient.transport import HttpTransport


class RecordingHandler:
    """Mock Uber API: replays queued responses and records requests."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.responses: list[httpx.Response] = []

    def reply(self, status_code: int = 200, body=None, content: bytes | None = None):
        if content is None:
            content = b"" if body is None else json.dumps(body).encode()
        self.responses.append(httpx.Response(status_code, content=content))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            return httpx.Response(500, json={"message": "no response queued"})
        return self.responses.pop(0)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(
        api_host="https://api.test/v1",
        auth_host="https://login.test/oauth",
        sandbox_host="https://sandbox.test/v1",
    )


@pytest.fixture
async def client(handler, config):
    transport = HttpTransport(
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
    )
    client = UberClient("server-tok", access_token="bearer-tok", config=config, transport=transport)
    yield client
    await client.close()
