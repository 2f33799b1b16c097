"""Tests for the interactive authorization listener.

The callback app is driven in-process through httpx's ASGI transport. The
full flow runs a real listener on a loopback port, with a browser launcher
that either fails or follows the redirect itself.
"""

import socket
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import uvicorn

from uberclient.auth.services.callback import CallbackListener, auto_authorize
from uberclient.auth.services.session import AuthorizationSession, AuthState
from uberclient.config import ClientConfig
from uberclient.errors import (
    AuthorizationCallbackError,
    AuthorizationRejected,
    StateValidationError,
)
from uberclient.transport import HttpTransport

REDIRECT_URI = "http://localhost:7635/callback"


def free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


class TestCallbackListener:
    def setup_method(self):
        # Arrange
        self.transport = HttpTransport()
        self.transport._http_client = AsyncMock()
        self.session = AuthorizationSession(self.transport, ClientConfig())
        self.session.begin("cid", "secret", REDIRECT_URI, "profile")

    def client_for(self, listener: CallbackListener) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(app=listener.app), base_url="http://localhost"
        )

    async def test_listener_takes_address_from_redirect_uri(self):
        listener = CallbackListener(self.session, REDIRECT_URI)

        assert listener.host == "localhost"
        assert listener.port == 7635
        assert listener.path == "/callback"

    async def test_listener_defaults_port(self):
        listener = CallbackListener(self.session, "http://localhost/")

        assert listener.port == 7635

    async def test_valid_callback_exchanges_code(self):
        # Arrange
        response = MagicMock()
        response.status_code = 200
        response.json.return_value = {"access_token": "tok", "token_type": "Bearer"}
        self.transport._http_client.request.return_value = response
        listener = CallbackListener(self.session, REDIRECT_URI)

        # Act
        async with self.client_for(listener) as client:
            reply = await client.get("/callback", params={"state": "uberclient", "code": "c0de"})

        # Assert
        assert reply.status_code == 200
        assert "you may close this webpage" in reply.text
        grant = await listener.outcome
        assert grant.access_token == "tok"
        assert self.session.state is AuthState.TOKEN_GRANTED
        form = self.transport._http_client.request.call_args[1]["data"]
        assert form["code"] == "c0de"

    async def test_wrong_state_is_tampering(self):
        listener = CallbackListener(self.session, REDIRECT_URI)

        async with self.client_for(listener) as client:
            reply = await client.get("/callback", params={"state": "evil", "code": "c0de"})

        assert reply.status_code == 400
        with pytest.raises(StateValidationError):
            await listener.outcome
        self.transport._http_client.request.assert_not_called()

    async def test_missing_code_is_an_error(self):
        listener = CallbackListener(self.session, REDIRECT_URI)

        async with self.client_for(listener) as client:
            await client.get("/callback", params={"state": "uberclient"})

        with pytest.raises(AuthorizationCallbackError):
            await listener.outcome

    async def test_denied_authorization_is_rejected(self):
        listener = CallbackListener(self.session, REDIRECT_URI)

        async with self.client_for(listener) as client:
            await client.get(
                "/callback", params={"state": "uberclient", "error": "access_denied"}
            )

        with pytest.raises(AuthorizationRejected) as exc_info:
            await listener.outcome
        assert exc_info.value.error == "access_denied"

    async def test_first_outcome_wins(self):
        # Arrange
        listener = CallbackListener(self.session, REDIRECT_URI)

        # Act
        async with self.client_for(listener) as client:
            await client.get("/callback", params={"state": "evil"})
            reply = await client.get("/callback", params={"state": "uberclient"})

        # Assert
        assert reply.status_code == 400
        with pytest.raises(StateValidationError):
            await listener.outcome

    async def test_unexpected_error_fails_flow(self):
        # Arrange
        self.transport._http_client.request.side_effect = RuntimeError("socket gone")
        listener = CallbackListener(self.session, REDIRECT_URI)

        # Act
        async with self.client_for(listener) as client:
            reply = await client.get("/callback", params={"state": "uberclient", "code": "c0de"})

        # Assert
        assert reply.status_code == 500
        with pytest.raises(AuthorizationCallbackError) as exc_info:
            await listener.outcome
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert self.session.current_grant() is None

    async def test_server_exiting_during_startup_raises(self, monkeypatch):
        # Arrange
        async def serve(server, sockets=None):
            for sock in sockets or []:
                sock.close()

        monkeypatch.setattr(uvicorn.Server, "serve", serve)
        listener = CallbackListener(self.session, "http://127.0.0.1:0/callback")

        # Act & Assert
        with pytest.raises(AuthorizationCallbackError, match="failed to start"):
            await listener.start()

    async def test_server_crashing_during_startup_raises(self, monkeypatch):
        async def serve(server, sockets=None):
            raise RuntimeError("lifespan failed")

        monkeypatch.setattr(uvicorn.Server, "serve", serve)
        listener = CallbackListener(self.session, "http://127.0.0.1:0/callback")

        with pytest.raises(AuthorizationCallbackError) as exc_info:
            await listener.start()

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        await listener.stop()


class TestAutoAuthorize:
    def setup_method(self):
        # Arrange
        self.transport = HttpTransport()
        self.transport._http_client = AsyncMock()
        self.session = AuthorizationSession(self.transport, ClientConfig())

    async def test_refused_browser_launch_ends_flow(self):
        # Arrange
        opened: list[str] = []

        def open_browser(url: str) -> bool:
            opened.append(url)
            return False

        # Act & Assert
        with pytest.raises(AuthorizationCallbackError, match="Could not open a browser"):
            await auto_authorize(
                self.session,
                "cid",
                "secret",
                "http://127.0.0.1:0/callback",
                "profile",
                open_browser=open_browser,
            )

        assert len(opened) == 1
        assert opened[0].startswith("https://login.uber.com/oauth/authorize?")
        assert self.session.current_grant() is None

    async def test_browser_launch_error_ends_flow(self):
        def open_browser(url: str) -> bool:
            raise OSError("no display")

        with pytest.raises(AuthorizationCallbackError, match="Browser launch failed"):
            await auto_authorize(
                self.session,
                "cid",
                "secret",
                "http://127.0.0.1:0/callback",
                open_browser=open_browser,
            )

    async def test_redirect_completes_flow(self):
        # Arrange
        port = free_port()
        response = MagicMock()
        response.status_code = 200
        response.json.return_value = {"access_token": "tok", "token_type": "Bearer"}
        self.transport._http_client.request.return_value = response
        replies: list[int] = []

        def open_browser(url: str) -> bool:
            reply = httpx.get(
                f"http://127.0.0.1:{port}/callback",
                params={"state": "uberclient", "code": "c0de"},
                trust_env=False,
            )
            replies.append(reply.status_code)
            return True

        # Act
        grant = await auto_authorize(
            self.session,
            "cid",
            "secret",
            f"http://127.0.0.1:{port}/callback",
            "profile",
            open_browser=open_browser,
        )

        # Assert
        assert grant.access_token == "tok"
        assert self.session.current_grant() is grant
        assert replies == [200]
        form = self.transport._http_client.request.call_args[1]["data"]
        assert form["code"] == "c0de"
        # The listener released its port
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind(("127.0.0.1", port))
        sock.close()
