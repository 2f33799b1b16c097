"""Interactive authorization: open a browser and catch the redirect locally.

Runs a short-lived Starlette app under uvicorn on the redirect URI's host and
port. Whichever comes first, the listener completing the code exchange or
the listener/browser launch failing, ends the flow; the listener is always
shut down afterwards.
"""

from __future__ import annotations

import asyncio
import html
import logging
import socket
import webbrowser
from collections.abc import Callable
from urllib.parse import urlparse

import uvicorn
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import HTMLResponse
from starlette.routing import Route

from uberclient.auth.models.grant import AccessGrant
from uberclient.auth.services.session import AuthorizationSession
from uberclient.errors import (
    AuthorizationCallbackError,
    AuthorizationRejected,
    StateValidationError,
    UberError,
)

logger = logging.getLogger(__name__)

CLOSE_PAGE = """<script type="text/javascript">close()</script>
you may close this webpage"""


class CallbackListener:
    """Local HTTP endpoint that receives the OAuth redirect.

    The outcome of the first callback (a grant or an error) is published on
    ``outcome``; later callbacks are answered but ignored.
    """

    def __init__(self, session: AuthorizationSession, redirect_uri: str):
        parsed = urlparse(redirect_uri)
        self.session = session
        self.host = parsed.hostname or "127.0.0.1"
        self.port = parsed.port if parsed.port is not None else session.config.callback_port
        self.path = parsed.path or "/"
        self.outcome: asyncio.Future[AccessGrant] = (
            asyncio.get_running_loop().create_future()
        )
        self.app = Starlette(
            routes=[Route(self.path, self._handle_callback, methods=["GET"])]
        )
        self._server: uvicorn.Server | None = None
        self._serve_task: asyncio.Task | None = None
        self._stopping = False

    async def _handle_callback(self, request: Request) -> HTMLResponse:
        try:
            grant = await self._process(request)
        except UberError as e:
            logger.warning(f"Authorization callback failed: {e}")
            self._publish_error(e)
            return HTMLResponse(
                f"authorization failed: {html.escape(str(e))}", status_code=400
            )
        except Exception as e:
            logger.error(f"Error handling authorization callback: {e}")
            error = AuthorizationCallbackError(f"Authorization callback failed: {e}")
            error.__cause__ = e
            self._publish_error(error)
            return HTMLResponse("authorization failed", status_code=500)

        if not self.outcome.done():
            self.outcome.set_result(grant)
        return HTMLResponse(CLOSE_PAGE)

    async def _process(self, request: Request) -> AccessGrant:
        params = request.query_params
        state = params.get("state")
        if state != self.session.config.state:
            raise StateValidationError(
                f"uber: evidence of tampering--incorrect state {state}"
            )

        error = params.get("error")
        if error:
            raise AuthorizationRejected(error, params.get("error_description"))

        code = params.get("code")
        if not code:
            raise AuthorizationCallbackError("uber: callback is missing the code")

        return await self.session.exchange(code)

    def _publish_error(self, error: Exception) -> None:
        if not self.outcome.done():
            self.outcome.set_exception(error)

    async def start(self) -> None:
        """Bind the socket and start serving in a background task.

        Raises:
            AuthorizationCallbackError: If the address cannot be bound or the
                server exits before it starts accepting connections
        """
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((self.host, self.port))
        except OSError as e:
            sock.close()
            raise AuthorizationCallbackError(
                f"Cannot listen on {self.host}:{self.port}: {e}"
            ) from e

        config = uvicorn.Config(app=self.app, log_level="warning")
        self._server = uvicorn.Server(config)
        self._serve_task = asyncio.create_task(self._server.serve(sockets=[sock]))
        self._serve_task.add_done_callback(self._on_serve_done)

        # Wait until the listener accepts connections
        while not self._server.started and not self._serve_task.done():
            await asyncio.sleep(0.01)
        if self._serve_task.done():
            task = self._serve_task
            self._stopping = True
            self._server = None
            self._serve_task = None
            sock.close()
            if self.outcome.done() and not self.outcome.cancelled():
                self.outcome.exception()
            cause = None if task.cancelled() else task.exception()
            raise AuthorizationCallbackError(
                "Callback listener failed to start"
            ) from cause
        logger.info(f"Callback listener started on {self.host}:{self.port}{self.path}")

    def _on_serve_done(self, task: asyncio.Task) -> None:
        if self._stopping:
            return
        if task.cancelled():
            self._publish_error(AuthorizationCallbackError("Callback listener cancelled"))
            return
        error = task.exception()
        if error is not None:
            self._publish_error(
                AuthorizationCallbackError(f"Callback listener failed: {error}")
            )
        else:
            self._publish_error(
                AuthorizationCallbackError("Callback listener stopped before a redirect")
            )

    async def stop(self) -> None:
        """Stop the listener and wait for it to exit."""
        if self._server is None or self._serve_task is None:
            return
        self._stopping = True
        self._server.should_exit = True
        try:
            await self._serve_task
        except Exception as e:
            logger.debug(f"Callback listener exited with {e!r}")
        self._server = None
        self._serve_task = None


async def auto_authorize(
    session: AuthorizationSession,
    client_id: str,
    client_secret: str,
    redirect_uri: str,
    *scopes: str,
    open_browser: Callable[[str], bool] = webbrowser.open,
) -> AccessGrant:
    """Run the whole authorization flow through the user's browser.

    Args:
        session: Session to authorize
        client_id: Application client id
        client_secret: Application client secret
        redirect_uri: Redirect URI registered with Uber; must point at this machine
        *scopes: Scopes to request
        open_browser: Launches the browser; returns False on failure

    Returns:
        The access grant stored on the session
    """
    auth_url = session.begin(client_id, client_secret, redirect_uri, *scopes)

    listener = CallbackListener(session, redirect_uri)
    await listener.start()
    try:
        launched = await asyncio.to_thread(open_browser, auth_url)
        if not launched:
            listener._publish_error(
                AuthorizationCallbackError(f"Could not open a browser for {auth_url}")
            )
        return await listener.outcome
    except (OSError, webbrowser.Error) as e:
        raise AuthorizationCallbackError(f"Browser launch failed: {e}") from e
    finally:
        await listener.stop()
