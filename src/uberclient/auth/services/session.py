"""OAuth 2.0 authorization-code flow for the Uber API.

Models the three legs of the flow as a small state machine:
build the authorize URL, exchange the returned code for an access grant,
then hold (and optionally refresh) that grant for authenticated calls.
"""

from __future__ import annotations

import logging
from enum import Enum

from uberclient.auth.models.grant import AccessGrant, AuthErrorBody
from uberclient.auth.models.requests import (
    AuthFields,
    authorize_request,
    refresh_request,
    token_request,
)
from uberclient.config import AUTHORIZE_ENDPOINT, TOKEN_ENDPOINT, ClientConfig
from uberclient.errors import (
    AuthorizationRejected,
    AuthorizationStateError,
    UberError,
    UnexpectedTokenType,
)
from uberclient.query.encoder import build_url, encode
from uberclient.query.models import RequestDescription
from uberclient.transport import HttpTransport

logger = logging.getLogger(__name__)


class AuthState(str, Enum):
    UNAUTHORIZED = "unauthorized"
    AUTHORIZE_URL_ISSUED = "authorize_url_issued"
    TOKEN_GRANTED = "token_granted"
    FAILED = "failed"


class AuthorizationSession:
    """Holds OAuth client credentials and the current access grant.

    Owned by a single client. Begin must complete before exchange; callers
    sharing one session are responsible for serializing those calls. The
    grant is only ever replaced as a whole, so concurrent readers see either
    the old or the new grant.
    """

    def __init__(self, transport: HttpTransport, config: ClientConfig | None = None):
        self._transport = transport
        self.config = config or ClientConfig()
        self._auth: AuthFields | None = None
        self._grant: AccessGrant | None = None
        self._state = AuthState.UNAUTHORIZED

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def auth(self) -> AuthFields | None:
        return self._auth

    def current_grant(self) -> AccessGrant | None:
        return self._grant

    def begin(
        self, client_id: str, client_secret: str, redirect_uri: str, *scopes: str
    ) -> str:
        """Start authorization and return the URL the user must visit.

        Stores the credentials for the later exchange and discards any
        previous grant. Does not touch the network.

        Args:
            client_id: Application client id
            client_secret: Application client secret
            redirect_uri: Where Uber redirects with the authorization code
            *scopes: Scopes to request, e.g. "profile", "history"

        Returns:
            Full authorize URL

        Raises:
            MissingRequiredField: If client_id or redirect_uri is empty
        """
        auth = AuthFields(
            client_id=client_id,
            client_secret=client_secret,
            redirect_uri=redirect_uri,
        )
        try:
            url = build_url(
                self.config.auth_host,
                AUTHORIZE_ENDPOINT,
                authorize_request(auth, scopes, self.config.state),
            )
        except UberError:
            self._state = AuthState.FAILED
            raise

        self._auth = auth
        self._grant = None
        self._state = AuthState.AUTHORIZE_URL_ISSUED
        logger.info(f"Generated authorization URL for client {client_id}")
        return url

    async def exchange(self, authorization_code: str) -> AccessGrant:
        """Exchange an authorization code for an access grant.

        Args:
            authorization_code: The ``code`` parameter from the redirect

        Returns:
            The stored access grant

        Raises:
            AuthorizationStateError: If begin() has not been called
            MissingRequiredField: If the code or a credential is empty
            TransportFailure: If the token endpoint could not be reached
            DecodeFailure: If the response is malformed
            AuthorizationRejected: If the server refused the exchange
            UnexpectedTokenType: If the granted token is not a bearer token
        """
        if self._auth is None:
            raise AuthorizationStateError(
                "Authorization has not begun; call begin() first"
            )

        logger.debug("Exchanging authorization code for access grant")
        return await self._request_grant(token_request(self._auth, authorization_code))

    async def refresh(self) -> AccessGrant:
        """Trade the stored refresh token for a new access grant.

        Raises:
            AuthorizationStateError: If there is no grant with a refresh token
            plus the same errors as exchange()
        """
        if self._auth is None or self._grant is None or not self._grant.refresh_token:
            raise AuthorizationStateError("No refresh token available")

        logger.debug("Refreshing access grant")
        return await self._request_grant(
            refresh_request(self._auth, self._grant.refresh_token)
        )

    def adopt(self, access_token: str) -> AccessGrant:
        """Use an access token obtained elsewhere as the current grant."""
        grant = AccessGrant(access_token=access_token)
        self._grant = grant
        self._state = AuthState.TOKEN_GRANTED
        return grant

    async def _request_grant(self, description: RequestDescription) -> AccessGrant:
        try:
            form = encode(description)
            response = await self._transport.send(
                "POST", f"{self.config.auth_host}/{TOKEN_ENDPOINT}", form=form
            )

            if response.status_code == 200:
                grant = self._transport.decode(response, AccessGrant)
                if not grant.is_bearer():
                    raise UnexpectedTokenType(grant.token_type)
            else:
                body = self._transport.decode(response, AuthErrorBody)
                logger.warning(
                    f"Token request failed with {response.status_code}: "
                    f"{body.error} - {body.error_description or 'no description'}"
                )
                raise AuthorizationRejected(
                    body.error, body.error_description, response.status_code
                )
        except UberError:
            self._state = AuthState.FAILED
            raise

        self._grant = grant
        self._state = AuthState.TOKEN_GRANTED
        logger.info("Access grant stored")
        return grant
