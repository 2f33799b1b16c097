"""Async client for the Uber API v1.

Product, price and time estimates use the application's server token.
User activity, profile and ride requests act on a user's behalf and need an
OAuth access grant, obtained with ``oauth()`` + ``set_access_token()`` or
``auto_oauth()``.
"""

from __future__ import annotations

import logging
from typing import TypeVar

from pydantic import BaseModel

from uberclient.auth.models.grant import AccessGrant
from uberclient.auth.services.callback import auto_authorize
from uberclient.auth.services.session import AuthorizationSession
from uberclient.client.requests import (
    HISTORY_ENDPOINT,
    PRICE_ENDPOINT,
    PRODUCT_ENDPOINT,
    REQUEST_ENDPOINT,
    TIME_ENDPOINT,
    USER_ENDPOINT,
    history_request,
    prices_request,
    products_request,
    ride_request,
    times_request,
)
from uberclient.config import ClientConfig
from uberclient.errors import APIRejected, NotAuthorized
from uberclient.models.rides import (
    APIErrorBody,
    Price,
    PricesResponse,
    Product,
    ProductsResponse,
    RequestMap,
    RideRequest,
    Time,
    TimesResponse,
    User,
    UserActivity,
)
from uberclient.query.encoder import build_url
from uberclient.query.models import RequestDescription
from uberclient.transport import HttpTransport

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class UberClient:
    """Holds the credentials needed to call the Uber API.

    Every endpoint is a coroutine method. Whether a call authenticates with
    the server token or the OAuth bearer token is fixed per endpoint.
    """

    def __init__(
        self,
        server_token: str | None = None,
        *,
        access_token: str | None = None,
        config: ClientConfig | None = None,
        transport: HttpTransport | None = None,
    ):
        """Initialize the client.

        Args:
            server_token: API token for products and estimates endpoints
            access_token: Optional bearer token obtained outside this client
            config: Hosts and timeouts; production defaults when omitted
            transport: Optional transport (tests inject one)
        """
        self.server_token = server_token
        self.config = config or ClientConfig()
        self._transport = transport or HttpTransport(timeout=self.config.timeout)
        self.session = AuthorizationSession(self._transport, self.config)
        if access_token:
            self.session.adopt(access_token)

    # ================================
    # Authorization
    # ================================

    @property
    def access_grant(self) -> AccessGrant | None:
        return self.session.current_grant()

    def oauth(
        self, client_id: str, client_secret: str, redirect_uri: str, *scopes: str
    ) -> str:
        """Begin authorization and return the URL the user needs to visit.

        After the user grants access, Uber redirects to ``redirect_uri`` with
        a ``code`` parameter; pass it to ``set_access_token``.
        """
        return self.session.begin(client_id, client_secret, redirect_uri, *scopes)

    async def set_access_token(self, authorization_code: str) -> AccessGrant:
        """Complete authorization with the code from the redirect."""
        return await self.session.exchange(authorization_code)

    async def refresh_access_token(self) -> AccessGrant:
        return await self.session.refresh()

    async def auto_oauth(
        self, client_id: str, client_secret: str, redirect_uri: str, *scopes: str
    ) -> AccessGrant:
        """Authorize through the user's browser and a local redirect listener."""
        return await auto_authorize(
            self.session, client_id, client_secret, redirect_uri, *scopes
        )

    # ================================
    # Endpoints
    # ================================

    async def get_products(self, latitude: float, longitude: float) -> list[Product]:
        """Products offered at a location, in display order.

        https://developer.uber.com/v1/endpoints/#product-types
        """
        response = await self._request(
            "GET",
            PRODUCT_ENDPOINT,
            products_request(latitude, longitude),
            oauth=False,
            out=ProductsResponse,
        )
        return response.products

    async def get_prices(
        self,
        start_latitude: float,
        start_longitude: float,
        end_latitude: float,
        end_longitude: float,
    ) -> list[Price]:
        """Estimated price range for each product between two locations.

        https://developer.uber.com/v1/endpoints/#price-estimates
        """
        response = await self._request(
            "GET",
            PRICE_ENDPOINT,
            prices_request(start_latitude, start_longitude, end_latitude, end_longitude),
            oauth=False,
            out=PricesResponse,
        )
        return response.prices

    async def get_times(
        self,
        start_latitude: float,
        start_longitude: float,
        customer_uuid: str = "",
        product_id: str = "",
    ) -> list[Time]:
        """ETAs in seconds for all products offered at a location."""
        response = await self._request(
            "GET",
            TIME_ENDPOINT,
            times_request(start_latitude, start_longitude, customer_uuid, product_id),
            oauth=False,
            out=TimesResponse,
        )
        return response.times

    async def get_user_activity(self, offset: int, limit: int) -> UserActivity:
        """The user's trip history. Needs the ``history`` scope."""
        return await self._request(
            "GET",
            HISTORY_ENDPOINT,
            history_request(offset, limit),
            oauth=True,
            out=UserActivity,
        )

    async def get_user_profile(self) -> User:
        """Profile of the authorized user. Needs the ``profile`` scope."""
        return await self._request("GET", USER_ENDPOINT, None, oauth=True, out=User)

    async def post_request(
        self,
        product_id: str,
        start_latitude: float,
        start_longitude: float,
        end_latitude: float,
        end_longitude: float,
        surge_confirmation_id: str = "",
    ) -> RideRequest:
        """Request a ride on behalf of the authorized user."""
        return await self._request(
            "POST",
            REQUEST_ENDPOINT,
            ride_request(
                product_id,
                start_latitude,
                start_longitude,
                end_latitude,
                end_longitude,
                surge_confirmation_id,
            ),
            oauth=True,
            out=RideRequest,
        )

    async def get_request(self, request_id: str) -> RideRequest:
        """Real-time status of a ride created with post_request."""
        return await self._request(
            "GET", f"{REQUEST_ENDPOINT}/{request_id}", None, oauth=True, out=RideRequest
        )

    async def delete_request(self, request_id: str) -> None:
        """Cancel an ongoing ride request."""
        await self._request(
            "DELETE", f"{REQUEST_ENDPOINT}/{request_id}", None, oauth=True, out=None
        )

    async def get_request_map(self, request_id: str) -> str:
        """URL of a map showing the ride request."""
        request_map = await self._request(
            "GET",
            f"{REQUEST_ENDPOINT}/{request_id}/map",
            None,
            oauth=True,
            out=RequestMap,
        )
        return request_map.href

    async def close(self) -> None:
        await self._transport.close()

    # ================================
    # Plumbing
    # ================================

    def _host_for(self, endpoint: str) -> str:
        if endpoint.split("/", 1)[0] == REQUEST_ENDPOINT:
            return self.config.request_host
        return self.config.api_host

    def _authorization(self, oauth: bool) -> str:
        if oauth:
            grant = self.session.current_grant()
            if grant is None:
                raise NotAuthorized(
                    "This endpoint requires an OAuth access token; authorize first"
                )
            return grant.authorization

        if not self.server_token:
            raise NotAuthorized("This endpoint requires a server token")
        return f"Token {self.server_token}"

    async def _request(
        self,
        method: str,
        endpoint: str,
        payload: RequestDescription | None,
        *,
        oauth: bool,
        out: type[ModelT] | None,
    ) -> ModelT | None:
        url = build_url(self._host_for(endpoint), endpoint, payload)
        authorization = self._authorization(oauth)

        response = await self._transport.send(method, url, authorization=authorization)

        if response.status_code == 404:
            raise APIRejected(f"Endpoint '{endpoint}' not found.", status_code=404)

        if response.status_code >= 300:
            body = self._transport.decode(response, APIErrorBody)
            logger.warning(
                f"{method} {endpoint} failed with {response.status_code}: "
                f"{body.code or 'no code'}"
            )
            if not body.message and not body.code:
                raise APIRejected(
                    "uber: an unidentified error occurred",
                    status_code=response.status_code,
                )
            raise APIRejected(
                body.message, body.code, body.fields, status_code=response.status_code
            )

        if out is None or response.status_code == 204:
            return None
        return self._transport.decode(response, out)
