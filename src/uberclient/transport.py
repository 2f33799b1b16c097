"""HTTP transport shared by the API client and the authorization session."""

from __future__ import annotations

import logging
from typing import TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from uberclient.errors import DecodeFailure, TransportFailure

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class HttpTransport:
    """Issues requests against the Uber API and decodes JSON bodies.

    One httpx.AsyncClient is created per transport and reused for every
    request.
    """

    def __init__(
        self, timeout: float = 30.0, http_client: httpx.AsyncClient | None = None
    ):
        """Initialize the transport.

        Args:
            timeout: HTTP request timeout in seconds
            http_client: Optional preconfigured client (tests inject one)
        """
        self.timeout = timeout
        self._http_client = http_client or httpx.AsyncClient(timeout=timeout)

    async def send(
        self,
        method: str,
        url: str,
        *,
        form: dict[str, str] | None = None,
        authorization: str | None = None,
    ) -> httpx.Response:
        """Send one request and return the raw response.

        Args:
            method: HTTP method
            url: Fully built URL, query string included
            form: Optional body sent as application/x-www-form-urlencoded
            authorization: Value for the Authorization header

        Raises:
            TransportFailure: If the request could not be completed
        """
        headers = {"Accept": "application/json"}
        if authorization:
            headers["Authorization"] = authorization
        if form is not None:
            headers["Content-Type"] = "application/x-www-form-urlencoded"

        logger.debug(f"{method} {url.split('?', 1)[0]}")

        try:
            if form is not None:
                return await self._http_client.request(
                    method, url, data=form, headers=headers
                )
            return await self._http_client.request(method, url, headers=headers)
        except httpx.HTTPError as e:
            raise TransportFailure(f"HTTP error during {method} request: {e}") from e

    def decode(self, response: httpx.Response, model: type[ModelT]) -> ModelT:
        """Decode a JSON response body into a pydantic model.

        Raises:
            DecodeFailure: If the body is not JSON or doesn't match the model
        """
        try:
            payload = response.json()
        except ValueError as e:
            raise DecodeFailure(f"Response body is not valid JSON: {e}") from e

        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise DecodeFailure(f"Invalid {model.__name__} response format: {e}") from e

    async def close(self) -> None:
        """Close the HTTP client and clean up resources."""
        await self._http_client.aclose()
