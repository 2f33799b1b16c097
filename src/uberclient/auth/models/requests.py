"""Request shapes for the authorize and token endpoints.

The client credentials form one group that is nested by value into each
authorization request. The client secret is carried in the group under the
skip marker so it can be reused internally without ever reaching the
authorize URL; the token requests add it back explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass

from uberclient.query.models import SKIP, Param, RequestDescription


@dataclass(frozen=True)
class AuthFields:
    """Client credentials shared by every authorization request."""

    client_id: str
    client_secret: str
    redirect_uri: str

    def describe(self) -> RequestDescription:
        return RequestDescription.of(
            "auth",
            Param("client_id", self.client_id, required=True),
            Param(SKIP, self.client_secret),
            Param("redirect_uri", self.redirect_uri, required=True),
        )


def authorize_request(
    auth: AuthFields, scopes: tuple[str, ...] | list[str], state: str
) -> RequestDescription:
    """Describe the query for the user-facing authorize URL."""
    return RequestDescription.of(
        "authorize",
        Param("", auth.describe()),
        Param("response_type", "code", required=True),
        Param("scope", " ".join(scopes)),
        Param("state", state),
    )


def token_request(auth: AuthFields, code: str) -> RequestDescription:
    """Describe the form body exchanging an authorization code for a grant."""
    return RequestDescription.of(
        "token",
        Param("", auth.describe()),
        Param("client_secret", auth.client_secret, required=True),
        Param("grant_type", "authorization_code", required=True),
        Param("code", code, required=True),
    )


def refresh_request(auth: AuthFields, refresh_token: str) -> RequestDescription:
    """Describe the form body trading a refresh token for a new grant."""
    return RequestDescription.of(
        "refresh",
        Param("", auth.describe()),
        Param("client_secret", auth.client_secret, required=True),
        Param("grant_type", "refresh_token", required=True),
        Param("refresh_token", refresh_token, required=True),
    )
