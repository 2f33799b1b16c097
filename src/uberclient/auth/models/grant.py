"""Token endpoint response models for the Uber OAuth 2.0 flow."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

BEARER = "Bearer"


class AccessGrant(BaseModel):
    """Token bundle returned by the token endpoint (RFC 6749 Section 5.1).

    Immutable; a new grant replaces the old one wholesale.
    """

    model_config = ConfigDict(frozen=True)

    # Result of the three-legged flow, needed for requests on a user's behalf
    access_token: str
    token_type: str = BEARER
    # Seconds until expiry, 30 days for Uber
    expires_in: int | None = None
    refresh_token: str | None = None
    # Space separated, e.g. "profile history"
    scope: str | None = None

    def is_bearer(self) -> bool:
        return self.token_type.lower() == BEARER.lower()

    @property
    def authorization(self) -> str:
        """Authorization header value for this grant."""
        return f"{BEARER} {self.access_token}"


class AuthErrorBody(BaseModel):
    """Error response from the token endpoint (RFC 6749 Section 5.2)."""

    error: str = "unknown_error"
    error_description: str | None = None
