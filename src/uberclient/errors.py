"""Exception hierarchy for the Uber API client.

Every public operation raises one of these instead of returning a partial
result, so callers can branch on the failure kind.
"""

from __future__ import annotations


class UberError(Exception):
    """Base exception for all client errors."""

    pass


class EncodingError(UberError):
    """Raised when a request description cannot be turned into parameters."""

    pass


class MissingRequiredField(EncodingError):
    """Raised when a required parameter formats to an empty string."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"uber: {field} is a required field")


class UnsupportedFieldKind(EncodingError):
    """Raised when a parameter holds a value the encoder cannot format.

    This is a programming error: a request shape was declared with a value
    kind outside str, int, float and nested descriptions.
    """

    def __init__(self, field: str, kind: str):
        self.field = field
        self.kind = kind
        super().__init__(f"uber: {field} has unsupported kind {kind}")


class TransportFailure(UberError):
    """Raised when an HTTP request could not be completed."""

    pass


class DecodeFailure(UberError):
    """Raised when a response body is not the expected JSON shape."""

    pass


class NotAuthorized(UberError):
    """Raised when a call needs a credential the client does not hold."""

    pass


class AuthorizationError(UberError):
    """Base exception for OAuth authorization failures."""

    pass


class AuthorizationRejected(AuthorizationError):
    """Raised when the authorization server returns an error response."""

    def __init__(
        self,
        error: str,
        description: str | None = None,
        status_code: int | None = None,
    ):
        self.error = error
        self.description = description
        self.status_code = status_code
        message = f"Authentication: {error}"
        if description:
            message += f" ({description})"
        super().__init__(message)


class UnexpectedTokenType(AuthorizationError):
    """Raised when the token endpoint grants something other than a bearer token."""

    def __init__(self, token_type: str):
        self.token_type = token_type
        super().__init__(f"uber: unexpected token type {token_type!r}")


class AuthorizationStateError(AuthorizationError):
    """Raised when an authorization step is invoked out of order."""

    pass


class AuthorizationCallbackError(AuthorizationError):
    """Raised when the redirect back from the authorization server is malformed."""

    pass


class StateValidationError(AuthorizationCallbackError):
    """Raised when the callback's state parameter does not match.

    Indicates either a missing state or evidence of tampering.
    """

    pass


class APIRejected(UberError):
    """Raised when an API endpoint returns a structured error.

    The message, short code and per-field messages stay available as
    attributes; str() joins them for display.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        fields: dict[str, str] | None = None,
        status_code: int | None = None,
    ):
        self.message = message
        self.code = code
        self.fields = dict(fields or {})
        self.status_code = status_code
        super().__init__(self._format())

    def _format(self) -> str:
        text = self.message
        if self.code:
            text = f"{text} ({self.code})"
        if self.fields:
            details = ", ".join(f"{name}: {msg}" for name, msg in self.fields.items())
            text = f"{text} [{details}]"
        return text
