"""Client configuration.

Hosts are threaded through the client at construction instead of living in
module globals, so tests and sandbox users can point the client elsewhere.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

API_HOST = "https://api.uber.com/v1"
AUTH_HOST = "https://login.uber.com/oauth"
SANDBOX_HOST = "https://sandbox-api.uber.com/v1"

AUTHORIZE_ENDPOINT = "authorize"
TOKEN_ENDPOINT = "token"

# Sent as the OAuth state parameter and checked on the redirect
AUTH_STATE = "uberclient"

CALLBACK_PORT = 7635


@dataclass(frozen=True)
class ClientConfig:
    """Runtime settings for an UberClient."""

    api_host: str = API_HOST
    auth_host: str = AUTH_HOST
    sandbox_host: str = SANDBOX_HOST
    sandbox: bool = False
    timeout: float = 30.0
    state: str = AUTH_STATE
    callback_port: int = CALLBACK_PORT

    def __post_init__(self) -> None:
        for name in ("api_host", "auth_host", "sandbox_host"):
            object.__setattr__(self, name, getattr(self, name).rstrip("/"))
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")

    @property
    def request_host(self) -> str:
        """Host used for ride request endpoints."""
        return self.sandbox_host if self.sandbox else self.api_host

    @classmethod
    def from_env(cls) -> ClientConfig:
        """Build a config from UBER_* environment variables.

        Unset variables fall back to the production defaults.

        Raises:
            ValueError: If UBER_TIMEOUT is not a number
        """
        timeout_raw = os.getenv("UBER_TIMEOUT", "30")
        try:
            timeout = float(timeout_raw)
        except ValueError as e:
            raise ValueError(f"UBER_TIMEOUT must be a number. Got: {timeout_raw!r}") from e

        return cls(
            api_host=os.getenv("UBER_API_HOST", API_HOST),
            auth_host=os.getenv("UBER_AUTH_HOST", AUTH_HOST),
            sandbox_host=os.getenv("UBER_SANDBOX_HOST", SANDBOX_HOST),
            sandbox=os.getenv("UBER_SANDBOX", "").strip().lower() in ("1", "true", "yes"),
            timeout=timeout,
        )
