"""Credential collaborator interface.

Architecture:
    Token acquisition and caching for the upstream reporting API live outside
    this library. The transport only needs two things from a provider: a
    currently valid bearer token for a tenant, and the TLS setting to use for
    the upstream (which commonly presents a self-signed certificate).

See Also:
    - RESTTransport: Calls get_token() once per request
    - HTTPClient: Receives the ssl setting
"""

from __future__ import annotations

import ssl as ssl_module
from abc import ABC, abstractmethod


class TokenProvider(ABC):
    """Abstract source of bearer credentials for tenants.

    Implementations own caching and refresh; get_token() is called before
    every page request and is expected to be cheap when the token is cached.
    """

    #: TLS setting for the upstream: None (default verification), False
    #: (verification disabled) or an SSLContext trusting the upstream's CA.
    ssl: ssl_module.SSLContext | bool | None = None

    @abstractmethod
    async def get_token(self, tenant_id: str) -> str:
        """Return a currently valid bearer token for the tenant."""
        pass


class StaticTokenProvider(TokenProvider):
    """Serves one pre-issued token for every tenant."""

    def __init__(
        self,
        token: str,
        *,
        ssl: ssl_module.SSLContext | bool | None = None,
    ) -> None:
        if not token:
            raise ValueError("token must be a non-empty string")
        self._token = token
        self.ssl = ssl

    async def get_token(self, tenant_id: str) -> str:  # noqa: ARG002
        return self._token
