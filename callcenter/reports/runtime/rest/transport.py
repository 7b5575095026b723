"""Authenticated REST transport for the reporting API."""

from __future__ import annotations

import logging
import ssl as ssl_module
from typing import Any

from ...core.base import TokenProvider
from ...utils.http import DEFAULT_TIMEOUT, HTTPClient

logger = logging.getLogger(__name__)

USER_AGENT_HEADER = "X-User-Agent"
USER_AGENT = "portal"
ACCOUNT_HEADER = "X-Account-ID"


class RESTTransport:
    """Adds tenant credentials to every request.

    A token is requested from the provider for each call; caching and
    refresh are the provider's concern.
    """

    def __init__(
        self,
        base_url: str,
        token_provider: TokenProvider,
        *,
        account_id_header: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        ssl: ssl_module.SSLContext | bool | None = None,
        http: HTTPClient | None = None,
    ) -> None:
        """Initialize transport.

        Args:
            base_url: Upstream base URL, paths are resolved against it
            token_provider: Source of bearer tokens per tenant
            account_id_header: Fixed X-Account-ID value; the tenant id is
                sent when not set
            timeout: Total request timeout in seconds
            ssl: TLS setting; the token provider's setting is used when None
            http: Pre-built client (tests)
        """
        if not base_url:
            raise ValueError("base_url must be a non-empty string")
        self._tokens = token_provider
        self._account_id_header = account_id_header
        self._http = http or HTTPClient(
            base_url=base_url,
            timeout=timeout,
            ssl=token_provider.ssl if ssl is None else ssl,
        )

    def build_headers(self, token: str, tenant_id: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            USER_AGENT_HEADER: USER_AGENT,
            ACCOUNT_HEADER: self._account_id_header or tenant_id,
        }

    async def get(
        self,
        path: str,
        *,
        tenant_id: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """GET path for tenant_id and return the decoded body.

        Raises:
            TransportError: Propagated from the HTTP client
        """
        token = await self._tokens.get_token(tenant_id)
        logger.debug(
            "Requesting %s",
            path,
            extra={"tenant_id": tenant_id, "token_prefix": f"{token[:8]}..."},
        )
        return await self._http.get(path, params=params, headers=self.build_headers(token, tenant_id))

    async def close(self) -> None:
        await self._http.close()
