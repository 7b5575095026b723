"""HTTP client helper."""

from __future__ import annotations

import asyncio
import json
import ssl as ssl_module
from typing import Any

import aiohttp

from ..core.exceptions import TransportError

# Report payloads can be large; the upstream takes minutes on wide windows
DEFAULT_TIMEOUT = 300.0


class HTTPClient:
    """Async HTTP client wrapper."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        ssl: ssl_module.SSLContext | bool | None = None,
    ) -> None:
        self.base_url = base_url
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.ssl = ssl
        self._session: aiohttp.ClientSession | None = None

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get or create session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    def resolve(self, url: str) -> str:
        """Combine base_url with a relative path."""
        if self.base_url and not url.startswith("http"):
            return f"{self.base_url.rstrip('/')}/{url.lstrip('/')}"
        return url

    async def get(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """GET request returning the decoded JSON body.

        Raises:
            TransportError: On connection failure, timeout, non-2xx status or
                an undecodable body
        """
        url = self.resolve(url)
        kwargs: dict[str, Any] = {"params": params, "headers": headers}
        if self.ssl is not None:
            kwargs["ssl"] = self.ssl

        try:
            async with self.session.get(url, **kwargs) as response:
                if response.status >= 400:
                    body = await response.text()
                    raise TransportError(
                        f"GET {url} failed with HTTP {response.status}: {body[:500]}",
                        status_code=response.status,
                        body=body,
                    )
                text = await response.text()
        except aiohttp.ClientError as e:
            raise TransportError(f"GET {url} failed: {e}") from e
        except asyncio.TimeoutError as e:
            raise TransportError(f"GET {url} timed out after {self.timeout.total}s") from e

        if not text.strip():
            return None
        try:
            return json.loads(text)
        except ValueError as e:
            raise TransportError(
                f"GET {url} returned a non-JSON body: {e}",
                status_code=response.status,
                body=text[:500],
            ) from e

    async def close(self) -> None:
        """Close session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> HTTPClient:
        """Context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        await self.close()
